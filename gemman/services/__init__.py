"""
Catalog services — modular organization of catalog operations.

    from gemman.services import CatalogSync, UnitLifecycle, UnitQueries, DocumentNumbers
"""

from gemman.services.lifecycle import UnitLifecycle
from gemman.services.numbering import DocumentNumbers
from gemman.services.queries import UnitQueries
from gemman.services.sync import CatalogSync

__all__ = [
    'CatalogSync',
    'UnitLifecycle',
    'UnitQueries',
    'DocumentNumbers',
]
