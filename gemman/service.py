"""
Catalog Service — The single public interface for all catalog operations.

Usage:
    from gemman import catalog, GemError

    catalog.run_sync()
    catalog.set_status(unit.pk, 'memo', 'MEMO-42')
    with transaction.atomic():
        number = catalog.issue_number('memo')
"""

from datetime import date

from gemman.services.lifecycle import UnitLifecycle
from gemman.services.numbering import DocumentNumbers
from gemman.services.queries import UnitQueries
from gemman.services.sync import CatalogSync


class Catalog(CatalogSync, UnitLifecycle, UnitQueries, DocumentNumbers):
    """
    Single interface for all catalog operations.

    IMPORTANT: All state-changing methods use atomic transactions
    with appropriate locking. See each method's docstring.
    """

    @classmethod
    def issue_number(cls, document_type: str, on: date | None = None, last_issued: str | None = None) -> str:
        """Alias of issue(), reads better next to invoice/memo code."""
        return cls.issue(document_type, on=on, last_issued=last_issued)
