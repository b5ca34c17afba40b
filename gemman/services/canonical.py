"""
Record canonicalization — maps supplier records onto InventoryUnit fields.

The supplier has shipped the same attribute under several spellings
over time ("Certificate No", "Certificate_No", ...). FIELD_MAP lists,
for every canonical field, the candidate source keys in priority order.
The first key holding a non-empty value wins.

Usage:
    from gemman.services.canonical import canonicalize

    attrs = canonicalize({"StockID": "TR001", "Size": "1.50"})
    attrs["size"]  # Decimal('1.500')
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import lru_cache
from typing import Any

from gemman.exceptions import MalformedFeedPayload

TEXT = 'text'                    # str, default ''
OPTIONAL_TEXT = 'optional_text'  # str or None
NUMBER = 'number'                # Decimal, default 0
OPTIONAL_NUMBER = 'optional_number'  # Decimal or None


@dataclass(frozen=True)
class FieldMapping:
    """Candidate source keys for one canonical field."""

    field: str
    sources: tuple[str, ...]
    kind: str = TEXT
    places: int = 2


IDENTIFIER = FieldMapping(
    'stock_id',
    ('StockID', 'Stock ID', 'Stock_ID', 'StockId', 'stockId', 'stock_id', 'id', 'ID'),
)

FIELD_MAP: tuple[FieldMapping, ...] = (
    IDENTIFIER,
    FieldMapping('certificate_no', ('Certificate No', 'Certificate_No', 'CertificateNo', 'certificateNo',
                                    'certificate_no', 'Certificate')),
    FieldMapping('shape', ('Shape', 'shape')),
    FieldMapping('size', ('Size', 'size', 'Carat', 'carat', 'Weight', 'weight'), NUMBER, 3),
    FieldMapping('color', ('Color', 'Colour', 'color')),
    FieldMapping('clarity', ('Clarity', 'clarity')),
    FieldMapping('cut', ('Cut', 'cut'), OPTIONAL_TEXT),
    FieldMapping('polish', ('Polish', 'polish')),
    FieldMapping('symmetry', ('Sym', 'Symmetry', 'sym', 'symmetry')),
    FieldMapping('fluorescence', ('Floro', 'Fluorescence', 'Flour', 'floro', 'fluorescence')),
    FieldMapping('lab', ('Lab', 'Laboratory', 'lab')),
    FieldMapping('rap_price', ('RapPrice', 'Rap Price', 'rapPrice', 'rap_price'), NUMBER),
    FieldMapping('rap_amount', ('RapAmount', 'Rap Amount', 'rapAmount', 'rap_amount'), NUMBER),
    FieldMapping('discount', ('Discount', 'discount'), NUMBER),
    FieldMapping('price_per_carat', ('PricePerCarat', 'Price Per Carat', 'pricePerCarat', 'price_per_carat'),
                 NUMBER),
    FieldMapping('final_amount', ('FinalAmount', 'Final Amount', 'finalAmount', 'final_amount', 'Amount'),
                 NUMBER),
    FieldMapping('measurement', ('Measurement', 'Measurements', 'measurement')),
    FieldMapping('length', ('Length', 'length'), OPTIONAL_NUMBER),
    FieldMapping('width', ('Width', 'width'), OPTIONAL_NUMBER),
    FieldMapping('height', ('Height', 'height'), OPTIONAL_NUMBER),
    FieldMapping('depth', ('Depth', 'Depth %', 'depth'), OPTIONAL_NUMBER),
    FieldMapping('table', ('Table', 'Table %', 'table'), OPTIONAL_NUMBER),
    FieldMapping('ratio', ('Ratio', 'ratio'), OPTIONAL_NUMBER, 3),
    FieldMapping('girdle', ('Girdle', 'girdle'), OPTIONAL_TEXT),
    FieldMapping('culet', ('Culet', 'culet'), OPTIONAL_TEXT),
    FieldMapping('crown_angle', ('CAngle', 'Crown Angle', 'cAngle', 'crownAngle'), OPTIONAL_NUMBER),
    FieldMapping('crown_height', ('CHeight', 'Crown Height', 'cHeight', 'crownHeight'), OPTIONAL_NUMBER),
    FieldMapping('pavilion_angle', ('PAngle', 'Pavilion Angle', 'pAngle', 'pavilionAngle'), OPTIONAL_NUMBER),
    FieldMapping('pavilion_depth', ('PDepth', 'Pavilion Depth', 'pDepth', 'pavilionDepth'), OPTIONAL_NUMBER),
    FieldMapping('fancy_color', ('Fancy Color', 'Fancy_Color', 'fancyColor'), OPTIONAL_TEXT),
    FieldMapping('fancy_intensity', ('Fancy Intensity', 'Fancy_Intensity', 'fancyIntensity'), OPTIONAL_TEXT),
    FieldMapping('fancy_overtone', ('Fancy Overtone', 'Fancy_Overtone', 'fancyOvertone'), OPTIONAL_TEXT),
    FieldMapping('location', ('Location', 'location'), OPTIONAL_TEXT),
    FieldMapping('inscription', ('Inscription', 'inscription'), OPTIONAL_TEXT),
    FieldMapping('comment', ('Comment', 'Comments', 'comment'), OPTIONAL_TEXT),
    FieldMapping('video_url', ('Video URL', 'Video_URL', 'VideoURL', 'videoUrl'), OPTIONAL_TEXT),
    FieldMapping('image_url', ('Image URL', 'Image_URL', 'ImageURL', 'imageUrl'), OPTIONAL_TEXT),
    FieldMapping('cert_url', ('Cert URL', 'Cert_URL', 'CertURL', 'certUrl'), OPTIONAL_TEXT),
    FieldMapping('feed_status', ('Status', 'status')),
)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _pick(record: dict, sources: tuple[str, ...]) -> Any:
    for key in sources:
        value = record.get(key)
        if not _is_empty(value):
            return value
    return None


def to_decimal(value: Any, places: int = 2) -> Decimal | None:
    """
    Parse a loosely typed number.

    Accepts int, float, Decimal and strings like "1,234.50" or "61.5%".
    Returns None for anything unparseable or non-finite.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = repr(value)
    if isinstance(value, str):
        value = value.strip().replace(',', '').rstrip('%').strip()
        if not value:
            return None
    try:
        number = Decimal(value)
        if not number.is_finite():
            return None
        return number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        return None


@lru_cache(maxsize=1)
def _max_lengths() -> dict[str, int]:
    from gemman.models.unit import InventoryUnit
    return {
        f.name: f.max_length
        for f in InventoryUnit._meta.concrete_fields
        if getattr(f, 'max_length', None)
    }


def _to_text(value: Any, field: str) -> str:
    text = str(value).strip()
    limit = _max_lengths().get(field)
    return text[:limit] if limit else text


def _to_identifier(value: Any) -> str:
    """Stock id as text, rejected rather than truncated when too long."""
    stock_id = str(value).strip()
    limit = _max_lengths()['stock_id']
    if len(stock_id) > limit:
        raise MalformedFeedPayload('IDENTIFIER_TOO_LONG', stock_id=stock_id[:limit], length=len(stock_id))
    return stock_id


def canonicalize(record: Any) -> dict[str, Any]:
    """
    Map one supplier record onto InventoryUnit field values.

    Args:
        record: Raw record as decoded from the feed

    Returns:
        Dict of model field values, stock_id included

    Raises:
        MalformedFeedPayload('MALFORMED_PAYLOAD'): Record is not an object
        MalformedFeedPayload('MISSING_IDENTIFIER'): No stock id under any key
        MalformedFeedPayload('IDENTIFIER_TOO_LONG'): Stock id longer than the column
    """
    if not isinstance(record, dict):
        raise MalformedFeedPayload('MALFORMED_PAYLOAD', record_type=type(record).__name__)

    attrs: dict[str, Any] = {}
    for mapping in FIELD_MAP:
        raw = _pick(record, mapping.sources)

        if mapping is IDENTIFIER:
            attrs[mapping.field] = _to_identifier(raw) if raw is not None else ''
        elif mapping.kind == TEXT:
            attrs[mapping.field] = _to_text(raw, mapping.field) if raw is not None else ''
        elif mapping.kind == OPTIONAL_TEXT:
            attrs[mapping.field] = _to_text(raw, mapping.field) if raw is not None else None
        elif mapping.kind == NUMBER:
            number = to_decimal(raw, mapping.places)
            attrs[mapping.field] = number if number is not None else Decimal('0')
        else:
            attrs[mapping.field] = to_decimal(raw, mapping.places)

    if not attrs['stock_id']:
        raise MalformedFeedPayload('MISSING_IDENTIFIER', keys=sorted(record)[:20])
    return attrs
