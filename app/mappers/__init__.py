"""
app/mappers package marker.
"""

from app.mappers.record_transformer import CENTURY_PIVOT, RecordTransformer, parse_vendor_date
from app.mappers.vendor_field_mapper import (
    REQUIRED_FIELDS,
    VENDOR_COLUMNS,
    ColumnResolution,
    VendorFieldMapper,
)

__all__ = [
    "CENTURY_PIVOT",
    "ColumnResolution",
    "REQUIRED_FIELDS",
    "RecordTransformer",
    "VENDOR_COLUMNS",
    "VendorFieldMapper",
    "parse_vendor_date",
]
