"""
Transfer module - JSON backup and restore of workout data.
"""
from motioncore.services.transfer.mapper import (
    DecodeWarning,
    ExportMapper,
    ImportDecoder,
    TransferKind,
    format_iso,
    get_mapper,
    parse_iso,
)
from motioncore.services.transfer.service import (
    DataIOService,
    ExportResult,
    ImportResult,
    write_json_atomic,
)

__all__ = [
    "DecodeWarning",
    "ExportMapper",
    "ImportDecoder",
    "TransferKind",
    "format_iso",
    "get_mapper",
    "parse_iso",
    "DataIOService",
    "ExportResult",
    "ImportResult",
    "write_json_atomic",
]
