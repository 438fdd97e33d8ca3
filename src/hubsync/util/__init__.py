from .ids import new_entity_id, new_op_id, new_uuid
from .time import format_clock, normalize_dt, now_iso, now_utc, parse_rfc3339, to_rfc3339

__all__ = [
    "new_uuid",
    "new_op_id",
    "new_entity_id",
    "now_utc",
    "now_iso",
    "parse_rfc3339",
    "to_rfc3339",
    "normalize_dt",
    "format_clock",
]
