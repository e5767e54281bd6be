from __future__ import annotations
from typing import Dict, Mapping, Optional

from .models import DirectoryConfig, RawRecord
from .config import default_config


def lower_index(record: Mapping[str, str]) -> Dict[str, str]:
    """
    Lowercase-keyed view of a record. Pure: the record itself is untouched.
    When two headers differ only by case, the first non-empty value wins.
    """
    out: Dict[str, str] = {}
    for k, v in (record or {}).items():
        key = (k or "").strip().lower()
        val = "" if v is None else str(v)
        if key not in out or (not out[key] and val):
            out[key] = val
    return out


def get_field(
    record: RawRecord,
    logical_name: str,
    config: Optional[DirectoryConfig] = None,
    index: Optional[Dict[str, str]] = None,
) -> str:
    """First non-empty candidate header for `logical_name`, "" otherwise."""
    cfg = config or default_config()
    candidates = cfg.field_map.get(logical_name)
    if not candidates:
        return ""
    idx = index if index is not None else lower_index(record)
    for header in candidates:
        val = idx.get(header.strip().lower(), "")
        if val.strip():
            return val
    return ""


def get_by_header(record: RawRecord, header: str, index: Optional[Dict[str, str]] = None) -> str:
    idx = index if index is not None else lower_index(record)
    return idx.get((header or "").strip().lower(), "")
