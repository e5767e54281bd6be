from .csvparse import parse_csv, parse_header, to_csv
from .fields import get_field, get_by_header
from .normalize import normalize, normalize_batch, slugify
from .search import search, filter_by_type
from .sanitize import decode_entities, normalize_multiline, sanitize, highlight, highlight_plain, render_rich
from .dates import parse_date, is_past
from .pipeline import load_state, apply_query, paginate, render_page, find_record

__all__ = [
    "parse_csv",
    "parse_header",
    "to_csv",
    "get_field",
    "get_by_header",
    "normalize",
    "normalize_batch",
    "slugify",
    "search",
    "filter_by_type",
    "decode_entities",
    "normalize_multiline",
    "sanitize",
    "highlight",
    "highlight_plain",
    "render_rich",
    "parse_date",
    "is_past",
    "load_state",
    "apply_query",
    "paginate",
    "render_page",
    "find_record",
]
