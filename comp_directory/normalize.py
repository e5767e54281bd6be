from __future__ import annotations
import re
from typing import Dict, Iterable, List, Optional

from markupsafe import escape

from .models import CanonicalRecord, DirectoryConfig, RawRecord
from .fields import get_by_header, get_field, lower_index
from .config import default_config
from .sanitize import normalize_multiline

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
SLUG_MAX = 80


def slugify(text: str) -> str:
    s = _NON_ALNUM.sub("-", (text or "").lower()).strip("-")
    s = s[:SLUG_MAX].strip("-")
    return s or "item"


def _fallback_details(record: RawRecord, cfg: DirectoryConfig, idx: Dict[str, str]) -> str:
    # "Summary" / "Description" style columns, one labelled line each
    lines = []
    for line in cfg.detail_fallbacks:
        val = get_by_header(record, line.header, index=idx).strip()
        if not val:
            continue
        lines.append(f"<strong>{escape(line.label)}:</strong> {normalize_multiline(val)}")
    return "<br>".join(lines)


def normalize(record: RawRecord, config: Optional[DirectoryConfig] = None) -> CanonicalRecord:
    cfg = config or default_config()
    idx = lower_index(record)

    def f(name: str) -> str:
        return get_field(record, name, cfg, index=idx).strip()

    title = f("title")
    rec_id = f("id") or slugify(title)
    details = f("details") or _fallback_details(record, cfg, idx)

    return CanonicalRecord(
        id=rec_id,
        title=title or cfg.untitled,
        date=f("date"),
        type=f(cfg.type_field),
        overview=f("overview"),
        details=details,
        link=f("link"),
        raw=record,
    )


def normalize_batch(records: Iterable[RawRecord], config: Optional[DirectoryConfig] = None) -> List[CanonicalRecord]:
    """
    Normalize a whole batch and make ids unique: the first record keeps its id,
    later duplicates get "-2", "-3", ...
    """
    out: List[CanonicalRecord] = []
    seen: set[str] = set()
    for rec in records:
        c = normalize(rec, config)
        base, n = c.id, 1
        while c.id in seen:
            n += 1
            c = c.model_copy(update={"id": f"{base}-{n}"})
        seen.add(c.id)
        out.append(c)
    return out


def index_by_id(canon: Iterable[CanonicalRecord]) -> Dict[str, CanonicalRecord]:
    return {c.id: c for c in canon}
