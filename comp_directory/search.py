from __future__ import annotations
import re
from typing import Iterable, List, Optional

from rapidfuzz.distance import Levenshtein

from .models import DirectoryConfig, RawRecord, ScoredRecord
from .fields import get_field, lower_index
from .config import default_config

EXACT_POINTS = 3
# edit distance -> points
FUZZY_POINTS = {1: 2, 2: 1}

_CHUNK_SPLIT = re.compile(r"[\W_]+")
_SEARCH_FIELDS = ("title", "type", "overview", "details")


def edit_distance(a: str, b: str) -> int:
    """Unit-cost Levenshtein distance, case-insensitive."""
    return Levenshtein.distance((a or "").lower(), (b or "").lower())


def _type_positions(records: List[RawRecord], category: str, cfg: DirectoryConfig) -> List[int]:
    want = (category or "").strip().lower()
    if not want:
        return list(range(len(records)))
    return [i for i, r in enumerate(records) if get_field(r, cfg.type_field, cfg).strip().lower() == want]


def filter_by_type(records: Iterable[RawRecord], category: str, config: Optional[DirectoryConfig] = None) -> List[RawRecord]:
    """Case-insensitive equality on the configured type field; "" keeps everything."""
    records = list(records)
    return [records[i] for i in _type_positions(records, category, config or default_config())]


def categories(records: Iterable[RawRecord], config: Optional[DirectoryConfig] = None) -> List[str]:
    """Distinct type values, first-seen order, for the filter drop-down."""
    cfg = config or default_config()
    seen, out = set(), []
    for r in records:
        val = get_field(r, cfg.type_field, cfg).strip()
        if val and val.lower() not in seen:
            seen.add(val.lower())
            out.append(val)
    return out


def search_exact(records: Iterable[RawRecord], query: str) -> List[ScoredRecord]:
    q = (query or "").strip().lower()
    out = []
    for pos, r in enumerate(records):
        if not q or any(q in (v or "").lower() for v in r.values()):
            out.append(ScoredRecord(record=r, position=pos))
    return out


def _haystack(record: RawRecord, cfg: DirectoryConfig, include_raw: bool) -> str:
    idx = lower_index(record)
    names = [cfg.type_field if n == "type" else n for n in _SEARCH_FIELDS]
    parts = [get_field(record, name, cfg, index=idx) for name in names]
    if include_raw:
        parts.extend(v for v in record.values() if v)
    return " ".join(p for p in parts if p).lower()


def score_record(text: str, tokens: List[str]) -> tuple[int, bool]:
    """
    Returns (score, had_exact_token).
    Exact substring hit: +3. Otherwise best edit distance over the
    text's word chunks: 1 -> +2, 2 -> +1, worse -> 0.
    """
    chunks = [c for c in _CHUNK_SPLIT.split(text) if c]
    score = 0
    had_exact = False
    for tok in tokens:
        if tok in text:
            score += EXACT_POINTS
            had_exact = True
            continue
        if not chunks:
            continue
        best = min(edit_distance(tok, c) for c in chunks)
        score += FUZZY_POINTS.get(best, 0)
    return score, had_exact


def search_fuzzy(
    records: Iterable[RawRecord],
    query: str,
    config: Optional[DirectoryConfig] = None,
    include_raw: bool = True,
) -> List[ScoredRecord]:
    cfg = config or default_config()
    tokens = [t.lower() for t in (query or "").split()]
    records = list(records)
    if not tokens:
        return [ScoredRecord(record=r, position=pos) for pos, r in enumerate(records)]

    scored = []
    for pos, r in enumerate(records):
        score, had_exact = score_record(_haystack(r, cfg, include_raw), tokens)
        if score <= 0:
            continue
        scored.append(ScoredRecord(record=r, score=score, is_fuzzy_only=not had_exact, position=pos))

    # sorted() is stable: ties keep batch order
    return sorted(scored, key=lambda s: -s.score)


def search(
    records: Iterable[RawRecord],
    query: str,
    mode: str = "fuzzy",
    category: str = "",
    config: Optional[DirectoryConfig] = None,
) -> List[ScoredRecord]:
    """
    Category pre-filter, then exact or fuzzy matching.
    `position` on each hit indexes into `records`, not into the filtered subset.
    """
    if mode not in ("exact", "fuzzy"):
        raise ValueError(f"Unknown search mode: {mode}")
    cfg = config or default_config()
    pool = list(records)
    keep = _type_positions(pool, category, cfg)
    subset = [pool[i] for i in keep]

    if mode == "exact":
        hits = search_exact(subset, query)
    else:
        hits = search_fuzzy(subset, query, cfg)
    return [h.model_copy(update={"position": keep[h.position]}) for h in hits]
