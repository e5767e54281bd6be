from __future__ import annotations

import math
from datetime import date
from typing import Dict, List, Optional, Tuple

from .models import (
    AppState,
    CanonicalRecord,
    DirectoryConfig,
    PageInfo,
    RawRecord,
    RenderItem,
    RenderPayload,
    ScoredRecord,
    SectionLine,
)
from .config import default_config
from .dates import is_past, parse_date
from .fields import get_by_header, lower_index
from .normalize import index_by_id, normalize_batch
from .sanitize import highlight_plain, render_rich, safe_url
from .search import categories, search


def load_state(
    records: List[RawRecord],
    page_size: int = 10,
    mode: str = "fuzzy",
    generation: int = 0,
    config: Optional[DirectoryConfig] = None,
) -> AppState:
    """Fresh state for a newly fetched batch: no query, no filter, page 1."""
    base = AppState(records=records, page_size=page_size, mode=mode, generation=generation)
    return apply_query(base, config=config)


def apply_query(
    state: AppState,
    query: Optional[str] = None,
    mode: Optional[str] = None,
    category: Optional[str] = None,
    config: Optional[DirectoryConfig] = None,
) -> AppState:
    """Re-run filter + search. Arguments left as None keep the state's current value."""
    q = state.query if query is None else (query or "").strip()
    m = state.mode if mode is None else mode
    c = state.category if category is None else (category or "").strip()
    results = search(state.records, q, mode=m, category=c, config=config)
    return state.model_copy(update={"query": q, "mode": m, "category": c, "results": results, "page": 1})


def page_info(state: AppState, page: Optional[int] = None) -> PageInfo:
    count = len(state.results)
    total = max(1, math.ceil(count / state.page_size))
    want = state.page if page is None else page
    return PageInfo(page=min(max(1, want), total), total_pages=total, page_size=state.page_size, count=count)


def goto_page(state: AppState, page: int) -> AppState:
    return state.model_copy(update={"page": page_info(state, page).page})


def paginate(state: AppState, page: Optional[int] = None) -> Tuple[List[ScoredRecord], PageInfo]:
    info = page_info(state, page)
    start = (info.page - 1) * info.page_size
    return state.results[start : start + info.page_size], info


def _sections(
    canon: CanonicalRecord,
    cfg: DirectoryConfig,
    query: str,
    elevated: bool,
    base_url: Optional[str],
) -> Dict[str, List[SectionLine]]:
    idx = lower_index(canon.raw)
    out: Dict[str, List[SectionLine]] = {}
    for title, entries in cfg.sections.items():
        lines = []
        for entry in entries:
            if entry.visibility == "admin" and not elevated:
                continue
            val = get_by_header(canon.raw, entry.header, index=idx).strip()
            if not val:
                continue
            lines.append(SectionLine(label=entry.label, html=render_rich(val, query, base_url)))
        if lines:
            out[title] = lines
    return out


def render_item(
    canon: CanonicalRecord,
    query: str = "",
    fuzzy_only: bool = False,
    config: Optional[DirectoryConfig] = None,
    elevated: bool = False,
    base_url: Optional[str] = None,
    now: Optional[date] = None,
) -> RenderItem:
    cfg = config or default_config()
    return RenderItem(
        id=canon.id,
        title_html=highlight_plain(canon.title, query),
        type=canon.type,
        date=canon.date,
        is_past=is_past(parse_date(canon.date), now),
        link=safe_url(canon.link, base_url),
        overview_html=render_rich(canon.overview, query, base_url),
        details_html=render_rich(canon.details, query, base_url),
        fuzzy_only=fuzzy_only,
        sections=_sections(canon, cfg, query, elevated, base_url),
    )


def render_page(
    state: AppState,
    config: Optional[DirectoryConfig] = None,
    elevated: bool = False,
    base_url: Optional[str] = None,
    now: Optional[date] = None,
) -> RenderPayload:
    cfg = config or default_config()
    canon = normalize_batch(state.records, cfg)
    hits, info = paginate(state)

    items = []
    for hit in hits:
        c = canon[hit.position]
        items.append(
            render_item(
                c,
                query=state.query,
                fuzzy_only=hit.is_fuzzy_only,
                config=cfg,
                elevated=elevated,
                base_url=base_url,
                now=now,
            )
        )

    return RenderPayload(
        items=items,
        page=info,
        query=state.query,
        mode=state.mode,
        category=state.category,
        categories=categories(state.records, cfg),
    )


def find_record(state: AppState, rec_id: str, config: Optional[DirectoryConfig] = None) -> Optional[CanonicalRecord]:
    """Lookup for the detail view; ids are the de-duplicated batch ids."""
    return index_by_id(normalize_batch(state.records, config)).get(rec_id)
