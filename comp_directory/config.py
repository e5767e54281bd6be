from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from .logger import get_logger
from .models import DirectoryConfig

log = get_logger(__name__)

# logical field -> acceptable spreadsheet headers, in priority order
DEFAULT_FIELD_MAP = {
    "id": ["id", "comp id", "competition id", "slug"],
    "title": ["comp name", "competition", "competition name", "title", "name", "event"],
    "date": ["date", "comp date", "event date", "start date"],
    "type": ["type", "category", "format", "comp type"],
    "overview": ["overview", "short description", "summary", "blurb"],
    "details": ["details", "long description", "full details", "more info"],
    "link": ["link", "url", "entry link", "booking link", "website"],
    "venue": ["venue", "course", "location"],
}

DEFAULT_DETAIL_FALLBACKS = [
    {"label": "Summary", "header": "Summary"},
    {"label": "Description", "header": "Description"},
]

DEFAULT_SECTIONS = {
    "Overview": [
        {"label": "Venue", "header": "Venue"},
        {"label": "Entry fee", "header": "Entry Fee"},
        {"label": "Handicap limit", "header": "Handicap Limit"},
    ],
    "Rules": [
        {"label": "Format", "header": "Format"},
        {"label": "Tees", "header": "Tees"},
        {"label": "Ties", "header": "Ties"},
    ],
    "Procedures": [
        {"label": "Entry closes", "header": "Entry Closes"},
        {"label": "Draw", "header": "Draw"},
        {"label": "Organiser notes", "header": "Organiser Notes", "visibility": "admin"},
        {"label": "Contact", "header": "Contact Email", "visibility": "admin"},
    ],
}


@lru_cache(maxsize=1)
def default_config() -> DirectoryConfig:
    """Built-in configuration. Shared instance: treat as read-only."""
    return DirectoryConfig(
        field_map=DEFAULT_FIELD_MAP,
        detail_fallbacks=DEFAULT_DETAIL_FALLBACKS,
        sections=DEFAULT_SECTIONS,
    )


def load_config(path: Optional[str] = None) -> DirectoryConfig:
    """
    Load the directory configuration.
    - explicit path, else $DIRECTORY_CONFIG, else the built-in defaults
    - the JSON may be partial: missing keys keep their defaults
    Raises pydantic.ValidationError on a malformed file.
    """
    path = path or os.getenv("DIRECTORY_CONFIG")
    if not path:
        return default_config()

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    merged = default_config().model_dump()
    merged.update(data or {})
    cfg = DirectoryConfig.model_validate(merged)
    log.info("Loaded directory config from %s (%d fields)", path, len(cfg.field_map))
    return cfg


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Settings:
    """Runtime settings from the environment (.env is loaded by the logger module)."""

    def __init__(self):
        self.csv_url = os.getenv("CSV_URL", "")
        self.page_size = max(1, _int_env("PAGE_SIZE", 10))
        mode = os.getenv("SEARCH_MODE", "fuzzy").strip().lower()
        self.search_mode = mode if mode in ("exact", "fuzzy") else "fuzzy"
        self.fetch_timeout = max(1, _int_env("FETCH_TIMEOUT", 15))
        self.link_base_url = os.getenv("LINK_BASE_URL") or None
        self.admin_view_token = os.getenv("ADMIN_VIEW_TOKEN") or None
