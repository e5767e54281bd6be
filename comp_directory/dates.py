from __future__ import annotations
import re
from datetime import date, datetime
from typing import Optional

import dateparser

from .logger import get_logger

log = get_logger(__name__)

ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
YMD_DATE = re.compile(r"^(\d{4})[/.](\d{1,2})[/.](\d{1,2})$")
UK_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_TIME_SPLIT = re.compile(r"[T\s]")

# UK sheets: day first when the generic parser has to guess
_FALLBACK_SETTINGS = {
    "DATE_ORDER": "DMY",
    "PREFER_DAY_OF_MONTH": "first",
    "REQUIRE_PARTS": ["day", "month", "year"],
}


def _mk(y: int, m: int, d: int) -> Optional[date]:
    try:
        return date(y, m, d)
    except ValueError:
        return None


def parse_date(text: str) -> Optional[date]:
    """
    Handles:
      - '2024-06-14' / '2024-06-14T09:30:00'
      - '2024/06/14' / '2024.6.4'  (year first, then month)
      - '14/6/2024'  (day first, never month first)
      - anything dateparser understands, e.g. '14 June 2024', 'Sat 14 Jun 2024'
    Returns a calendar date (no time of day) or None.
    """
    txt = (text or "").strip()
    if not txt:
        return None

    head = _TIME_SPLIT.split(txt, 1)[0]

    m = ISO_DATE.match(head)
    if m:
        return _mk(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = YMD_DATE.match(head)
    if m:
        return _mk(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = UK_DATE.match(head)
    if m:
        return _mk(int(m.group(3)), int(m.group(2)), int(m.group(1)))

    try:
        parsed = dateparser.parse(txt, settings=_FALLBACK_SETTINGS)
    except Exception as e:  # dateparser raises assorted errors on odd input
        log.debug("dateparser failed on %r: %s", txt, type(e).__name__)
        parsed = None
    if parsed is None:
        log.debug("Unparseable date %r", txt)
        return None
    return parsed.date()


def today() -> date:
    return datetime.now().date()


def is_past(value: Optional[date], now: Optional[date] = None) -> bool:
    """Strictly before today. An unknown date is never past."""
    if value is None:
        return False
    return value < (now or today())


def classify(text: str, now: Optional[date] = None) -> str:
    """'past' | 'upcoming' | 'undated'"""
    d = parse_date(text)
    if d is None:
        return "undated"
    return "past" if is_past(d, now) else "upcoming"
