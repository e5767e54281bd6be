from __future__ import annotations
import itertools
import threading
import time
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from .csvparse import parse_csv
from .logger import get_logger
from .models import RawRecord

log = get_logger(__name__)

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


class FetchError(RuntimeError):
    """The spreadsheet export could not be fetched."""


def cache_busted(url: str, stamp: Optional[int] = None) -> str:
    """Append/replace a `_ts` query parameter so intermediaries can't serve a stale copy."""
    stamp = int(time.time() * 1000) if stamp is None else stamp
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "_ts"]
    query.append(("_ts", str(stamp)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def fetch_csv_text(url: str, session=None, timeout: int = 15) -> str:
    """GET the export. No retry: failures surface as FetchError."""
    if not url:
        raise FetchError("No CSV URL configured")
    http = session or requests
    try:
        r = http.get(cache_busted(url), headers=NO_STORE_HEADERS, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Fetch failed: {type(e).__name__}: {e}") from e
    # exports are UTF-8 even when served as text/csv without a charset
    return r.content.decode("utf-8", errors="replace")


def fetch_records(url: str, session=None, timeout: int = 15) -> List[RawRecord]:
    return parse_csv(fetch_csv_text(url, session=session, timeout=timeout))


class DirectoryStore:
    """
    Holds the current batch. Each refresh takes a ticket before fetching and
    only installs its result if no newer refresh has landed first, so a slow
    early response can never overwrite a later one.
    """

    def __init__(self, url: str, session=None, timeout: int = 15, loader=None):
        self.url = url
        self.loader = loader or fetch_records
        self.session = session
        self.timeout = timeout
        self._tickets = itertools.count(1)
        self._lock = threading.Lock()
        self._records: List[RawRecord] = []
        self._generation = 0

    def snapshot(self) -> Tuple[int, List[RawRecord]]:
        with self._lock:
            return self._generation, self._records

    def next_ticket(self) -> int:
        with self._lock:
            return next(self._tickets)

    def install(self, ticket: int, records: List[RawRecord]) -> bool:
        with self._lock:
            if ticket <= self._generation:
                log.info("Discarding stale load #%d (current #%d)", ticket, self._generation)
                return False
            self._records = list(records)
            self._generation = ticket
            return True

    def refresh(self) -> Tuple[int, List[RawRecord]]:
        ticket = self.next_ticket()
        log.info("Loading directory #%d from %s", ticket, self.url)
        try:
            records = self.loader(self.url, session=self.session, timeout=self.timeout)
        except FetchError as e:
            log.warning("Directory load #%d failed: %s", ticket, e)
            raise
        if self.install(ticket, records):
            log.info("Directory #%d installed (%d rows)", ticket, len(records))
        return self.snapshot()
