from __future__ import annotations
import os
from typing import List
from urllib.parse import urlsplit

from comp_directory import parse_csv
from comp_directory.ingest import FetchError, fetch_records
from comp_directory.models import RawRecord


def load_directory(source: str, session=None, timeout: int = 15) -> List[RawRecord]:
    """
    Entry point that supports both a published export URL and a local file.
    For http(s): fetch with cache-busting (ingest.fetch_records).
    For .csv / .txt files: read from disk, same parser.
    """
    if not source:
        raise FetchError("No directory source configured")

    scheme = urlsplit(source).scheme.lower()
    if scheme in ("http", "https"):
        return fetch_records(source, session=session, timeout=timeout)

    ext = os.path.splitext(source)[1].lower()
    if ext in (".csv", ".txt"):
        try:
            with open(source, "r", encoding="utf-8-sig", newline="") as f:
                text = f.read()
        except OSError as e:
            raise FetchError(f"Could not read {source}: {e}") from e
        return parse_csv(text)

    raise ValueError(f"Unsupported directory source: {source}")
