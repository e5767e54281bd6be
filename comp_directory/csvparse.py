# comp_directory/csvparse.py
from __future__ import annotations

import re
from typing import Iterable, List

from .models import RawRecord

_NEEDS_QUOTES = re.compile(r'[",\r\n]')


def _split_rows(text: str) -> List[List[str]]:
    """
    Single pass over the text with an in-quotes flag.
    Outside quotes: ',' ends a field, CRLF / CR / LF end a row.
    Inside quotes everything is literal except '""' (-> '"') and the closing quote.
    An unterminated quote just runs to the end of the input.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    i, n = 0, len(text)

    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and text[i + 1] == '"':
                    field.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                field.append(ch)
            i += 1
            continue

        if ch == '"':
            in_quotes = True
        elif ch == ",":
            row.append("".join(field))
            field = []
        elif ch == "\r" or ch == "\n":
            row.append("".join(field))
            field = []
            rows.append(row)
            row = []
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
        else:
            field.append(ch)
        i += 1

    # flush whatever is pending (no trailing newline, or unterminated quote)
    if field or row:
        row.append("".join(field))
        rows.append(row)

    return [r for r in rows if len(r) > 1 or (r and r[0] != "")]


def parse_header(text: str) -> List[str]:
    """Trimmed header cells of an export, quoting honoured. [] for empty input."""
    rows = _split_rows((text or "").lstrip("\ufeff"))
    return [h.strip() for h in rows[0]] if rows else []


def parse_csv(text: str) -> List[RawRecord]:
    """
    Parse a delimited export into records keyed by the (trimmed) header row.
    Short rows are padded with "", extra cells beyond the header are ignored.
    """
    rows = _split_rows((text or "").lstrip("\ufeff"))
    if not rows:
        return []

    headers = [h.strip() for h in rows[0]]
    out: List[RawRecord] = []
    for cells in rows[1:]:
        rec: RawRecord = {}
        for idx, h in enumerate(headers):
            if h in rec and rec[h]:
                continue  # duplicate header: first non-empty cell wins
            rec[h] = cells[idx] if idx < len(cells) else ""
        out.append(rec)
    return out


def _quote(value: str) -> str:
    value = "" if value is None else str(value)
    if _NEEDS_QUOTES.search(value):
        return '"' + value.replace('"', '""') + '"'
    return value


def to_csv(records: Iterable[RawRecord], headers: List[str] | None = None) -> str:
    """Serialize records back to CSV (RFC 4180 quoting, LF row ends)."""
    records = list(records)
    if headers is None:
        headers = []
        for r in records:
            for k in r:
                if k not in headers:
                    headers.append(k)
    lines = [",".join(_quote(h) for h in headers)]
    for r in records:
        lines.append(",".join(_quote(r.get(h, "")) for h in headers))
    return "\n".join(lines) + "\n"
