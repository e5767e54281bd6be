# comp_directory/sanitize.py
from __future__ import annotations

import html
import re
from typing import List, Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from markupsafe import escape

ALLOWED_TAGS = frozenset({"p", "br", "b", "i", "em", "strong", "a", "span"})
SAFE_SCHEMES = ("http", "https")
MARK_TAG = "mark"

# "<" followed by a letter: the text is treated as markup already
_TAG_HINT = re.compile(r"<[A-Za-z]")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_CLASS_TOKEN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
# what html.parser treats as collapsible whitespace between tags
_ASCII_SPACES = "\x20\x0a\x09\x0c\x0d"


def decode_entities(raw: str) -> str:
    """'&lt;b&gt;' -> '<b>' so the sanitizer sees real tags rather than escaped text."""
    return html.unescape(raw or "")


def normalize_multiline(text: str) -> str:
    text = text or ""
    if _TAG_HINT.search(text):
        return text
    return _LINE_BREAK.sub("<br>", text)


def safe_url(href, base_url: Optional[str] = None) -> Optional[str]:
    """
    Return the href when it is an absolute http(s) URL, else None.
    Relative hrefs only survive when a base URL is configured to resolve them against.
    """
    if isinstance(href, (list, tuple)):
        href = " ".join(href)
    href = (href or "").strip()
    if not href:
        return None
    if base_url:
        href = urljoin(base_url, href)
    try:
        parts = urlsplit(href)
    except ValueError:
        return None
    if parts.scheme.lower() not in SAFE_SCHEMES or not parts.netloc:
        return None
    return href


def _safe_class(value) -> Optional[str]:
    if not value:
        return None
    raw = value if isinstance(value, (list, tuple)) else str(value).split()
    tokens = [t for t in raw if _CLASS_TOKEN.match(t)]
    return " ".join(tokens) or None


def _clean(node: Tag, base_url: Optional[str]) -> None:
    # depth first; children of an unwrapped element are cleaned before they move up
    for child in list(node.children):
        if isinstance(child, PreformattedString):
            # comments, doctype, CDATA, processing instructions
            child.extract()
            continue
        if isinstance(child, NavigableString):
            if type(child) is not NavigableString:
                # <script>/<style> contents: keep as ordinary escaped text
                child.replace_with(NavigableString(str(child)))
            continue
        if not isinstance(child, Tag):
            continue

        _clean(child, base_url)

        name = (child.name or "").lower()
        if name not in ALLOWED_TAGS:
            child.unwrap()
            continue

        attrs = {}
        cls = _safe_class(child.get("class"))
        if cls:
            attrs["class"] = cls
        if name == "a":
            href = safe_url(child.get("href"), base_url)
            if not href:
                child.unwrap()
                continue
            attrs["href"] = href
            attrs["target"] = "_blank"
            attrs["rel"] = "noopener noreferrer"
        child.attrs = attrs


def _settle_whitespace(soup: BeautifulSoup) -> None:
    """
    Unwrapping leaves neighbouring strings as separate nodes. Merge them, then
    collapse whitespace-only runs the way the parser does on input (newline if
    the run has one, else a single space), so the output re-parses unchanged.
    """
    soup.smooth()
    for node in soup.find_all(string=True):
        text = str(node)
        if not text or text.strip(_ASCII_SPACES) or text in (" ", "\n"):
            continue
        node.replace_with(NavigableString("\n" if "\n" in text else " "))


def sanitize(markup: str, base_url: Optional[str] = None) -> str:
    """
    Reduce arbitrary markup to the allow-listed subset.

    Disallowed elements are unwrapped (their text survives), every attribute
    except a filtered `class` is dropped, links need an absolute http(s) href
    and always open in a new tab with rel="noopener noreferrer".
    Never raises; bad input only degrades.
    """
    soup = BeautifulSoup(markup or "", "html.parser")
    _clean(soup, base_url)
    _settle_whitespace(soup)
    return soup.decode()


def _tokens(query: str) -> List[str]:
    seen, out = set(), []
    for tok in (query or "").split():
        key = tok.lower()
        if key not in seen:
            seen.add(key)
            out.append(tok)
    return out


def _token_pattern(tokens: List[str]) -> re.Pattern:
    # longest first so "handicap" wins over "hand" at the same position
    ordered = sorted(tokens, key=len, reverse=True)
    return re.compile("|".join(re.escape(t) for t in ordered), re.I)


def highlight(safe_html: str, query: str) -> str:
    """Wrap query tokens found in text nodes with <mark>. Tags and attributes are never touched."""
    tokens = _tokens(query)
    if not tokens or not safe_html:
        return safe_html
    pattern = _token_pattern(tokens)

    soup = BeautifulSoup(safe_html, "html.parser")
    for node in soup.find_all(string=True):
        if isinstance(node, PreformattedString):
            continue
        if node.parent is not None and node.parent.name == MARK_TAG:
            continue
        text = str(node)
        if not pattern.search(text):
            continue

        pieces = []
        pos = 0
        for m in pattern.finditer(text):
            if m.start() > pos:
                pieces.append(NavigableString(text[pos : m.start()]))
            mark = soup.new_tag(MARK_TAG)
            mark.string = m.group(0)
            pieces.append(mark)
            pos = m.end()
        if pos < len(text):
            pieces.append(NavigableString(text[pos:]))
        node.replace_with(*pieces)

    return soup.decode()


def highlight_plain(text: str, query: str) -> str:
    """
    Highlighter for plain-text fields (titles). Every character of the input
    ends up escaped; only the <mark> wrappers are markup.
    """
    text = text or ""
    tokens = _tokens(query)
    if not tokens:
        return str(escape(text))
    pattern = _token_pattern(tokens)

    out = []
    pos = 0
    for m in pattern.finditer(text):
        out.append(str(escape(text[pos : m.start()])))
        out.append(f"<{MARK_TAG}>{escape(m.group(0))}</{MARK_TAG}>")
        pos = m.end()
    out.append(str(escape(text[pos:])))
    return "".join(out)


def render_rich(text: str, query: str = "", base_url: Optional[str] = None) -> str:
    """decode entities -> line breaks -> sanitize -> highlight"""
    prepared = normalize_multiline(decode_entities(text))
    return highlight(sanitize(prepared, base_url=base_url), query)
