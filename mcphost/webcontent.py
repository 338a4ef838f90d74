"""Fetching web pages and turning HTML into text, body markup or markdown."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

import requests
from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

MAX_RESPONSE_SIZE = 5 * 1024 * 1024
DEFAULT_TIMEOUT = 30.0
MAX_TIMEOUT = 120.0

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}

DEFAULT_MARKDOWN_REMOVE = ("script", "style", "meta", "link")

_TOO_LARGE = "response too large (exceeds 5MB limit)"
_NON_CONTENT = ["script", "style", "noscript", "iframe", "object", "embed"]
_LOCAL_PREFIXES = ("localhost", "127.0.0.1", "::1")


class FetchError(Exception):
    """Raised when a URL cannot be fetched or its response is unusable."""


@dataclass(frozen=True)
class FetchedPage:
    """A fetched response: final URL, decoded body and raw content type."""

    url: str
    content: str
    content_type: str

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type


def is_localhost(host: str) -> bool:
    """Tell whether ``host`` names the local machine."""
    return host.startswith(_LOCAL_PREFIXES)


def normalize_url(url: str, upgrade_http: bool = False) -> str:
    """Add a missing ``https://`` scheme, check it, and optionally upgrade http.

    Only http and https are accepted. With ``upgrade_http``, http URLs that
    do not point at the local machine are switched to https.
    """
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise FetchError(f"invalid URL: {exc}") from exc
    if not parts.scheme:
        url = "https://" + url
        try:
            parts = urlsplit(url)
        except ValueError as exc:
            raise FetchError(f"invalid URL after adding https: {exc}") from exc
    if parts.scheme not in ("http", "https"):
        raise FetchError("URL must use http:// or https://")
    if upgrade_http and parts.scheme == "http" and not is_localhost(parts.netloc):
        url = urlunsplit(parts._replace(scheme="https"))
    return url


def _read_limited(response: requests.Response) -> bytes:
    body = bytearray()
    try:
        for chunk in response.iter_content(chunk_size=64 * 1024):
            body += chunk
            if len(body) > MAX_RESPONSE_SIZE:
                raise FetchError(_TOO_LARGE)
    except requests.RequestException as exc:
        raise FetchError(f"failed to read response: {exc}") from exc
    return bytes(body)


def fetch_url(
    url: str, timeout: float | None = DEFAULT_TIMEOUT, upgrade_http: bool = False
) -> FetchedPage:
    """GET ``url`` with browser-like headers, allowing at most 5MB of body."""
    url = normalize_url(url, upgrade_http)
    try:
        response = requests.get(
            url, headers=BROWSER_HEADERS, timeout=timeout, stream=True
        )
    except requests.RequestException as exc:
        raise FetchError(f"request failed: {exc}") from exc
    with response:
        if not 200 <= response.status_code < 300:
            raise FetchError(
                f"request failed with status code: {response.status_code}"
            )
        length = response.headers.get("Content-Length", "").strip()
        if length.isdigit() and int(length) > MAX_RESPONSE_SIZE:
            raise FetchError(_TOO_LARGE)
        body = _read_limited(response)
        content_type = response.headers.get("Content-Type", "")
    return FetchedPage(url, body.decode("utf-8", errors="replace"), content_type)


def extract_text_from_html(html: str) -> str:
    """Return the visible text of ``html``, one non-blank stripped line each."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_NON_CONTENT):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text().split("\n"))
    return "\n".join(line for line in lines if line)


def _is_markup_string(node: object) -> bool:
    return isinstance(node, NavigableString) and not isinstance(
        node, (Comment, Declaration, Doctype, ProcessingInstruction)
    )


def extract_body_content(html: str) -> str:
    """Return the inner markup of ``<body>``, or ``html`` unchanged without one.

    Whitespace that follows ``</body>`` or ``</html>`` belongs to the body,
    as an HTML5 parser would place it.
    """
    soup = BeautifulSoup(html, "html.parser")
    body = soup.find("body")
    if body is None:
        return html
    inner = body.decode_contents()
    trailing = list(body.next_siblings)
    parent = body.parent
    if isinstance(parent, Tag) and parent.name == "html":
        trailing += list(parent.next_siblings)
    for node in trailing:
        if _is_markup_string(node) and not str(node).strip():
            inner += str(node)
    return inner


_INDENT = "\x01"
_PRE_OPEN, _PRE_CLOSE = "\x02", "\x03"
_PRE_PLACEHOLDER = re.compile(f"{_PRE_OPEN}(\\d+){_PRE_CLOSE}")
_HEADINGS = {f"h{level}": level for level in range(1, 7)}
_SKIPPED = {"head", "title", "template"}
_BLOCKS = {
    "p", "div", "section", "article", "main", "header", "footer", "nav",
    "aside", "figure", "figcaption", "form", "table", "thead", "tbody",
    "tfoot", "tr", "dl", "dt", "dd", "address", "details", "summary",
    "body", "html", "li",
}


def _tidy(text: str) -> str:
    lines = "\n".join(line.strip(" \t") for line in text.split("\n"))
    return re.sub(r"\n{3,}", "\n\n", lines).strip("\n")


class _MarkdownRenderer:
    def __init__(self) -> None:
        self.preformatted: list[str] = []

    def children(self, node: Tag) -> str:
        return "".join(self.render(child) for child in node.children)

    def render(self, node: object) -> str:
        if isinstance(node, NavigableString):
            if not _is_markup_string(node):
                return ""
            return re.sub(r"\s+", " ", str(node))
        if not isinstance(node, Tag):
            return ""
        name = node.name
        if name in _SKIPPED:
            return ""
        if name in _HEADINGS:
            text = " ".join(self.children(node).split())
            return f"\n\n{'#' * _HEADINGS[name]} {text}\n\n" if text else ""
        if name == "br":
            return "\n"
        if name == "hr":
            return "\n\n* * *\n\n"
        if name in ("strong", "b"):
            return self._wrap(node, "**")
        if name in ("em", "i"):
            return self._wrap(node, "_")
        if name == "code":
            code = node.get_text()
            return f"`{code}`" if code else ""
        if name == "pre":
            self.preformatted.append(f"```\n{node.get_text().strip(chr(10))}\n```")
            index = len(self.preformatted) - 1
            return f"\n\n{_PRE_OPEN}{index}{_PRE_CLOSE}\n\n"
        if name == "a":
            text = " ".join(self.children(node).split())
            href = node.get("href")
            return f"[{text}]({href})" if href and text else text
        if name == "img":
            src = node.get("src")
            return f"![{node.get('alt', '')}]({src})" if src else ""
        if name in ("ul", "ol"):
            return self._list(node, ordered=name == "ol")
        if name == "blockquote":
            body = _tidy(self.children(node))
            if not body:
                return ""
            quoted = (f"> {line}" if line else ">" for line in body.split("\n"))
            return "\n\n" + "\n".join(quoted) + "\n\n"
        if name in _BLOCKS:
            return f"\n\n{self.children(node)}\n\n"
        return self.children(node)

    def _wrap(self, node: Tag, marker: str) -> str:
        inner = self.children(node)
        stripped = inner.strip()
        if not stripped:
            return inner
        lead = " " if inner[:1].isspace() else ""
        trail = " " if inner[-1:].isspace() else ""
        return f"{lead}{marker}{stripped}{marker}{trail}"

    def _list(self, node: Tag, ordered: bool) -> str:
        start = 1
        if ordered:
            try:
                start = int(node.get("start", "1"))
            except ValueError:
                start = 1
        items = []
        for number, item in enumerate(node.find_all("li", recursive=False), start):
            marker = f"{number}. " if ordered else "- "
            body = _tidy(self.children(item))
            first, *rest = body.split("\n")
            pad = _INDENT * len(marker)
            lines = [marker + first] + [pad + line if line else "" for line in rest]
            items.append("\n".join(lines))
        return "\n\n" + "\n".join(items) + "\n\n" if items else ""


def html_to_markdown(html: str, remove: Iterable[str] = DEFAULT_MARKDOWN_REMOVE) -> str:
    """Convert ``html`` to markdown, dropping the elements named in ``remove``."""
    soup = BeautifulSoup(html, "html.parser")
    names = list(remove)
    if names:
        for tag in soup.find_all(names):
            tag.decompose()
    renderer = _MarkdownRenderer()
    text = _tidy(renderer.children(soup))
    text = _PRE_PLACEHOLDER.sub(
        lambda match: renderer.preformatted[int(match.group(1))], text
    )
    return text.replace(_INDENT, " ")