# pebblescan/extractors/page_accessor.py

"""Uniform read access to a product page, from raw markup or a parsed DOM.

Server-side fetches only ever hold the HTML string, while the
browser-context path has a full element tree to query.  Extraction
strategies talk to a :class:`PageAccessor` and never branch on which
kind they were given: primitives that need a live DOM simply come back
empty from :class:`StringAccessor`.
"""

import html as html_lib
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator

from bs4 import BeautifulSoup, Tag

_SCRIPT_STYLE_RE = re.compile(
    r"<(script|style|noscript|template)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_BLOCK_TAG_RE = re.compile(
    r"</?(?:p|div|br|li|ul|ol|h[1-6]|tr|td|th|table|section|article|"
    r"header|footer|main|nav|aside|form|dd|dt|dl|blockquote)\b[^>]*>",
    re.IGNORECASE,
)
_ANY_TAG_RE = re.compile(r"<[^>]+>")
_HSPACE_RE = re.compile(r"[ \t\r\f\v\xa0]+")

_META_TAG_RE = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_ATTR_RE = re.compile(
    r"([a-zA-Z_:][\w:.-]*)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')"
)
_TITLE_RE = re.compile(
    r"<title[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL
)
_H1_RE = re.compile(r"<h1\b[^>]*>(.*?)</h1\s*>", re.IGNORECASE | re.DOTALL)
_JSON_LD_RE = re.compile(
    r"<script\b[^>]*type\s*=\s*[\"']application/ld\+json[\"'][^>]*>"
    r"(.*?)</script\s*>",
    re.IGNORECASE | re.DOTALL,
)
_STRUCK_TAG_RE = re.compile(
    r"<(del|strike|s)\b[^>]*>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL
)
_STRUCK_STYLE_RE = re.compile(
    r"<([a-z][a-z0-9]*)\b[^>]*style\s*=\s*[\"'][^\"']*line-through"
    r"[^\"']*[\"'][^>]*>(.*?)</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_BODY_RE = re.compile(r"<body\b[^>]*>(.*)</body\s*>", re.IGNORECASE | re.DOTALL)

STRUCK_SELECTOR = 'del, s, strike, [style*="line-through"]'


def visible_text(markup: str) -> str:
    """Approximate ``innerText``: block tags break lines, inline tags join."""
    text = _SCRIPT_STYLE_RE.sub(" ", markup)
    text = _COMMENT_RE.sub(" ", text)
    text = _BLOCK_TAG_RE.sub("\n", text)
    text = _ANY_TAG_RE.sub("", text)
    text = html_lib.unescape(text)
    lines = (_HSPACE_RE.sub(" ", line).strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


def _strip_tags(fragment: str) -> str:
    """Flatten a small markup fragment into single-spaced text."""
    text = html_lib.unescape(_ANY_TAG_RE.sub(" ", fragment))
    return " ".join(text.split())


def class_string(el: Tag) -> str:
    """Lower-cased space-joined class attribute of *el*."""
    raw = el.get("class")
    if isinstance(raw, list):
        return " ".join(raw).lower()
    return str(raw or "").lower()


def is_struck(el: Tag) -> bool:
    """True if *el* or one of its ancestors renders crossed out."""
    node: Tag | None = el
    while node is not None:
        if node.name in ("del", "s", "strike"):
            return True
        style = node.get("style")
        if isinstance(style, str) and "line-through" in style.lower():
            return True
        node = node.parent
    return False


class PageAccessor(ABC):
    """Read-only query primitives shared by every extraction strategy."""

    supports_dom: bool = False

    def __init__(self, url: str) -> None:
        self.url = url
        self._body_text: str | None = None
        self._price_text: str | None = None

    @property
    @abstractmethod
    def markup(self) -> str:
        """Raw HTML source of the page."""
        ...

    @abstractmethod
    def meta_content(self, key: str) -> str | None:
        """Content of the ``<meta>`` whose property or name equals *key*."""
        ...

    @abstractmethod
    def title_tag(self) -> str | None:
        """Text of the document ``<title>``."""
        ...

    @abstractmethod
    def first_heading(self) -> str | None:
        """Text of the first ``<h1>``."""
        ...

    @abstractmethod
    def json_ld_blocks(self) -> list[str]:
        """Raw bodies of every ``application/ld+json`` script."""
        ...

    @abstractmethod
    def struck_texts(self) -> list[str]:
        """Texts of strikethrough elements (del/s/strike/line-through)."""
        ...

    @abstractmethod
    def _body_markup(self) -> str:
        """Markup that visible text is derived from."""
        ...

    def body_text(self) -> str:
        """Visible page text, computed once."""
        if self._body_text is None:
            self._body_text = visible_text(self._body_markup())
        return self._body_text

    @abstractmethod
    def _unstruck_markup(self) -> str:
        """Body markup with strikethrough elements removed."""
        ...

    def price_text(self) -> str:
        """Visible text without crossed-out prices, computed once."""
        if self._price_text is None:
            self._price_text = visible_text(self._unstruck_markup())
        return self._price_text

    # DOM-only primitives: empty unless a parsed tree is available

    def select(self, selector: str) -> list[Tag]:
        """CSS-select elements."""
        return []

    def select_one(self, selector: str) -> Tag | None:
        """First element for *selector*, if any."""
        found = self.select(selector)
        return found[0] if found else None

    def elements(self) -> Iterator[Tag]:
        """Every element in document order."""
        return iter(())


class StringAccessor(PageAccessor):
    """Regex-only access to a fetched HTML string."""

    def __init__(self, html: str, url: str) -> None:
        super().__init__(url)
        self._html = html or ""
        self._meta: dict[str, str] | None = None

    @property
    def markup(self) -> str:
        return self._html

    def _index_meta(self) -> dict[str, str]:
        """Map lower-cased property/name keys to content, first one wins."""
        index: dict[str, str] = {}
        for tag in _META_TAG_RE.findall(self._html):
            attrs = {
                m.group(1).lower(): (
                    m.group(2) if m.group(2) is not None else m.group(3)
                )
                for m in _ATTR_RE.finditer(tag)
            }
            content = attrs.get("content")
            if content is None:
                continue
            for attr in ("property", "name", "itemprop"):
                key = attrs.get(attr)
                if key:
                    index.setdefault(key.lower(), content)
        return index

    def meta_content(self, key: str) -> str | None:
        if self._meta is None:
            self._meta = self._index_meta()
        value = self._meta.get(key.lower())
        if value is None:
            return None
        return html_lib.unescape(value).strip() or None

    def title_tag(self) -> str | None:
        match = _TITLE_RE.search(self._html)
        if not match:
            return None
        return _strip_tags(match.group(1)) or None

    def first_heading(self) -> str | None:
        match = _H1_RE.search(self._html)
        if not match:
            return None
        return _strip_tags(match.group(1)) or None

    def json_ld_blocks(self) -> list[str]:
        return [m.group(1) for m in _JSON_LD_RE.finditer(self._html)]

    def struck_texts(self) -> list[str]:
        texts = [
            _strip_tags(m.group(2))
            for m in _STRUCK_TAG_RE.finditer(self._html)
        ]
        texts.extend(
            _strip_tags(m.group(2))
            for m in _STRUCK_STYLE_RE.finditer(self._html)
        )
        return texts

    def _body_markup(self) -> str:
        match = _BODY_RE.search(self._html)
        return match.group(1) if match else self._html

    def _unstruck_markup(self) -> str:
        markup = _STRUCK_TAG_RE.sub(" ", self._body_markup())
        return _STRUCK_STYLE_RE.sub(" ", markup)


class DomAccessor(PageAccessor):
    """Element-tree access, the equivalent of a content-script DOM."""

    supports_dom = True

    def __init__(self, dom: BeautifulSoup | str, url: str) -> None:
        super().__init__(url)
        if isinstance(dom, BeautifulSoup):
            self.soup = dom
        else:
            self.soup = BeautifulSoup(dom or "", "lxml")

    @property
    def markup(self) -> str:
        return str(self.soup)

    def meta_content(self, key: str) -> str | None:
        wanted = key.lower()
        for tag in self.soup.find_all("meta"):
            for attr in ("property", "name", "itemprop"):
                value = tag.get(attr)
                if isinstance(value, str) and value.lower() == wanted:
                    content = tag.get("content")
                    if isinstance(content, str) and content.strip():
                        return content.strip()
        return None

    def title_tag(self) -> str | None:
        tag = self.soup.find("title")
        if tag is None:
            return None
        return tag.get_text(" ", strip=True) or None

    def first_heading(self) -> str | None:
        tag = self.soup.find("h1")
        if tag is None:
            return None
        return tag.get_text(" ", strip=True) or None

    def json_ld_blocks(self) -> list[str]:
        return [
            tag.get_text()
            for tag in self.soup.find_all(
                "script", attrs={"type": "application/ld+json"}
            )
        ]

    def struck_texts(self) -> list[str]:
        return [
            el.get_text(" ", strip=True)
            for el in self.soup.select(STRUCK_SELECTOR)
        ]

    def _body_markup(self) -> str:
        body = self.soup.body
        return str(body) if body is not None else str(self.soup)

    def _unstruck_markup(self) -> str:
        copy = BeautifulSoup(self._body_markup(), "lxml")
        for el in copy.select(STRUCK_SELECTOR):
            el.decompose()
        return str(copy)

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def elements(self) -> Iterator[Tag]:
        for el in self.soup.find_all(True):
            if isinstance(el, Tag):
                yield el
