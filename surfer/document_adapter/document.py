"""BeautifulSoup implementation of the document protocols.

CSS selectors are matched by soupsieve through `Tag.select`, which returns
elements in document order.
"""
from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from surfer.core.protocols.document_protocol import DocumentParserProtocol, DocumentProtocol, ElementProtocol

HTML_PARSER = 'html.parser'


class SoupElement(ElementProtocol):
    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def tag(self) -> Tag:
        return self._tag

    @property
    def tag_name(self) -> str:
        return (self._tag.name or "").lower()

    def attr(self, name: str) -> str | None:
        value = self._tag.get(name)
        if value is None:
            return None
        return " ".join(value) if isinstance(value, list) else value

    def has_attr(self, name: str) -> bool:
        return self._tag.has_attr(name)

    def text(self) -> str:
        return self._tag.get_text()

    def inner_html(self) -> str:
        return self._tag.decode_contents()

    def html(self) -> str:
        return str(self._tag)

    def find(self, selector: str) -> list[ElementProtocol]:
        return [SoupElement(tag) for tag in self._tag.select(selector)]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SoupElement) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"SoupElement(<{self.tag_name}>)"


class SoupDocument(DocumentProtocol):
    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def find(self, selector: str) -> list[ElementProtocol]:
        return [SoupElement(tag) for tag in self._soup.select(selector)]

    def title(self) -> str:
        title = self._soup.select_one("title")
        return title.get_text() if title else ""

    def body(self) -> str:
        body = self._soup.select_one("body")
        if body is None:
            return self._soup.decode()
        return body.decode_contents()

    def html(self) -> str:
        return self._soup.decode()


class SoupParser(DocumentParserProtocol):
    """Parses response bodies with BeautifulSoup's built-in HTML parser."""

    def __init__(self, features: str = HTML_PARSER) -> None:
        self.features = features

    def parse(self, content: bytes, url: str) -> DocumentProtocol:
        return SoupDocument(BeautifulSoup(content, self.features))
