from __future__ import annotations

from typing import Protocol


class ElementProtocol(Protocol):
    """A single element of a parsed document.

    The browser core only reads elements; implementations wrap whatever
    node type the parsing library produces.
    """

    @property
    def tag_name(self) -> str:
        """Lower-case tag name, e.g. 'a' or 'form'."""

    def attr(self, name: str) -> str | None:
        """Return the attribute value, or None if the element lacks it.

        Multi-valued attributes (class, rel) are returned space-joined.
        """

    def has_attr(self, name: str) -> bool:
        """Return True if the attribute is present, even with an empty value."""

    def text(self) -> str:
        """Return the concatenated text content of the element."""

    def inner_html(self) -> str:
        """Return the markup of the element's children."""

    def html(self) -> str:
        """Return the markup of the element itself."""

    def find(self, selector: str) -> list["ElementProtocol"]:
        """Return descendants matching a CSS selector, in document order."""


class DocumentProtocol(Protocol):
    """A parsed document supporting CSS selector queries."""

    def find(self, selector: str) -> list[ElementProtocol]:
        """Return the elements matching a CSS selector, in document order."""

    def title(self) -> str:
        """Return the text of the <title> element, or an empty string."""

    def body(self) -> str:
        """Return the inner markup of <body>.

        Documents without a body element return their whole markup.
        """

    def html(self) -> str:
        """Serialize the document back to markup."""


class DocumentParserProtocol(Protocol):
    def parse(self, content: bytes, url: str) -> DocumentProtocol:
        """Parse a response body fetched from `url` into a document."""
