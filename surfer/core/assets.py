"""Page assets: links, images, stylesheets and scripts.

Assets are read from the current document on demand. The browser binds
each one to its transport and request headers so it can be downloaded
independently of the history.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Mapping
from urllib.parse import urljoin

from surfer.core.errors import AttributeNotFoundError, URLParseError
from surfer.core.protocols.document_protocol import DocumentProtocol, ElementProtocol
from surfer.core.protocols.transport_protocol import TransportProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Asset:
    url: str
    id: str = ""
    _transport: TransportProtocol | None = field(default=None, compare=False, repr=False)
    _headers: Mapping[str, str] | None = field(default=None, compare=False, repr=False)

    def download(self, sink: BinaryIO) -> int:
        """Fetch the asset and write its raw bytes to `sink`.

        Returns the number of bytes written. Does not touch browser state.
        """
        if self._transport is None:
            raise RuntimeError(f"Asset {self.url} is not bound to a transport")
        logger.debug(f"Downloading asset {self.url}")
        return self._transport.download(self.url, sink, self._headers)


@dataclass(frozen=True)
class Link(Asset):
    text: str = ""


@dataclass(frozen=True)
class Image(Asset):
    alt: str = ""
    title: str = ""


@dataclass(frozen=True)
class Stylesheet(Asset):
    media: str = "all"
    type: str = "text/css"


@dataclass(frozen=True)
class Script(Asset):
    type: str = "text/javascript"


def resolve_url(base_url: str, url: str) -> str:
    """Resolve a possibly relative URL against `base_url`.

    Raises URLParseError when the URL can't be parsed.
    """
    try:
        return urljoin(base_url, url.strip())
    except ValueError as e:
        raise URLParseError(f"Cannot parse URL '{url}': {e}") from e


def attr_to_resolved_url(element: ElementProtocol, name: str, base_url: str) -> str:
    value = element.attr(name)
    if value is None:
        raise AttributeNotFoundError(f"Attribute '{name}' not found.")
    return resolve_url(base_url, value)


def attr_or_default(element: ElementProtocol, name: str, default: str) -> str:
    value = element.attr(name)
    return default if value is None else value


def _resolved_or_none(element: ElementProtocol, name: str, base_url: str) -> str | None:
    try:
        return attr_to_resolved_url(element, name, base_url)
    except (AttributeNotFoundError, URLParseError):
        return None


def scan_links(document: DocumentProtocol, base_url: str) -> list[Link]:
    links = []
    for element in document.find("a"):
        href = _resolved_or_none(element, "href", base_url)
        if href is None:
            continue
        links.append(Link(
            url=href,
            id=attr_or_default(element, "id", ""),
            text=element.text(),
        ))
    return links


def scan_images(document: DocumentProtocol, base_url: str) -> list[Image]:
    images = []
    for element in document.find("img"):
        src = _resolved_or_none(element, "src", base_url)
        if src is None:
            continue
        images.append(Image(
            url=src,
            id=attr_or_default(element, "id", ""),
            alt=attr_or_default(element, "alt", ""),
            title=attr_or_default(element, "title", ""),
        ))
    return images


def scan_stylesheets(document: DocumentProtocol, base_url: str) -> list[Stylesheet]:
    stylesheets = []
    for element in document.find("link"):
        rel = (element.attr("rel") or "").lower().split()
        if "stylesheet" not in rel:
            continue
        href = _resolved_or_none(element, "href", base_url)
        if href is None:
            continue
        stylesheets.append(Stylesheet(
            url=href,
            id=attr_or_default(element, "id", ""),
            media=attr_or_default(element, "media", "all"),
            type=attr_or_default(element, "type", "text/css"),
        ))
    return stylesheets


def scan_scripts(document: DocumentProtocol, base_url: str) -> list[Script]:
    scripts = []
    for element in document.find("script"):
        # inline scripts have no src and are skipped
        src = _resolved_or_none(element, "src", base_url)
        if src is None:
            continue
        scripts.append(Script(
            url=src,
            id=attr_or_default(element, "id", ""),
            type=attr_or_default(element, "type", "text/javascript"),
        ))
    return scripts
