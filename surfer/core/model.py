from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from requests.structures import CaseInsensitiveDict


class Attribute(Enum):
    """Boolean browser policies read when a request is built."""
    SEND_REFERER = "send_referer"
    META_REFRESH_HANDLING = "meta_refresh_handling"
    FOLLOW_REDIRECTS = "follow_redirects"


DEFAULT_ATTRIBUTES: dict[Attribute, bool] = {
    Attribute.SEND_REFERER: True,
    Attribute.META_REFRESH_HANDLING: True,
    Attribute.FOLLOW_REDIRECTS: True,
}


def _frozen_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    # read-only, case-insensitive view; `.copy()` gives back a mutable CaseInsensitiveDict
    return MappingProxyType(CaseInsensitiveDict(dict(headers or {})))


@dataclass(frozen=True)
class Request:
    """Outgoing request descriptor. Headers are copied into a read-only view on construction."""
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: bytes | None = None

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", _frozen_headers(self.headers))


@dataclass(frozen=True)
class Response:
    """Response descriptor for a completed request.

    `url` is the final URL after any followed redirects; `request` is the
    request the browser issued, before redirects.
    """
    status_code: int
    url: str
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    content: bytes = b""
    request: Request | None = None

    def __post_init__(self):
        object.__setattr__(self, "headers", _frozen_headers(self.headers))
