from __future__ import annotations

from http.cookiejar import Cookie, CookieJar
from typing import BinaryIO, Callable, Mapping, Protocol

from surfer.core.model import Request, Response

RedirectCheck = Callable[[str], None]


class TransportProtocol(Protocol):
    """HTTP transport used by the browser.

    The transport owns the cookie store; the browser never reads or writes
    cookies except through `cookies_for`.
    """

    def fetch(self, request: Request, check_redirect: RedirectCheck | None = None) -> Response:
        """Send `request` and return the final response.

        Before following each redirect the transport calls `check_redirect`
        with the target URL. The hook vetoes the redirect by raising, and
        the exception propagates out of `fetch`.
        """

    def download(self, url: str, sink: BinaryIO, headers: Mapping[str, str] | None = None) -> int:
        """GET `url` and stream the raw body into `sink`. Returns the number of bytes written."""

    def cookies_for(self, url: str) -> list[Cookie]:
        """Return the stored cookies that would be sent to `url`."""

    def set_cookie_jar(self, jar: CookieJar) -> None:
        """Replace the cookie store."""

    def close(self) -> None:
        """Release pooled connections."""
