import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import pytest
import requests
from requests.cookies import RequestsCookieJar

from surfer.core.browser import Browser
from surfer.core.model import Request, Response
from surfer.core.protocols.transport_protocol import TransportProtocol
from surfer.document_adapter.document import SoupParser
from tests.html_utils import HtmlUtils


class _FakeTransport(TransportProtocol):
    """Serves canned pages by URL and records every request it sees.

    A page may be a list of bodies: each fetch consumes one and the last is
    repeated. URLs that are not found fall back to the URL without its query
    string, then to a 404.
    """

    def __init__(
        self,
        *,
        pages: dict[str, Any] | None = None,
        redirects: dict[str, str] | None = None,
        assets: dict[str, bytes] | None = None,
        failing_urls: tuple[str, ...] = (),
        headers: dict[str, str] | None = None,
    ) -> None:
        self.pages = dict(pages or {})
        self.redirects = redirects or {}
        self.assets = assets or {}
        self.failing_urls = failing_urls
        self.headers = headers or {"Content-Type": "text/html; charset=utf-8"}
        self.cookie_jar = RequestsCookieJar()
        self.closed = False

        # recording
        self.requests: list[Request] = []
        self.redirect_checks: list[str] = []
        self.downloads: list[tuple[str, dict[str, str]]] = []

    def fetch(self, request: Request, check_redirect=None) -> Response:
        self.requests.append(request)
        url = request.url
        while url in self.redirects:
            target = self.redirects[url]
            self.redirect_checks.append(target)
            if check_redirect is not None:
                check_redirect(target)
            url = target

        if url in self.failing_urls:
            raise requests.ConnectionError(f"cannot reach {url}")

        key = url if url in self.pages else _without_query(url)
        if key not in self.pages:
            return Response(status_code=404, url=url, headers=self.headers, content=b"", request=request)

        page = self.pages[key]
        if isinstance(page, list):
            body = page.pop(0) if len(page) > 1 else page[0]
        else:
            body = page
        content = body.encode("utf-8") if isinstance(body, str) else body
        return Response(status_code=200, url=url, headers=self.headers, content=content, request=request)

    def download(self, url, sink, headers=None) -> int:
        self.downloads.append((url, dict(headers or {})))
        data = self.assets.get(url, b"asset-bytes")
        sink.write(data)
        return len(data)

    def cookies_for(self, url: str):
        host = urlsplit(url).hostname
        return [cookie for cookie in self.cookie_jar if cookie.domain.lstrip(".") == host]

    def set_cookie_jar(self, jar) -> None:
        self.cookie_jar = jar

    def close(self) -> None:
        self.closed = True


def _without_query(url: str) -> str:
    return urlunsplit(urlsplit(url)._replace(query=""))


@pytest.fixture
def site_pages():
    """The standard three linked pages plus the forms page, served from http://example.com."""
    return {
        "http://example.com/": HtmlUtils.load("page1.html"),
        "http://example.com/page2": HtmlUtils.load("page2.html"),
        "http://example.com/page3": HtmlUtils.load("page3.html"),
        "http://example.com/form": HtmlUtils.load("form.html"),
    }


@pytest.fixture
def fake_transport_factory(site_pages):
    """Return a factory that constructs a configured FakeTransport.

    Usage:
        transport = fake_transport_factory(redirects={'http://example.com/old': 'http://example.com/'})
    """

    def _factory(**kwargs):
        kwargs.setdefault("pages", site_pages)
        return _FakeTransport(**kwargs)

    return _factory


@pytest.fixture
def browser_factory(fake_transport_factory):
    """Return a factory building a Browser on a fake transport.

    The factory returns a (browser, transport) pair.
    """
    browsers: list[Browser] = []

    def _factory(transport: _FakeTransport | None = None, **kwargs):
        transport = transport or fake_transport_factory()
        browser = Browser(transport=transport, parser=SoupParser(), **kwargs)
        browsers.append(browser)
        return browser, transport

    yield _factory

    for browser in browsers:
        browser.close()


class _SiteHandler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:
        self._route()

    def do_POST(self) -> None:
        self._route()

    def log_message(self, format: str, *args: Any) -> None:
        return None

    def _route(self) -> None:
        path = urlsplit(self.path).path
        if path == "/":
            self._send(200, HtmlUtils.load("page1.html"))
        elif path == "/page2":
            self._send(200, HtmlUtils.load("page2.html"))
        elif path == "/redirect":
            self._redirect("/page2")
        elif path == "/loop":
            self._redirect("/loop")
        elif path == "/echo":
            length = int(self.headers.get("Content-Length") or 0)
            payload = {
                "method": self.command,
                "path": self.path,
                "headers": dict(self.headers.items()),
                "body": self.rfile.read(length).decode("utf-8"),
            }
            self._send(200, json.dumps(payload), content_type="application/json")
        elif path == "/set-cookie":
            self._send(200, "<html><body>cookie</body></html>", extra_headers={"Set-Cookie": "session=abc; Path=/"})
        elif path.endswith(".css"):
            self._send(200, "body { color: black; }", content_type="text/css")
        else:
            self._send(404, "<html><body>not found</body></html>")

    def _redirect(self, location: str) -> None:
        self.send_response(302)
        self.send_header("Location", location)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _send(self, status: int, body: str, content_type: str = "text/html; charset=utf-8",
              extra_headers: dict[str, str] | None = None) -> None:
        data = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        for name, value in (extra_headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(data)


@pytest.fixture
def http_server():
    """Serve a small test site on a random local port; yields its base URL."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _SiteHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    server.server_close()
