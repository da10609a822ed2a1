from __future__ import annotations

import base64
import logging
import math
import threading
from dataclasses import replace
from http.cookiejar import Cookie, CookieJar
from typing import IO, TYPE_CHECKING, BinaryIO, Mapping, Sequence, TypeVar
from urllib.parse import urlencode, urlsplit, urlunsplit

from requests.structures import CaseInsensitiveDict

from surfer.core.assets import (
    Asset,
    Image,
    Link,
    Script,
    Stylesheet,
    attr_to_resolved_url,
    resolve_url,
    scan_images,
    scan_links,
    scan_scripts,
    scan_stylesheets,
)
from surfer.core.errors import ElementNotFoundError, LocationError, PageNotLoadedError, URLParseError
from surfer.core.events import Event, EventDispatcher, EventHandler, EventType
from surfer.core.form import Form
from surfer.core.history import History, State
from surfer.core.model import DEFAULT_ATTRIBUTES, Attribute, Request
from surfer.core.protocols.bookmarks_protocol import BookmarksProtocol
from surfer.core.protocols.document_protocol import DocumentParserProtocol, DocumentProtocol, ElementProtocol
from surfer.core.protocols.transport_protocol import TransportProtocol
from surfer.domain.config import DEFAULT_USER_AGENT
from surfer.infrastructure.bookmarks import MemoryBookmarks

if TYPE_CHECKING:
    from surfer.core.recorder import MemoryRecorder

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
FormValues = Mapping[str, str | Sequence[str]]
AssetT = TypeVar("AssetT", bound=Asset)


class Browser:
    """A headless browsing session.

    Every navigation goes through the same pipeline: a PRE_REQUEST event,
    the transport fetch, parsing, a push onto the history, and finally a
    POST_REQUEST event. A navigation that fails before the push leaves the
    session on its last good page.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        parser: DocumentParserProtocol,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        attributes: Mapping[Attribute, bool] | None = None,
        headers: Mapping[str, str] | None = None,
        bookmarks: BookmarksProtocol | None = None,
        history: History | None = None,
        events: EventDispatcher | None = None,
    ) -> None:
        self._transport = transport
        self._parser = parser
        self.user_agent: str = user_agent
        self._attributes: dict[Attribute, bool] = dict(DEFAULT_ATTRIBUTES)
        self._attributes.update(attributes or {})
        self._headers: CaseInsensitiveDict = CaseInsensitiveDict(dict(headers or {}))
        self._bookmarks: BookmarksProtocol = bookmarks if bookmarks is not None else MemoryBookmarks()
        self._history: History = history if history is not None else History()
        self._events: EventDispatcher = events if events is not None else EventDispatcher()
        self._auth: tuple[str, str] | None = None

        # pending meta refresh; replaced under the lock on every navigation
        self._refresh: threading.Timer | None = None
        self._refresh_lock = threading.Lock()

    # --- Configuration ---

    def attribute(self, attribute: Attribute) -> bool:
        return self._attributes.get(attribute, False)

    def set_attribute(self, attribute: Attribute, value: bool) -> None:
        self._attributes[attribute] = value

    def set_attributes(self, attributes: Mapping[Attribute, bool]) -> None:
        """Replace every attribute; attributes left out become False."""
        self._attributes = {attribute: bool(attributes.get(attribute, False)) for attribute in Attribute}

    def set_authorization(self, username: str, password: str) -> None:
        """Send HTTP basic credentials with every request."""
        self._auth = (username, password)

    @property
    def headers(self) -> CaseInsensitiveDict:
        """Copy of the extra headers sent with every request."""
        return self._headers.copy()

    def add_request_header(self, name: str, value: str) -> None:
        self._headers[name] = value

    def set_bookmarks_jar(self, bookmarks: BookmarksProtocol) -> None:
        self._bookmarks = bookmarks

    def set_cookie_jar(self, jar: CookieJar) -> None:
        self._transport.set_cookie_jar(jar)

    def set_recorder(self, recorder: "MemoryRecorder") -> None:
        """Let `recorder` record this browser's requests and replay them through it."""
        self.on(EventType.POST_REQUEST, recorder.handle_event)
        recorder.on(EventType.RECORD_REPLAY, self._replay_request)

    # --- Events ---

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        self._events.on(event_type, handler)

    def dispatch(self, event: Event) -> None:
        self._events.dispatch(event)

    def dispatch_event(self, event_type: EventType, args: object = None) -> None:
        """Dispatch an event of the given type sent by this browser."""
        self.dispatch(Event(type=event_type, args=args, sender=self))

    # --- Navigation ---

    def open(self, url: str) -> None:
        """Request the given URL using the GET method."""
        self._get(self._parse_url(url))

    def open_form(self, url: str, values: FormValues) -> None:
        """Replace the query string of `url` with `values` and send a GET request."""
        parts = urlsplit(self._parse_url(url))
        query = urlencode(values, doseq=True)
        self._get(urlunsplit(parts._replace(query=query)))

    def open_bookmark(self, name: str) -> None:
        self.open(self._bookmarks.read(name))

    def post(self, url: str, content_type: str, body: bytes | str | IO | None = None) -> None:
        """Request the given URL using the POST method."""
        self._post(self._parse_url(url), content_type, _read_body(body))

    def post_form(self, url: str, values: FormValues) -> None:
        """POST `values` url-encoded to the given URL."""
        body = urlencode(values, doseq=True).encode("utf-8")
        self._post(self._parse_url(url), FORM_CONTENT_TYPE, body)

    def back(self) -> bool:
        """Return to the previous page.

        Returns False, without changing the current page, when there is no
        earlier page in the history.
        """
        popped = self._history.pop()
        if popped is None:
            return False
        # a refresh scheduled by the page we left must not reload the restored one
        self._cancel_refresh()
        logger.debug(f"Back from {popped.response.url} to {self.url}")
        return True

    def reload(self) -> None:
        """Re-issue the request that produced the current page."""
        state = self._history.top()
        if state is None:
            raise PageNotLoadedError("Cannot reload, no request has succeeded yet.")
        self._send(state.request)

    def bookmark(self, name: str) -> None:
        """Save the current page URL under `name`."""
        self._bookmarks.save(name, self.url)
        logger.info(f"Bookmarked {self.url} as '{name}'")

    def click(self, selector: str) -> None:
        """Follow the link matched by `selector`.

        Only anchors can be clicked. The first element matching the selector
        is used.
        """
        elements = self.find(selector)
        if not elements:
            raise ElementNotFoundError(f"Element not found matching expr '{selector}'.")
        anchor = elements[0]
        if anchor.tag_name != "a":
            raise ElementNotFoundError(f"Expr '{selector}' must match an anchor tag.")

        href = attr_to_resolved_url(anchor, "href", self.url)
        self.dispatch_event(EventType.CLICK, href)
        self._get(href, referer=self.url)

    # --- Current page ---

    @property
    def history(self) -> History:
        return self._history

    @property
    def refresh_delay(self) -> float | None:
        """Seconds until the pending meta refresh fires, as declared by the page.

        None when no refresh is pending.
        """
        with self._refresh_lock:
            timer = self._refresh
        if timer is None or timer.finished.is_set():
            return None
        return timer.interval

    @property
    def state(self) -> State:
        state = self._history.top()
        if state is None:
            raise PageNotLoadedError("No page has been loaded.")
        return state

    @property
    def url(self) -> str:
        return self.state.response.url or self.state.request.url

    @property
    def status_code(self) -> int:
        return self.state.response.status_code

    @property
    def response_headers(self) -> CaseInsensitiveDict:
        return self.state.response.headers.copy()

    @property
    def title(self) -> str:
        return self.state.document.title()

    @property
    def body(self) -> str:
        return self.state.document.body()

    @property
    def dom(self) -> DocumentProtocol:
        return self.state.document

    def find(self, selector: str) -> list[ElementProtocol]:
        return self.state.document.find(selector)

    def resolve_url(self, url: str) -> str:
        """Return an absolute URL for a possibly relative one, based on the current page."""
        return resolve_url(self.url, url)

    def form(self, selector: str) -> Form:
        """Return the form matched by `selector`."""
        elements = self.find(selector)
        if not elements:
            raise ElementNotFoundError(f"Form not found matching expr '{selector}'.")
        if elements[0].tag_name != "form":
            raise ElementNotFoundError(f"Expr '{selector}' does not match a form tag.")
        return Form(self, elements[0])

    def forms(self) -> list[Form]:
        return [Form(self, element) for element in self.find("form")]

    def links(self) -> list[Link]:
        return self._bind_assets(scan_links(self.dom, self.url))

    def images(self) -> list[Image]:
        return self._bind_assets(scan_images(self.dom, self.url))

    def stylesheets(self) -> list[Stylesheet]:
        return self._bind_assets(scan_stylesheets(self.dom, self.url))

    def scripts(self) -> list[Script]:
        return self._bind_assets(scan_scripts(self.dom, self.url))

    def site_cookies(self) -> list[Cookie]:
        return self._transport.cookies_for(self.url)

    def download(self, sink: BinaryIO) -> int:
        """Write the current document's markup to `sink` and return the byte count."""
        data = self.state.document.html().encode("utf-8")
        sink.write(data)
        return len(data)

    def close(self) -> None:
        self._cancel_refresh()
        self._transport.close()

    def __enter__(self) -> "Browser":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- Request pipeline ---

    def _get(self, url: str, referer: str | None = None) -> None:
        self._send(self._build_request("GET", url, referer))

    def _post(self, url: str, content_type: str, body: bytes | None, referer: str | None = None) -> None:
        request = self._build_request("POST", url, referer, content_type=content_type, body=body)
        self._send(request)

    def _build_request(
        self,
        method: str,
        url: str,
        referer: str | None = None,
        content_type: str | None = None,
        body: bytes | None = None,
    ) -> Request:
        headers = self._base_headers()
        if referer and self.attribute(Attribute.SEND_REFERER):
            headers["Referer"] = referer
        if content_type:
            headers["Content-Type"] = content_type
        return Request(method=method, url=url, headers=headers, body=body)

    def _base_headers(self) -> CaseInsensitiveDict:
        headers = self._headers.copy()
        headers["User-Agent"] = self.user_agent
        if self._auth is not None:
            headers["Authorization"] = "Basic " + _basic_auth(*self._auth)
        return headers

    def _send(self, request: Request) -> None:
        self.dispatch_event(EventType.PRE_REQUEST, request)
        self._cancel_refresh()

        logger.debug(f"{request.method} {request.url}")
        response = self._transport.fetch(request, self._check_redirect)
        document = self._parser.parse(response.content, response.url)

        self._history.push(State(request=request, response=response, document=document))
        logger.debug(f"Loaded {response.url} ({response.status_code}), history depth {len(self._history)}")
        self._handle_meta_refresh()

        # the page is already committed when a post-request handler fails
        self.dispatch_event(EventType.POST_REQUEST, response)

    def _replay_request(self, event: Event) -> None:
        request: Request = event.args
        logger.debug(f"Replaying {request.method} {request.url}")
        self._send(request)

    def _check_redirect(self, url: str) -> None:
        if not self.attribute(Attribute.FOLLOW_REDIRECTS):
            raise LocationError(f"Redirects are disabled. Cannot follow '{url}'.")

    def _parse_url(self, url: str) -> str:
        try:
            if self._history.top() is not None:
                url = self.resolve_url(url)
            parts = urlsplit(url)
            parts.port  # raises ValueError for an invalid port
        except ValueError as e:
            raise URLParseError(f"Cannot parse URL '{url}': {e}") from e
        if not parts.scheme or not parts.netloc:
            raise URLParseError(f"URL '{url}' is not absolute.")
        return url

    def _bind_assets(self, assets: list[AssetT]) -> list[AssetT]:
        page_url = self.url
        return [
            replace(asset, _transport=self._transport, _headers=self._asset_headers(asset.url, page_url))
            for asset in assets
        ]

    def _asset_headers(self, asset_url: str, page_url: str) -> CaseInsensitiveDict:
        headers = self._base_headers()
        if not _same_origin(asset_url, page_url):
            # Authorization only goes to the page's own origin
            headers.pop("Authorization", None)
        return headers

    # --- Meta refresh ---

    def _handle_meta_refresh(self) -> None:
        if not self.attribute(Attribute.META_REFRESH_HANDLING):
            return
        tags = self.find("meta[http-equiv='refresh' i]")
        if not tags:
            return
        delay = _parse_refresh_delay(tags[0].attr("content"))
        if delay is None:
            return

        timer = threading.Timer(delay, self._refresh_page)
        timer.daemon = True
        with self._refresh_lock:
            previous, self._refresh = self._refresh, timer
        if previous is not None:
            previous.cancel()
        logger.debug(f"Meta refresh of {self.url} scheduled in {delay}s")
        timer.start()

    def _cancel_refresh(self) -> None:
        with self._refresh_lock:
            timer, self._refresh = self._refresh, None
        if timer is not None:
            timer.cancel()

    def _refresh_page(self) -> None:
        try:
            self.reload()
        except Exception as e:
            # runs on the timer thread; there is no caller to report to
            logger.warning(f"Meta refresh reload failed: {e}")


def _parse_refresh_delay(content: str | None) -> float | None:
    if not content:
        return None
    delay = content.split(";", 1)[0].strip()
    try:
        value = float(delay)
    except ValueError:
        return None
    return value if math.isfinite(value) and value >= 0 else None


def _same_origin(url: str, other: str) -> bool:
    try:
        return _origin(url) == _origin(other)
    except ValueError:
        return False


def _origin(url: str) -> tuple[str, str | None, int | None]:
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.hostname, parts.port


def _basic_auth(username: str, password: str) -> str:
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def _read_body(body: bytes | str | IO | None) -> bytes | None:
    if body is None or isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    data = body.read()
    return data.encode("utf-8") if isinstance(data, str) else data
