import logging
import time
from http.cookiejar import Cookie, CookieJar, DefaultCookiePolicy
from typing import BinaryIO, List, Mapping, Optional

import requests
from requests.cookies import MockRequest

from surfer.core.model import Request, Response
from surfer.core.protocols.transport_protocol import RedirectCheck, TransportProtocol

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class RequestsTransport(TransportProtocol):
    """Transport backed by a `requests.Session`.

    Redirects are followed by hand so each hop can be vetoed: requests are
    sent with ``allow_redirects=False`` and the prepared ``response.next``
    is sent only after the redirect check passes.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        max_redirects: Optional[int] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        if max_redirects is not None:
            self.session.max_redirects = max_redirects

    def fetch(self, request: Request, check_redirect: Optional[RedirectCheck] = None) -> Response:
        prepared = self.session.prepare_request(requests.Request(
            method=request.method,
            url=request.url,
            headers=dict(request.headers),
            data=request.body,
        ))

        response = self.session.send(prepared, allow_redirects=False, timeout=self.timeout)
        hops = 0
        while response.is_redirect and response.next is not None:
            target = response.next
            if check_redirect is not None:
                try:
                    check_redirect(target.url)
                except Exception:
                    response.close()
                    raise
            hops += 1
            if hops > self.session.max_redirects:
                response.close()
                raise requests.TooManyRedirects(f"Exceeded {self.session.max_redirects} redirects.", response=response)

            logger.debug(f"Following redirect {response.status_code} -> {target.url}")
            response.close()
            response = self.session.send(target, allow_redirects=False, timeout=self.timeout)

        return Response(
            status_code=response.status_code,
            url=response.url,
            headers=response.headers,
            content=response.content,
            request=request,
        )

    def download(self, url: str, sink: BinaryIO, headers: Optional[Mapping[str, str]] = None) -> int:
        written = 0
        with self.session.get(url, headers=dict(headers or {}), stream=True, timeout=self.timeout) as response:
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    sink.write(chunk)
                    written += len(chunk)
        logger.debug(f"Downloaded {written} bytes from {url}")
        return written

    def cookies_for(self, url: str) -> List[Cookie]:
        jar = self.session.cookies
        request = MockRequest(requests.Request("GET", url).prepare())
        policy = getattr(jar, "_policy", None) or DefaultCookiePolicy()
        # return_ok checks expiry against the timestamp CookieJar stamps before matching
        policy._now = int(time.time())
        return [
            cookie for cookie in jar
            if policy.path_return_ok(cookie.path, request) and policy.return_ok(cookie, request)
        ]

    def set_cookie_jar(self, jar: CookieJar) -> None:
        self.session.cookies = jar

    def close(self) -> None:
        self.session.close()
