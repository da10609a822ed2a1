import io

import pytest

from surfer.core.assets import Link, Stylesheet, resolve_url, scan_links
from surfer.core.errors import URLParseError
from surfer.document_adapter.document import SoupParser


@pytest.fixture
def page1(browser_factory):
    browser, transport = browser_factory()
    browser.open("http://example.com/")
    return browser, transport


def test_links(page1):
    browser, _ = page1

    links = browser.links()

    assert len(links) == 2
    assert links[0].id == ""
    assert links[0].url == "http://example.com/page2"
    assert links[0].text == "click"
    assert links[1].id == "page3"
    assert links[1].url == "http://example.com/page3"
    assert links[1].text == "no clicking"


def test_images(page1):
    browser, _ = page1

    images = browser.images()

    assert len(images) == 2
    assert images[0].id == "imgur-image"
    assert images[0].url == "http://i.imgur.com/HW4bJtY.jpg"
    assert images[0].alt == ""
    assert images[0].title == "It's a..."
    assert images[1].id == ""
    assert images[1].url == "http://example.com/Cxagv.jpg"
    assert images[1].alt == "A picture"
    assert images[1].title == ""


def test_stylesheets(page1):
    browser, _ = page1

    stylesheets = browser.stylesheets()

    assert len(stylesheets) == 2
    assert stylesheets[0].url == "http://godoc.org/-/site.css"
    assert stylesheets[0].media == "all"
    assert stylesheets[0].type == "text/css"
    assert stylesheets[1].url == "http://example.com/print.css"
    assert stylesheets[1].media == "print"
    assert stylesheets[1].type == "text/css"


def test_scripts(page1):
    browser, _ = page1

    scripts = browser.scripts()

    assert len(scripts) == 2
    assert scripts[0].url == "http://godoc.org/-/site.js"
    assert scripts[0].type == "text/javascript"
    assert scripts[1].url == "http://example.com/jquery.min.js"
    assert scripts[1].type == "text/javascript"


def test_asset_download_uses_transport_without_navigating(page1):
    # Given
    browser, transport = page1
    stylesheet = browser.stylesheets()[1]
    transport.assets["http://example.com/print.css"] = b"@media print { body { margin: 0; } }"
    sink = io.BytesIO()

    # When
    written = stylesheet.download(sink)

    # Then
    assert written == len(sink.getvalue()) > 0
    assert sink.getvalue().startswith(b"@media print")
    url, headers = transport.downloads[0]
    assert url == "http://example.com/print.css"
    assert headers["User-Agent"] == browser.user_agent
    assert len(transport.requests) == 1
    assert len(browser.history) == 1


def test_assets_are_values():
    assert Link(url="http://h/page2", text="click") == Link(url="http://h/page2", text="click")
    assert Stylesheet(url="http://h/a.css") == Stylesheet(url="http://h/a.css", media="all", type="text/css")


def test_unbound_asset_cannot_download():
    with pytest.raises(RuntimeError):
        Link(url="http://h/page2").download(io.BytesIO())


def test_scan_links_skips_unparsable_urls():
    # Given
    html = b'<a href="http://[broken/">bad</a><a href="/page2">click</a><a>no href</a>'
    document = SoupParser().parse(html, "http://h/")

    # When
    links = scan_links(document, "http://h/")

    # Then
    assert links == [Link(url="http://h/page2", text="click")]


def test_resolve_url():
    assert resolve_url("http://h/", "/page2") == "http://h/page2"
    assert resolve_url("http://h/a/b", "c") == "http://h/a/c"
    assert resolve_url("http://h/", "https://other.org/x") == "https://other.org/x"
    with pytest.raises(URLParseError):
        resolve_url("http://h/", "http://[broken/")


def test_credentials_are_sent_only_to_the_page_origin(page1):
    # Given
    browser, transport = page1
    browser.set_authorization("joe", "bob")
    cross_origin = browser.images()[0]
    same_origin = browser.stylesheets()[1]

    # When
    cross_origin.download(io.BytesIO())
    same_origin.download(io.BytesIO())

    # Then
    (cdn_url, cdn_headers), (own_url, own_headers) = transport.downloads
    assert cdn_url == "http://i.imgur.com/HW4bJtY.jpg"
    assert "Authorization" not in cdn_headers
    assert cdn_headers["User-Agent"] == browser.user_agent
    assert own_url == "http://example.com/print.css"
    assert own_headers["Authorization"].startswith("Basic ")


def test_same_host_on_other_scheme_is_another_origin(browser_factory, fake_transport_factory):
    # Given
    page = '<html><body><img src="https://example.com/secure.png"></body></html>'
    transport = fake_transport_factory(pages={"http://example.com/": page})
    browser, _ = browser_factory(transport)
    browser.set_authorization("joe", "bob")
    browser.open("http://example.com/")

    # When
    browser.images()[0].download(io.BytesIO())

    # Then
    _, headers = transport.downloads[0]
    assert "Authorization" not in headers
