import os
from typing import Optional

from surfer.config.logging_config import configure_logging
from surfer.core.browser import Browser
from surfer.core.model import Attribute
from surfer.document_adapter.document import SoupParser
from surfer.domain.config import BrowserConfig, Config
from surfer.infrastructure.bookmarks import MemoryBookmarks
from surfer.infrastructure.config_loader import load
from surfer.transport_adapter.transport import RequestsTransport


def setup_env(config_path: Optional[str] = None) -> Config:
    """Load configuration and configure logging.

    `LOG_LEVEL` in the environment wins over the configured log level.
    """
    config = load(config_path)
    configure_logging(os.getenv("LOG_LEVEL", config.log_level))
    return config


def new_browser(browser_config: Optional[BrowserConfig] = None) -> Browser:
    """Create a browser wired to the requests transport and the BeautifulSoup parser."""
    browser_config = browser_config or BrowserConfig()

    transport = RequestsTransport(timeout=browser_config.timeout, max_redirects=browser_config.max_redirects)
    browser = Browser(
        transport=transport,
        parser=SoupParser(),
        user_agent=browser_config.user_agent,
        attributes={
            Attribute.SEND_REFERER: browser_config.send_referer,
            Attribute.META_REFRESH_HANDLING: browser_config.meta_refresh_handling,
            Attribute.FOLLOW_REDIRECTS: browser_config.follow_redirects,
        },
        headers=browser_config.headers,
        bookmarks=MemoryBookmarks(),
    )
    if browser_config.has_credentials:
        browser.set_authorization(browser_config.username, browser_config.password or "")
    return browser
