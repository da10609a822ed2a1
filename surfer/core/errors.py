"""Exception types raised by the browser core.

Transport and parser failures are not wrapped; they propagate as raised by
the underlying library.
"""


class SurferError(Exception):
    """Base class for all browser-layer problems."""


class URLParseError(SurferError, ValueError):
    """Raised when a URL cannot be parsed or is not absolute after resolution."""


class ElementNotFoundError(SurferError):
    """Raised when a selector matched no element, or an element of the wrong type."""


class AttributeNotFoundError(SurferError):
    """Raised when a required element attribute is missing."""


class InvalidFormValueError(SurferError, ValueError):
    """Raised when a form is clicked with a button it does not contain."""


class PageNotLoadedError(SurferError):
    """Raised when an operation needs a loaded page and there is none."""


class LocationError(SurferError):
    """Raised when a redirect is rejected by the browser's redirect policy."""


class BookmarkNotFoundError(SurferError, KeyError):
    """Raised when a bookmark name is not present in the bookmark store."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""
