from typing import Protocol


class BookmarksProtocol(Protocol):
    """Named URL store used by `Browser.bookmark` and `Browser.open_bookmark`."""

    def save(self, name: str, url: str) -> None:
        """Store `url` under `name`, replacing any previous value."""

    def read(self, name: str) -> str:
        """Return the URL stored under `name`.

        Raises BookmarkNotFoundError when there is no such bookmark.
        """

    def remove(self, name: str) -> bool:
        """Delete the bookmark; return True if it existed."""

    def has(self, name: str) -> bool:
        """Return True if a bookmark with the given name exists."""

    def all(self) -> dict[str, str]:
        """Return a copy of every stored bookmark."""
