from typing import Dict

from surfer.core.errors import BookmarkNotFoundError


class MemoryBookmarks:
    """In-memory bookmark store keyed by name.

    Public API mirrors BookmarksProtocol: save/read/remove/has/all.
    """

    def __init__(self) -> None:
        self._bookmarks: Dict[str, str] = {}

    def save(self, name: str, url: str) -> None:
        self._bookmarks[name] = url

    def read(self, name: str) -> str:
        if name not in self._bookmarks:
            raise BookmarkNotFoundError(f"Bookmark '{name}' does not exist.")
        return self._bookmarks[name]

    def remove(self, name: str) -> bool:
        return self._bookmarks.pop(name, None) is not None

    def has(self, name: str) -> bool:
        return name in self._bookmarks

    def all(self) -> Dict[str, str]:
        return dict(self._bookmarks)
