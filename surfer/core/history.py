from __future__ import annotations

from dataclasses import dataclass

from surfer.core.model import Request, Response
from surfer.core.protocols.document_protocol import DocumentProtocol


@dataclass(frozen=True)
class State:
    """Snapshot of one successful navigation."""
    request: Request
    response: Response
    document: DocumentProtocol


class History:
    """Stack of visited states, most recent last.

    The top of the stack is always the browser's current page. The first
    state pushed is the session origin and is never popped.
    """

    def __init__(self) -> None:
        self._states: list[State] = []

    def push(self, state: State) -> None:
        self._states.append(state)

    def pop(self) -> State | None:
        """Remove and return the top state.

        Returns None, leaving the stack untouched, when one state or fewer
        remains.
        """
        if len(self._states) <= 1:
            return None
        return self._states.pop()

    def top(self) -> State | None:
        if not self._states:
            return None
        return self._states[-1]

    def __len__(self) -> int:
        return len(self._states)
