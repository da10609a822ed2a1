from __future__ import annotations

import logging

from surfer.core.events import Event, EventDispatcher, EventHandler, EventType
from surfer.core.model import Request, Response

logger = logging.getLogger(__name__)


class MemoryRecorder:
    """Records a browser's successful requests so they can be replayed in order.

    The browser feeds the recorder its POST_REQUEST events (see
    `Browser.set_recorder`) and listens to RECORD_REPLAY to re-issue each
    recorded request.
    """

    def __init__(self) -> None:
        self._events = EventDispatcher()
        self._requests: list[Request] = []
        self._recording: bool = False

    @property
    def recording(self) -> bool:
        return self._recording

    @property
    def requests(self) -> tuple[Request, ...]:
        return tuple(self._requests)

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        self._events.on(event_type, handler)

    def start(self) -> None:
        """Discard previous recordings and begin recording."""
        self._requests = []
        self._recording = True
        logger.info("Recording started")
        self._events.dispatch(Event(type=EventType.RECORD_START, args=self, sender=self))

    def stop(self) -> None:
        self._recording = False
        logger.info(f"Recording stopped with {len(self._requests)} request(s)")
        self._events.dispatch(Event(type=EventType.RECORD_STOP, args=self, sender=self))

    def replay(self) -> None:
        """Dispatch RECORD_REPLAY once per recorded request.

        Stops at the first handler failure, which is raised to the caller.
        """
        requests = tuple(self._requests)
        logger.info(f"Replaying {len(requests)} request(s)")
        for request in requests:
            self._events.dispatch(Event(type=EventType.RECORD_REPLAY, args=request, sender=self))

    def handle_event(self, event: Event) -> None:
        if not self._recording or event.type != EventType.POST_REQUEST:
            return
        response: Response = event.args
        if response.request is not None:
            self._requests.append(response.request)
