from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Session lifecycle events.

    Arguments carried by each type:
    - PRE_REQUEST: the outgoing `Request`
    - POST_REQUEST: the `Response`
    - CLICK: the resolved URL of the clicked link
    - FORM_SUBMIT: a `FormArgs`
    - RECORD_START / RECORD_STOP: the recorder
    - RECORD_REPLAY: a recorded `Request`
    """
    PRE_REQUEST = "pre_request"
    POST_REQUEST = "post_request"
    CLICK = "click"
    FORM_SUBMIT = "form_submit"
    RECORD_START = "record_start"
    RECORD_STOP = "record_stop"
    RECORD_REPLAY = "record_replay"


@dataclass(frozen=True)
class Event:
    type: EventType
    args: Any = None
    sender: Any = None


@dataclass(frozen=True)
class FormArgs:
    """Arguments of a FORM_SUBMIT event."""
    values: dict[str, list[str]]
    method: str
    action: str


EventHandler = Callable[[Event], None]


@dataclass
class EventDispatcher:
    """Ordered, synchronous dispatch of events to handlers.

    Handlers are kept per event type in registration order and can't be
    removed. A handler signals failure by raising; dispatching stops at that
    handler and the exception reaches the caller of `dispatch`.
    """
    _handlers: dict[EventType, list[EventHandler]] = field(default_factory=dict)

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def dispatch(self, event: Event) -> None:
        for handler in tuple(self._handlers.get(event.type, ())):
            try:
                handler(event)
            except Exception:
                logger.debug(f"Handler {handler!r} failed for {event.type.value}, dispatch stopped")
                raise

    def handlers(self, event_type: EventType) -> tuple[EventHandler, ...]:
        return tuple(self._handlers.get(event_type, ()))
