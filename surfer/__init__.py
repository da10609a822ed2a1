"""Headless, programmatic web browsing."""

from surfer.core.browser import Browser
from surfer.core.events import Event, EventType, FormArgs
from surfer.core.form import Form
from surfer.core.model import Attribute, Request, Response
from surfer.core.recorder import MemoryRecorder
from surfer.factory import new_browser, setup_env

__all__ = [
    "Attribute",
    "Browser",
    "Event",
    "EventType",
    "Form",
    "FormArgs",
    "MemoryRecorder",
    "Request",
    "Response",
    "new_browser",
    "setup_env",
]
