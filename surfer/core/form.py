from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from surfer.core.assets import attr_or_default, resolve_url
from surfer.core.errors import ElementNotFoundError, InvalidFormValueError, URLParseError
from surfer.core.events import EventType, FormArgs
from surfer.core.protocols.document_protocol import ElementProtocol

if TYPE_CHECKING:
    from surfer.core.browser import Browser

logger = logging.getLogger(__name__)

FORM_CONTROLS = "input, button, select, textarea"
CHECKABLE_TYPES = ("radio", "checkbox")
IGNORED_BUTTON_TYPES = ("button", "reset")


class Form:
    """A submittable form read from one <form> element of the current page.

    Field values and submit buttons are captured when the form is built.
    Editing the form never touches the page it came from; submitting it
    navigates the browser to a new page.
    """

    def __init__(self, browser: "Browser", element: ElementProtocol) -> None:
        self._browser = browser
        self._element = element
        self._method, self._action = self._form_attributes(browser, element)
        self._fields: dict[str, list[str]] = {}
        self._buttons: dict[str, str] = {}
        self._serialize(element)

    @property
    def method(self) -> str:
        """Submit method, "GET" or "POST"."""
        return self._method

    @property
    def action(self) -> str:
        """Absolute URL the form submits to."""
        return self._action

    @property
    def fields(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._fields.items()}

    @property
    def buttons(self) -> dict[str, str]:
        return dict(self._buttons)

    @property
    def dom(self) -> ElementProtocol:
        return self._element

    def input(self, name: str, value: str) -> None:
        """Set the value of a field found when the form was read."""
        if name not in self._fields:
            raise ElementNotFoundError(f"No input found with name '{name}'.")
        self._fields[name] = [value]

    def submit(self) -> None:
        """Submit the form with its first submit button, or without one if it has none."""
        if self._buttons:
            return self.click(next(iter(self._buttons)))
        return self._send(None, None)

    def click(self, button: str) -> None:
        """Submit the form by clicking the button with the given name."""
        if button not in self._buttons:
            raise InvalidFormValueError(f"Form does not contain a button with the name '{button}'.")
        return self._send(button, self._buttons[button])

    def _send(self, button_name: str | None, button_value: str | None) -> None:
        values = self.fields
        if button_name:
            values[button_name] = [button_value or ""]

        self._browser.dispatch_event(
            EventType.FORM_SUBMIT,
            FormArgs(values=values, method=self._method, action=self._action),
        )

        logger.debug(f"Submitting form {self._method} {self._action}")
        if self._method == "GET":
            self._browser.open_form(self._action, values)
        else:
            self._browser.post_form(self._action, values)

    def _serialize(self, element: ElementProtocol) -> None:
        for control in element.find(FORM_CONTROLS):
            name = control.attr("name")
            if name is None:
                continue

            tag = control.tag_name
            if tag == "select":
                self._fields.setdefault(name, []).extend(_selected_options(control))
            elif tag == "textarea":
                self._fields.setdefault(name, []).append(control.text())
            else:
                self._serialize_input(control, tag, name)

    def _serialize_input(self, control: ElementProtocol, tag: str, name: str) -> None:
        # a <button> without a type attribute is a submit button
        default_type = "submit" if tag == "button" else "text"
        kind = attr_or_default(control, "type", default_type).lower()

        if kind == "submit":
            self._buttons.setdefault(name, attr_or_default(control, "value", ""))
        elif tag == "button" and kind in IGNORED_BUTTON_TYPES:
            return
        elif kind in CHECKABLE_TYPES:
            values = self._fields.setdefault(name, [])
            if control.has_attr("checked"):
                values.append(attr_or_default(control, "value", "on"))
        else:
            self._fields.setdefault(name, []).append(attr_or_default(control, "value", ""))

    @staticmethod
    def _form_attributes(browser: "Browser", element: ElementProtocol) -> tuple[str, str]:
        method = attr_or_default(element, "method", "GET").upper() or "GET"
        page_url = browser.url
        action = attr_or_default(element, "action", page_url)
        try:
            action = resolve_url(page_url, action)
        except URLParseError:
            logger.debug(f"Unparsable form action '{action}', using page URL")
            action = page_url
        return method, action

    def __repr__(self) -> str:
        return f"Form(method={self._method!r}, action={self._action!r}, fields={list(self._fields)!r})"


def _selected_options(select: ElementProtocol) -> list[str]:
    options = select.find("option")
    selected = [option for option in options if option.has_attr("selected")]
    if not selected and options and not select.has_attr("multiple"):
        selected = options[:1]
    return [_option_value(option) for option in selected]


def _option_value(option: ElementProtocol) -> str:
    value = option.attr("value")
    return option.text().strip() if value is None else value
