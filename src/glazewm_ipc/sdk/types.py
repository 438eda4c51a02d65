"""Window-manager state types returned by queries.

Field names are snake_case in Python and camelCase on the wire. Unknown
fields are kept, so newer GlazeWM releases do not break validation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WmModel(BaseModel):
    """Base model accepting camelCase payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Monitor(WmModel):
    """A physical display."""

    id: str
    name: str
    width: int
    height: int
    x: int
    y: int
    is_primary: bool


class Workspace(WmModel):
    """A workspace and where it is shown."""

    id: str
    name: str
    display_name: str | None = None
    monitor_id: str | None = None
    is_displayed: bool
    is_focused: bool


class Window(WmModel):
    """A managed window."""

    id: str
    process_name: str
    title: str
    class_name: str | None = None
    parent_id: str | None = None
    has_focus: bool
    is_minimized: bool
    is_maximized: bool
    x: int
    y: int
    width: int
    height: int


class FocusedContainer(WmModel):
    """The container that currently has focus."""

    id: str
    type: str
    children: list[Any] | None = None
    windows: list[Window] | None = None
