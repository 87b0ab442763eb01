"""Pydantic schemas for component templates.

A component template is a flat map of directive key to directive value.
A directive value is "on" (build from the model schema), "off" (omit) or
any other literal (pass through). Nested objects are walked with the same
rules.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ComponentKind(str, Enum):
    """Fixed set of UI component kinds a view block can request."""
    TABLE = "table"
    FORM = "form"
    TOOLBAR = "toolbar"
    FILTER_SECTION = "filterSection"
    META = "meta"


class DirectiveState(str, Enum):
    ON = "on"
    OFF = "off"


class ComponentTemplate(BaseModel):
    """One loaded template, keyed by its component kind."""

    kind: ComponentKind
    directives: dict[str, Any] = Field(
        default_factory=dict,
        description="Directive key -> 'on' | 'off' | literal default",
    )

    @property
    def directive_keys(self) -> list[str]:
        return list(self.directives.keys())


class ComponentSummary(BaseModel):
    """Lightweight template listing for the API."""

    kind: ComponentKind
    directive_keys: list[str] = Field(default_factory=list)
    auto_built: list[str] = Field(
        default_factory=list,
        description="Directive keys set to 'on' at the top level",
    )
