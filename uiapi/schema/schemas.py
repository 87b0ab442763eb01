"""Pydantic schemas for model column definitions.

A model schema maps column tokens to ColumnDefinitions. Definition files use
camelCase keys (displayType, inputType, formField, ...); unknown keys such as
fieldComponent or validationRule are kept and passed through to form fields.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

LocalizedText = Union[str, dict[str, str]]


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    JSON = "json"


class DisplayType(str, Enum):
    TEXT = "text"
    CHIP = "chip"
    CHECKBOX = "checkbox"
    DATE = "date"
    SELECT = "select"
    CUSTOM = "custom"
    HTML = "html"


class InputType(str, Enum):
    TEXT_FIELD = "textField"
    TEXTAREA = "textarea"
    NUMBER_FIELD = "numberField"
    DATEPICKER = "datepicker"
    SELECT = "select"
    CHECKBOX = "checkbox"
    SWITCH = "switch"
    SEARCH = "search"
    FILE = "file"


class ColumnDefinition(BaseModel):
    """One schema-declared column of a model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        use_enum_values=True,
        validate_default=True,
    )

    key: str = Field(default="", description="Value key; defaults to the column token")
    hidden: bool = False
    label: Optional[LocalizedText] = None
    type: ColumnType = ColumnType.STRING
    display_type: Optional[DisplayType] = None
    input_type: Optional[InputType] = None
    form_field: bool = True
    sortable: bool = False
    inline_editable: Optional[bool] = None
    lang: Optional[list[str]] = Field(
        default=None,
        description="Supported language codes; None means every language",
    )
    chip: Optional[dict[str, Any]] = None
    select: Optional[dict[str, Any]] = None
    filterable: Optional[Union[bool, dict[str, Any]]] = None
    display_props: Optional[dict[str, Any]] = None
    relation_label: Optional[LocalizedText] = None

    def value_key(self, token: str) -> str:
        return self.key or token

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class RelationDefinition(BaseModel):
    """A relation exposed as 'relation.field' column tokens."""

    model: str = Field(..., description="Related model name")
    fields: Optional[list[str]] = Field(
        default=None,
        description="Related columns to expose; None exposes all of them",
    )


class ModelSchema(BaseModel):
    """Column definitions for one model, as loaded from YAML."""

    model: str
    columns: dict[str, ColumnDefinition] = Field(default_factory=dict)
    searchable: list[str] = Field(default_factory=list)
    relations: dict[str, RelationDefinition] = Field(default_factory=dict)


class ModelSchemaSummary(BaseModel):
    model: str
    column_count: int
    relations: list[str] = Field(default_factory=list)
