"""Pydantic schemas for view configs.

A view config document is a JSON object mapping view block names
("listView", "detailView", ...) to ViewBlocks. A ViewBlock selects the
components to assemble and carries root-level columns, per-column
customizations, the filter allow-list, page size and supported languages.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from uiapi.schema.schemas import ColumnDefinition

# Keys of a component override consumed by the engine, never merged into
# the component section.
COMPONENT_INTERNAL_KEYS = frozenset({"columns", "columnCustomizations"})

# ViewBlock keys that never appear in assembled output.
BLOCK_INTERNAL_KEYS = frozenset(
    {"columnCustomizations", "columns", "per_page", "filters", "lang"}
)


class ViewBlock(BaseModel):
    """One selectable configuration unit inside a view config."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    components: dict[str, Any] = Field(
        default_factory=dict,
        description="Component key -> override object (empty object for none)",
    )
    columns: list[str] = Field(default_factory=list)
    column_customizations: dict[str, dict[str, Any]] = Field(
        default_factory=dict, alias="columnCustomizations"
    )
    columns_schema: Optional[dict[str, ColumnDefinition]] = Field(
        default=None, alias="columnsSchema"
    )
    filters: Optional[list[str]] = Field(
        default=None,
        description="Allow-list of filterable column tokens; None allows all",
    )
    per_page: Optional[int] = Field(default=None, gt=0, alias="per_page")
    lang: list[str] = Field(default_factory=list)
    no_model: bool = Field(default=False, alias="noModel")

    @field_validator("components", mode="before")
    @classmethod
    def _components_as_map(cls, value: Any) -> Any:
        # A bare list of component keys means "no overrides"
        if isinstance(value, list):
            return {k: {} for k in value if isinstance(k, str)}
        return value

    def component_override(self, component_key: str) -> dict[str, Any]:
        override = self.components.get(component_key)
        return dict(override) if isinstance(override, dict) else {}

    def allows_lang(self, lang: str) -> bool:
        if not lang:
            return False
        return lang.lower() in {l.lower() for l in self.lang}


class ViewConfigSummary(BaseModel):
    model: str
    blocks: list[str] = Field(default_factory=list)


class ValidationIssue(BaseModel):
    path: str
    rule: str
    message: str


class ValidationReport(BaseModel):
    """Result of validating one view config document."""

    model: str
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error(self, path: str, rule: str, message: str) -> None:
        self.errors.append(ValidationIssue(path=path, rule=rule, message=message))

    def warn(self, path: str, rule: str, message: str) -> None:
        self.warnings.append(ValidationIssue(path=path, rule=rule, message=message))
