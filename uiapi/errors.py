"""Exception hierarchy for the view config assembly engine.

Configuration errors are fatal for the request that hit them and are reported
to the caller as structured errors. Function extraction errors are per-entry:
the inliner catches them, logs, and drops the entry.
"""

from typing import Optional


class UiApiError(Exception):
    """Base class for every error raised by the engine."""


class ConfigurationError(UiApiError):
    """A view config or template is structurally unusable."""

    def to_detail(self) -> dict:
        return {"error": str(self)}


class UnknownComponentError(ConfigurationError):
    """A requested component has no template of a known kind."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Component config(s) not found: {', '.join(self.missing)}")

    def to_detail(self) -> dict:
        return {
            "error": "Component config(s) not found",
            "missingComponents": self.missing,
        }


class MissingColumnsSchemaError(ConfigurationError):
    """A noModel view block does not carry a columnsSchema."""

    def __init__(self, block_name: Optional[str] = None):
        self.block_name = block_name
        where = f" '{block_name}'" if block_name else ""
        super().__init__(
            f"noModel mode requires columnsSchema in view config{where}"
        )


class ViewConfigNotFoundError(UiApiError):
    """No view config document exists for a model."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"View config file missing for model '{model}'")


class ViewBlockNotFoundError(UiApiError):
    """The view config exists but does not declare the requested block."""

    def __init__(self, model: str, block: str, available: Optional[list[str]] = None):
        self.model = model
        self.block = block
        self.available = available or []
        super().__init__(
            f"Component key '{block}' not found in view config for '{model}'. "
            f"Available: {self.available}"
        )


class ModelSchemaNotFoundError(UiApiError):
    """The schema provider has no schema for a model."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"Model '{model}' not found or missing schema")


class FunctionExtractionError(UiApiError):
    """A named function could not be extracted from a function store file."""

    def __init__(self, file: str, function: str, reason: str):
        self.file = file
        self.function = function
        self.reason = reason
        super().__init__(f"Cannot extract '{function}' from '{file}': {reason}")
