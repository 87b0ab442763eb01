"""Engine settings.

Settings are passed explicitly into the Assembler and the registries; the
engine itself never reads the environment. `get_settings()` builds the
process-wide instance from UIAPI_* environment variables for the API layer.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

PACKAGE_DIR = Path(__file__).parent

_TRUTHY = ("1", "true", "yes", "on")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_path(name: str, default: Path) -> Path:
    raw = os.environ.get(name)
    return Path(raw) if raw else default


class EngineSettings(BaseModel):
    """Configuration for view config assembly."""

    view_configs_dir: Path = Field(
        default=PACKAGE_DIR / "views" / "definitions",
        description="Directory holding one view config JSON per model",
    )
    templates_dir: Path = Field(
        default=PACKAGE_DIR / "components" / "definitions",
        description="Directory holding one component template JSON per kind",
    )
    schemas_dir: Path = Field(
        default=PACKAGE_DIR / "schema" / "definitions",
        description="Directory holding one model schema YAML per model",
    )
    functions_dir: Path = Field(
        default=PACKAGE_DIR / "functions" / "definitions",
        description="Function store root (script files referenced by 'file')",
    )
    route_prefix: str = Field(default="api", description="Prefix for generated URLs")
    logging_enabled: bool = True
    allow_custom_component_keys: bool = Field(
        default=True,
        description="Pass override keys unknown to a component template through "
        "into the payload instead of dropping them",
    )
    include_hidden_columns_in_headers: bool = False
    include_top_level_headers: bool = False
    include_top_level_filters: bool = False
    include_top_level_pagination: bool = False
    default_lang: str = "dv"
    default_per_page: int = Field(default=25, gt=0)

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Build settings from UIAPI_* environment variables."""
        defaults = cls()
        per_page = os.environ.get("UIAPI_DEFAULT_PER_PAGE")
        return cls(
            view_configs_dir=_env_path("UIAPI_VIEW_CONFIGS_DIR", defaults.view_configs_dir),
            templates_dir=_env_path("UIAPI_TEMPLATES_DIR", defaults.templates_dir),
            schemas_dir=_env_path("UIAPI_SCHEMAS_DIR", defaults.schemas_dir),
            functions_dir=_env_path("UIAPI_FUNCTIONS_DIR", defaults.functions_dir),
            route_prefix=os.environ.get("UIAPI_ROUTE_PREFIX", defaults.route_prefix),
            logging_enabled=_env_bool("UIAPI_LOGGING_ENABLED", defaults.logging_enabled),
            allow_custom_component_keys=_env_bool(
                "UIAPI_ALLOW_CUSTOM_COMPONENT_KEYS", defaults.allow_custom_component_keys
            ),
            include_hidden_columns_in_headers=_env_bool(
                "UIAPI_INCLUDE_HIDDEN_COLUMNS", defaults.include_hidden_columns_in_headers
            ),
            include_top_level_headers=_env_bool(
                "UIAPI_TOP_LEVEL_HEADERS", defaults.include_top_level_headers
            ),
            include_top_level_filters=_env_bool(
                "UIAPI_TOP_LEVEL_FILTERS", defaults.include_top_level_filters
            ),
            include_top_level_pagination=_env_bool(
                "UIAPI_TOP_LEVEL_PAGINATION", defaults.include_top_level_pagination
            ),
            default_lang=os.environ.get("UIAPI_DEFAULT_LANG", defaults.default_lang),
            default_per_page=int(per_page) if per_page else defaults.default_per_page,
        )


# Global settings instance
_settings: Optional[EngineSettings] = None


def get_settings() -> EngineSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = EngineSettings.from_env()
    return _settings
