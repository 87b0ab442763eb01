"""View config registry for loading per-model view config documents."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from uiapi.errors import ConfigurationError, ViewBlockNotFoundError, ViewConfigNotFoundError
from uiapi.schema.registry import normalize_model_name
from uiapi.settings import get_settings

from .schemas import ViewBlock, ViewConfigSummary

logger = logging.getLogger(__name__)


class ViewConfigRegistry:
    """Registry for view config documents.

    Loads one JSON document per model from the definitions directory, keyed
    by the normalised file stem (person.json serves Person, per-son, ...).
    Raw documents are kept as loaded; blocks are parsed on request.
    """

    def __init__(self, definitions_dir: Optional[Path] = None):
        self.definitions_dir = definitions_dir or (
            Path(__file__).parent / "definitions"
        )
        self._documents: dict[str, dict[str, Any]] = {}
        self._loaded = False

    def load(self) -> None:
        """Load all view config documents from JSON files."""
        if self._loaded:
            return

        if not self.definitions_dir.exists():
            logger.warning(f"View configs directory not found: {self.definitions_dir}")
            self._loaded = True
            return

        for json_file in sorted(self.definitions_dir.glob("*.json")):
            try:
                with open(json_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    logger.error(f"View config {json_file} is not a JSON object")
                    continue
                self._documents[normalize_model_name(json_file.stem)] = data
                logger.debug(f"Loaded view config: {json_file.stem} ({len(data)} blocks)")
            except Exception as e:
                logger.error(f"Failed to load view config {json_file}: {e}")

        logger.info(
            f"Loaded {len(self._documents)} view configs from {self.definitions_dir}"
        )
        self._loaded = True

    def get_document(self, model: str) -> Optional[dict[str, Any]]:
        """Get the raw view config document for a model."""
        self.load()
        return self._documents.get(normalize_model_name(model))

    def require_document(self, model: str) -> dict[str, Any]:
        document = self.get_document(model)
        if not document:
            raise ViewConfigNotFoundError(model)
        return document

    def get_block(self, model: str, block: str) -> ViewBlock:
        """Parse one view block of a model's view config."""
        document = self.require_document(model)
        raw = document.get(block)
        if not isinstance(raw, dict):
            raise ViewBlockNotFoundError(model, block, list(document.keys()))
        try:
            return ViewBlock.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid view block '{block}' for '{model}': {e}"
            ) from e

    def list_models(self) -> list[str]:
        """Get all (normalised) model names with a view config."""
        self.load()
        return sorted(self._documents.keys())

    def list_summaries(self) -> list[ViewConfigSummary]:
        """List all view configs with their block names."""
        self.load()
        return [
            ViewConfigSummary(model=model, blocks=list(doc.keys()))
            for model, doc in sorted(self._documents.items())
        ]

    def count(self) -> int:
        """Get total number of view config documents."""
        self.load()
        return len(self._documents)

    def reload(self) -> None:
        """Force reload all view configs from disk."""
        self._documents.clear()
        self._loaded = False
        self.load()


# Global registry instance
_registry: Optional[ViewConfigRegistry] = None


def get_view_config_registry() -> ViewConfigRegistry:
    """Get the global view config registry instance."""
    global _registry
    if _registry is None:
        _registry = ViewConfigRegistry(get_settings().view_configs_dir)
        _registry.load()
    return _registry
