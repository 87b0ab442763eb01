"""Template registry for loading component templates."""

import json
import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from uiapi.errors import UnknownComponentError
from uiapi.settings import get_settings

from .schemas import ComponentKind, ComponentSummary, ComponentTemplate, DirectiveState

logger = logging.getLogger(__name__)

_TRAILING_DIGITS = re.compile(r"\d+$")


def canonical_kind(component_key: str) -> str:
    """Strip a numeric suffix: 'table2' -> 'table'."""
    return _TRAILING_DIGITS.sub("", component_key)


class TemplateRegistry:
    """Registry for component templates.

    Loads one JSON file per component kind from the definitions directory.
    The file stem is the kind (table.json, filterSection.json, ...); files
    named after anything else are skipped.
    """

    def __init__(self, definitions_dir: Optional[Path] = None):
        self.definitions_dir = definitions_dir or (
            Path(__file__).parent / "definitions"
        )
        self._templates: dict[ComponentKind, ComponentTemplate] = {}
        self._loaded = False

    def load(self) -> None:
        """Load all component templates from JSON files."""
        if self._loaded:
            return

        if not self.definitions_dir.exists():
            logger.warning(f"Templates directory not found: {self.definitions_dir}")
            self._loaded = True
            return

        for json_file in sorted(self.definitions_dir.glob("*.json")):
            try:
                kind = ComponentKind(json_file.stem)
            except ValueError:
                logger.warning(f"Skipping template with unknown kind: {json_file.name}")
                continue
            try:
                with open(json_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                template = ComponentTemplate(kind=kind, directives=data)
                self._templates[kind] = template
                logger.debug(f"Loaded template: {kind.value}")
            except Exception as e:
                logger.error(f"Failed to load template {json_file}: {e}")

        logger.info(
            f"Loaded {len(self._templates)} component templates from {self.definitions_dir}"
        )
        self._loaded = True

    def get(self, component_key: str) -> Optional[ComponentTemplate]:
        """Get the template for a component key (numeric suffix allowed)."""
        self.load()
        try:
            kind = ComponentKind(canonical_kind(component_key))
        except ValueError:
            return None
        return self._templates.get(kind)

    def require_all(self, component_keys: Iterable[str]) -> dict[str, ComponentTemplate]:
        """Resolve every component key to its template.

        Raises UnknownComponentError listing every key without a template.
        """
        found: dict[str, ComponentTemplate] = {}
        missing: list[str] = []
        for key in component_keys:
            template = self.get(key)
            if template is None:
                missing.append(key)
            else:
                found[key] = template
        if missing:
            raise UnknownComponentError(missing)
        return found

    def list_all(self) -> list[ComponentTemplate]:
        """List all loaded templates."""
        self.load()
        return list(self._templates.values())

    def list_summaries(self) -> list[ComponentSummary]:
        """List all template summaries."""
        self.load()
        return [
            ComponentSummary(
                kind=t.kind,
                directive_keys=t.directive_keys,
                auto_built=[
                    k for k, v in t.directives.items() if v == DirectiveState.ON.value
                ],
            )
            for t in self._templates.values()
        ]

    def list_kinds(self) -> list[str]:
        """Get all loaded kinds."""
        self.load()
        return [k.value for k in self._templates]

    def count(self) -> int:
        """Get total number of templates."""
        self.load()
        return len(self._templates)

    def reload(self) -> None:
        """Force reload all templates from disk."""
        self._templates.clear()
        self._loaded = False
        self.load()


# Global registry instance
_registry: Optional[TemplateRegistry] = None


def get_template_registry() -> TemplateRegistry:
    """Get the global template registry instance."""
    global _registry
    if _registry is None:
        _registry = TemplateRegistry(get_settings().templates_dir)
        _registry.load()
    return _registry
