"""Schema registry: loads model column definitions from YAML files.

Each file is named {model}.yaml and holds the model name, its columns keyed by
column token, and optional relations to other models. Relations are flattened
into 'relation.field' tokens when a snapshot is taken.
"""

import logging
import re
from pathlib import Path
from typing import Optional

import yaml

from uiapi.errors import ModelSchemaNotFoundError
from uiapi.settings import get_settings

from .schemas import ColumnDefinition, ModelSchema, ModelSchemaSummary

logger = logging.getLogger(__name__)

_NAME_NOISE = re.compile(r"[-_\s]")

SchemaSnapshot = dict[str, ColumnDefinition]


def normalize_model_name(name: str) -> str:
    """'Person', 'person', 'per-son' and 'per_son' all become 'person'."""
    return _NAME_NOISE.sub("", name).lower()


class SchemaRegistry:
    """Registry for model schemas."""

    def __init__(self, definitions_dir: Optional[Path] = None):
        self.definitions_dir = definitions_dir or (
            Path(__file__).parent / "definitions"
        )
        self._schemas: dict[str, ModelSchema] = {}
        self._loaded = False

    def load(self) -> None:
        """Load all model schemas from YAML files."""
        if self._loaded:
            return

        if not self.definitions_dir.exists():
            logger.warning(f"Schemas directory not found: {self.definitions_dir}")
            self._loaded = True
            return

        for yaml_file in sorted(self.definitions_dir.glob("*.yaml")):
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
                if data is None:
                    continue
                schema = ModelSchema.model_validate(data)
                for token, column in schema.columns.items():
                    if not column.key:
                        column.key = token
                self._schemas[normalize_model_name(schema.model)] = schema
                logger.debug(
                    f"Loaded schema: {schema.model} ({len(schema.columns)} columns)"
                )
            except Exception as e:
                logger.error(f"Failed to load schema {yaml_file}: {e}")

        logger.info(f"Loaded {len(self._schemas)} model schemas from {self.definitions_dir}")
        self._loaded = True

    def get(self, model: str) -> Optional[ModelSchema]:
        """Get a model schema by (normalised) name."""
        self.load()
        return self._schemas.get(normalize_model_name(model))

    def get_snapshot(self, model: str) -> SchemaSnapshot:
        """Column token -> ColumnDefinition for a model, relations flattened.

        Own columns come first in declaration order, followed by relation
        tokens. Raises ModelSchemaNotFoundError for an unknown model.
        """
        schema = self.get(model)
        if schema is None:
            raise ModelSchemaNotFoundError(model)

        snapshot: SchemaSnapshot = dict(schema.columns)
        for rel_name, relation in schema.relations.items():
            related = self.get(relation.model)
            if related is None:
                logger.warning(
                    f"Relation '{rel_name}' of '{schema.model}' points at unknown "
                    f"model '{relation.model}'"
                )
                continue
            for field, column in related.columns.items():
                if relation.fields is not None and field not in relation.fields:
                    continue
                token = f"{rel_name}.{field}"
                snapshot[token] = column.model_copy(update={"key": token})
        return snapshot

    def list_all(self) -> list[ModelSchema]:
        """List all model schemas."""
        self.load()
        return list(self._schemas.values())

    def list_summaries(self) -> list[ModelSchemaSummary]:
        """List all model schema summaries (lightweight)."""
        self.load()
        return [
            ModelSchemaSummary(
                model=s.model,
                column_count=len(s.columns),
                relations=list(s.relations.keys()),
            )
            for s in self._schemas.values()
        ]

    def list_models(self) -> list[str]:
        """Get all model names."""
        self.load()
        return sorted(s.model for s in self._schemas.values())

    def count(self) -> int:
        """Get total number of model schemas."""
        self.load()
        return len(self._schemas)

    def reload(self) -> None:
        """Force reload all schemas from disk."""
        self._schemas.clear()
        self._loaded = False
        self.load()


# Global registry instance
_registry: Optional[SchemaRegistry] = None


def get_schema_registry() -> SchemaRegistry:
    """Get the global schema registry instance."""
    global _registry
    if _registry is None:
        _registry = SchemaRegistry(get_settings().schemas_dir)
        _registry.load()
    return _registry
