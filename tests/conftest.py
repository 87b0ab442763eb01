"""
Pytest fixtures for the UI API test suite.

Provides:
1. Settings pointing at the shipped definition files
2. Registries (templates, schemas, view configs) built from those settings
3. An Assembler wired to a real function store
4. Small hand-built schema snapshots for engine tests
5. A FastAPI TestClient
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from uiapi.components.registry import TemplateRegistry  # noqa: E402
from uiapi.engine.assembler import Assembler  # noqa: E402
from uiapi.engine.functions import FunctionStore  # noqa: E402
from uiapi.schema.registry import SchemaRegistry, normalize_model_name  # noqa: E402
from uiapi.schema.schemas import ColumnDefinition  # noqa: E402
from uiapi.settings import EngineSettings  # noqa: E402
from uiapi.views.registry import ViewConfigRegistry  # noqa: E402


# ==================== SETTINGS & REGISTRIES ====================


@pytest.fixture
def settings() -> EngineSettings:
    """Default settings: shipped definitions, pass-through of unknown keys."""
    return EngineSettings()


@pytest.fixture
def template_registry(settings) -> TemplateRegistry:
    registry = TemplateRegistry(settings.templates_dir)
    registry.load()
    return registry


@pytest.fixture
def schema_registry(settings) -> SchemaRegistry:
    registry = SchemaRegistry(settings.schemas_dir)
    registry.load()
    return registry


@pytest.fixture
def view_registry(settings) -> ViewConfigRegistry:
    registry = ViewConfigRegistry(settings.view_configs_dir)
    registry.load()
    return registry


@pytest.fixture
def function_store(settings) -> FunctionStore:
    return FunctionStore(settings.functions_dir)


@pytest.fixture
def person_snapshot(schema_registry):
    return schema_registry.get_snapshot("Person")


# ==================== ASSEMBLER ====================


@pytest.fixture
def make_assembler(template_registry, schema_registry, function_store):
    """Factory building an Assembler for the given settings overrides."""

    def _make(**overrides) -> Assembler:
        return Assembler(
            EngineSettings(**overrides),
            template_registry,
            function_store=function_store,
            known_models={normalize_model_name(m) for m in schema_registry.list_models()},
        )

    return _make


@pytest.fixture
def assembler(make_assembler) -> Assembler:
    return make_assembler()


# ==================== SNAPSHOTS ====================


@pytest.fixture
def abcd_snapshot() -> dict[str, ColumnDefinition]:
    """Four plain columns a, b, c, d with English labels."""
    return {
        token: ColumnDefinition(key=token, label={"en": token.upper(), "dv": f"{token}-dv"})
        for token in ("a", "b", "c", "d")
    }


@pytest.fixture
def bilingual_snapshot() -> dict[str, ColumnDefinition]:
    """One shared column plus an English-only and a Dhivehi-only column."""
    return {
        "id": ColumnDefinition(key="id", label="Id", type="number"),
        "name_eng": ColumnDefinition(
            key="name_eng", label={"en": "Name", "dv": "ނަން"}, lang=["en"]
        ),
        "name_div": ColumnDefinition(
            key="name_div", label={"en": "Name", "dv": "ނަން"}, lang=["dv"]
        ),
    }


# ==================== API ====================


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from uiapi.api.main import app

    with TestClient(app) as test_client:
        yield test_client
