"""Tests for the file-backed registries and settings."""

import json

import pytest

from uiapi.components.registry import TemplateRegistry, canonical_kind
from uiapi.errors import (
    ConfigurationError,
    ModelSchemaNotFoundError,
    UnknownComponentError,
    ViewBlockNotFoundError,
    ViewConfigNotFoundError,
)
from uiapi.schema.registry import SchemaRegistry, normalize_model_name
from uiapi.settings import EngineSettings
from uiapi.views.registry import ViewConfigRegistry


class TestTemplateRegistry:
    """Component templates."""

    def test_shipped_templates(self, template_registry):
        """All five component kinds ship with a template."""
        assert sorted(template_registry.list_kinds()) == sorted(
            ["table", "form", "toolbar", "filterSection", "meta"]
        )

    def test_numeric_suffix(self, template_registry):
        """table2 resolves to the table template."""
        assert canonical_kind("table2") == "table"
        assert canonical_kind("filterSection10") == "filterSection"
        assert template_registry.get("table2") is template_registry.get("table")

    def test_require_all_reports_every_missing_key(self, template_registry):
        """Missing keys are collected before raising."""
        with pytest.raises(UnknownComponentError) as exc_info:
            template_registry.require_all(["table", "chart", "form", "grid"])
        assert exc_info.value.to_detail() == {
            "error": "Component config(s) not found",
            "missingComponents": ["chart", "grid"],
        }

    def test_summaries(self, template_registry):
        """Summaries list the auto-built directives."""
        summaries = {s.kind.value: s for s in template_registry.list_summaries()}
        assert "headers" in summaries["table"].auto_built
        assert "filters" not in summaries["table"].auto_built

    def test_skips_unknown_and_broken_files(self, tmp_path):
        """Unknown kinds and invalid JSON are skipped."""
        (tmp_path / "table.json").write_text(json.dumps({"headers": "on"}))
        (tmp_path / "chart.json").write_text(json.dumps({"series": "on"}))
        (tmp_path / "form.json").write_text("{not json")
        registry = TemplateRegistry(tmp_path)
        assert registry.list_kinds() == ["table"]

    def test_reload(self, tmp_path):
        """reload picks up new files."""
        registry = TemplateRegistry(tmp_path)
        assert registry.count() == 0
        (tmp_path / "meta.json").write_text(json.dumps({"pagination": "on"}))
        assert registry.count() == 0
        registry.reload()
        assert registry.count() == 1

    def test_missing_directory(self, tmp_path):
        """A missing directory loads nothing."""
        assert TemplateRegistry(tmp_path / "absent").count() == 0


class TestSchemaRegistry:
    """Model schemas and snapshots."""

    @pytest.mark.parametrize("name", ["Person", "person", "per-son", "per_son", "PER SON"])
    def test_name_normalization(self, schema_registry, name):
        """Model names resolve regardless of case and separators."""
        assert normalize_model_name(name) == "person"
        assert schema_registry.get(name).model == "Person"

    def test_snapshot_flattens_relations(self, person_snapshot):
        """Relation fields appear as rel.field tokens after own columns."""
        tokens = list(person_snapshot)
        assert tokens[0] == "full_name"
        assert tokens[-2:] == ["country.name_eng", "country.name_div"]
        assert person_snapshot["country.name_eng"].key == "country.name_eng"
        assert person_snapshot["country.name_eng"].relation_label == {"dv": "ޤައުމު", "en": "Country"}

    def test_snapshot_keys_default_to_tokens(self, person_snapshot):
        """Columns without an explicit key use their token."""
        assert person_snapshot["gender"].key == "gender"

    def test_camel_case_and_extra_keys(self, person_snapshot):
        """camelCase keys map to fields; unknown keys are kept."""
        column = person_snapshot["first_name_eng"]
        assert column.input_type == "textField"
        assert column.display_type == "text"
        assert column.extras["fieldComponent"] == "textInput"
        assert person_snapshot["full_name"].form_field is False

    def test_unknown_model(self, schema_registry):
        """Snapshots of unknown models raise."""
        with pytest.raises(ModelSchemaNotFoundError):
            schema_registry.get_snapshot("Ghost")

    def test_unknown_related_model_is_skipped(self, tmp_path):
        """A relation to a missing model contributes no tokens."""
        (tmp_path / "a.yaml").write_text(
            "model: A\ncolumns:\n  id: {type: number}\nrelations:\n  b: {model: B}\n"
        )
        registry = SchemaRegistry(tmp_path)
        assert list(registry.get_snapshot("A")) == ["id"]

    def test_broken_file_is_skipped(self, tmp_path):
        """Unparseable YAML is logged and skipped."""
        (tmp_path / "bad.yaml").write_text("model: [unclosed\n")
        (tmp_path / "ok.yaml").write_text("model: Ok\ncolumns: {}\n")
        assert SchemaRegistry(tmp_path).list_models() == ["Ok"]


class TestViewConfigRegistry:
    """View config documents and blocks."""

    def test_summaries(self, view_registry):
        """The person document exposes its blocks."""
        summaries = {s.model: s.blocks for s in view_registry.list_summaries()}
        assert summaries["person"] == ["listView", "formView", "statsView"]

    def test_get_block(self, view_registry):
        """Blocks parse into ViewBlocks with aliases applied."""
        block = view_registry.get_block("Person", "statsView")
        assert block.no_model is True
        assert block.per_page == 10
        assert set(block.columns_schema) == {"category", "total"}

    def test_missing_document(self, view_registry):
        """Unknown models raise ViewConfigNotFoundError."""
        with pytest.raises(ViewConfigNotFoundError):
            view_registry.get_block("ghost", "listView")

    def test_missing_block(self, view_registry):
        """Unknown blocks raise with the available block names."""
        with pytest.raises(ViewBlockNotFoundError) as exc_info:
            view_registry.get_block("person", "detailView")
        assert exc_info.value.available == ["listView", "formView", "statsView"]

    def test_invalid_block(self, tmp_path):
        """Blocks that fail validation become configuration errors."""
        (tmp_path / "thing.json").write_text(json.dumps({"v": {"per_page": -1, "lang": ["en"]}}))
        with pytest.raises(ConfigurationError):
            ViewConfigRegistry(tmp_path).get_block("thing", "v")

    def test_non_object_document_is_skipped(self, tmp_path):
        """A JSON array is not a view config."""
        (tmp_path / "list.json").write_text("[]")
        assert ViewConfigRegistry(tmp_path).count() == 0


class TestSettings:
    """Environment-driven settings."""

    def test_defaults(self):
        """Defaults point at the shipped definitions."""
        settings = EngineSettings()
        assert settings.route_prefix == "api"
        assert settings.default_lang == "dv"
        assert settings.allow_custom_component_keys is True
        assert (settings.templates_dir / "table.json").is_file()

    def test_from_env(self, monkeypatch, tmp_path):
        """UIAPI_* variables override the defaults."""
        monkeypatch.setenv("UIAPI_ROUTE_PREFIX", "backend")
        monkeypatch.setenv("UIAPI_ALLOW_CUSTOM_COMPONENT_KEYS", "false")
        monkeypatch.setenv("UIAPI_TOP_LEVEL_FILTERS", "yes")
        monkeypatch.setenv("UIAPI_DEFAULT_PER_PAGE", "50")
        monkeypatch.setenv("UIAPI_SCHEMAS_DIR", str(tmp_path))
        settings = EngineSettings.from_env()
        assert settings.route_prefix == "backend"
        assert settings.allow_custom_component_keys is False
        assert settings.include_top_level_filters is True
        assert settings.default_per_page == 50
        assert settings.schemas_dir == tmp_path
