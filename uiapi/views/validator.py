"""View config validator.

Checks a raw view config document (as loaded from JSON, before any parsing)
and reports errors and warnings, each with a dotted path into the document,
the rule that fired and a human-readable message. Errors make a block
unusable; warnings flag configs that will assemble but probably not as
intended.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from uiapi.components.registry import canonical_kind
from uiapi.components.schemas import ComponentKind

from .schemas import ValidationReport

logger = logging.getLogger(__name__)

_DISPLAY_TYPES_NEEDING_CONFIG = ("chip", "select")


class ViewConfigValidator:
    """Validates view config documents block by block."""

    def __init__(self, known_components: Optional[Iterable[str]] = None):
        self.known_components = set(
            known_components
            if known_components is not None
            else (k.value for k in ComponentKind)
        )

    def validate(
        self,
        document: Mapping[str, Any],
        model: str,
        schema_columns: Optional[Mapping[str, Any]] = None,
    ) -> ValidationReport:
        """Validate every view block of a document.

        Args:
            document: Raw view config (block name -> block).
            model: Model name, used in messages.
            schema_columns: Column token -> definition for model-backed
                blocks. None skips the column reference rules for them.
        """
        report = ValidationReport(model=model)

        if not document:
            report.error("(root)", "not_empty", f"View config for '{model}' is empty.")
            return report

        for block_name, block in document.items():
            if not isinstance(block, Mapping):
                continue
            if block.get("noModel"):
                raw_schema = block.get("columnsSchema")
                columns = raw_schema if isinstance(raw_schema, Mapping) else None
            else:
                columns = schema_columns
            self._validate_block(report, block, block_name, columns)

        logger.debug(
            f"Validated view config '{model}': {len(report.errors)} errors, "
            f"{len(report.warnings)} warnings"
        )
        return report

    # ── Block orchestration ──────────────────────────────────

    def _validate_block(
        self,
        report: ValidationReport,
        block: Mapping[str, Any],
        prefix: str,
        columns: Optional[Mapping[str, Any]],
    ) -> None:
        self._lang_required(report, block, prefix)
        self._per_page_positive(report, block, prefix)
        self._no_model_requires_schema(report, block, prefix)
        self._columns_required(report, block, prefix)
        self._components_have_templates(report, block, prefix)

        if columns is not None:
            self._columns_reference_known_keys(report, block, prefix, columns)
            self._filters_reference_known_keys(report, block, prefix, columns)
            self._customizations_reference_known_keys(report, block, prefix, columns)

        components = block.get("components")
        if isinstance(components, Mapping):
            for comp_name, comp in components.items():
                if not isinstance(comp, Mapping):
                    continue
                comp_prefix = f"{prefix}.components.{comp_name}"
                if canonical_kind(comp_name) == ComponentKind.FORM.value:
                    self._validate_form(report, comp, comp_prefix)
                elif isinstance(comp.get("functions"), Mapping):
                    self._function_refs(report, comp["functions"], comp_prefix)
                if isinstance(comp.get("columnCustomizations"), Mapping):
                    self._validate_customizations(
                        report, comp["columnCustomizations"], comp_prefix
                    )

        if isinstance(block.get("columnCustomizations"), Mapping):
            self._validate_customizations(report, block["columnCustomizations"], prefix)

        raw_schema = block.get("columnsSchema")
        if isinstance(raw_schema, Mapping):
            for col_key, col_def in raw_schema.items():
                if not isinstance(col_def, Mapping):
                    continue
                col_prefix = f"{prefix}.columnsSchema.{col_key}"
                self._select_requires_config(report, col_def, col_prefix)
                self._display_type_requires_config(report, col_def, col_prefix)

    def _validate_form(
        self, report: ValidationReport, form: Mapping[str, Any], prefix: str
    ) -> None:
        self._field_groups_exist(report, form, prefix)
        self._group_names_unique(report, form, prefix)
        self._group_titles_localized(report, form, prefix)
        self._search_requires_submit_url(report, form, prefix)
        self._events_reference_functions(report, form, prefix)
        if isinstance(form.get("functions"), Mapping):
            self._function_refs(report, form["functions"], prefix)

    def _validate_customizations(
        self, report: ValidationReport, customizations: Mapping[str, Any], prefix: str
    ) -> None:
        for col_key, custom in customizations.items():
            if not isinstance(custom, Mapping):
                continue
            cust_prefix = f"{prefix}.columnCustomizations.{col_key}"
            self._display_type_requires_config(report, custom, cust_prefix)
            self._select_requires_config(report, custom, cust_prefix)

    # ── Structural rules ─────────────────────────────────────

    def _lang_required(self, report, block, prefix) -> None:
        lang = block.get("lang")
        if lang is None:
            report.error(
                f"{prefix}.lang",
                "required",
                '"lang" key is missing. It must be a non-empty array (e.g. ["en", "dv"]).',
            )
        elif not isinstance(lang, list) or not lang:
            report.error(
                f"{prefix}.lang",
                "required_array",
                '"lang" must be a non-empty array (e.g. ["en", "dv"]).',
            )

    def _per_page_positive(self, report, block, prefix) -> None:
        if "per_page" not in block:
            return
        per_page = block["per_page"]
        if isinstance(per_page, bool) or not isinstance(per_page, int) or per_page <= 0:
            report.warn(
                f"{prefix}.per_page",
                "positive_integer",
                f'"per_page" should be a positive integer. Got: {per_page!r}',
            )

    def _no_model_requires_schema(self, report, block, prefix) -> None:
        if not block.get("noModel"):
            return
        schema = block.get("columnsSchema")
        if not isinstance(schema, Mapping) or not schema:
            report.error(
                f"{prefix}.columnsSchema",
                "nomodel_requires_schema",
                '"noModel" is true but "columnsSchema" is missing or empty. '
                "A non-empty columnsSchema is required.",
            )

    def _columns_required(self, report, block, prefix) -> None:
        components = block.get("components")
        if not isinstance(components, Mapping):
            return
        table_keys = [
            k for k in components if canonical_kind(k) == ComponentKind.TABLE.value
        ]
        if not table_keys:
            return

        root_columns = block.get("columns")
        if isinstance(root_columns, list) and root_columns:
            return
        for key in table_keys:
            table = components.get(key)
            if isinstance(table, Mapping):
                table_columns = table.get("columns")
                if isinstance(table_columns, list) and table_columns:
                    return

        report.error(
            f"{prefix}.columns",
            "columns_required",
            '"columns" must be defined either at the root level or inside '
            '"components.table.columns" when using a table component.',
        )

    def _components_have_templates(self, report, block, prefix) -> None:
        components = block.get("components")
        if not isinstance(components, Mapping):
            return
        for comp_name in components:
            if canonical_kind(comp_name) not in self.known_components:
                report.warn(
                    f"{prefix}.components.{comp_name}",
                    "component_config_exists",
                    f'Component "{comp_name}" has no component template. '
                    f"Known: {', '.join(sorted(self.known_components))}.",
                )

    # ── Column reference rules ───────────────────────────────

    def _check_column_refs(self, report, refs, columns, path) -> None:
        for index, ref in enumerate(refs):
            if not isinstance(ref, str) or "." in ref:
                continue
            if ref not in columns:
                report.warn(
                    f"{path}[{index}]",
                    "column_exists_in_schema",
                    f'Column "{ref}" is not defined in the schema.',
                )

    def _columns_reference_known_keys(self, report, block, prefix, columns) -> None:
        root_columns = block.get("columns")
        if isinstance(root_columns, list):
            self._check_column_refs(report, root_columns, columns, f"{prefix}.columns")

        components = block.get("components")
        if not isinstance(components, Mapping):
            return
        for comp_name, comp in components.items():
            if isinstance(comp, Mapping) and isinstance(comp.get("columns"), list):
                self._check_column_refs(
                    report, comp["columns"], columns, f"{prefix}.components.{comp_name}.columns"
                )

    def _filters_reference_known_keys(self, report, block, prefix, columns) -> None:
        filters = block.get("filters")
        if not isinstance(filters, list):
            return
        for index, key in enumerate(filters):
            if isinstance(key, str) and key not in columns:
                report.warn(
                    f"{prefix}.filters[{index}]",
                    "filter_key_exists",
                    f'Filter "{key}" does not reference a known column in the schema.',
                )

    def _customizations_reference_known_keys(self, report, block, prefix, columns) -> None:
        customizations = block.get("columnCustomizations")
        if not isinstance(customizations, Mapping):
            return

        known = set(columns)
        root_columns = block.get("columns")
        if isinstance(root_columns, list):
            known.update(c for c in root_columns if isinstance(c, str))
        components = block.get("components")
        if isinstance(components, Mapping):
            for comp in components.values():
                if isinstance(comp, Mapping) and isinstance(comp.get("columns"), list):
                    known.update(c for c in comp["columns"] if isinstance(c, str))

        for col_key, custom in customizations.items():
            if not isinstance(custom, Mapping):
                continue
            if custom.get("displayType") == "custom" or "columnData" in custom:
                continue
            if col_key not in known:
                report.warn(
                    f"{prefix}.columnCustomizations.{col_key}",
                    "customization_key_exists",
                    f'Column customization "{col_key}" does not match any known column '
                    'in the schema or columns list. If this is intentional, set '
                    'displayType to "custom".',
                )

    # ── Column definition rules ──────────────────────────────

    def _select_requires_config(self, report, definition, prefix) -> None:
        if str(definition.get("inputType") or "").lower() != "select":
            return

        select = definition.get("select")
        filterable = definition.get("filterable")
        has_select = isinstance(select, Mapping) and bool(select)
        has_filterable = isinstance(filterable, Mapping) and bool(filterable)
        if not has_select and not has_filterable:
            report.error(
                prefix,
                "select_requires_config",
                '"inputType" is "select" but neither "select" nor "filterable" '
                "configuration is defined.",
            )
            return

        config = select if has_select else filterable
        mode = str(config.get("mode") or "self").lower()
        if mode == "self":
            items = config.get("items")
            if not isinstance(items, list) or not items:
                report.warn(
                    f"{prefix}.select",
                    "self_mode_requires_items",
                    'Select mode is "self" but "items" is missing or empty. '
                    "The dropdown will have no options.",
                )
        else:
            relationship = config.get("relationship")
            if not isinstance(relationship, str) or not relationship:
                report.warn(
                    f"{prefix}.select",
                    "relation_mode_requires_relationship",
                    'Select mode is "relation" but "relationship" is missing. '
                    "The related model is guessed from the key name.",
                )

    def _display_type_requires_config(self, report, definition, prefix) -> None:
        display_type = definition.get("displayType")
        if not isinstance(display_type, str) or not display_type:
            return
        if display_type.lower() not in _DISPLAY_TYPES_NEEDING_CONFIG:
            return

        sub = definition.get(display_type)
        props = definition.get("displayProps")
        if not (isinstance(sub, Mapping) and sub) and not (isinstance(props, Mapping) and props):
            report.warn(
                prefix,
                "displaytype_requires_config",
                f'"displayType" is "{display_type}" but neither a "{display_type}" '
                'sub-key nor "displayProps" is defined.',
            )

    def _function_refs(self, report, functions, prefix) -> None:
        for name, ref in functions.items():
            path = f"{prefix}.functions.{name}"
            if isinstance(ref, str):
                continue
            if not isinstance(ref, Mapping):
                report.warn(
                    path,
                    "function_type",
                    f'Function "{name}" should be either a string or an object with '
                    '"file" and "function" keys.',
                )
                continue
            if "file" not in ref:
                report.error(
                    path,
                    "function_requires_file",
                    f'Function "{name}" is missing the "file" key (e.g. "misc.js").',
                )
            if "function" not in ref:
                report.error(
                    path,
                    "function_requires_function",
                    f'Function "{name}" is missing the "function" key.',
                )

    # ── Form rules ───────────────────────────────────────────

    def _field_groups_exist(self, report, form, prefix) -> None:
        groups = form.get("groups")
        fields = form.get("fields")
        if not isinstance(groups, list) or not isinstance(fields, list):
            return
        names = [
            str(g["name"]) for g in groups if isinstance(g, Mapping) and "name" in g
        ]
        for index, field in enumerate(fields):
            if not isinstance(field, Mapping) or field.get("group") is None:
                continue
            if str(field["group"]) not in names:
                report.warn(
                    f"{prefix}.fields[{index}]",
                    "field_group_exists",
                    f'Field "{field.get("key", f"index:{index}")}" references group '
                    f'"{field["group"]}" which is not defined in "groups". '
                    f"Available groups: {', '.join(names)}.",
                )

    def _group_names_unique(self, report, form, prefix) -> None:
        groups = form.get("groups")
        if not isinstance(groups, list):
            return
        seen: set[str] = set()
        for index, group in enumerate(groups):
            if not isinstance(group, Mapping) or "name" not in group:
                continue
            name = str(group["name"])
            if name in seen:
                report.warn(
                    f"{prefix}.groups[{index}]",
                    "group_name_unique",
                    f'Duplicate group name "{name}". Group names should be unique.',
                )
            seen.add(name)

    def _group_titles_localized(self, report, form, prefix) -> None:
        groups = form.get("groups")
        if not isinstance(groups, list):
            return
        for index, group in enumerate(groups):
            if not isinstance(group, Mapping):
                continue
            path = f"{prefix}.groups[{index}]"
            name = group.get("name", f"index:{index}")
            title = group.get("title")
            if title is None:
                report.warn(
                    path,
                    "group_title_required",
                    f'Group "{name}" is missing a "title". It should be a localized '
                    'object like {"en": "...", "dv": "..."}.',
                )
            elif not isinstance(title, Mapping):
                report.warn(
                    path,
                    "group_title_localized",
                    f'Group "{name}" title should be a localized object '
                    '{"en": "...", "dv": "..."} instead of a plain string.',
                )
            else:
                missing = [l for l in ("en", "dv") if l not in title]
                if missing:
                    report.warn(
                        path,
                        "group_title_langs",
                        f'Group "{name}" title is missing language(s): {", ".join(missing)}.',
                    )

    def _search_requires_submit_url(self, report, form, prefix) -> None:
        fields = form.get("fields")
        if not isinstance(fields, list):
            return
        for index, field in enumerate(fields):
            if not isinstance(field, Mapping):
                continue
            if str(field.get("inputType") or "").lower() != "search":
                continue
            submit_url = field.get("submitUrl")
            if not isinstance(submit_url, str) or not submit_url:
                report.error(
                    f"{prefix}.fields[{index}]",
                    "search_requires_submiturl",
                    f'Field "{field.get("key", f"index:{index}")}" has inputType '
                    '"search" but is missing "submitUrl".',
                )

    def _events_reference_functions(self, report, form, prefix) -> None:
        fields = form.get("fields")
        if not isinstance(fields, list):
            return
        functions = form.get("functions")
        declared = set(functions.keys()) if isinstance(functions, Mapping) else set()
        for index, field in enumerate(fields):
            if not isinstance(field, Mapping) or not isinstance(field.get("events"), Mapping):
                continue
            for event, handler in field["events"].items():
                if isinstance(handler, str) and handler not in declared:
                    report.warn(
                        f"{prefix}.fields[{index}].events.{event}",
                        "event_handler_exists",
                        f'Field "{field.get("key", f"index:{index}")}" event "{event}" '
                        f'references handler "{handler}" which is not defined in "functions".',
                    )
