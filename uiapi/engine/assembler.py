"""Assembler: drives template resolution, overrides, header ordering,
function inlining and localization for every component of a view block.

Each component's draft is built and merged independently from its own deep
copies, so a failure in one never leaves another half-merged. Configuration
errors (unknown component kind, noModel without columnsSchema) are raised
before any component is built.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from uiapi.components.registry import TemplateRegistry, canonical_kind, get_template_registry
from uiapi.errors import MissingColumnsSchemaError
from uiapi.localization.localizer import DEFAULT_LANGUAGES, localize_tree, resolve_text
from uiapi.schema.registry import get_schema_registry, normalize_model_name
from uiapi.schema.schemas import ColumnDefinition
from uiapi.settings import EngineSettings, get_settings
from uiapi.views.schemas import COMPONENT_INTERNAL_KEYS, ViewBlock

from .directives import BuildContext, DirectiveResolver, build_filters, build_pagination
from .functions import FunctionStore, inline_functions
from .headers import build_headers, has_order, reorder_headers
from .merge import apply_overrides

logger = logging.getLogger(__name__)

LANG_NOT_SUPPORTED = {"en": "Language '{lang}' not supported by view config"}


def snapshot_from_columns_schema(
    columns_schema: Mapping[str, ColumnDefinition],
) -> dict[str, ColumnDefinition]:
    """Snapshot for a noModel block; value keys default to the column token."""
    return {
        token: definition if definition.key else definition.model_copy(update={"key": token})
        for token, definition in columns_schema.items()
    }


def parse_columns_param(columns: Optional[str]) -> Optional[list[str]]:
    """'a, b,,c' -> ['a', 'b', 'c']; None or blank -> None."""
    if not columns:
        return None
    tokens = [t.strip() for t in columns.split(",") if t.strip()]
    return tokens or None


class Assembler:
    """Assembles view block payloads.

    Settings are passed in explicitly; the assembler never reads ambient
    configuration.
    """

    def __init__(
        self,
        settings: EngineSettings,
        templates: TemplateRegistry,
        function_store: Optional[FunctionStore] = None,
        resolver: Optional[DirectiveResolver] = None,
        known_models: Optional[set[str]] = None,
    ):
        self.settings = settings
        self.templates = templates
        self.function_store = function_store
        self.resolver = resolver or DirectiveResolver()
        self.known_models = known_models

    def assemble(
        self,
        view_block: ViewBlock,
        component_keys: Optional[Sequence[str]] = None,
        schema: Optional[Mapping[str, ColumnDefinition]] = None,
        lang: Optional[str] = None,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
        *,
        model: str = "",
        block_name: str = "",
        columns: Optional[Sequence[str]] = None,
    ) -> dict[str, Any]:
        """Assemble the requested components of a view block.

        Args:
            view_block: The selected view block.
            component_keys: Subset of the block's components; None means all.
            schema: Schema snapshot for model-backed blocks. Ignored for
                noModel blocks, which use their own columnsSchema.
            lang: Request language; defaults to settings.default_lang.
            per_page: Page size override.
            page: Current page override.
            model: Model name, used for generated URLs.
            block_name: View block name, used in error messages.
            columns: Replacement for the block's root columns.

        Returns:
            {"componentSettings": {key: section}, ...} with optional top-level
            headers/filters/pagination, or {"message": ..., "data": []} when
            the language is not supported by the block.
        """
        lang = lang or self.settings.default_lang

        if view_block.no_model:
            if not view_block.columns_schema:
                raise MissingColumnsSchemaError(block_name or None)
            snapshot = snapshot_from_columns_schema(view_block.columns_schema)
        else:
            snapshot = dict(schema or {})

        keys = list(component_keys) if component_keys is not None else list(view_block.components)
        templates = self.templates.require_all(keys)

        if not view_block.allows_lang(lang):
            logger.info(f"Language '{lang}' not allowed for view block '{block_name}'")
            message = {k: v.format(lang=lang) for k, v in LANG_NOT_SUPPORTED.items()}
            return {"message": resolve_text(message, lang), "data": []}

        languages = set(DEFAULT_LANGUAGES) | {l.lower() for l in view_block.lang}
        root_columns = list(columns) if columns else view_block.columns
        effective_per_page = per_page or view_block.per_page or self.settings.default_per_page
        effective_page = page or 1

        sections: dict[str, Any] = {}
        for key in keys:
            override = view_block.component_override(key)
            component_columns = override.get("columns")
            if columns or not isinstance(component_columns, list):
                component_columns = None
            ctx = BuildContext(
                snapshot=snapshot,
                lang=lang,
                per_page=effective_per_page,
                page=effective_page,
                model=model,
                route_prefix=self.settings.route_prefix,
                root_columns=root_columns,
                root_customizations=view_block.column_customizations,
                component_columns=component_columns,
                component_customizations=override.get("columnCustomizations"),
                allowed_filters=view_block.filters,
                include_hidden=self.settings.include_hidden_columns_in_headers,
                known_models=self.known_models,
            )
            sections[key] = self._assemble_component(
                templates[key], ctx, override, languages
            )
            logger.debug(f"Assembled component '{key}' ({canonical_kind(key)})")

        payload: dict[str, Any] = {"componentSettings": sections}
        self._add_top_level(payload, view_block, snapshot, lang, root_columns,
                            effective_per_page, effective_page, model, languages)
        return payload

    def _assemble_component(self, template, ctx: BuildContext, override: dict, languages) -> dict:
        draft = self.resolver.resolve(template, ctx)

        patch = {k: v for k, v in override.items() if k not in COMPONENT_INTERNAL_KEYS}
        section = apply_overrides(
            draft,
            patch,
            known_keys=template.directive_keys,
            allow_unknown_keys=self.settings.allow_custom_component_keys,
        )

        if has_order(section.get("headers")):
            section["headers"] = reorder_headers(section["headers"])

        section = inline_functions(section, self.function_store)
        return localize_tree(section, ctx.lang, languages)

    def _add_top_level(
        self,
        payload: dict[str, Any],
        view_block: ViewBlock,
        snapshot: Mapping[str, ColumnDefinition],
        lang: str,
        root_columns: Sequence[str],
        per_page: int,
        page: int,
        model: str,
        languages,
    ) -> None:
        ctx = BuildContext(
            snapshot=snapshot,
            lang=lang,
            per_page=per_page,
            page=page,
            model=model,
            route_prefix=self.settings.route_prefix,
            root_columns=root_columns,
            root_customizations=view_block.column_customizations,
            allowed_filters=view_block.filters,
            include_hidden=self.settings.include_hidden_columns_in_headers,
            known_models=self.known_models,
        )
        if self.settings.include_top_level_headers:
            payload["headers"] = build_headers(
                snapshot,
                lang,
                root_columns=root_columns,
                root_customizations=view_block.column_customizations,
                include_hidden=self.settings.include_hidden_columns_in_headers,
            )
        if self.settings.include_top_level_filters:
            payload["filters"] = localize_tree(build_filters(ctx), lang, languages)
        if self.settings.include_top_level_pagination:
            payload["pagination"] = build_pagination(ctx)


# Global assembler instance
_assembler: Optional[Assembler] = None


def get_assembler() -> Assembler:
    """Get the global assembler, wired to the global registries and settings."""
    global _assembler
    if _assembler is None:
        settings = get_settings()
        schemas = get_schema_registry()
        _assembler = Assembler(
            settings,
            get_template_registry(),
            function_store=FunctionStore(settings.functions_dir),
            known_models={normalize_model_name(m) for m in schemas.list_models()},
        )
    return _assembler
