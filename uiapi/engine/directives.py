"""Directive resolution: turns a component template into a draft section.

Each template key holds a directive: "on" builds the section from the schema
snapshot, "off" omits it, any other literal passes through. Nested objects
are walked with the same rules.
"""

import copy
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from uiapi.components.schemas import ComponentTemplate, DirectiveState
from uiapi.localization.localizer import include_column, resolve_text, title_case_token
from uiapi.schema.schemas import ColumnDefinition

from .headers import build_headers, effective_columns
from .merge import is_off

logger = logging.getLogger(__name__)

# Column definition keys copied onto form fields
_FIELD_PASSTHROUGH = ("select", "filterable", "chip", "displayType")

DEFAULT_BUTTONS: dict[str, dict[str, list[dict[str, Any]]]] = {
    "table": {
        "actions": [
            {"type": "view", "label": {"en": "View", "dv": "ބަލާ"}, "icon": "mdi-eye"},
            {"type": "edit", "label": {"en": "Edit", "dv": "ބަދަލުކުރޭ"}, "icon": "mdi-pencil"},
            {"type": "delete", "label": {"en": "Delete", "dv": "ފޮހެލާ"}, "icon": "mdi-delete"},
        ],
    },
    "form": {
        "buttons": [
            {"type": "submit", "label": {"en": "Save", "dv": "ރައްކާކުރޭ"}, "color": "primary"},
            {"type": "reset", "label": {"en": "Reset", "dv": "ރީސެޓް"}},
        ],
    },
    "toolbar": {
        "buttons": [
            {"type": "create", "label": {"en": "New", "dv": "އާ"}, "icon": "mdi-plus"},
            {"type": "export", "label": {"en": "Export", "dv": "އެކްސްޕޯޓް"}, "icon": "mdi-download"},
        ],
    },
    "filterSection": {
        "buttons": [
            {"type": "apply", "label": {"en": "Apply", "dv": "ހޯދާ"}, "color": "primary"},
            {"type": "clear", "label": {"en": "Clear", "dv": "ސާފުކުރޭ"}},
        ],
    },
}

_STUDLY_SPLIT = re.compile(r"[_\-\s]+")


def studly(name: str) -> str:
    """'user_role' -> 'UserRole'."""
    return "".join(part[:1].upper() + part[1:] for part in _STUDLY_SPLIT.split(name) if part)


class BuildContext:
    """Everything a directive builder may read for one component."""

    def __init__(
        self,
        snapshot: Mapping[str, ColumnDefinition],
        lang: str,
        per_page: int,
        page: int = 1,
        model: str = "",
        route_prefix: str = "api",
        root_columns: Optional[Sequence[str]] = None,
        root_customizations: Optional[Mapping[str, Any]] = None,
        component_columns: Optional[Sequence[str]] = None,
        component_customizations: Optional[Mapping[str, Any]] = None,
        allowed_filters: Optional[Sequence[str]] = None,
        include_hidden: bool = False,
        known_models: Optional[set[str]] = None,
    ):
        self.snapshot = snapshot
        self.lang = lang
        self.per_page = per_page
        self.page = page
        self.model = model
        self.route_prefix = route_prefix.strip("/")
        self.root_columns = root_columns
        self.root_customizations = root_customizations
        self.component_columns = component_columns
        self.component_customizations = component_customizations
        self.allowed_filters = allowed_filters
        self.include_hidden = include_hidden
        self.known_models = known_models

    @property
    def columns(self) -> list[str]:
        return effective_columns(self.snapshot, self.root_columns, self.component_columns)

    def gapi_url(self, model: str) -> str:
        return f"/{self.route_prefix}/gapi/{model}"


Builder = Callable[[BuildContext, str, str], Any]


# ── Builders ─────────────────────────────────────────────────


def build_header_section(ctx: BuildContext, kind: str, key: str) -> list[dict]:
    return build_headers(
        ctx.snapshot,
        ctx.lang,
        root_columns=ctx.root_columns,
        root_customizations=ctx.root_customizations,
        component_columns=ctx.component_columns,
        component_customizations=ctx.component_customizations,
        include_hidden=ctx.include_hidden,
    )


def build_fields(ctx: BuildContext, kind: str, key: str) -> list[dict]:
    """One form field per column with formField != false."""
    if ctx.component_columns is not None:
        tokens = effective_columns(ctx.snapshot, component_columns=ctx.component_columns)
    else:
        tokens = [t for t in ctx.snapshot if "." not in t]

    fields = []
    for token in tokens:
        definition = ctx.snapshot.get(token)
        if definition is None:
            logger.warning(f"Skipping form field '{token}': no schema entry")
            continue
        if not definition.form_field or not include_column(definition, ctx.lang):
            continue

        field: dict[str, Any] = {
            "key": definition.value_key(token),
            "label": copy.deepcopy(definition.label) or title_case_token(token),
            "type": definition.type,
        }
        if definition.input_type is not None:
            field["inputType"] = definition.input_type
        if definition.hidden:
            field["hidden"] = True
        dumped = definition.model_dump(by_alias=True, exclude_none=True)
        for prop in _FIELD_PASSTHROUGH:
            if prop in dumped:
                field[prop] = dumped[prop]
        for extra_key, extra_value in definition.extras.items():
            field.setdefault(extra_key, copy.deepcopy(extra_value))
        fields.append(field)
    return fields


def _default_filter_type(definition: ColumnDefinition) -> str:
    return "Date" if str(definition.type).lower() in ("date", "datetime", "timestamp") else "Text"


def _select_filter(ctx: BuildContext, token: str, config: Mapping, filt: dict) -> Optional[dict]:
    definition = ctx.snapshot[token]
    mode = str(config.get("mode") or "self").lower()
    item_title = resolve_text(config.get("itemTitle") or definition.value_key(token), ctx.lang)
    item_value = str(config.get("itemValue") or definition.value_key(token))
    filt["itemTitle"] = item_title
    filt["itemValue"] = item_value

    if mode == "self":
        items = config.get("items")
        pruned = []
        for item in items if isinstance(items, list) else []:
            if isinstance(item, Mapping):
                pruned.append({
                    item_title: str(item.get(item_title, "")),
                    item_value: str(item.get(item_value, "")),
                })
            else:
                pruned.append({item_title: str(item), item_value: str(item)})
        filt["items"] = pruned
        return filt

    relationship = str(config.get("relationship") or "")
    if relationship:
        related = studly(relationship)
    elif filt["key"].endswith("_id"):
        related = studly(filt["key"][: -len("_id")])
    else:
        logger.warning(f"Omitting filter '{token}': relation mode without a relationship")
        return None

    if ctx.known_models is not None and related.lower() not in ctx.known_models:
        logger.warning(f"Omitting filter '{token}': related model '{related}' not found")
        return None

    filt["url"] = (
        f"{ctx.gapi_url(related)}?columns={item_value},{item_title}"
        f"&sort={item_title}&pagination=off&wrap=data"
    )
    return filt


def build_filters(ctx: BuildContext, kind: str = "", key: str = "filters") -> list[dict]:
    """One filter per allowed, language-supported column."""
    allowed = set(ctx.allowed_filters) if ctx.allowed_filters is not None else None
    filters = []
    for token, definition in ctx.snapshot.items():
        if allowed is not None:
            if token not in allowed:
                continue
        elif "." in token:
            continue
        if not include_column(definition, ctx.lang):
            continue

        config = definition.filterable
        if config is False:
            continue
        if not isinstance(config, Mapping):
            filters.append({
                "type": _default_filter_type(definition),
                "key": definition.value_key(token),
                "label": copy.deepcopy(definition.label) or title_case_token(token),
            })
            continue

        filter_type = str(config.get("type") or "search").lower()
        filt: dict[str, Any] = {
            "type": filter_type.title(),
            "key": str(config.get("value") or definition.value_key(token)),
            "label": copy.deepcopy(config.get("label") or definition.label)
            or title_case_token(token),
        }
        if config.get("multiple") is not None:
            filt["multiple"] = bool(config["multiple"])
        if filter_type == "select":
            filt = _select_filter(ctx, token, config, filt)
            if filt is None:
                continue
        filters.append(filt)
    return filters


def build_pagination(ctx: BuildContext, kind: str = "", key: str = "pagination") -> dict:
    return {"current_page": ctx.page, "per_page": ctx.per_page}


def build_datalink(ctx: BuildContext, kind: str = "", key: str = "datalink") -> str:
    """Data URL for the effective, language-supported columns."""
    tokens = []
    for token in ctx.columns:
        definition = ctx.snapshot.get(token)
        if definition is not None and include_column(definition, ctx.lang):
            tokens.append(token)

    relations: dict[str, list[str]] = {}
    for token in tokens:
        if "." not in token:
            continue
        rel, field = token.split(".", 1)
        if field and field not in relations.setdefault(rel, []):
            relations[rel].append(field)

    query = f"columns={','.join(tokens)}"
    if relations:
        query += "&with=" + ",".join(f"{rel}:{','.join(f)}" for rel, f in relations.items())
    query += f"&per_page={ctx.per_page}"
    return f"{ctx.gapi_url(ctx.model)}?{query}"


def build_default_buttons(ctx: BuildContext, kind: str, key: str) -> list[dict]:
    defaults = DEFAULT_BUTTONS.get(kind, {}).get(key)
    if defaults is None:
        logger.debug(f"No default '{key}' for component kind '{kind}'")
        return []
    return copy.deepcopy(defaults)


DEFAULT_BUILDERS: dict[str, Builder] = {
    "headers": build_header_section,
    "fields": build_fields,
    "filters": build_filters,
    "pagination": build_pagination,
    "datalink": build_datalink,
    "actions": build_default_buttons,
    "buttons": build_default_buttons,
}


def is_on(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == DirectiveState.ON.value


class DirectiveResolver:
    """Resolves template directives against a build context."""

    def __init__(self, builders: Optional[Mapping[str, Builder]] = None):
        self.builders = dict(builders if builders is not None else DEFAULT_BUILDERS)

    def resolve(self, template: ComponentTemplate, ctx: BuildContext) -> dict[str, Any]:
        """Build the draft section for one component template."""
        return self._walk(template.directives, ctx, template.kind.value)

    def _walk(self, node: Mapping[str, Any], ctx: BuildContext, kind: str) -> dict[str, Any]:
        draft: dict[str, Any] = {}
        for key, value in node.items():
            if is_on(value):
                builder = self.builders.get(key)
                if builder is None:
                    logger.debug(f"No builder for directive '{key}', passing 'on' through")
                    draft[key] = value
                else:
                    draft[key] = builder(ctx, kind, key)
            elif is_off(value):
                continue
            elif isinstance(value, Mapping):
                draft[key] = self._walk(value, ctx, kind)
            else:
                draft[key] = copy.deepcopy(value)
        return draft
