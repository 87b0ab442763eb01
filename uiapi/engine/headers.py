"""Header building: column customization merge, language filter, reordering.

Headers are built in four passes over the effective column list:

1. base header from the ColumnDefinition, or a shell for a synthetic column
2. root customization, then component customization, deep-merged on top
3. language filter (before reordering, so `order` indices count only
   columns that are actually shown)
4. reordering by `order`, which is then stripped
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from uiapi.localization.localizer import (
    include_column,
    pick_header_lang,
    resolve_text,
    title_case_token,
)
from uiapi.schema.schemas import ColumnDefinition

from .merge import Side, deep_merge

logger = logging.getLogger(__name__)

Header = dict[str, Any]


def effective_columns(
    snapshot: Mapping[str, ColumnDefinition],
    root_columns: Optional[Sequence[str]] = None,
    component_columns: Optional[Sequence[str]] = None,
) -> list[str]:
    """Component columns if declared, else root columns, else own schema columns.

    A component that declares `columns: []` gets no columns; an empty root
    list falls through to the schema.
    """
    if component_columns is not None:
        return _unique_tokens(component_columns)
    if root_columns:
        return _unique_tokens(root_columns)
    return [token for token in snapshot if "." not in token]


def _unique_tokens(tokens: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(t for t in tokens if isinstance(t, str) and t))


def is_synthetic(token: str, customization: Mapping[str, Any], snapshot: Mapping) -> bool:
    return token not in snapshot and ("label" in customization or "columnData" in customization)


def base_header(token: str, definition: ColumnDefinition, lang: str) -> Header:
    title: Any = None
    if "." in token:
        title = definition.relation_label
    title = title or definition.label or title_case_token(token)

    header: Header = {
        "key": token,
        "title": title,
        "value": definition.value_key(token),
        "sortable": definition.sortable,
        "hidden": definition.hidden,
        "type": definition.type,
    }
    if definition.display_type is not None:
        header["displayType"] = definition.display_type
    if definition.display_props is not None:
        header["displayProps"] = definition.display_props
    if definition.inline_editable is not None:
        header["inlineEditable"] = definition.inline_editable
    if definition.chip is not None:
        header["chip"] = definition.chip
    hint = pick_header_lang(definition.lang, lang)
    if hint is not None:
        header["lang"] = hint
    return header


def _order_of(header: Mapping[str, Any]) -> Optional[int]:
    order = header.get("order")
    if isinstance(order, bool) or not isinstance(order, int) or order < 0:
        return None
    return order


def reorder_headers(headers: Sequence[Header]) -> list[Header]:
    """Place headers carrying an integer `order` at their target index.

    Ordered headers are stable-sorted by `order` and inserted one by one into
    the natural (unordered) sequence. Each target index is clamped to the
    current length and never lands before the previously placed header, so
    ties keep their original order. `order` is stripped from every header.
    """
    natural: list[Header] = []
    ordered: list[tuple[int, int, Header]] = []
    for index, header in enumerate(headers):
        order = _order_of(header)
        if order is None:
            natural.append(header)
        else:
            ordered.append((order, index, header))
    ordered.sort(key=lambda item: (item[0], item[1]))

    result = list(natural)
    previous = -1
    for order, _, header in ordered:
        position = max(min(order, len(result)), previous + 1)
        result.insert(position, header)
        previous = position

    return [{k: v for k, v in h.items() if k != "order"} for h in result]


def has_order(headers: Any) -> bool:
    return isinstance(headers, list) and any(
        isinstance(h, Mapping) and "order" in h for h in headers
    )


def build_headers(
    snapshot: Mapping[str, ColumnDefinition],
    lang: str,
    root_columns: Optional[Sequence[str]] = None,
    root_customizations: Optional[Mapping[str, Any]] = None,
    component_columns: Optional[Sequence[str]] = None,
    component_customizations: Optional[Mapping[str, Any]] = None,
    include_hidden: bool = False,
) -> list[Header]:
    """Build the ordered, localized header list for a header-bearing component."""
    root_custom = root_customizations or {}
    comp_custom = component_customizations or {}

    tokens = effective_columns(snapshot, root_columns, component_columns)
    for token in list(root_custom) + list(comp_custom):
        if token in tokens:
            continue
        merged = deep_merge(root_custom.get(token) or {}, comp_custom.get(token) or {})
        if is_synthetic(token, merged, snapshot):
            tokens.append(token)

    headers: list[Header] = []
    for token in tokens:
        custom = deep_merge(root_custom.get(token) or {}, comp_custom.get(token) or {})
        definition = snapshot.get(token)

        if definition is not None:
            if definition.hidden and not include_hidden:
                continue
            if not include_column(definition, lang):
                continue
            header = deep_merge(base_header(token, definition, lang), custom)
        elif is_synthetic(token, custom, snapshot):
            if not include_column(custom, lang):
                continue
            custom = deep_merge(custom, {"label": title_case_token(token)}, prefer=Side.LEFT)
            shell = {
                "key": token,
                "value": custom.get("columnData", token),
                "sortable": False,
                "hidden": False,
            }
            header = deep_merge(shell, custom)
        else:
            logger.warning(f"Skipping column '{token}': no schema entry and no label")
            continue

        if "editable" in header:
            header["inlineEditable"] = bool(header.pop("editable"))
        if "title" not in custom and custom.get("label") is not None:
            header["title"] = custom["label"]
        header.setdefault("title", header.get("label"))
        if isinstance(header.get("lang"), list):
            hint = pick_header_lang(header.pop("lang"), lang)
            if hint is not None:
                header["lang"] = hint
        headers.append(header)

    headers = reorder_headers(headers)

    for header in headers:
        header["title"] = resolve_text(header.get("title"), lang)
        if "label" in header:
            header["label"] = resolve_text(header["label"], lang)
    return headers
