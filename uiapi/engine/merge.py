"""Override merging for resolved component sections.

Override values are classified once into an OverrideKind and dispatched on
that tag. The recursive deep merge is shared by override objects, upserted
list elements and column customizations.
"""

import copy
import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)

MATCH_FIELDS = ("type", "key", "name", "label")


class OverrideKind(str, Enum):
    """How an override value is applied to the draft value at the same key."""

    REMOVE = "remove"  # "off"
    SCALAR = "scalar"  # replace
    STRING_LIST = "string_list"  # filter + reorder
    OBJECT_LIST = "object_list"  # upsert by key/name
    MIXED_LIST = "mixed_list"  # upsert objects, ignore bare strings
    SCALAR_LIST = "scalar_list"  # replace
    OBJECT = "object"  # recurse


class Side(str, Enum):
    """Which side wins a leaf conflict in deep_merge."""

    LEFT = "left"
    RIGHT = "right"


def is_off(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == "off"


def classify_override(value: Any) -> OverrideKind:
    """Tag an override value with the merge rule that applies to it."""
    if is_off(value):
        return OverrideKind.REMOVE
    if isinstance(value, Mapping):
        return OverrideKind.OBJECT
    if isinstance(value, list):
        if not value:
            return OverrideKind.SCALAR_LIST
        if all(isinstance(v, str) for v in value):
            return OverrideKind.STRING_LIST
        if all(isinstance(v, Mapping) for v in value):
            return OverrideKind.OBJECT_LIST
        if any(isinstance(v, Mapping) for v in value):
            return OverrideKind.MIXED_LIST
        return OverrideKind.SCALAR_LIST
    return OverrideKind.SCALAR


def deep_merge(base: Any, patch: Any, prefer: Side = Side.RIGHT) -> Any:
    """Merge two JSON-like values into a new value.

    Mappings merge key by key (union, base key order first); any other
    collision is decided by `prefer`. Inputs are never mutated.
    """
    if isinstance(base, Mapping) and isinstance(patch, Mapping):
        merged = {k: copy.deepcopy(v) for k, v in base.items()}
        for key, value in patch.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value, prefer)
            else:
                merged[key] = copy.deepcopy(value)
        return merged
    winner = patch if prefer is Side.RIGHT else base
    return copy.deepcopy(winner)


def _matches(element: Any, wanted: str) -> bool:
    wanted = wanted.lower()
    if isinstance(element, str):
        return element.lower() == wanted
    if not isinstance(element, Mapping):
        return False
    for field in MATCH_FIELDS:
        candidate = element.get(field)
        if isinstance(candidate, str) and candidate.lower() == wanted:
            return True
        if isinstance(candidate, Mapping) and any(
            isinstance(v, str) and v.lower() == wanted for v in candidate.values()
        ):
            return True
    return False


def filter_by_strings(draft: list, wanted: list[str]) -> list:
    """Keep draft elements matching any wanted string, in wanted order.

    Each draft element is emitted at most once, under the first wanted
    string it matches.
    """
    taken: set[int] = set()
    result = []
    for name in wanted:
        for index, element in enumerate(draft):
            if index in taken or not _matches(element, name):
                continue
            taken.add(index)
            result.append(copy.deepcopy(element))
    return result


def _identity(element: Mapping) -> Optional[tuple[str, Any]]:
    for field in ("key", "name"):
        if element.get(field) is not None:
            return field, element[field]
    return None


def upsert_by_key(draft: list, overrides: Iterable[Mapping]) -> list:
    """Deep-merge each override onto the draft element with the same key or name.

    Unmatched overrides are appended. Overrides with neither key nor name are
    appended unless an equal element is already present.
    """
    result = copy.deepcopy(draft)
    for override in overrides:
        identity = _identity(override)
        if identity is None:
            if override not in result:
                result.append(copy.deepcopy(override))
            continue

        field, value = identity
        for index, element in enumerate(result):
            if isinstance(element, Mapping) and element.get(field) == value:
                result[index] = deep_merge(element, override)
                break
        else:
            result.append(copy.deepcopy(override))
    return result


def _merge_value(draft: Any, present: bool, value: Any, kind: OverrideKind, key: str) -> Any:
    if kind in (OverrideKind.SCALAR, OverrideKind.SCALAR_LIST):
        return copy.deepcopy(value)

    if kind == OverrideKind.OBJECT:
        base = draft if present and isinstance(draft, Mapping) else {}
        return apply_overrides(base, value)

    if kind == OverrideKind.STRING_LIST:
        if not present or not isinstance(draft, list):
            return list(value)
        return filter_by_strings(draft, value)

    objects = value
    if kind == OverrideKind.MIXED_LIST:
        objects = [v for v in value if isinstance(v, Mapping)]
        logger.warning(
            f"Override '{key}' mixes strings and objects; "
            f"ignoring {len(value) - len(objects)} non-object element(s)"
        )
    base = draft if present and isinstance(draft, list) else []
    return upsert_by_key(base, objects)


def apply_overrides(
    draft: Mapping,
    overrides: Mapping,
    known_keys: Optional[Iterable[str]] = None,
    allow_unknown_keys: bool = True,
) -> dict:
    """Apply an override object to a draft section and return the merged copy.

    When `known_keys` is given and `allow_unknown_keys` is false, override
    keys outside `known_keys` are dropped. Nested objects are merged with
    every key allowed.
    """
    result = copy.deepcopy(dict(draft))
    known = set(known_keys) if known_keys is not None else None

    for key, value in overrides.items():
        if known is not None and key not in known and not allow_unknown_keys:
            logger.debug(f"Dropping unknown override key '{key}'")
            continue

        kind = classify_override(value)
        if kind == OverrideKind.REMOVE:
            result.pop(key, None)
            continue

        present = key in result
        result[key] = _merge_value(result.get(key), present, value, kind, key)

    return result
