"""Localizer - collapses per-language values to one string per request.

A localized text is either a plain string or a mapping of language code to
string, e.g. {"en": "Full Name", "dv": "ނަން"}. Resolution order for a
requested language L: L, then "dv", then "en", then the first value present.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

LocalizedText = Union[str, Mapping[str, str]]

FALLBACK_LANGS = ("dv", "en")
DEFAULT_LANGUAGES = frozenset(FALLBACK_LANGS)

# Keys whose mapping value is always a localized text.
TEXT_KEYS = frozenset({"label", "title"})

_LANG_CODE = re.compile(r"^[a-z]{2,3}(?:[-_][a-z0-9]{2,8})*$", re.IGNORECASE)


def resolve_text(value: Optional[LocalizedText], lang: str) -> str:
    """Resolve a localized text to a plain string for `lang`."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if not isinstance(value, Mapping):
        return str(value)
    if not value:
        return ""

    for candidate in (lang, lang.lower(), *FALLBACK_LANGS):
        if candidate in value and value[candidate] is not None:
            return str(value[candidate])

    for v in value.values():
        if v is not None:
            return str(v)
    return ""


def _declared_langs(column: Any) -> Any:
    if isinstance(column, Mapping):
        return column.get("lang")
    return getattr(column, "lang", None)


def include_column(column: Any, lang: str) -> bool:
    """True when the column has no `lang` restriction or lists `lang`.

    Accepts a ColumnDefinition or a plain mapping (column customization).
    """
    langs = _declared_langs(column)
    if not isinstance(langs, (list, tuple, set, frozenset)):
        return True
    normalized = {str(l).lower() for l in langs}
    return lang.lower() in normalized


def _is_language_map(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(
            isinstance(k, str) and _LANG_CODE.match(k) and isinstance(v, str)
            for k, v in value.items()
        )
    )


def is_localized_text(value: Any, languages: Iterable[str] = DEFAULT_LANGUAGES) -> bool:
    """True for a mapping of language codes to strings carrying a known language.

    Keys outside `languages` are allowed as long as they look like language
    codes ({"en": ..., "dv": ..., "ar": ...}); a mapping with any other key is
    configuration, not text.
    """
    if not _is_language_map(value):
        return False
    known = {l.lower() for l in languages}
    return any(k.lower() in known for k in value)


def localize_tree(
    node: Any,
    lang: str,
    languages: Iterable[str] = DEFAULT_LANGUAGES,
) -> Any:
    """Return a copy of `node` with every localized text leaf resolved."""
    known = frozenset(l.lower() for l in languages) | DEFAULT_LANGUAGES | {lang.lower()}
    return _localize(node, lang, known)


def _localize(node: Any, lang: str, known: frozenset) -> Any:
    if is_localized_text(node, known):
        return resolve_text(node, lang)
    if isinstance(node, Mapping):
        return {
            k: resolve_text(v, lang)
            if k in TEXT_KEYS and _is_language_map(v)
            else _localize(v, lang, known)
            for k, v in node.items()
        }
    if isinstance(node, list):
        return [_localize(v, lang, known) for v in node]
    return node


def pick_header_lang(column_langs: Any, lang: str) -> Optional[str]:
    """Language hint for a header whose column declares supported languages.

    When the column supports the request language the hint names the other
    language to offer: en pairs with dv and dv with en, otherwise the first
    other language. When it does not, the hint is en, then dv, then the
    column's first language. None when there is nothing to hint.
    """
    if not isinstance(column_langs, (list, tuple)):
        return None
    normalized = list(dict.fromkeys(str(l).lower() for l in column_langs))
    if not normalized:
        return None

    current = lang.lower()
    others = [l for l in normalized if l != current]
    if current in normalized:
        if not others:
            return None
        if current == "en" and "dv" in others:
            return "dv"
        if current == "dv" and "en" in others:
            return "en"
        return others[0]

    for fallback in ("en", "dv"):
        if fallback in normalized:
            return fallback
    return normalized[0]


def title_case_token(token: str) -> str:
    """'first_name' -> 'First Name'; for 'rel.field' uses the field part."""
    tail = token.split(".", 1)[1] if "." in token else token
    return tail.replace("_", " ").title()
