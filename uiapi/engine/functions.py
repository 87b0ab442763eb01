"""Function inlining: splices script source into `functions` blocks.

A function reference is either a plain string (used verbatim) or
{"file": "misc.js", "function": "name"}. Named references are resolved
against the function store: the file text is read (and cached), the named
declaration located, and its body extracted by brace counting. The
extracted body excludes the outer braces and is stripped of surrounding
whitespace:

    function f(){ if(x){y()} return z; }   ->   "if(x){y()} return z;"

Braces inside string literals, template literals, regex literals and comments
are ignored.
"""

import logging
import re
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from uiapi.errors import FunctionExtractionError

logger = logging.getLogger(__name__)

_IDENT_BOUNDARY = r"(?<![\w$.])"

# A "/" after one of these (or after a keyword below) starts a regex literal.
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = frozenset(
    {"return", "typeof", "case", "do", "else", "in", "of", "void", "yield", "delete", "throw", "new"}
)
_TRAILING_WORD = re.compile(r"[A-Za-z_$][\w$]*$")


def _declaration_patterns(name: str) -> list[tuple[str, re.Pattern]]:
    n = re.escape(name)
    return [
        # function name(
        ("params", re.compile(rf"\bfunction\b\s*\*?\s*{n}\s*\(")),
        # name = function(, name: function (
        ("params", re.compile(rf"{_IDENT_BOUNDARY}{n}\s*[:=]\s*(?:async\s+)?function\b\s*\*?\s*[\w$]*\s*\(")),
        # name = (a, b) => ...
        ("arrow_params", re.compile(rf"{_IDENT_BOUNDARY}{n}\s*[:=]\s*(?:async\s+)?\(")),
        # name = a => ...
        ("arrow", re.compile(rf"{_IDENT_BOUNDARY}{n}\s*[:=]\s*(?:async\s+)?[A-Za-z_$][\w$]*\s*=>")),
        # name(a, b) { ... }  (method shorthand)
        ("method", re.compile(rf"(?m)^[ \t]*(?:(?:async|static)\s+)*{n}\s*\(")),
    ]


def _skip_string(source: str, i: int) -> int:
    """Index just past the string literal starting at source[i]."""
    quote = source[i]
    i += 1
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return i


def _skip_comment(source: str, i: int) -> int:
    """Index just past the comment starting at source[i], or i if none."""
    if source.startswith("//", i):
        end = source.find("\n", i)
        return len(source) if end == -1 else end + 1
    if source.startswith("/*", i):
        end = source.find("*/", i + 2)
        return len(source) if end == -1 else end + 2
    return i


def _starts_regex(source: str, i: int) -> bool:
    """True when the "/" at source[i] opens a regex literal rather than a division."""
    j = i - 1
    while j >= 0 and source[j].isspace():
        j -= 1
    if j < 0 or source[j] in _REGEX_PRECEDERS:
        return True
    word = _TRAILING_WORD.search(source, 0, j + 1)
    return word is not None and word.group() in _REGEX_KEYWORDS


def _skip_regex(source: str, i: int) -> int:
    """Index just past the regex literal (and flags) at source[i], or i if it never closes."""
    j = i + 1
    in_class = False
    while j < len(source):
        ch = source[j]
        if ch == "\\":
            j += 2
            continue
        if ch == "\n":
            return i
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "/":
            j += 1
            while j < len(source) and (source[j].isalnum() or source[j] in "_$"):
                j += 1
            return j
        j += 1
    return i


def _match_close(source: str, i: int, open_ch: str, close_ch: str) -> int:
    """Index of the delimiter closing source[i], or -1 when unbalanced."""
    depth = 0
    while i < len(source):
        ch = source[i]
        if ch in "\"'`":
            i = _skip_string(source, i)
            continue
        skipped = _skip_comment(source, i)
        if skipped != i:
            i = skipped
            continue
        if ch == "/" and _starts_regex(source, i):
            skipped = _skip_regex(source, i)
            if skipped != i:
                i = skipped
                continue
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _skip_space(source: str, i: int) -> int:
    while i < len(source) and source[i].isspace():
        i += 1
    return i


def _expression_end(source: str, i: int) -> int:
    end = len(source)
    for stop in (";", "\n"):
        found = source.find(stop, i)
        if found != -1:
            end = min(end, found)
    return end


def _body_from(source: str, i: int, file: str, name: str) -> str:
    close = _match_close(source, i, "{", "}")
    if close == -1:
        raise FunctionExtractionError(file, name, "unbalanced braces")
    return source[i + 1:close].strip()


def extract_function_body(source: str, name: str, file: str = "<inline>") -> str:
    """Extract the body of function `name` from script source.

    Raises FunctionExtractionError when the function is not declared or its
    braces do not balance.
    """
    candidates = []
    for kind, pattern in _declaration_patterns(name):
        for match in pattern.finditer(source):
            candidates.append((match.start(), kind, match))
    candidates.sort(key=lambda c: c[0])

    for _, kind, match in candidates:
        if kind == "arrow":
            i = _skip_space(source, match.end())
        else:
            paren = match.end() - 1
            close = _match_close(source, paren, "(", ")")
            if close == -1:
                continue
            i = _skip_space(source, close + 1)
            if kind == "arrow_params":
                if not source.startswith("=>", i):
                    continue
                i = _skip_space(source, i + 2)
            elif kind == "method" and not source.startswith("{", i):
                continue

        if source.startswith("{", i):
            return _body_from(source, i, file, name)
        if kind in ("arrow", "arrow_params"):
            return source[i:_expression_end(source, i)].strip()

    raise FunctionExtractionError(file, name, "function not found")


class FunctionStore:
    """File-backed store of script files, read once and cached.

    File names are reduced to their base name, so references cannot escape
    the store root.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._cache: dict[str, str] = {}
        self._lock = threading.Lock()

    def read(self, file: str) -> Optional[str]:
        """Full text of a store file, or None when it does not exist."""
        name = Path(file).name
        with self._lock:
            cached = self._cache.get(name)
        if cached is not None:
            return cached

        path = self.root / name
        if not name or not path.is_file():
            return None
        text = path.read_text(encoding="utf-8")
        with self._lock:
            self._cache[name] = text
        logger.debug(f"Cached function file: {name}")
        return text

    def resolve(self, file: str, function: str) -> str:
        """Extracted body of `function` in `file`."""
        source = self.read(file)
        if source is None:
            raise FunctionExtractionError(file, function, "file not found")
        return extract_function_body(source, function, file)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


def _inline_map(functions: Mapping[str, Any], store: Optional[FunctionStore]) -> dict[str, str]:
    inlined: dict[str, str] = {}
    for name, ref in functions.items():
        if isinstance(ref, str):
            inlined[name] = ref
            continue
        if not isinstance(ref, Mapping) or "file" not in ref or "function" not in ref:
            logger.warning(f"Dropping function '{name}': expected a string or {{file, function}}")
            continue
        if store is None:
            logger.warning(f"Dropping function '{name}': no function store configured")
            continue
        try:
            inlined[name] = store.resolve(str(ref["file"]), str(ref["function"]))
        except FunctionExtractionError as e:
            logger.warning(f"Dropping function '{name}': {e}")
    return inlined


def inline_functions(node: Any, store: Optional[FunctionStore]) -> Any:
    """Return a copy of `node` with every `functions` map inlined."""
    if isinstance(node, Mapping):
        out = {}
        for key, value in node.items():
            if key == "functions" and isinstance(value, Mapping):
                out[key] = _inline_map(value, store)
            else:
                out[key] = inline_functions(value, store)
        return out
    if isinstance(node, list):
        return [inline_functions(v, store) for v in node]
    return node
