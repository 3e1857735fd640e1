"""
Thin wrapper over the Python `esprima` port.

`parse_js` returns the JSON-compatible tree together with the grammar that
accepted the input. Nodes always carry `loc` and `range`: positions in error
messages come from the former, while the emitter splices edited regions back
into the original text using the latter. JSX is on by default since component
files are the main input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import esprima

SOURCE_TYPES = ("module", "script", "auto")

_PARSERS = {
    "module": esprima.parseModule,
    "script": esprima.parseScript,
}


def _field(error: Any, key: str) -> Any:
    if isinstance(error, dict):
        return error.get(key)
    return getattr(error, key, None)


@dataclass(frozen=True)
class ParseError:
    """A syntax error reported by esprima. `column` is 0-based like `loc`."""

    description: str
    line: Optional[int]
    column: Optional[int]

    @classmethod
    def from_esprima(cls, error: Any) -> "ParseError":
        column = _field(error, "column")
        return cls(
            description=_field(error, "description") or str(error),
            line=_field(error, "lineNumber"),
            column=column - 1 if column else None,
        )


@dataclass(frozen=True)
class ParseResult:
    ast: Optional[Dict[str, Any]]
    errors: List[ParseError]
    source_name: str
    source_type: str


def _attempts(source_type: str) -> List[str]:
    if source_type not in SOURCE_TYPES:
        raise ValueError(f"Unknown source type: {source_type!r}")
    if source_type == "auto":
        # Sloppy-mode scripts (`with`, octal literals) only parse as scripts.
        return ["module", "script"]
    return [source_type]


def parse_js(
    source: str,
    *,
    source_name: str = "<input>",
    tolerant: bool = True,
    source_type: str = "auto",
    jsx: bool = True,
) -> ParseResult:
    """
    Parse JavaScript source text into an esprima AST.

    Args:
        source: Raw JavaScript source code.
        source_name: Label used for diagnostics (defaults to `<input>`).
        tolerant: When True, esprima recovers from what errors it can and a
            hard failure is reported in `errors` instead of raised.
        source_type: `"script"`, `"module"` or `"auto"`, which tries the module
            grammar first and falls back to the script grammar.
        jsx: Enable JSX syntax.

    Raises:
        esprima.Error: If no grammar accepts the source and `tolerant` is False.
        ValueError: On an unknown `source_type`.
    """
    attempts = _attempts(source_type)
    options = dict(loc=True, range=True, tolerant=tolerant, jsx=jsx)

    failure: Optional[esprima.Error] = None
    for attempt in attempts:
        try:
            tree = _PARSERS[attempt](source, **options)
        except esprima.Error as exc:
            failure = exc
            continue
        raw_ast = tree.toDict()
        # Recoverable errors are attached to the Program node in tolerant mode.
        recovered = raw_ast.pop("errors", None) or []
        return ParseResult(
            ast=raw_ast,
            errors=[ParseError.from_esprima(error) for error in recovered],
            source_name=source_name,
            source_type=attempt,
        )

    if not tolerant:
        raise failure
    return ParseResult(
        ast=None,
        errors=[ParseError.from_esprima(failure)],
        source_name=source_name,
        source_type=attempts[-1],
    )


__all__ = ["ParseError", "ParseResult", "SOURCE_TYPES", "parse_js"]
