"""esprima-backed parsing for script, module and JSX sources."""

from .es_parser import SOURCE_TYPES, ParseError, ParseResult, parse_js

__all__ = ["ParseError", "ParseResult", "SOURCE_TYPES", "parse_js"]
