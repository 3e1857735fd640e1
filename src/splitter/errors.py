"""
Failures raised while rewriting a file.

Every error carries the offending node so the message can point at a source
line and column. They are all fatal for the file being processed: the tree may
be partially rewritten when one is raised and must not be printed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


def node_position(node: Optional[Dict[str, Any]]):
    if not node or not isinstance(node, dict):
        return None, None
    start = (node.get("loc") or {}).get("start") or {}
    return start.get("line"), start.get("column")


class SplitError(RuntimeError):
    """Base class for every failure reported by the splitter."""

    def __init__(
        self,
        message: str,
        node: Optional[Dict[str, Any]] = None,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        if node is not None:
            line, column = node_position(node)
        loc = ""
        if line is not None and column is not None:
            loc = f" (line {line}, column {column})"
        super().__init__(f"{message}{loc}")
        self.message = message
        self.node = node
        self.line = line
        self.column = column


class SourceParseError(SplitError):
    """The source text could not be parsed."""


class MultipleDeclarationsError(SplitError):
    """More than one declaration loads the core module."""


class UnsupportedDestructuringError(SplitError):
    """A destructuring pattern appears where only an identifier is supported."""


class UnexpectedInitializationError(SplitError):
    """A reassigned alias was declared with an unrelated initializer."""


class UnexpectedBindingCountError(SplitError):
    """A reassignment target does not resolve to exactly one declaration."""


class UnknownMemberError(SplitError):
    """A member of the core namespace is absent from every table."""


class ScopeConflictError(SplitError):
    """A namespace identifier is in use in a scope the alias does not own."""


class UnsupportedConstructError(SplitError):
    """The alias is used in a syntactic position the splitter does not handle."""


class UnexpectedAssignmentError(UnsupportedConstructError):
    """The alias is assigned something other than a reload of its module."""


__all__ = [
    "MultipleDeclarationsError",
    "ScopeConflictError",
    "SourceParseError",
    "SplitError",
    "UnexpectedAssignmentError",
    "UnexpectedBindingCountError",
    "UnexpectedInitializationError",
    "UnknownMemberError",
    "UnsupportedConstructError",
    "UnsupportedDestructuringError",
    "node_position",
]
