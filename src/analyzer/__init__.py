"""Semantic analysis helpers for JavaScript ASTs."""

from .node_index import NodeIndex, NodePath, is_node, iter_child_fields
from .scope_tracker import (
    AnalysisIssue,
    AnalysisResult,
    Binding,
    BindingKind,
    Scope,
    ScopeType,
    SourcePosition,
    analyze_bindings,
)

__all__ = [
    "AnalysisIssue",
    "AnalysisResult",
    "Binding",
    "BindingKind",
    "NodeIndex",
    "NodePath",
    "Scope",
    "ScopeType",
    "SourcePosition",
    "analyze_bindings",
    "is_node",
    "iter_child_fields",
]
