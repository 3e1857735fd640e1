"""Rewrite React namespace uses onto the split ReactDOM / ReactDOMServer modules."""

from .classifier import Classification, Tally, UsageKind, UsageRecord
from .core import (
    FileResult,
    PassReport,
    RewriteOutcome,
    rewrite_source,
    split_program,
    try_rewrite_source,
)
from .errors import (
    MultipleDeclarationsError,
    ScopeConflictError,
    SourceParseError,
    SplitError,
    UnexpectedAssignmentError,
    UnexpectedBindingCountError,
    UnexpectedInitializationError,
    UnknownMemberError,
    UnsupportedConstructError,
    UnsupportedDestructuringError,
)
from .resolver import CoreBinding, DeclarationKind, ScopeState
from .tables import (
    DEFAULT_TARGETS,
    ClassificationTable,
    Destination,
    Namespace,
    SplitConfig,
    SplitTarget,
    load_config,
)

__all__ = [
    "Classification",
    "ClassificationTable",
    "CoreBinding",
    "DEFAULT_TARGETS",
    "DeclarationKind",
    "Destination",
    "FileResult",
    "MultipleDeclarationsError",
    "Namespace",
    "PassReport",
    "RewriteOutcome",
    "ScopeConflictError",
    "ScopeState",
    "SourceParseError",
    "SplitConfig",
    "SplitError",
    "SplitTarget",
    "Tally",
    "UnexpectedAssignmentError",
    "UnexpectedBindingCountError",
    "UnexpectedInitializationError",
    "UnknownMemberError",
    "UnsupportedConstructError",
    "UnsupportedDestructuringError",
    "UsageKind",
    "UsageRecord",
    "load_config",
    "rewrite_source",
    "split_program",
    "try_rewrite_source",
]
