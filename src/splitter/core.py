"""
Per-file driver for the React / ReactDOM split.

`split_program` runs one pass (resolve, classify, synthesize, prune) for one
spelling of the core module over a parsed tree. `rewrite_source` parses a
file, runs a pass per configured spelling and prints the result.
`try_rewrite_source` returns a `FileResult` instead of raising, so batch
drivers can decide how to continue after a failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import esprima

from analyzer import AnalysisIssue, AnalysisResult, NodeIndex, analyze_bindings
from emitter import EmitOptions, capture_layout, emit_program
from frontend import run_frontend
from parser import ParseError

from .classifier import Classification, Tally, classify_usages
from .cleanup import prune_core_declaration
from .errors import SourceParseError, SplitError
from .resolver import resolve_binding
from .synthesizer import check_scope_conflicts, synthesize_declarations
from .tables import ClassificationTable, SplitConfig, SplitTarget


@dataclass(frozen=True)
class PassReport:
    """What one pass did for one spelling of the core module."""

    target: SplitTarget
    alias: Optional[str] = None
    tally: Tally = field(default_factory=Tally)
    inserted: Tuple[str, ...] = ()
    reused: Tuple[str, ...] = ()
    removed_core: bool = False
    classification: Optional[Classification] = None

    @property
    def found(self) -> bool:
        return self.alias is not None


@dataclass(frozen=True)
class RewriteOutcome:
    source: str
    changed: bool
    passes: List[PassReport]
    diagnostics: List[str]
    issues: List[AnalysisIssue]


@dataclass(frozen=True)
class FileResult:
    source_name: str
    outcome: Optional[RewriteOutcome] = None
    error: Optional[SplitError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def split_program(
    program: Dict[str, Any],
    target: SplitTarget,
    table: ClassificationTable,
    *,
    analysis: Optional[AnalysisResult] = None,
    diagnostics: Optional[List[str]] = None,
) -> PassReport:
    """
    Run one rewrite pass for `target` over `program`, mutating it in place.

    `analysis` must describe the tree as it is now; it is rebuilt when omitted.
    Raises a `SplitError` subclass when the file does not have a supported
    shape, in which case `program` may be partially rewritten.
    """
    if analysis is None:
        analysis = analyze_bindings(program, index=NodeIndex.build(program))
    index = analysis.index

    resolution = resolve_binding(index, analysis, target, table)
    if resolution is None:
        return PassReport(target=target)
    binding, state = resolution.binding, resolution.state

    reused = []
    for destination, namespace in target.namespaces():
        if state.is_declared(destination):
            reused.append(namespace.identifier)
            if diagnostics is not None:
                diagnostics.append(f"Using existing {namespace.identifier} declaration")
    check_scope_conflicts(index, binding, state, target)

    classification = classify_usages(index, analysis, binding, target, table)
    inserted = synthesize_declarations(binding, state, classification, target)
    removed = prune_core_declaration(binding, classification)

    if diagnostics is not None:
        tally = classification.tally
        diagnostics.append(
            f"{target.module_name}: {binding.alias} uses core={tally.core} "
            f"dom={tally.dom} dom_server={tally.dom_server}"
        )
        if removed:
            diagnostics.append(f"{target.module_name}: removed {binding.alias} declaration")

    return PassReport(
        target=target,
        alias=binding.alias,
        tally=classification.tally,
        inserted=tuple(inserted),
        reused=tuple(reused),
        removed_core=removed,
        classification=classification,
    )


def rewrite_source(
    source: str,
    *,
    source_name: str = "<input>",
    config: Optional[SplitConfig] = None,
    source_type: str = "auto",
) -> RewriteOutcome:
    """
    Rewrite one file's source text for every configured module spelling.

    Raises:
        SplitError: (or a subclass) when the file cannot be rewritten safely.
    """
    config = config or SplitConfig()
    try:
        frontend_result = run_frontend(
            source,
            source_name=source_name,
            tolerant=False,
            source_type=source_type,
        )
    except esprima.Error as exc:
        error = ParseError.from_esprima(exc)
        raise SourceParseError(
            f"Failed to parse {source_name}: {error.description}",
            line=error.line,
            column=error.column,
        ) from exc

    program = frontend_result.program
    if program is None:
        raise SourceParseError(f"Failed to parse {source_name}")
    layout = capture_layout(program, source)

    diagnostics: List[str] = []
    passes: List[PassReport] = []
    analysis = frontend_result.analysis
    for target in config.targets:
        passes.append(
            split_program(
                program,
                target,
                config.table,
                analysis=analysis,
                diagnostics=diagnostics,
            )
        )
        # Later passes must see this pass's edits.
        analysis = None

    if any(report.tally.split_uses for report in passes):
        output = emit_program(program, layout, EmitOptions(quote=config.quote)).source
    else:
        # Nothing moved to a split namespace, so the tree is untouched.
        output = source

    return RewriteOutcome(
        source=output,
        changed=output != source,
        passes=passes,
        diagnostics=diagnostics,
        issues=list(frontend_result.analysis.issues) if frontend_result.analysis else [],
    )


def try_rewrite_source(
    source: str,
    *,
    source_name: str = "<input>",
    config: Optional[SplitConfig] = None,
    source_type: str = "auto",
) -> FileResult:
    """Like `rewrite_source`, but report failures as a value instead of raising."""
    try:
        outcome = rewrite_source(
            source, source_name=source_name, config=config, source_type=source_type
        )
    except SplitError as exc:
        return FileResult(source_name=source_name, error=exc)
    return FileResult(source_name=source_name, outcome=outcome)


__all__ = [
    "FileResult",
    "PassReport",
    "RewriteOutcome",
    "rewrite_source",
    "split_program",
    "try_rewrite_source",
]
