"""
Parse a file, index its tree and analyse its scopes in one call.

Every rewrite pass works from the same three artefacts (the esprima tree, a
`NodeIndex` over it and the binding analysis), so `run_frontend` builds them
together and `FrontEndResult` hands them to the splitter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from analyzer import AnalysisIssue, AnalysisResult, NodeIndex, analyze_bindings
from parser import ParseError, ParseResult, parse_js


@dataclass(frozen=True)
class FrontEndResult:
    source: str
    parse: ParseResult
    index: Optional[NodeIndex]
    analysis: Optional[AnalysisResult]

    @property
    def has_ast(self) -> bool:
        return self.parse.ast is not None

    @property
    def program(self) -> Optional[Dict[str, Any]]:
        return self.parse.ast

    @property
    def diagnostics(self) -> List[Union[ParseError, AnalysisIssue]]:
        """Recovered syntax errors followed by analysis warnings."""
        diagnostics: List[Union[ParseError, AnalysisIssue]] = list(self.parse.errors)
        if self.analysis is not None:
            diagnostics.extend(self.analysis.issues)
        return diagnostics


def run_frontend(
    source: str,
    *,
    source_name: str = "<input>",
    tolerant: bool = True,
    analyze: bool = True,
    source_type: str = "auto",
    jsx: bool = True,
) -> FrontEndResult:
    """
    Parse `source`, index the tree and (optionally) analyse its bindings.

    Args:
        source: Raw JavaScript source text.
        source_name: Identifier used in diagnostics, e.g. file path.
        tolerant: Forwarded to the parser; when False a syntax error raises
            `esprima.Error` instead of producing a result without a tree.
        analyze: Skip binding analysis when False (printing-only callers).
        source_type: `"script"`, `"module"` or `"auto"`.
        jsx: Forwarded to the parser.
    """
    parse_result = parse_js(
        source,
        source_name=source_name,
        tolerant=tolerant,
        source_type=source_type,
        jsx=jsx,
    )
    if parse_result.ast is None:
        return FrontEndResult(source=source, parse=parse_result, index=None, analysis=None)

    index = NodeIndex.build(parse_result.ast)
    analysis = None
    if analyze:
        analysis = analyze_bindings(parse_result.ast, source_name=source_name, index=index)
    return FrontEndResult(source=source, parse=parse_result, index=index, analysis=analysis)


__all__ = ["FrontEndResult", "run_frontend"]
