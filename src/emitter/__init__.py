"""Utilities for printing rewritten JavaScript syntax trees back to source."""

from .writer import (
    BLANK_LINE_BEFORE,
    EmitError,
    EmitOptions,
    EmitResult,
    QUOTE_STYLES,
    SourceLayout,
    capture_layout,
    emit_program,
)

__all__ = [
    "BLANK_LINE_BEFORE",
    "EmitError",
    "EmitOptions",
    "EmitResult",
    "QUOTE_STYLES",
    "SourceLayout",
    "capture_layout",
    "emit_program",
]
