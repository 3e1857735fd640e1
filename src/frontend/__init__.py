"""Parsing, node indexing and scope analysis bundled for the rewrite passes."""

from .pipeline import FrontEndResult, run_frontend

__all__ = ["FrontEndResult", "run_frontend"]
