"""
Command-line interface for moving React DOM APIs onto ReactDOM / ReactDOMServer.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, List

from splitter import FileResult, SplitConfig, load_config, try_rewrite_source

SOURCE_SUFFIXES = (".js", ".jsx")


def _format_location(line: int | None, column: int | None) -> str:
    if line is None:
        return ""
    if column is None:
        return f":{line}"
    return f":{line}:{column}"


def _print_diagnostics(messages: List[str]) -> None:
    if not messages:
        return
    for message in messages:
        sys.stderr.write(message + "\n")


def _collect_diagnostics(result: FileResult, *, verbose: bool) -> List[str]:
    diagnostics: List[str] = []
    source_name = result.source_name

    if result.error is not None:
        loc = _format_location(result.error.line, result.error.column)
        diagnostics.append(f"ERROR {source_name}{loc}: {result.error.message}")
        return diagnostics

    outcome = result.outcome
    for issue in outcome.issues:
        loc = _format_location(issue.loc.line, issue.loc.column)
        diagnostics.append(f"WARNING {source_name}{loc}: {issue.message}")

    if verbose:
        for message in outcome.diagnostics:
            diagnostics.append(f"INFO {source_name}: {message}")

    if outcome.changed:
        diagnostics.append(f"INFO {source_name}: rewritten")
    return diagnostics


def iter_source_files(paths: Iterable[str]) -> Iterable[Path]:
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if candidate.suffix in SOURCE_SUFFIXES and "node_modules" not in candidate.parts:
                    yield candidate
        else:
            yield path


def rewrite_command(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config) if args.config else SplitConfig()
        config = config.with_quote(args.quote)
    except (OSError, ValueError) as exc:
        sys.stderr.write(f"ERROR: Invalid configuration: {exc}\n")
        return 1

    source_type = "script" if args.script else "auto"
    failures = 0
    for input_path in iter_source_files(args.paths):
        if not input_path.exists():
            sys.stderr.write(f"ERROR: Input file not found: {input_path}\n")
            failures += 1
            continue

        try:
            source = input_path.read_text(encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"ERROR: Failed to read {input_path}: {exc}\n")
            failures += 1
            continue

        result = try_rewrite_source(
            source,
            source_name=str(input_path),
            config=config,
            source_type=source_type,
        )
        _print_diagnostics(_collect_diagnostics(result, verbose=args.verbose))

        if not result.ok:
            failures += 1
            continue
        if result.outcome.changed and not args.dry_run:
            input_path.write_text(result.outcome.source, encoding="utf-8")

    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="react-dom-split",
        description="Move React DOM APIs onto the ReactDOM and ReactDOMServer modules",
    )
    subparsers = parser.add_subparsers(dest="command")

    rewrite_parser = subparsers.add_parser(
        "rewrite", help="Rewrite JavaScript files (or directories of them) in place"
    )
    rewrite_parser.add_argument("paths", nargs="+", help="Files or directories to rewrite")
    rewrite_parser.add_argument(
        "--quote",
        choices=["single", "double"],
        default=None,
        help="Quote style for generated module names (default: single)",
    )
    rewrite_parser.add_argument(
        "--config",
        help="JSON file overriding the member tables and module names",
    )
    rewrite_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing files.",
    )
    rewrite_parser.add_argument(
        "--script",
        action="store_true",
        help="Parse inputs as scripts only (no import/export syntax).",
    )
    rewrite_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print per-pass usage counts and reuse notes.",
    )
    rewrite_parser.set_defaults(func=rewrite_command)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
