from pathlib import Path

import pytest

from splitter import rewrite_source

CASES = Path(__file__).parent / "cases"

FIXTURES = [
    "react_require",
    "react_import",
    "legacy_reassignment",
    "server_render",
]


def _read(name: str) -> str:
    return (CASES / name).read_text(encoding="utf-8")


@pytest.mark.parametrize("fixture", FIXTURES)
def test_fixture_output(fixture: str):
    outcome = rewrite_source(_read(f"{fixture}.input.js"), source_name=f"{fixture}.input.js")

    assert outcome.changed
    assert outcome.source == _read(f"{fixture}.output.js")


@pytest.mark.parametrize("fixture", FIXTURES)
def test_fixture_output_is_stable(fixture: str):
    expected = _read(f"{fixture}.output.js")
    outcome = rewrite_source(expected, source_name=f"{fixture}.output.js")

    assert not outcome.changed
    assert outcome.source == expected


def test_require_fixture_reports_usage():
    outcome = rewrite_source(_read("react_require.input.js"))

    legacy, modern = outcome.passes
    assert not legacy.found
    assert modern.alias == "React"
    # React.Component plus the JSX element.
    assert modern.tally.core == 2
    assert modern.tally.dom == 1
    assert modern.tally.dom_server == 0
    assert modern.inserted == ("ReactDOM",)
    assert not modern.removed_core


def test_legacy_fixture_removes_core_declaration():
    outcome = rewrite_source(_read("legacy_reassignment.input.js"))

    legacy = outcome.passes[0]
    assert legacy.removed_core
    assert legacy.tally.core == 0
    assert "removed React declaration" in " ".join(outcome.diagnostics)
