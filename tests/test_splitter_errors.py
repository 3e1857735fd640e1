import pytest

from splitter import (
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
    rewrite_source,
    try_rewrite_source,
)

ERROR_CASES = [
    (
        "var React = require('react');\nvar R = require('react');\n",
        MultipleDeclarationsError,
        (2, 8),
    ),
    (
        "import React from 'react';\nvar R = require('react');\nR.render(a, b);\n",
        MultipleDeclarationsError,
        (1, 0),
    ),
    (
        "var {render, PropTypes} = require('react');\n",
        UnsupportedDestructuringError,
        (1, 26),
    ),
    (
        "import {render} from 'react';\n",
        UnsupportedDestructuringError,
        (1, 0),
    ),
    (
        "var React = 1;\nReact = require('react');\n",
        UnexpectedInitializationError,
        (1, 4),
    ),
    (
        "React = require('react');\n",
        UnexpectedBindingCountError,
        (1, 0),
    ),
    (
        "var React = require('react');\nReact.mystery();\n",
        UnknownMemberError,
        (2, 0),
    ),
    (
        "var React = require('react');\nvar {render, mystery} = React;\n",
        UnknownMemberError,
        (2, 13),
    ),
    (
        "var React = require('react');\n"
        "function mount() {\n"
        "  var ReactDOM = null;\n"
        "}\n"
        "React.render(a, b);\n",
        ScopeConflictError,
        (3, 6),
    ),
    (
        "var React = require('react');\nwrap(React);\n",
        UnsupportedConstructError,
        (2, 5),
    ),
    (
        "var React = require('react');\nReact = window.React;\n",
        UnexpectedAssignmentError,
        (2, 0),
    ),
    (
        "if (ready) var React = require('react');\n",
        UnsupportedConstructError,
        (1, 11),
    ),
    (
        "var React = require('react'), {render} = React;\n",
        UnsupportedConstructError,
        (1, 41),
    ),
]


@pytest.mark.parametrize("source, error_type, position", ERROR_CASES)
def test_rewrite_rejects_unsupported_shapes(source, error_type, position):
    with pytest.raises(error_type) as excinfo:
        rewrite_source(source, source_name="broken.js")

    assert (excinfo.value.line, excinfo.value.column) == position
    assert str(excinfo.value).endswith(f"(line {position[0]}, column {position[1]})")


def test_unexpected_assignment_is_an_unsupported_construct():
    assert issubclass(UnexpectedAssignmentError, UnsupportedConstructError)
    assert issubclass(UnsupportedConstructError, SplitError)


def test_unsupported_construct_names_the_parent_node():
    with pytest.raises(UnsupportedConstructError) as excinfo:
        rewrite_source("var React = require('react');\nwrap(React);\n")

    assert excinfo.value.message == "unimplemented CallExpression"


def test_multiple_declarations_names_the_module():
    with pytest.raises(MultipleDeclarationsError) as excinfo:
        rewrite_source("var React = require('React');\nvar Other = require('React');\n")

    assert excinfo.value.message == "Multiple declarations of React"


def test_scope_conflict_only_checks_undeclared_namespaces():
    source = (
        "var React = require('react');\n"
        "var ReactDOM = require('react-dom');\n"
        "function mount() {\n"
        "  return ReactDOM.render(a, b);\n"
        "}\n"
        "React.render(a, b);\n"
    )
    outcome = rewrite_source(source)

    assert outcome.source == (
        "var ReactDOM = require('react-dom');\n"
        "function mount() {\n"
        "  return ReactDOM.render(a, b);\n"
        "}\n"
        "ReactDOM.render(a, b);\n"
    )


def test_parse_failure_is_reported_as_split_error():
    with pytest.raises(SourceParseError) as excinfo:
        rewrite_source("var = ;\n", source_name="syntax.js")

    assert "syntax.js" in str(excinfo.value)
    assert excinfo.value.line == 1
    assert isinstance(excinfo.value, SplitError)


def test_try_rewrite_returns_error_value():
    result = try_rewrite_source(
        "var React = require('react');\nReact.mystery();\n", source_name="bad.js"
    )

    assert not result.ok
    assert result.outcome is None
    assert isinstance(result.error, UnknownMemberError)
    assert result.source_name == "bad.js"


def test_try_rewrite_returns_outcome_on_success():
    result = try_rewrite_source(
        "var React = require('react');\nReact.render(a, b);\n", source_name="ok.js"
    )

    assert result.ok
    assert result.error is None
    assert result.outcome.source == (
        "var ReactDOM = require('react-dom');\nReactDOM.render(a, b);\n"
    )


def test_split_use_inside_own_declaration_is_refused():
    with pytest.raises(UnsupportedConstructError) as excinfo:
        rewrite_source("var React = require('react'), x = React.render(a, b);\n")

    assert excinfo.value.message == "Cannot move React members used inside its own declaration"
    assert (excinfo.value.line, excinfo.value.column) == (1, 34)
