from pathlib import Path

import pytest

from emitter import BLANK_LINE_BEFORE, EmitError, EmitOptions, capture_layout, emit_program
from frontend import run_frontend


def _load(source: str):
    frontend_result = run_frontend(source, source_name="<test>", analyze=False)
    assert frontend_result.parse.ast is not None
    program = frontend_result.parse.ast
    return program, capture_layout(program, source)


def _identifier(name: str):
    return {"type": "Identifier", "name": name}


def _require(module: str, *, blank_line: bool = False):
    declaration = {
        "type": "VariableDeclaration",
        "kind": "var",
        "declarations": [
            {
                "type": "VariableDeclarator",
                "id": _identifier("dep"),
                "init": {
                    "type": "CallExpression",
                    "callee": _identifier("require"),
                    "arguments": [{"type": "Literal", "value": module, "raw": None}],
                },
            }
        ],
    }
    if blank_line:
        declaration[BLANK_LINE_BEFORE] = True
    return declaration


@pytest.mark.parametrize(
    "relative_path",
    [
        "tests/cases/react_require.input.js",
        "tests/cases/server_render.input.js",
        "tests/cases/class_declaration.js",
        "tests/cases/module_import.js",
    ],
)
def test_untouched_tree_prints_original_text(relative_path: str):
    source = Path(relative_path).read_text(encoding="utf-8")
    program, layout = _load(source)

    assert emit_program(program, layout).source == source


def test_replaced_identifier_is_spliced_in_place():
    source = "// keep me\nfoo.bar(  1,2 );\n"
    program, layout = _load(source)
    member = program["body"][0]["expression"]["callee"]
    member["object"] = _identifier("baz")

    assert emit_program(program, layout).source == "// keep me\nbaz.bar(  1,2 );\n"


def test_removed_statement_keeps_neighbours():
    source = "a();\n\nb();\nc();\n"
    program, layout = _load(source)
    del program["body"][1]

    assert emit_program(program, layout).source == "a();\nc();\n"


def test_removing_first_statement_drops_its_spacing():
    source = "a();\n\nb();\n"
    program, layout = _load(source)
    del program["body"][0]

    assert emit_program(program, layout).source == "b();\n"


def test_inserted_statement_takes_indentation():
    source = "function f() {\n    a();\n}\n"
    program, layout = _load(source)
    block = program["body"][0]["body"]["body"]
    block.append(_require("x"))
    block.insert(1, _require("y", blank_line=True))

    assert emit_program(program, layout).source == (
        "function f() {\n"
        "    a();\n"
        "\n"
        "    var dep = require('y');\n"
        "    var dep = require('x');\n"
        "}\n"
    )


def test_generated_strings_follow_quote_style():
    source = "a();\n"
    program, layout = _load(source)
    program["body"].append(_require("it's"))

    single = emit_program(program, layout, EmitOptions(quote="single")).source
    double = emit_program(program, layout, EmitOptions(quote="double")).source

    assert single == "a();\nvar dep = require('it\\'s');\n"
    assert double == 'a();\nvar dep = require("it\'s");\n'


def test_edited_import_is_regenerated():
    source = "import Foo, {Bar as Baz} from \"core\";\n"
    program, layout = _load(source)
    del program["body"][0]["specifiers"][0]

    assert emit_program(program, layout).source == "import {Bar as Baz} from \"core\";\n"


def test_edited_comma_list_is_rejoined():
    source = "var a = 1,   b = 2, c = 3;\n"
    program, layout = _load(source)
    del program["body"][0]["declarations"][1]

    assert emit_program(program, layout).source == "var a = 1,   c = 3;\n"


def test_edited_comma_list_keeps_separator_comments():
    source = "var {\n  a, // keep\n  b,\n  c\n} = x;\n"
    program, layout = _load(source)
    del program["body"][0]["declarations"][0]["id"]["properties"][1]

    assert emit_program(program, layout).source == "var {\n  a, // keep\n  c\n} = x;\n"


def test_inserted_statements_follow_crlf_line_endings():
    source = "a();\r\nb();\r\n"
    program, layout = _load(source)
    program["body"].append(_require("x", blank_line=True))
    program["body"].append(_require("y"))

    assert emit_program(program, layout).source == (
        "a();\r\nb();\r\n\r\nvar dep = require('x');\r\nvar dep = require('y');\r\n"
    )


def test_unknown_synthesised_node_is_an_emit_error():
    source = "a();\n"
    program, layout = _load(source)
    program["body"].append({"type": "DebuggerStatement"})

    with pytest.raises(EmitError):
        emit_program(program, layout)


def test_invalid_quote_style_is_rejected():
    with pytest.raises(ValueError):
        EmitOptions(quote="backtick")
