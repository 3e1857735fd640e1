import json
import os
import shutil
import subprocess
import sys
from pathlib import Path


def _run_cli(args, cwd: Path):
    env = os.environ.copy()
    pythonpath = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = str(Path("src").resolve()) + (os.pathsep + pythonpath if pythonpath else "")
    result = subprocess.run(
        [sys.executable, "-m", "cli", *args],
        cwd=cwd,
        env=env,
        check=False,
        capture_output=True,
        text=True,
    )
    return result


def _copy_case(name: str, tmp_path: Path) -> Path:
    target = tmp_path / name.replace(".input", "")
    shutil.copy(Path("tests/cases") / name, target)
    return target


def test_cli_rewrites_in_place(tmp_path):
    target = _copy_case("react_require.input.js", tmp_path)

    result = _run_cli(["rewrite", str(target)], cwd=Path("."))

    assert result.returncode == 0, result.stderr
    expected = Path("tests/cases/react_require.output.js").read_text(encoding="utf-8")
    assert target.read_text(encoding="utf-8") == expected
    assert f"INFO {target}: rewritten" in result.stderr


def test_cli_dry_run_leaves_files_alone(tmp_path):
    target = _copy_case("server_render.input.js", tmp_path)
    original = target.read_text(encoding="utf-8")

    result = _run_cli(["rewrite", "--dry-run", "--verbose", str(target)], cwd=Path("."))

    assert result.returncode == 0, result.stderr
    assert target.read_text(encoding="utf-8") == original
    assert "uses core=1 dom=0 dom_server=1" in result.stderr


def test_cli_walks_directories(tmp_path):
    first = _copy_case("react_import.input.js", tmp_path)
    vendored = tmp_path / "node_modules"
    vendored.mkdir()
    skipped = vendored / "lib.js"
    skipped.write_text("var React = require('react');\nReact.render(a, b);\n", encoding="utf-8")

    result = _run_cli(["rewrite", str(tmp_path)], cwd=Path("."))

    assert result.returncode == 0, result.stderr
    assert "import ReactDOM from 'react-dom';" in first.read_text(encoding="utf-8")
    assert "require('react')" in skipped.read_text(encoding="utf-8")


def test_cli_reports_failures(tmp_path):
    broken = tmp_path / "broken.js"
    broken.write_text("var React = require('react');\nReact.mystery();\n", encoding="utf-8")
    good = _copy_case("legacy_reassignment.input.js", tmp_path)

    result = _run_cli(["rewrite", str(broken), str(good)], cwd=Path("."))

    assert result.returncode == 1
    assert f"ERROR {broken}:2:0: Unknown property React.mystery" in result.stderr
    assert "ReactDOM.render(app, node);" in good.read_text(encoding="utf-8")


def test_cli_quote_and_config(tmp_path):
    config_path = tmp_path / "split.json"
    config_path.write_text(
        json.dumps(
            {
                "targets": [
                    {
                        "module": "preact",
                        "dom_module": "preact-dom",
                        "dom_server_module": "preact-render-to-string",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    target = tmp_path / "app.js"
    target.write_text("var React = require('preact');\nReact.render(a, b);\n", encoding="utf-8")

    result = _run_cli(
        ["rewrite", "--quote", "double", "--config", str(config_path), str(target)],
        cwd=Path("."),
    )

    assert result.returncode == 0, result.stderr
    assert target.read_text(encoding="utf-8") == (
        'var ReactDOM = require("preact-dom");\nReactDOM.render(a, b);\n'
    )


def test_cli_rejects_bad_config(tmp_path):
    config_path = tmp_path / "split.json"
    config_path.write_text(json.dumps({"core": ["render"]}), encoding="utf-8")

    result = _run_cli(["rewrite", "--config", str(config_path), "x.js"], cwd=Path("."))

    assert result.returncode == 1
    assert "Invalid configuration" in result.stderr


def test_cli_missing_file(tmp_path):
    result = _run_cli(["rewrite", str(tmp_path / "missing.js")], cwd=Path("."))

    assert result.returncode == 1
    assert "Input file not found" in result.stderr
