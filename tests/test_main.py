"""CLI tests through typer's CliRunner."""

import logging

import pytest
from typer.testing import CliRunner

from detector.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI installs its own root handler; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_analyze_single_file(tmp_path):
    target = _write(tmp_path, "app.js", "if (x === true) { y(); }\n")
    result = runner.invoke(app, ["analyze", str(target)])
    assert result.exit_code == 0, result.output
    assert "1 finding" in result.output
    assert "boolean-comparison" in result.output


def test_analyze_directory(tmp_path):
    _write(tmp_path, "tool.py", "".join(f"print({n})\n" for n in range(6)))
    _write(tmp_path, "clean.js", "export const ok = true;\n")
    result = runner.invoke(app, ["analyze", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "6 findings" in result.output
    assert "Files Summary" in result.output


def test_analyze_clean_file(tmp_path):
    target = _write(tmp_path, "clean.js", "export const ok = true;\n")
    result = runner.invoke(app, ["analyze", str(target)])
    assert result.exit_code == 0
    assert "0 findings" in result.output


def test_analyze_with_patch_drops_lines_outside_diff(tmp_path):
    target = _write(tmp_path, "app.js", "const spare = 1;\nif (x === true) { y(); }\n")
    patch = _write(
        tmp_path,
        "change.diff",
        "diff --git a/app.js b/app.js\n--- a/app.js\n+++ b/app.js\n"
        "@@ -1,1 +1,2 @@\n const spare = 1;\n+if (x === true) { y(); }\n",
    )
    result = runner.invoke(app, ["analyze", str(target), "--patch", str(patch)])
    assert result.exit_code == 0, result.output
    assert "2 findings" in result.output

    narrow = _write(tmp_path, "narrow.diff", "diff --git a/app.js b/app.js\n@@ -2 +2 @@\n-old\n+if (x === true) { y(); }\n")
    result = runner.invoke(app, ["analyze", str(target), "--patch", str(narrow)])
    assert result.exit_code == 0, result.output
    assert "1 finding" in result.output
    assert "outside the diff" in result.output


def test_analyze_rejects_unsupported_file(tmp_path):
    target = _write(tmp_path, "notes.txt", "hello\n")
    result = runner.invoke(app, ["analyze", str(target)])
    assert result.exit_code == 2


def test_analyze_rejects_unknown_rule(tmp_path):
    target = _write(tmp_path, "app.js", "let a;\n")
    result = runner.invoke(app, ["analyze", str(target), "--disable", "no-such-rule"])
    assert result.exit_code == 2


def test_analyze_disable_rule(tmp_path):
    target = _write(tmp_path, "app.js", "const spare = 1;\n")
    result = runner.invoke(app, ["analyze", str(target), "--disable", "unused-variable"])
    assert result.exit_code == 0
    assert "0 findings" in result.output


def test_action_without_configuration_exits_2():
    env = {
        "GITHUB_TOKEN": None,
        "INPUT_GITHUB_TOKEN": None,
        "GITHUB_REPOSITORY": None,
        "GITHUB_EVENT_PATH": None,
    }
    result = runner.invoke(app, ["action"], env=env)
    assert result.exit_code == 2
