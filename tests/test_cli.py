import json

import pytest
import typer
from typer.testing import CliRunner

from promptassembler import __version__
from promptassembler.cli import app, parse_snippet_spec

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_tiktoken(mocker):
    # Encodings may need a download; the CLI only needs a number here
    return mocker.patch("promptassembler.cli.count_tokens", side_effect=lambda text: len(text) // 4)


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    return mocker.patch("promptassembler.cli.setup_logging")


@pytest.fixture(autouse=True)
def console(mocker, notifier):
    mocker.patch("promptassembler.cli.ConsoleNotifier", return_value=notifier)
    return notifier


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.ts").write_text("x", encoding="utf-8")
    (tmp_path / "src" / "b.py").write_text("one\ntwo\nthree\n", encoding="utf-8")
    return tmp_path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


@pytest.mark.parametrize("spec, expected", [
    ("src/b.py:2-3", ("src/b.py", 2, 3)),
    ("src/b.py:7", ("src/b.py", 7, 7)),
    ("C:/work/b.py:1-2", ("C:/work/b.py", 1, 2)),
])
def test_parse_snippet_spec(spec, expected):
    assert parse_snippet_spec(spec) == expected


@pytest.mark.parametrize("spec", ["src/b.py", "src/b.py:a-b", "src/b.py:3-2", "src/b.py:0-1", ":1-2"])
def test_parse_snippet_spec_rejects(spec):
    with pytest.raises(typer.BadParameter):
        parse_snippet_spec(spec)


def test_build_single_file(project):
    result = runner.invoke(app, ["build", "--root", str(project), "--file", "src/a.ts"])

    assert result.exit_code == 0, result.output
    assert result.stdout.rstrip("\n") == (
        "### Sources ###\n\nOutlines:\n\n- src/a.ts\n\nContent:\n\n"
        'File: src/a.ts\n<Content src="src/a.ts" lang="typescript">\nx\n</Content>'
    )


def test_build_empty_collection(project):
    result = runner.invoke(app, ["build", "--root", str(project)])

    assert result.exit_code == 0
    assert result.stdout.strip() == "No files or code snippets selected."


def test_build_mixed_items_markdown(project):
    result = runner.invoke(app, [
        "build", "--root", str(project),
        "--snippet", "src/b.py:2-3",
        "--file", "src/a.ts",
        "-m", "Review this",
        "--format", "markdown",
        "--sort", "filePath",
    ])

    assert result.exit_code == 0, result.output
    out = result.stdout
    assert out.startswith("### User Instructions ###\n\nReview this\n\n### Sources ###")
    assert "- src/a.ts\n- src/b.py (lines 2-3)" in out
    assert "Snippet: src/b.py (lines 2-3)\n```python\ntwo\nthree\n```" in out


def test_build_tree_and_template(project):
    result = runner.invoke(app, [
        "build", "--root", str(project), "--tree", "src", "--file", "src/a.ts",
        "--template", "// $path\n$content",
    ])

    assert result.exit_code == 0, result.output
    assert "### Folder Structure ###\n\nTree: src\n```\nsrc/\n├── a.ts\n└── b.py\n\n```" in result.stdout
    assert "File: src/a.ts\n// src/a.ts\nx" in result.stdout


def test_build_writes_output_file_and_zip(project):
    output = project / "out" / "prompt.txt"
    archive = project / "out" / "files.zip"

    result = runner.invoke(app, [
        "build", "--root", str(project), "--file", "src", "--output", str(output), "--export-zip", str(archive),
    ])

    assert result.exit_code == 0, result.output
    assert "- src/a.ts\n- src/b.py" in output.read_text(encoding="utf-8")
    assert archive.exists()


def test_build_uses_workspace_config(project):
    (project / ".promptassembler.json").write_text(json.dumps({"format": {"preset": "plain"}}), encoding="utf-8")

    result = runner.invoke(app, ["build", "--root", str(project), "--file", "src/a.ts"])

    assert result.stdout.rstrip("\n").endswith("File: src/a.ts\nx")


def test_build_warns_over_token_limit(project, no_tiktoken, console):
    no_tiktoken.side_effect = lambda text: 10 ** 9

    result = runner.invoke(app, ["build", "--root", str(project), "--file", "src/a.ts"])

    assert result.exit_code == 0
    assert any("above the configured limit" in message for message in console.of("warning"))


def test_build_copy_to_clipboard(project, mocker):
    copy = mocker.patch("promptassembler.services.clipboard.pyperclip.copy")

    result = runner.invoke(app, ["build", "--root", str(project), "-m", "hello", "--copy"])

    assert result.exit_code == 0
    copy.assert_called_once_with("### User Instructions ###\n\nhello")


def test_build_rejects_bad_snippet(project):
    result = runner.invoke(app, ["build", "--root", str(project), "--snippet", "src/b.py:x"])
    assert result.exit_code != 0


def test_presets():
    result = runner.invoke(app, ["presets"])

    assert result.exit_code == 0
    for preset in ("xml", "markdown", "plain", "github", "custom"):
        assert preset in result.stdout


def test_tree_command(project):
    (project / "node_modules").mkdir()

    result = runner.invoke(app, ["tree", str(project)])

    assert result.exit_code == 0
    assert "node_modules" not in result.stdout
    assert "└── src/" in result.stdout
