import zipfile

import pytest

from promptassembler.config.schema import AppConfig, SortOrder
from promptassembler.core.models import ContentMode, ItemKind
from promptassembler.core.session import PromptSession


class FakeClipboard:
    def __init__(self, text=""):
        self.text = text

    def read_text(self):
        return self.text


class FakeTerminal:
    name = "bash"

    async def trigger_copy(self):
        pass


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.ts").write_text("export const a = 1;\n", encoding="utf-8")
    (tmp_path / "src" / "b.py").write_text("one\ntwo\nthree\nfour\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def session(workspace, notifier, text_input_factory, mocker):
    config = AppConfig(terminal_capture_delay=0)
    return PromptSession(
        workspace,
        config=config,
        notifier=notifier,
        text_input=text_input_factory(),
        clipboard=FakeClipboard("$ make\nok\n"),
        git=mocker.Mock(),
    )


def test_add_path_and_generate(session, run):
    added = run(session.add_path("src/a.ts"))

    assert [item.file_path for item in added] == ["src/a.ts"]
    prompt = run(session.generate())
    assert prompt.endswith('File: src/a.ts\n<Content src="src/a.ts" lang="typescript">\nexport const a = 1;\n\n</Content>')


def test_duplicate_files_are_skipped(session, run):
    run(session.add_path("src/a.ts"))
    assert run(session.add_path("src/a.ts")) == []
    assert run(session.add_path("src")) == [session.store.get_all()[1]]
    assert [item.file_path for item in session.store] == ["src/a.ts", "src/b.py"]


def test_add_snippet_lines(session, run):
    (snippet,) = run(session.add_snippet_lines("src/b.py", 2, 3))

    assert snippet.kind is ItemKind.SNIPPET
    assert snippet.static_text == "two\nthree"
    assert (snippet.line_start, snippet.line_end) == (2, 3)
    assert run(session.add_snippet_lines("src/b.py", 2, 3)) == []


def test_add_snippet_lines_rejects_bad_range(session, run, notifier):
    assert run(session.add_snippet_lines("src/b.py", 3, 2)) == []
    assert notifier.of("error")


def test_terminal_and_instruction(session, run):
    run(session.add_terminal_output(FakeTerminal()))
    run(session.add_instruction("Fix the build"))
    assert run(session.add_instruction("Fix the build")) == []

    prompt = run(session.generate())
    assert prompt.startswith("### User Instructions ###\n\nFix the build\n\n### Terminal Output ###")
    assert "Terminal: bash\n```\n$ make\nok\n\n```" in prompt


def test_move_remove_and_clear(session, run):
    run(session.add_paths(["src/a.ts", "src/b.py"]))
    first, second = session.store.get_all()

    assert session.move_up(first.id) is False
    assert session.move_down(second.id) is False
    assert session.move_down(first.id) is True
    assert session.store.get_all() == [second, first]
    assert session.move_up(first.id) is True

    assert session.remove(second.id) is second
    assert session.status_reporter.text == "Prompt: 1 item"
    session.clear()
    assert session.store.is_empty
    assert session.status_reporter.visible is False


def test_sort_order_override(session, run):
    run(session.add_paths(["src/b.py", "src/a.ts"]))

    by_opening = run(session.generate())
    by_path = run(session.generate(SortOrder.FILE_PATH))

    assert by_opening.index("- src/b.py") < by_opening.index("- src/a.ts")
    assert by_path.index("- src/a.ts") < by_path.index("- src/b.py")


def test_edit_instruction(session, run, text_input_factory):
    (item,) = run(session.add_instruction("Old text"))
    session.instructions.text_input = text_input_factory("New first line\nmore")

    assert run(session.edit_item(item.id)) is True
    assert item.static_text == "New first line\nmore"
    assert item.title == "New first line"


def test_edit_rejects_dynamic_items(session, run, notifier):
    (item,) = run(session.add_path("src/a.ts"))

    assert item.mode is ContentMode.DYNAMIC
    assert run(session.edit_item(item.id)) is False
    assert "Only static items can be edited" in notifier.of("error")


def test_export_zip(session, run, tmp_path):
    run(session.add_path("src/a.ts"))
    run(session.add_snippet_lines("src/b.py", 1, 2))

    archive = run(session.export_zip(tmp_path / "out" / "prompt.zip"))

    with zipfile.ZipFile(archive) as zf:
        assert sorted(zf.namelist()) == ["src/a.ts", "src/b_L1-2.py"]
        assert zf.read("src/b_L1-2.py").decode() == "one\ntwo"
