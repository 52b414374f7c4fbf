import asyncio

import pytest

from promptassembler.config.schema import SortOrder
from promptassembler.core.assembler import EMPTY_PROMPT, PromptAssembler, error_marker
from promptassembler.core.models import ItemKind
from promptassembler.core.store import ItemStore


def _producer(text):
    async def produce():
        return text
    return produce


@pytest.fixture
def assembler():
    return PromptAssembler()


def test_empty_collection_returns_sentinel(assembler, run):
    assert run(assembler.generate([])) == EMPTY_PROMPT


def test_single_file_prompt(assembler, run, make_dynamic):
    store = ItemStore()
    store.add(make_dynamic(ItemKind.FILE, _producer("x"), title="a.ts", file_path="src/a.ts", language="typescript"))

    prompt = run(assembler.generate(store.get_all()))

    assert prompt == (
        "### Sources ###\n\n"
        "Outlines:\n\n"
        "- src/a.ts\n\n"
        "Content:\n\n"
        "File: src/a.ts\n"
        '<Content src="src/a.ts" lang="typescript">\nx\n</Content>'
    )


def test_sections_follow_fixed_order_regardless_of_insertion(assembler, run, make_static, make_dynamic):
    store = ItemStore()
    store.add(make_dynamic(ItemKind.FILE, _producer("code"), file_path="a.py", language="python"))
    store.add(make_dynamic(ItemKind.GIT_DIFF, _producer("+added"), title="Git Diff (--cached)"))
    store.add(make_dynamic(ItemKind.TREE, _producer("root/\n└── a.py\n"), title="Tree: root", file_path="."))
    store.add(make_static(kind=ItemKind.TERMINAL, text="$ ls", title="Terminal: bash"))
    store.add(make_static(kind=ItemKind.USER_INSTRUCTION, text="Explain this"))

    prompt = run(assembler.generate(store.get_all()))

    headings = ["### User Instructions ###", "### Terminal Output ###", "### Folder Structure ###",
                "### Git Diff (--cached) ###", "### Sources ###"]
    positions = [prompt.index(heading) for heading in headings]
    assert positions == sorted(positions)
    assert prompt.startswith("### User Instructions ###\n\nExplain this\n\n")
    assert "Terminal: bash\n```\n$ ls\n```" in prompt
    assert "Git Diff (--cached)\n```diff\n+added\n```" in prompt
    assert not prompt.endswith("\n")


def test_empty_groups_are_omitted(assembler, run, make_static):
    prompt = run(assembler.generate([make_static(kind=ItemKind.USER_INSTRUCTION, text="Only me")]))

    assert prompt == "### User Instructions ###\n\nOnly me"
    assert "### Sources ###" not in prompt


def test_snippets_use_line_range_in_outline(assembler, run, make_static):
    store = ItemStore()
    store.add(make_static(kind=ItemKind.SNIPPET, text="body", file_path="lib/b.py", language="python",
                          line_start=2, line_end=4))

    prompt = run(assembler.generate(store.get_all()))

    assert "- lib/b.py (lines 2-4)" in prompt
    assert "Snippet: lib/b.py (lines 2-4)\n" in prompt


def _code_store(make_dynamic, paths):
    store = ItemStore()
    for path in paths:
        store.add(make_dynamic(ItemKind.FILE, _producer(path), file_path=path))
    return store


def _outline(prompt):
    block = prompt.split("Outlines:\n\n", 1)[1].split("\n\nContent:", 1)[0]
    return [line[2:] for line in block.splitlines()]


def test_opening_order_follows_store(assembler, run, make_dynamic):
    store = _code_store(make_dynamic, ["z.py", "a.py", "m.py"])
    store.reorder(2, 0)

    prompt = run(assembler.generate(store.get_all(), SortOrder.OPENING_ORDER))

    assert _outline(prompt) == ["m.py", "z.py", "a.py"]


def test_file_path_order_is_deterministic(assembler, run, make_dynamic):
    store = _code_store(make_dynamic, ["z.py", "a.py", "m.py"])

    first = run(assembler.generate(store.get_all(), SortOrder.FILE_PATH))
    second = run(assembler.generate(list(reversed(store.get_all())), SortOrder.FILE_PATH))

    assert _outline(first) == ["a.py", "m.py", "z.py"]
    assert first == second


def test_failing_producer_only_affects_its_item(assembler, run, make_dynamic):
    async def broken():
        raise OSError("disk on fire")

    store = ItemStore()
    store.add(make_dynamic(ItemKind.FILE, _producer("good"), file_path="ok.py"))
    store.add(make_dynamic(ItemKind.FILE, broken, file_path="bad.py"))

    prompt = run(assembler.generate(store.get_all()))

    assert "\ngood\n" in prompt
    assert error_marker("disk on fire") in prompt
    assert error_marker("disk on fire") == "[Error: failed to resolve dynamic content - disk on fire]"


def test_non_string_result_becomes_marker(assembler, run, make_dynamic):
    async def wrong_type():
        return 42

    text = run(assembler.resolve_content(make_dynamic(ItemKind.TERMINAL, wrong_type)))

    assert text.startswith("[Error: failed to resolve dynamic content - ")
    assert "int" in text


def test_slow_producer_times_out(run, make_dynamic):
    async def slow():
        await asyncio.sleep(5)
        return "late"

    assembler = PromptAssembler(resolve_timeout=0.05)
    text = run(assembler.resolve_content(make_dynamic(ItemKind.GIT_DIFF, slow)))

    assert text == error_marker("timed out after 0.05s")


def test_dynamic_content_is_resolved_on_every_generate(assembler, run, make_dynamic):
    calls = []

    async def counting():
        calls.append(1)
        return f"call {len(calls)}"

    items = [make_dynamic(ItemKind.FILE, counting, file_path="a.py")]

    assert "call 1" in run(assembler.generate(items))
    assert "call 2" in run(assembler.generate(items))


def test_file_and_snippet_of_same_path_share_one_sources_section(assembler, run, make_static):
    store = ItemStore()
    store.add(make_static(kind=ItemKind.FILE, text="console.log(1)", file_path="src/a.ts", language="ts"))
    store.add(make_static(kind=ItemKind.SNIPPET, text="line two", file_path="src/a.ts", language="ts",
                          line_start=2, line_end=2))

    prompt = run(assembler.generate(store.get_all()))

    assert prompt.count("### Sources ###") == 1
    assert _outline(prompt) == ["src/a.ts", "src/a.ts (lines 2-2)"]
    file_block = 'File: src/a.ts\n<Content src="src/a.ts" lang="ts">\nconsole.log(1)\n</Content>'
    snippet_block = 'Snippet: src/a.ts (lines 2-2)\n<Content src="src/a.ts (lines 2-2)" lang="ts">\nline two\n</Content>'
    assert prompt.endswith(f"Content:\n\n{file_block}\n\n{snippet_block}")


def test_tree_only_input_renders_only_folder_structure(assembler, run, make_dynamic):
    item = make_dynamic(ItemKind.TREE, _producer("demo/\n└── a.py\n"), title="Tree: demo", file_path=".")

    prompt = run(assembler.generate([item]))

    assert prompt == "### Folder Structure ###\n\nTree: demo\n```\ndemo/\n└── a.py\n\n```"
    assert [line for line in prompt.splitlines() if line.startswith("### ")] == ["### Folder Structure ###"]
