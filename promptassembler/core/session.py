# promptassembler/core/session.py
from pathlib import Path
from typing import Iterable, List, Optional, assert_never
from loguru import logger

from ..config.schema import AppConfig, SortOrder
from ..services.clipboard import SystemClipboard
from ..services.exporter import export_to_zip
from ..services.git import GitClient
from ..services.status import StatusReporter
from ..services.host import ClipboardReader, EditorTextInput, LogNotifier, Notifier, TerminalHandle, TextInput
from ..services.workspace import WorkspaceReader
from ..sources.base import ContentSource, EditableSource
from ..sources.files import FileSource
from ..sources.git_diff import GitDiffSource
from ..sources.instruction import InstructionSource
from ..sources.snippet import SnippetSource, TextPosition
from ..sources.terminal import TerminalSource
from ..sources.tree import FolderTreeSource
from .assembler import PromptAssembler
from .formatter import ContentFormatter, CustomFormatter
from .ignore_rules import IgnoreRuleEngine
from .models import ContentMode, ItemKind, PromptItem
from .store import ItemStore

class PromptSession:
    """
    One collection of prompt items plus everything needed to fill and render it.

    Every add_* method runs the source, applies the source's duplicate check
    and only then touches the store. They return the items actually added.
    """

    def __init__(self, root: Path, config: Optional[AppConfig] = None,
                 notifier: Optional[Notifier] = None, text_input: Optional[TextInput] = None,
                 clipboard: Optional[ClipboardReader] = None, git: Optional[GitClient] = None,
                 custom_formatter: Optional[CustomFormatter] = None):
        self.config = config or AppConfig()
        self.workspace = WorkspaceReader(root)
        self.notifier = notifier or LogNotifier()
        self.text_input = text_input or EditorTextInput(self.notifier)
        self.store = ItemStore()
        self.status_reporter = StatusReporter(self.store)

        self.ignore_rules = IgnoreRuleEngine(self.config.ignore)
        self.formatter = ContentFormatter(self.config.format, custom=custom_formatter)
        self.assembler = PromptAssembler(self.formatter, resolve_timeout=self.config.resolve_timeout)

        self.files = FileSource(self.workspace, self.ignore_rules, self.notifier)
        self.snippets = SnippetSource(self.workspace, self.text_input, self.notifier,
                                      max_length=self.config.edit_max_length)
        self.terminals = TerminalSource(self.workspace, clipboard or SystemClipboard(), self.text_input, self.notifier,
                                        capture_delay=self.config.terminal_capture_delay,
                                        max_length=self.config.edit_max_length)
        self.trees = FolderTreeSource(self.workspace, self.ignore_rules, self.notifier)
        self.git_diffs = GitDiffSource(self.workspace, git or GitClient(self.workspace.root, timeout=self.config.git_timeout),
                                       self.notifier)
        self.instructions = InstructionSource(self.workspace, self.text_input, self.notifier,
                                              max_length=self.config.instruction_max_length)
        logger.debug(f"Prompt session created for {self.workspace.root}")

    # --- Collection ---

    def _add_unique(self, source: ContentSource, item: Optional[PromptItem]) -> List[PromptItem]:
        if item is None:
            return []
        if source.is_duplicate(item, self.store.get_all()):
            logger.info(f"Skipping duplicate {item.kind.value}: {item.display_path or item.title}")
            return []
        self.store.add(item)
        return [item]

    async def add_path(self, path: str | Path) -> List[PromptItem]:
        """Adds a file, or every collectable file below a directory."""
        resolved = self.workspace.resolve(path)
        if self.workspace.is_dir(resolved):
            added: List[PromptItem] = []
            for item in await self.files.create_from_directory(resolved):
                added.extend(self._add_unique(self.files, item))
            return added
        return self._add_unique(self.files, await self.files.create(resolved))

    async def add_paths(self, paths: Iterable[str | Path]) -> List[PromptItem]:
        added: List[PromptItem] = []
        for path in paths:
            added.extend(await self.add_path(path))
        return added

    async def add_snippet(self, path: str | Path, start: TextPosition, end: TextPosition,
                          title: Optional[str] = None) -> List[PromptItem]:
        return self._add_unique(self.snippets, await self.snippets.create(path, start, end, title))

    async def add_snippet_lines(self, path: str | Path, line_start: int, line_end: int) -> List[PromptItem]:
        """Whole lines line_start..line_end, 1-based inclusive."""
        if line_start < 1 or line_end < line_start:
            self.notifier.error(f"Invalid line range {line_start}-{line_end}")
            return []
        end_of_line = 2 ** 31 # clamped to the line length
        return await self.add_snippet(path, TextPosition(line_start - 1, 0), TextPosition(line_end - 1, end_of_line))

    async def add_terminal_output(self, terminal: Optional[TerminalHandle]) -> List[PromptItem]:
        return self._add_unique(self.terminals, await self.terminals.create(terminal))

    async def add_tree(self, path: str | Path) -> List[PromptItem]:
        return self._add_unique(self.trees, await self.trees.create(path))

    async def add_git_diff(self, path: Optional[str | Path] = None) -> List[PromptItem]:
        return self._add_unique(self.git_diffs, await self.git_diffs.create(path))

    async def add_instruction(self, text: Optional[str] = None) -> List[PromptItem]:
        return self._add_unique(self.instructions, await self.instructions.create(text))

    # --- Structure ---

    def remove(self, item_id: str) -> Optional[PromptItem]:
        removed = self.store.remove(item_id)
        if removed:
            self.notifier.status(f"Removed: {removed.title}")
        return removed

    def move_up(self, item_id: str) -> bool:
        item = self.store.get_by_id(item_id)
        if item is None or item.index == 0:
            return False
        return self.store.reorder(item.index, item.index - 1)

    def move_down(self, item_id: str) -> bool:
        item = self.store.get_by_id(item_id)
        if item is None or item.index >= self.store.count - 1:
            return False
        return self.store.reorder(item.index, item.index + 1)

    def clear(self) -> None:
        self.store.clear()
        self.notifier.status("Prompt collection cleared")

    async def edit_item(self, item_id: str) -> bool:
        """Edits a static item through the text input. Returns True if the item changed."""
        item = self.store.get_by_id(item_id)
        if item is None:
            self.notifier.error("Item not found")
            return False
        if item.mode is not ContentMode.STATIC:
            self.notifier.error("Only static items can be edited")
            return False

        editor = self._editor_for(item.kind)
        if editor is None:
            self.notifier.error(f"Items of kind '{item.kind.value}' cannot be edited")
            return False

        updates = await editor.edit(item)
        if not updates:
            return False
        changed = self.store.update(item.id, **updates)
        if changed:
            self.notifier.info("Item content updated")
        return changed

    def _editor_for(self, kind: ItemKind) -> Optional[EditableSource]:
        if kind is ItemKind.TERMINAL:
            return self.terminals
        elif kind is ItemKind.USER_INSTRUCTION:
            return self.instructions
        elif kind is ItemKind.SNIPPET:
            return self.snippets
        elif kind is ItemKind.FILE or kind is ItemKind.TREE or kind is ItemKind.GIT_DIFF:
            return None
        else:
            assert_never(kind)

    # --- Output ---

    async def generate(self, sort_order: Optional[SortOrder] = None) -> str:
        return await self.assembler.generate(self.store.get_all(), sort_order or self.config.sort_order)

    async def export_zip(self, destination: Path) -> Optional[Path]:
        return await export_to_zip(self.store.get_all(), destination, self.notifier)
