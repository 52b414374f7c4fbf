# promptassembler/sources/files.py
from pathlib import Path
from typing import List, Optional, Sequence
from loguru import logger

from ..core.ignore_rules import IgnoreRuleEngine
from ..core.models import DynamicContent, DynamicContentGenerator, ItemKind, PromptItem
from ..services.async_utils import run_blocking
from ..services.host import Notifier
from ..services.workspace import WorkspaceReader
from .base import ContentSource
from .languages import language_for

class FileSource(ContentSource):
    """Whole files, re-read from disk every time the prompt is generated."""
    kind = ItemKind.FILE

    def __init__(self, workspace: WorkspaceReader, ignore_rules: Optional[IgnoreRuleEngine] = None,
                 notifier: Optional[Notifier] = None):
        super().__init__(workspace, notifier)
        self.ignore_rules = ignore_rules or IgnoreRuleEngine.default()

    async def create(self, path: str | Path) -> Optional[PromptItem]:
        """Creates an item for one file. Directories return None; use create_from_directory."""
        file_path = self.workspace.resolve(path)
        try:
            if self.workspace.is_dir(file_path):
                return None
            item = await run_blocking(self._build_item, file_path)
        except (OSError, ValueError) as e:
            self.show_error(f"Failed to add file {file_path.name}: {e}")
            return None

        self.show_status(f"Added file: {item.title}")
        return item

    async def create_from_directory(self, path: str | Path) -> List[PromptItem]:
        """Collects every non-ignored text file below a directory as a flat list of items."""
        dir_path = self.workspace.resolve(path)
        try:
            file_paths = await run_blocking(self._collect_files, dir_path)
        except OSError as e:
            self.show_error(f"Failed to read directory {dir_path.name}: {e}")
            return []

        items: List[PromptItem] = []
        for file_path in file_paths:
            try:
                items.append(await run_blocking(self._build_item, file_path))
            except (OSError, ValueError) as e:
                # Binary and unreadable files are skipped without bothering the operator
                logger.info(f"Skipping {file_path}: {e}")

        if items:
            self.show_status(f"Added {len(items)} files from directory {dir_path.name}")
        else:
            logger.info(f"No files collected from {dir_path}")
        return items

    def is_duplicate(self, candidate: PromptItem, existing_items: Sequence[PromptItem]) -> bool:
        return any(
            existing.kind is ItemKind.FILE and existing.file_path == candidate.file_path
            for existing in existing_items
        )

    def _build_item(self, file_path: Path) -> PromptItem:
        if not file_path.is_file():
            raise FileNotFoundError(f"No such file: {file_path}")
        if self.workspace.is_binary(file_path):
            raise ValueError("binary file")
        # Read once now so an unreadable file fails at collection time
        self.workspace.read_text(file_path)

        return PromptItem(
            kind=ItemKind.FILE,
            title=file_path.name,
            content=DynamicContent(self._dynamic_reader(file_path)),
            file_path=self.workspace.relative_path(file_path),
            language=language_for(file_path),
        )

    def _dynamic_reader(self, file_path: Path) -> DynamicContentGenerator:
        async def read_current_text() -> str:
            return await run_blocking(self.workspace.read_text, file_path)
        return read_current_text

    def _collect_files(self, dir_path: Path) -> List[Path]:
        """Depth-first walk in name order; ignore rules apply at every level."""
        if not dir_path.is_dir():
            raise NotADirectoryError(f"Not a directory: {dir_path}")

        collected: List[Path] = []
        entries = sorted(self.workspace.list_dir(dir_path), key=lambda e: e.name)
        for entry in entries:
            if entry.is_symlink:
                logger.trace(f"Ignoring symlink entry: {entry.name}")
                continue
            if entry.is_dir:
                if self.ignore_rules.should_ignore_directory(entry.name):
                    continue
                try:
                    collected.extend(self._collect_files(entry.path))
                except OSError as e:
                    logger.warning(f"Could not scan directory contents {entry.path}: {e}")
            elif entry.is_file:
                if self.ignore_rules.should_ignore_file(entry.name):
                    continue
                collected.append(entry.path)
        return collected
