# promptassembler/sources/tree.py
from pathlib import Path
from typing import List, Optional
from loguru import logger

from ..core.ignore_rules import IgnoreRuleEngine
from ..core.models import DynamicContent, DynamicContentGenerator, ItemKind, PromptItem
from ..services.async_utils import run_blocking
from ..services.host import Notifier
from ..services.workspace import WorkspaceReader
from .base import ContentSource

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "
UNREADABLE_MARKER = "[Error: cannot read directory contents]"

class FolderTreeSource(ContentSource):
    """Box-drawing rendering of a directory, redrawn from disk on every generate."""
    kind = ItemKind.TREE

    def __init__(self, workspace: WorkspaceReader, ignore_rules: Optional[IgnoreRuleEngine] = None,
                 notifier: Optional[Notifier] = None):
        super().__init__(workspace, notifier)
        self.ignore_rules = ignore_rules or IgnoreRuleEngine.default()

    async def create(self, path: str | Path) -> Optional[PromptItem]:
        folder = self.workspace.resolve(path)
        try:
            is_dir = self.workspace.is_dir(folder)
        except OSError as e:
            self.show_error(f"Failed to add folder tree: {e}")
            return None
        if not is_dir:
            self.show_warning(f"Please select a folder: {folder}")
            return None

        item = PromptItem(
            kind=ItemKind.TREE,
            title=f"Tree: {folder.name}",
            content=DynamicContent(self._dynamic_tree(folder)),
            file_path=self.workspace.relative_path(folder),
        )
        self.show_status(f"Added folder tree: {folder.name}")
        return item

    def _dynamic_tree(self, folder: Path) -> DynamicContentGenerator:
        async def render_current_tree() -> str:
            return await run_blocking(self.render_tree, folder)
        return render_current_tree

    def render_tree(self, folder: Path) -> str:
        if not folder.is_dir():
            raise NotADirectoryError(f"Folder no longer exists: {folder}")
        lines = [f"{folder.name}/"]
        self._render_level(folder, "", lines)
        return "\n".join(lines) + "\n"

    def _render_level(self, folder: Path, prefix: str, lines: List[str]) -> None:
        try:
            entries = self.workspace.list_dir(folder)
        except OSError as e:
            logger.warning(f"Could not read directory {folder}: {e}")
            lines.append(f"{prefix}{UNREADABLE_MARKER}")
            return

        visible = [
            entry for entry in entries
            if not self.ignore_rules.should_ignore(entry.name, entry.is_dir)
        ]
        # Directories first, then name order
        visible.sort(key=lambda entry: (not entry.is_dir, entry.name))

        for i, entry in enumerate(visible):
            is_last = i == len(visible) - 1
            connector = LAST_BRANCH if is_last else BRANCH
            if entry.is_dir:
                lines.append(f"{prefix}{connector}{entry.name}/")
                self._render_level(entry.path, prefix + (SPACE if is_last else PIPE), lines)
            else:
                lines.append(f"{prefix}{connector}{entry.name}")
