# promptassembler/sources/git_diff.py
from pathlib import Path
from typing import List, Optional
from loguru import logger

from ..core.models import DynamicContent, DynamicContentGenerator, ItemKind, PromptItem
from ..services.git import GitClient, GitError, GitUnavailableError, NotARepositoryError, StagedChange
from ..services.host import Notifier
from ..services.workspace import WorkspaceReader
from .base import ContentSource

RULE_LINE = "=" * 50

class GitDiffSource(ContentSource):
    """
    Staged changes (git diff --cached), for one file or the whole repository.

    Creation checks that something is staged; the content itself is queried
    again at generate time so it reflects the index as it is then.
    """
    kind = ItemKind.GIT_DIFF

    def __init__(self, workspace: WorkspaceReader, git: Optional[GitClient] = None,
                 notifier: Optional[Notifier] = None):
        super().__init__(workspace, notifier)
        self.git = git or GitClient(workspace.root)

    async def create(self, path: Optional[str | Path] = None) -> Optional[PromptItem]:
        relative_path = self.workspace.relative_path(path) if path is not None else None
        if not await self._verify_has_changes(relative_path):
            return None

        file_name = Path(relative_path).name if relative_path else None
        item = PromptItem(
            kind=ItemKind.GIT_DIFF,
            title=f"Git Diff: {file_name}" if file_name else "Git Diff (--cached)",
            content=DynamicContent(self._dynamic_diff(relative_path)),
            file_path=relative_path,
        )
        self.show_status(f"Added git diff: {file_name}" if file_name else "Added global git diff (--cached)")
        return item

    async def _verify_has_changes(self, relative_path: Optional[str]) -> bool:
        try:
            has_changes = await self.git.ahas_staged_changes(relative_path)
        except GitUnavailableError as e:
            self.show_warning(f"Git is not available: {e}")
            return False
        except NotARepositoryError as e:
            self.show_warning(f"Not a git repository: {e}")
            return False
        except GitError as e:
            self.show_error(f"git diff failed: {e}")
            return False

        if not has_changes:
            target = f"File {Path(relative_path).name} has" if relative_path else "There are"
            self.show_info(f"{target} no staged changes")
            return False
        return True

    def _dynamic_diff(self, relative_path: Optional[str]) -> DynamicContentGenerator:
        async def current_staged_diff() -> str:
            # GitError propagates and is rendered as an inline error marker
            if relative_path:
                return await self._file_diff(relative_path)
            return await self._all_diffs()
        return current_staged_diff

    async def _file_diff(self, relative_path: str) -> str:
        diff = await self.git.astaged_diff(relative_path)
        if not diff.strip():
            return f"File {relative_path} has no staged changes"
        return diff.rstrip("\n")

    async def _all_diffs(self) -> str:
        changes: List[StagedChange] = await self.git.astaged_changes()
        if not changes:
            return "No staged changes"

        result = "Staged changes:\n\n"
        for change in changes:
            label = change.path
            if change.original_path:
                label = f"{change.original_path} -> {change.path}"
            result += f"{change.status.value}: {label}\n"

            try:
                file_diff = await self.git.astaged_change_diff(change)
            except GitError as e:
                logger.warning(f"Could not diff {change.path}: {e}")
                result += f"  (could not get detailed diff: {e})\n"
                continue
            if file_diff:
                result += f"\n{file_diff.rstrip()}\n{RULE_LINE}\n"
        return result.rstrip("\n")
