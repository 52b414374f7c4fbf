# promptassembler/services/git.py
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional
from loguru import logger

from .async_utils import run_blocking

class GitError(Exception):
    """Base class for version-control query failures."""

class GitUnavailableError(GitError):
    """The git executable could not be found."""

class NotARepositoryError(GitError):
    """The workspace is not inside a git repository."""

class GitCommandError(GitError):
    """git ran but failed or timed out."""

class ChangeStatus(str, Enum):
    MODIFIED = "MODIFIED"
    ADDED = "ADDED"
    DELETED = "DELETED"
    RENAMED = "RENAMED"
    COPIED = "COPIED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_code(cls, code: str) -> "ChangeStatus":
        return _STATUS_CODES.get(code[:1], cls.UNKNOWN)

_STATUS_CODES = {
    "M": ChangeStatus.MODIFIED,
    "A": ChangeStatus.ADDED,
    "D": ChangeStatus.DELETED,
    "R": ChangeStatus.RENAMED,
    "C": ChangeStatus.COPIED,
}

@dataclass(frozen=True)
class StagedChange:
    path: str # Relative to the repository top level, POSIX separators
    status: ChangeStatus
    original_path: Optional[str] = None # Source path for renames and copies

def parse_name_status(output: str) -> List[StagedChange]:
    """Parses `git diff --name-status -z` output."""
    tokens = output.split("\0")
    changes: List[StagedChange] = []
    i = 0
    while i < len(tokens):
        code = tokens[i]
        if not code:
            i += 1
            continue
        status = ChangeStatus.from_code(code)
        if status in (ChangeStatus.RENAMED, ChangeStatus.COPIED) and i + 2 < len(tokens):
            changes.append(StagedChange(path=tokens[i + 2], status=status, original_path=tokens[i + 1]))
            i += 3
        elif i + 1 < len(tokens):
            changes.append(StagedChange(path=tokens[i + 1], status=status))
            i += 2
        else:
            logger.warning(f"Truncated name-status entry: {code!r}")
            break
    return changes

class GitClient:
    """Queries the staged (index) state of the repository containing the workspace root."""

    def __init__(self, root: Path, timeout: float = 15.0):
        self.root = Path(root)
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        command = ["git", "-C", str(self.root), *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            process = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                check=False,
                shell=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise GitUnavailableError("'git' command not found. Is Git installed and in PATH?") from e
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(f"git {args[0]} timed out after {self.timeout:g}s") from e

        if process.returncode != 0:
            error_msg = process.stderr.strip() or f"Git command failed with code {process.returncode}"
            if "not a git repository" in error_msg.lower():
                raise NotARepositoryError(f"'{self.root}' is not a git repository")
            raise GitCommandError(error_msg)
        return process.stdout

    @staticmethod
    def _pathspec(path: Optional[str]) -> List[str]:
        return ["--", path] if path else []

    def staged_changes(self, path: Optional[str] = None) -> List[StagedChange]:
        output = self._run("diff", "--cached", "--name-status", "-z", *self._pathspec(path))
        return parse_name_status(output)

    def staged_diff(self, path: Optional[str] = None) -> str:
        """Diff of the index against HEAD, for one path or the whole repository."""
        return self._run("diff", "--cached", *self._pathspec(path))

    def staged_change_diff(self, change: StagedChange) -> str:
        """
        Diff of one entry returned by staged_changes().

        Its paths are relative to the repository top level, not to the root this
        client runs in, so they are passed as :(top) pathspecs. Renames and copies
        pass both sides so git reports the move instead of a new file.
        """
        paths = [change.original_path, change.path] if change.original_path else [change.path]
        return self._run("diff", "--cached", "--", *(f":(top){p}" for p in paths))

    def has_staged_changes(self, path: Optional[str] = None) -> bool:
        return bool(self.staged_diff(path).strip())

    # --- async wrappers ---

    async def astaged_changes(self, path: Optional[str] = None) -> List[StagedChange]:
        return await run_blocking(self.staged_changes, path)

    async def astaged_diff(self, path: Optional[str] = None) -> str:
        return await run_blocking(self.staged_diff, path)

    async def astaged_change_diff(self, change: StagedChange) -> str:
        return await run_blocking(self.staged_change_diff, change)

    async def ahas_staged_changes(self, path: Optional[str] = None) -> bool:
        return await run_blocking(self.has_staged_changes, path)
