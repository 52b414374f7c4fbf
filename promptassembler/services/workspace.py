# promptassembler/services/workspace.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple
from loguru import logger

ENCODINGS_TO_TRY: Tuple[str, ...] = ("utf-8", "cp1252", "latin-1")
BINARY_SNIFF_BYTES = 1024

@dataclass(frozen=True)
class DirEntryInfo:
    name: str
    path: Path
    is_dir: bool
    is_file: bool
    is_symlink: bool

class WorkspaceReader:
    """Resource reader rooted at the workspace directory."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def resolve(self, path: str | Path) -> Path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.root / candidate
        return candidate.resolve()

    def relative_path(self, path: str | Path) -> str:
        """Workspace-relative POSIX path, or the absolute path for files outside the workspace."""
        resolved = self.resolve(path)
        try:
            return resolved.relative_to(self.root).as_posix()
        except ValueError:
            return str(resolved)

    def is_dir(self, path: str | Path) -> bool:
        return self.resolve(path).is_dir()

    def is_binary(self, path: str | Path) -> bool:
        with open(self.resolve(path), "rb") as f:
            return b"\0" in f.read(BINARY_SNIFF_BYTES)

    def read_text(self, path: str | Path) -> str:
        """Reads a text file, trying a few encodings. Raises OSError if unreadable."""
        file_path = self.resolve(path)
        data = file_path.read_bytes()
        for enc in ENCODINGS_TO_TRY:
            try:
                return data.decode(enc)
            except UnicodeDecodeError:
                continue
        logger.warning(f"Could not decode {file_path} cleanly, replacing invalid bytes")
        return data.decode("utf-8", errors="replace")

    def list_dir(self, path: str | Path) -> List[DirEntryInfo]:
        """Lists a directory without following symlinks. Raises OSError if unreadable."""
        entries: List[DirEntryInfo] = []
        with os.scandir(self.resolve(path)) as it:
            for entry in it:
                try:
                    is_symlink = entry.is_symlink()
                    entries.append(DirEntryInfo(
                        name=entry.name,
                        path=Path(entry.path),
                        is_dir=entry.is_dir(follow_symlinks=False),
                        is_file=entry.is_file(follow_symlinks=False),
                        is_symlink=is_symlink,
                    ))
                except OSError as e:
                    logger.warning(f"Could not stat entry {entry.path}: {e}. Skipping.")
        return entries
