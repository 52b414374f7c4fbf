# promptassembler/sources/snippet.py
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ..core.models import ItemKind, PromptItem, StaticContent
from ..services.async_utils import run_blocking
from .base import EditableSource
from .languages import language_for

@dataclass(frozen=True)
class TextPosition:
    line: int      # 0-based
    character: int # 0-based

def extract_range(text: str, start: TextPosition, end: TextPosition) -> str:
    """Returns the text between two 0-based positions, like an editor selection."""
    lines = text.splitlines(keepends=True)
    offsets = [0]
    for line in lines:
        offsets.append(offsets[-1] + len(line))

    def to_offset(pos: TextPosition) -> int:
        if pos.line < 0 or pos.character < 0:
            raise ValueError(f"Negative position {pos}")
        if pos.line >= len(lines):
            return len(text)
        line_text = lines[pos.line].rstrip("\r\n")
        return offsets[pos.line] + min(pos.character, len(line_text))

    start_offset, end_offset = to_offset(start), to_offset(end)
    if end_offset < start_offset:
        raise ValueError("Selection end is before its start")
    return text[start_offset:end_offset]

class SnippetSource(EditableSource):
    """Selections from a document, captured once and never re-read."""
    kind = ItemKind.SNIPPET

    async def create(self, path: str | Path, start: TextPosition, end: TextPosition,
                     title: Optional[str] = None) -> Optional[PromptItem]:
        file_path = self.workspace.resolve(path)
        try:
            text = await run_blocking(self.workspace.read_text, file_path)
            content = extract_range(text, start, end)
        except (OSError, ValueError) as e:
            self.show_error(f"Failed to add snippet from {file_path.name}: {e}")
            return None

        return self.create_from_text(
            self.workspace.relative_path(file_path),
            content,
            line_start=start.line + 1,
            line_end=end.line + 1,
            title=title,
        )

    def create_from_text(self, file_path: str, content: str, line_start: int, line_end: int,
                         title: Optional[str] = None, language: Optional[str] = None) -> Optional[PromptItem]:
        """For hosts that already hold the selected text. Line numbers are 1-based inclusive."""
        if line_start < 1 or line_end < line_start:
            self.show_error(f"Invalid line range {line_start}-{line_end}")
            return None

        item = PromptItem(
            kind=ItemKind.SNIPPET,
            title=title or "",
            content=StaticContent(content),
            file_path=file_path,
            language=language or language_for(file_path),
            line_start=line_start,
            line_end=line_end,
        )
        self.show_status(f"Added snippet: {file_path} ({line_start}-{line_end})")
        return item

    def is_duplicate(self, candidate: PromptItem, existing_items: Sequence[PromptItem]) -> bool:
        return any(
            existing.kind is ItemKind.SNIPPET
            and existing.file_path == candidate.file_path
            and existing.line_start == candidate.line_start
            and existing.line_end == candidate.line_end
            for existing in existing_items
        )

    async def edit(self, item: PromptItem) -> Optional[Dict[str, Any]]:
        new_content = await self._ask_for_new_content(
            item, f"Edit {item.file_path} (lines {item.line_start}-{item.line_end})")
        if new_content is None:
            return None
        return {"content": StaticContent(new_content)}
