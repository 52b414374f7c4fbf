# promptassembler/sources/instruction.py
from typing import Any, Dict, Optional, Sequence

from ..core.models import ItemKind, PromptItem, StaticContent
from ..services.host import Notifier, TextInput
from ..services.workspace import WorkspaceReader
from .base import EditableSource

TITLE_MAX_LENGTH = 50
DEFAULT_TITLE = "User Instruction"

def generate_title(content: str) -> str:
    """First non-empty line, cut to 50 characters."""
    first_line = next((line.strip() for line in content.splitlines() if line.strip()), "")
    if len(first_line) > TITLE_MAX_LENGTH:
        return f"{first_line[:TITLE_MAX_LENGTH]}..."
    return first_line or DEFAULT_TITLE

class InstructionSource(EditableSource):
    """Free-form instructions typed by the operator. Always rendered first."""
    kind = ItemKind.USER_INSTRUCTION

    def __init__(self, workspace: WorkspaceReader, text_input: TextInput,
                 notifier: Optional[Notifier] = None, max_length: int = 5000):
        super().__init__(workspace, text_input, notifier, max_length)

    async def create(self, text: Optional[str] = None) -> Optional[PromptItem]:
        if text is None:
            text = await self.text_input.ask(
                title="Add user instruction",
                description="Multi-line instructions for the model",
                max_length=self.max_length,
            )
            if text is None:
                return None
        elif len(text) > self.max_length:
            self.show_warning(f"Instruction is {len(text)} characters, the limit is {self.max_length}")
            return None

        trimmed = text.strip()
        if not trimmed:
            self.show_warning("User instruction cannot be empty")
            return None

        item = PromptItem(
            kind=ItemKind.USER_INSTRUCTION,
            title=generate_title(trimmed),
            content=StaticContent(trimmed),
        )
        self.show_status("Added user instruction")
        return item

    async def edit(self, item: PromptItem) -> Optional[Dict[str, Any]]:
        new_content = await self._ask_for_new_content(item, "Edit user instruction")
        if new_content is None:
            return None
        trimmed = new_content.strip()
        if not trimmed:
            self.show_warning("User instruction cannot be empty")
            return None
        return {"content": StaticContent(trimmed), "title": generate_title(trimmed)}

    def is_duplicate(self, candidate: PromptItem, existing_items: Sequence[PromptItem]) -> bool:
        return any(
            existing.kind is ItemKind.USER_INSTRUCTION and existing.static_text == candidate.static_text
            for existing in existing_items
        )
