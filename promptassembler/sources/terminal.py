# promptassembler/sources/terminal.py
import asyncio
from typing import Any, Dict, Optional

from loguru import logger

from ..core.models import ItemKind, PromptItem, StaticContent
from ..services.async_utils import run_blocking
from ..services.host import ClipboardReader, Notifier, TerminalHandle, TextInput
from ..services.workspace import WorkspaceReader
from .base import EditableSource

class TerminalSource(EditableSource):
    """
    Last command and output of the active terminal.

    Capture is a clipboard round-trip: ask the terminal to copy, wait briefly,
    read the clipboard. If that yields nothing the operator is asked to paste
    the output by hand.
    """
    kind = ItemKind.TERMINAL

    def __init__(self, workspace: WorkspaceReader, clipboard: ClipboardReader, text_input: TextInput,
                 notifier: Optional[Notifier] = None, capture_delay: float = 0.3, max_length: int = 50000):
        super().__init__(workspace, text_input, notifier, max_length)
        self.clipboard = clipboard
        self.capture_delay = capture_delay

    async def create(self, terminal: Optional[TerminalHandle]) -> Optional[PromptItem]:
        if terminal is None:
            self.show_warning("No active terminal")
            return None

        output = await self.capture_output(terminal)
        if not output:
            return None

        item = PromptItem(
            kind=ItemKind.TERMINAL,
            title=f"Terminal: {terminal.name}",
            content=StaticContent(output),
        )
        self.show_status(f"Added terminal output: {terminal.name}")
        return item

    async def capture_output(self, terminal: TerminalHandle) -> Optional[str]:
        try:
            await terminal.trigger_copy()
            await asyncio.sleep(self.capture_delay)
            output = await run_blocking(self.clipboard.read_text)
        except Exception as e:
            logger.warning(f"Automatic terminal capture failed: {e}")
            return await self._prompt_manual_input()

        if not output or not output.strip():
            return await self._prompt_manual_input()
        return output

    async def _prompt_manual_input(self) -> Optional[str]:
        output = await self.text_input.ask(
            title="Terminal output",
            description="Could not capture the terminal output automatically, paste it here",
            max_length=self.max_length,
        )
        if output is None:
            return None
        return output.strip() or None

    async def edit(self, item: PromptItem) -> Optional[Dict[str, Any]]:
        new_content = await self._ask_for_new_content(item, "Edit terminal output")
        if new_content is None:
            return None
        return {"content": StaticContent(new_content)}
