# promptassembler/services/clipboard.py
import pyperclip
from loguru import logger

class ClipboardError(Exception):
    pass

class SystemClipboard:
    """OS clipboard through pyperclip."""

    def read_text(self) -> str:
        try:
            return pyperclip.paste() or ""
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Clipboard is not available: {e}") from e

    def write_text(self, text: str) -> None:
        try:
            pyperclip.copy(text)
            logger.debug(f"Copied {len(text)} characters to clipboard")
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Clipboard is not available: {e}") from e

class ClipboardTerminal:
    """
    Terminal handle for hosts without a terminal API.

    The operator copies the last command and its output themselves, so the
    copy trigger has nothing to do; the capture then reads the clipboard.
    """

    def __init__(self, name: str = "clipboard"):
        self.name = name

    async def trigger_copy(self) -> None:
        logger.debug(f"Terminal '{self.name}' relies on a manual copy")
