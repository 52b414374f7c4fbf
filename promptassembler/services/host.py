# promptassembler/services/host.py
"""
Surfaces the host environment provides to the sources.

The core never talks to a terminal, dialog or status bar directly; it goes
through these small protocols so the CLI, tests, or any other front-end can
plug in their own implementations.
"""
import asyncio
from typing import Optional, Protocol

import typer
from loguru import logger

class Notifier(Protocol):
    def status(self, message: str) -> None: ...
    def info(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...

class TextInput(Protocol):
    async def ask(self, title: str, description: str, initial: str = "", max_length: int = 5000) -> Optional[str]:
        """Returns the entered text, or None when the operator cancels."""
        ...

class ClipboardReader(Protocol):
    def read_text(self) -> str: ...

class TerminalHandle(Protocol):
    name: str

    async def trigger_copy(self) -> None:
        """Asks the terminal to put its last command and output on the clipboard."""
        ...

class LogNotifier:
    """Routes notifications to the log only."""

    def status(self, message: str) -> None:
        logger.debug(message)

    def info(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)

class ConsoleNotifier(LogNotifier):
    """Echoes notifications to stderr, keeping stdout free for the prompt."""

    def status(self, message: str) -> None:
        super().status(message)
        typer.secho(message, err=True, dim=True)

    def info(self, message: str) -> None:
        super().info(message)
        typer.secho(message, err=True)

    def warning(self, message: str) -> None:
        super().warning(message)
        typer.secho(message, err=True, fg=typer.colors.YELLOW)

    def error(self, message: str) -> None:
        super().error(message)
        typer.secho(message, err=True, fg=typer.colors.RED)

class EditorTextInput:
    """Multi-line input through the user's $EDITOR (typer.edit)."""

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier or LogNotifier()

    async def ask(self, title: str, description: str, initial: str = "", max_length: int = 5000) -> Optional[str]:
        typer.secho(f"{title}: {description}", err=True, bold=True)
        text = await asyncio.to_thread(typer.edit, initial, require_save=True)
        if text is None:
            logger.debug(f"Input '{title}' cancelled")
            return None
        if len(text) > max_length:
            self.notifier.warning(f"Input is {len(text)} characters, the limit is {max_length}.")
            return None
        return text
