# promptassembler/sources/base.py
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from ..core.models import ItemKind, PromptItem
from ..services.host import LogNotifier, Notifier, TextInput
from ..services.workspace import WorkspaceReader

class ContentSource(ABC):
    """
    Creates PromptItems of one kind.

    create() returns None on any acquisition failure (unreadable resource, no
    terminal, cancelled dialog) after telling the operator through the notifier;
    it does not raise and never touches the store.
    """
    kind: ItemKind

    def __init__(self, workspace: WorkspaceReader, notifier: Optional[Notifier] = None):
        self.workspace = workspace
        self.notifier = notifier or LogNotifier()

    @abstractmethod
    async def create(self, *args, **kwargs) -> Optional[PromptItem]:
        ...

    def is_duplicate(self, candidate: PromptItem, existing_items: Sequence[PromptItem]) -> bool:
        """Kinds without a de-duplication key are never duplicates."""
        return False

    def show_status(self, message: str) -> None:
        self.notifier.status(message)

    def show_info(self, message: str) -> None:
        self.notifier.info(message)

    def show_warning(self, message: str) -> None:
        self.notifier.warning(message)

    def show_error(self, message: str) -> None:
        self.notifier.error(message)

class EditableSource(ContentSource):
    """Source whose static items can be edited after collection."""

    def __init__(self, workspace: WorkspaceReader, text_input: TextInput,
                 notifier: Optional[Notifier] = None, max_length: int = 50000):
        super().__init__(workspace, notifier)
        self.text_input = text_input
        self.max_length = max_length

    @abstractmethod
    async def edit(self, item: PromptItem) -> Optional[Dict[str, Any]]:
        """Returns the fields to pass to ItemStore.update, or None if cancelled or unchanged."""

    async def _ask_for_new_content(self, item: PromptItem, description: str) -> Optional[str]:
        current = item.static_text
        if current is None:
            self.show_error("Only static items can be edited")
            return None

        new_content = await self.text_input.ask(
            title=f"Edit {item.title}",
            description=description,
            initial=current,
            max_length=self.max_length,
        )
        if new_content is None or new_content == current:
            return None
        return new_content
