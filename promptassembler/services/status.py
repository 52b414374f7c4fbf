# promptassembler/services/status.py
from loguru import logger

from ..core.models import ItemChangeEvent
from ..core.store import ItemStore

class StatusReporter:
    """Item counter kept in sync with the store, like an editor status bar entry."""

    def __init__(self, store: ItemStore):
        self.store = store
        self.text = ""
        self.visible = False
        self._unsubscribe = store.on_change(self._on_change)
        self.update()

    def _on_change(self, event: ItemChangeEvent) -> None:
        self.update()
        logger.debug(f"Store change '{event.type.value}': {self.text}")

    def update(self) -> None:
        count = self.store.count
        noun = "item" if count == 1 else "items"
        self.text = f"Prompt: {count} {noun}"
        self.visible = count > 0

    def dispose(self) -> None:
        self._unsubscribe()
