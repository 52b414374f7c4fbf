# promptassembler/core/store.py
from typing import Callable, Iterator, List, Optional
from loguru import logger

from .models import ChangeType, ContentMode, ItemChangeEvent, ItemKind, PromptItem, StaticContent

ChangeListener = Callable[[ItemChangeEvent], None]

_IMMUTABLE_FIELDS = frozenset({"id", "kind", "index"})
_MUTABLE_FIELDS = frozenset({"title", "content", "file_path", "language", "line_start", "line_end"})

class ItemStore:
    """
    Ordered, in-memory collection of PromptItems.

    The store is the single source of truth for views: listeners registered with
    on_change receive an ItemChangeEvent after every successful mutation and
    nothing for no-op calls. Uniqueness is not enforced here; callers run the
    source's is_duplicate check before add().
    """

    def __init__(self):
        self._items: List[PromptItem] = []
        self._listeners: List[ChangeListener] = []

    # --- Notification ---

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Registers a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _fire(self, event: ItemChangeEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Error in store change listener for '{event.type.value}': {e}")

    # --- Mutations ---

    def add(self, item: PromptItem) -> None:
        item.index = len(self._items)
        self._items.append(item)
        logger.debug(f"Added {item.kind.value} item '{item.title}' at index {item.index}")
        self._fire(ItemChangeEvent(type=ChangeType.ADD, item=item))

    def remove(self, item_id: str) -> Optional[PromptItem]:
        position = self._position_of(item_id)
        if position is None:
            return None

        removed = self._items.pop(position)
        self._reindex()
        logger.debug(f"Removed item '{removed.title}' from index {position}")
        self._fire(ItemChangeEvent(type=ChangeType.REMOVE, item=removed))
        return removed

    def update(self, item_id: str, **updates) -> bool:
        """Merges fields into an existing item in place. Returns False if nothing changed."""
        item = self.get_by_id(item_id)
        if item is None:
            return False

        forbidden = set(updates) & _IMMUTABLE_FIELDS
        unknown = set(updates) - _IMMUTABLE_FIELDS - _MUTABLE_FIELDS
        if forbidden or unknown:
            logger.warning(f"Rejected update of item {item_id}: cannot set {sorted(forbidden | unknown)}")
            return False

        if "content" in updates:
            content = updates["content"]
            if isinstance(content, str):
                if item.mode is not ContentMode.STATIC:
                    logger.warning(f"Rejected update of item {item_id}: dynamic item given static text")
                    return False
                updates["content"] = StaticContent(content)
            elif getattr(content, "mode", None) is not item.mode:
                logger.warning(f"Rejected update of item {item_id}: content mode cannot change")
                return False

        for name, value in updates.items():
            setattr(item, name, value)
        self._fire(ItemChangeEvent(type=ChangeType.UPDATE, item=item))
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Moves the item at from_index so it ends up at to_index (splice-out, splice-in)."""
        if not self._is_valid_index(from_index) or not self._is_valid_index(to_index):
            return False

        item = self._items.pop(from_index)
        self._items.insert(to_index, item)
        self._reindex()
        self._fire(ItemChangeEvent(type=ChangeType.REORDER, items=list(self._items)))
        return True

    def clear(self) -> None:
        removed = self._items
        self._items = []
        logger.debug(f"Cleared {len(removed)} items")
        self._fire(ItemChangeEvent(type=ChangeType.CLEAR, items=removed))

    # --- Queries ---

    def get_all(self) -> List[PromptItem]:
        return list(self._items)

    def get_by_id(self, item_id: str) -> Optional[PromptItem]:
        return next((item for item in self._items if item.id == item_id), None)

    def get_by_kind(self, kind: ItemKind) -> List[PromptItem]:
        return [item for item in self._items if item.kind is kind]

    def find(self, predicate: Callable[[PromptItem], bool]) -> Optional[PromptItem]:
        return next((item for item in self._items if predicate(item)), None)

    def exists(self, predicate: Callable[[PromptItem], bool]) -> bool:
        return any(predicate(item) for item in self._items)

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[PromptItem]:
        return iter(self.get_all())

    def dispose(self) -> None:
        self._listeners.clear()

    # --- Helpers ---

    def _position_of(self, item_id: str) -> Optional[int]:
        for position, item in enumerate(self._items):
            if item.id == item_id:
                return position
        return None

    def _reindex(self):
        for position, item in enumerate(self._items):
            item.index = position

    def _is_valid_index(self, index: int) -> bool:
        return 0 <= index < len(self._items)
