# promptassembler/core/models.py
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

class ItemKind(str, Enum):
    FILE = "file"
    SNIPPET = "snippet"
    TERMINAL = "terminal"
    TREE = "tree"
    GIT_DIFF = "git-diff"
    USER_INSTRUCTION = "user-instruction"

class ContentMode(str, Enum):
    STATIC = "static"   # Captured once when the item is collected
    DYNAMIC = "dynamic" # Re-read from its resource on every generate

class ChangeType(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"
    REORDER = "reorder"
    CLEAR = "clear"

DynamicContentGenerator = Callable[[], Awaitable[str]]

@dataclass(frozen=True)
class StaticContent:
    value: str

    @property
    def mode(self) -> ContentMode:
        return ContentMode.STATIC

@dataclass(frozen=True)
class DynamicContent:
    resolve: DynamicContentGenerator

    @property
    def mode(self) -> ContentMode:
        return ContentMode.DYNAMIC

PromptContent = Union[StaticContent, DynamicContent]

# Kinds that carry a file path and language and go through the formatter
CODE_KINDS = frozenset({ItemKind.FILE, ItemKind.SNIPPET})

def new_item_id() -> str:
    return uuid.uuid4().hex

@dataclass
class PromptItem:
    """One unit of collected content."""
    kind: ItemKind
    title: str
    content: PromptContent
    file_path: Optional[str] = None
    language: Optional[str] = None
    line_start: Optional[int] = None # 1-based, inclusive (snippets only)
    line_end: Optional[int] = None
    index: int = 0 # Assigned by the store
    id: str = field(default_factory=new_item_id)

    def __post_init__(self):
        if not isinstance(self.content, (StaticContent, DynamicContent)):
            raise TypeError(f"content must be StaticContent or DynamicContent, got {type(self.content).__name__}")
        if self.kind in (ItemKind.FILE, ItemKind.SNIPPET, ItemKind.TREE) and not self.file_path:
            raise ValueError(f"{self.kind.value} items require a file_path")
        if self.kind is ItemKind.SNIPPET:
            if self.content.mode is not ContentMode.STATIC:
                raise ValueError("snippet content is always static")
            if self.line_start is None or self.line_end is None:
                raise ValueError("snippet items require line_start and line_end")

    @property
    def mode(self) -> ContentMode:
        return self.content.mode

    @property
    def is_code(self) -> bool:
        return self.kind in CODE_KINDS

    @property
    def display_path(self) -> str:
        """Path shown in outlines and used for filePath sorting."""
        if self.kind is ItemKind.SNIPPET:
            return f"{self.file_path} (lines {self.line_start}-{self.line_end})"
        return self.file_path or ""

    @property
    def static_text(self) -> Optional[str]:
        if isinstance(self.content, StaticContent):
            return self.content.value
        return None

@dataclass
class ItemChangeEvent:
    type: ChangeType
    item: Optional[PromptItem] = None
    items: Optional[List[PromptItem]] = None

@dataclass(frozen=True)
class FormatContext:
    """Metadata handed to formatters for one code item."""
    file_path: str
    language: str
    content: str
    kind: ItemKind
    line_start: Optional[int] = None
    line_end: Optional[int] = None

    @property
    def location(self) -> str:
        if self.kind is ItemKind.SNIPPET:
            return f"{self.file_path} (lines {self.line_start}-{self.line_end})"
        return self.file_path
