# promptassembler/core/assembler.py
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, assert_never
from loguru import logger

from ..config.schema import SortOrder
from .formatter import ContentFormatter
from .models import DynamicContent, ItemKind, PromptItem, StaticContent

EMPTY_PROMPT = "No files or code snippets selected."
DEFAULT_RESOLVE_TIMEOUT = 30.0

@dataclass
class _Groups:
    user_instructions: List[PromptItem] = field(default_factory=list)
    terminals: List[PromptItem] = field(default_factory=list)
    trees: List[PromptItem] = field(default_factory=list)
    git_diffs: List[PromptItem] = field(default_factory=list)
    code_items: List[PromptItem] = field(default_factory=list)

@dataclass
class _CodeEntry:
    path: str
    prompt: str
    index: int

def error_marker(message: str) -> str:
    return f"[Error: failed to resolve dynamic content - {message}]"

class PromptAssembler:
    """
    Turns the ordered item list into the final prompt text.

    Sections always appear as user instructions, terminal output, folder
    structure, git diff, then sources; empty groups are left out. Every dynamic
    item is resolved at generate time and a failing producer only costs that
    item an inline error marker.
    """

    def __init__(self, formatter: Optional[ContentFormatter] = None, resolve_timeout: Optional[float] = DEFAULT_RESOLVE_TIMEOUT):
        self.formatter = formatter or ContentFormatter()
        self.resolve_timeout = resolve_timeout

    async def generate(self, items: Sequence[PromptItem], sort_order: SortOrder = SortOrder.OPENING_ORDER) -> str:
        if not items:
            return EMPTY_PROMPT

        logger.info(f"Generating prompt from {len(items)} items (sort: {sort_order.value})")
        grouped = self._group_items(items)

        # Resolve everything up front; section order is fixed by the groups, not completion order
        resolved_list = await asyncio.gather(*(self.resolve_content(item) for item in items))
        resolved: Dict[str, str] = {item.id: text for item, text in zip(items, resolved_list)}

        sections: List[str] = []
        if grouped.user_instructions:
            sections.append(self._format_user_instructions(grouped.user_instructions, resolved))
        if grouped.terminals:
            sections.append(self._format_fenced_section("### Terminal Output ###", grouped.terminals, resolved))
        if grouped.trees:
            sections.append(self._format_fenced_section("### Folder Structure ###", grouped.trees, resolved))
        if grouped.git_diffs:
            sections.append(self._format_fenced_section("### Git Diff (--cached) ###", grouped.git_diffs, resolved, fence_lang="diff"))
        if grouped.code_items:
            sections.append(self._format_code_items(grouped.code_items, resolved, sort_order))

        prompt = "".join(sections).rstrip()
        logger.info(f"Prompt generated: {len(sections)} sections, {len(prompt)} characters")
        return prompt

    def _group_items(self, items: Sequence[PromptItem]) -> _Groups:
        groups = _Groups()
        for item in items:
            kind = item.kind
            if kind is ItemKind.USER_INSTRUCTION:
                groups.user_instructions.append(item)
            elif kind is ItemKind.TERMINAL:
                groups.terminals.append(item)
            elif kind is ItemKind.TREE:
                groups.trees.append(item)
            elif kind is ItemKind.GIT_DIFF:
                groups.git_diffs.append(item)
            elif kind is ItemKind.FILE or kind is ItemKind.SNIPPET:
                groups.code_items.append(item)
            else:
                assert_never(kind)
        return groups

    async def resolve_content(self, item: PromptItem) -> str:
        """Returns the item's text. Never raises: failures become an inline error marker."""
        content = item.content
        if isinstance(content, StaticContent):
            return content.value
        elif isinstance(content, DynamicContent):
            try:
                if self.resolve_timeout is None:
                    text = await content.resolve()
                else:
                    text = await asyncio.wait_for(content.resolve(), timeout=self.resolve_timeout)
            except asyncio.TimeoutError:
                logger.error(f"Dynamic content for '{item.title}' timed out after {self.resolve_timeout}s")
                return error_marker(f"timed out after {self.resolve_timeout:g}s")
            except Exception as e:
                logger.error(f"Dynamic content for '{item.title}' failed: {e}")
                return error_marker(str(e) or type(e).__name__)

            if not isinstance(text, str):
                logger.error(f"Dynamic content for '{item.title}' returned {type(text).__name__}")
                return error_marker(f"producer returned {type(text).__name__}, expected str")
            return text
        else:
            assert_never(content)

    def _format_user_instructions(self, items: List[PromptItem], resolved: Dict[str, str]) -> str:
        result = "### User Instructions ###\n\n"
        for item in items:
            result += f"{resolved[item.id]}\n\n"
        return result

    def _format_fenced_section(self, heading: str, items: List[PromptItem], resolved: Dict[str, str], fence_lang: str = "") -> str:
        result = f"{heading}\n\n"
        for item in items:
            result += f"{item.title}\n```{fence_lang}\n{resolved[item.id]}\n```\n\n"
        return result

    def _format_code_items(self, items: List[PromptItem], resolved: Dict[str, str], sort_order: SortOrder) -> str:
        entries = [self._format_code_item(item, resolved[item.id]) for item in items]
        self._sort_code_entries(entries, sort_order)

        outlines = "\n".join(f"- {entry.path}" for entry in entries)
        contents = "\n\n".join(entry.prompt for entry in entries)
        return f"### Sources ###\n\nOutlines:\n\n{outlines}\n\nContent:\n\n{contents}\n\n"

    def _format_code_item(self, item: PromptItem, content: str) -> _CodeEntry:
        label = "Snippet" if item.kind is ItemKind.SNIPPET else "File"
        wrapped = self.formatter.format(item, content)
        return _CodeEntry(path=item.display_path, prompt=f"{label}: {item.display_path}\n{wrapped}", index=item.index)

    @staticmethod
    def _sort_code_entries(entries: List[_CodeEntry], sort_order: SortOrder) -> None:
        if sort_order is SortOrder.FILE_PATH:
            entries.sort(key=lambda entry: entry.path)
        elif sort_order is SortOrder.OPENING_ORDER:
            entries.sort(key=lambda entry: entry.index)
        else:
            assert_never(sort_order)
