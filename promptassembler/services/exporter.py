# promptassembler/services/exporter.py
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence
from loguru import logger

from ..core.models import DynamicContent, ItemKind, PromptItem, StaticContent
from .async_utils import run_blocking
from .host import LogNotifier, Notifier

def archive_name(item: PromptItem) -> str:
    """Path of an item inside the archive; snippets get their line range in the file name."""
    relative = PurePosixPath((item.file_path or item.title).replace("\\", "/"))
    if relative.is_absolute() or ".." in relative.parts:
        raise ValueError(f"Refusing to export path outside the workspace: {relative}")
    if item.kind is ItemKind.SNIPPET:
        relative = relative.with_name(f"{relative.stem}_L{item.line_start}-{item.line_end}{relative.suffix}")
    return relative.as_posix()

async def _resolve(item: PromptItem) -> str:
    content = item.content
    if isinstance(content, StaticContent):
        return content.value
    if isinstance(content, DynamicContent):
        return await content.resolve()
    raise TypeError(f"Unexpected content type {type(content).__name__}")

async def export_to_zip(items: Sequence[PromptItem], destination: Path,
                        notifier: Optional[Notifier] = None) -> Optional[Path]:
    """
    Writes the file and snippet items to a ZIP archive at destination.

    Returns the archive path, or None when there was nothing to export or the
    archive could not be written. Items that fail to resolve are skipped.
    """
    notifier = notifier or LogNotifier()
    exportable = [item for item in items if item.is_code]
    if not exportable:
        notifier.warning("No files to export")
        return None

    entries: List[tuple] = []
    for item in exportable:
        try:
            entries.append((archive_name(item), await _resolve(item)))
        except Exception as e:
            logger.error(f"Failed to export {item.title}: {e}")

    def _write():
        destination.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, text in entries:
                archive.writestr(name, text)

    try:
        await run_blocking(_write)
    except OSError as e:
        notifier.error(f"Export failed: {e}")
        return None

    notifier.info(f"Exported {len(entries)} files to {destination.name}")
    return destination
