# promptassembler/core/formatter.py
from string import Template
from typing import Callable, Dict, List, Optional, assert_never
from loguru import logger

from ..config.schema import FormatConfig, FormatPreset
from .models import FormatContext, ItemKind, PromptItem
from .plugins import get_formatter_by_name

CustomFormatter = Callable[[FormatContext], str]

_PRESET_DESCRIPTIONS: Dict[FormatPreset, tuple] = {
    FormatPreset.XML: ("XML tags", '<Content src="..." lang="...">...</Content>'),
    FormatPreset.MARKDOWN: ("Markdown code block", "```lang\\n...\\n```"),
    FormatPreset.PLAIN: ("Plain text", "No envelope, content only"),
    FormatPreset.GITHUB: ("GitHub style", "Code block preceded by a file path comment"),
    FormatPreset.CUSTOM: ("Custom", "Formatter plugin, injected callable or $-template"),
}

def format_xml(ctx: FormatContext) -> str:
    return f'<Content src="{ctx.location}" lang="{ctx.language}">\n{ctx.content}\n</Content>'

def format_markdown(ctx: FormatContext) -> str:
    lang = ctx.language or "text"
    return f"```{lang}\n{ctx.content}\n```"

def format_plain(ctx: FormatContext) -> str:
    return ctx.content

def format_github(ctx: FormatContext) -> str:
    lang = ctx.language or "text"
    if ctx.kind is ItemKind.SNIPPET:
        filepath = f"{ctx.file_path}#L{ctx.line_start}-L{ctx.line_end}"
    else:
        filepath = ctx.file_path
    return f"<!-- filepath: {filepath} -->\n```{lang}\n{ctx.content}\n```"

def template_formatter(template_text: str) -> CustomFormatter:
    """
    Builds a formatter from a string.Template.

    Placeholders: $path $language $content $kind $location $line_start $line_end.
    Unknown placeholders raise KeyError at format time, which triggers the xml fallback.
    """
    template = Template(template_text)

    def _format(ctx: FormatContext) -> str:
        return template.substitute(
            path=ctx.file_path,
            language=ctx.language,
            content=ctx.content,
            kind=ctx.kind.value,
            location=ctx.location,
            line_start="" if ctx.line_start is None else str(ctx.line_start),
            line_end="" if ctx.line_end is None else str(ctx.line_end),
        )
    return _format

class ContentFormatter:
    """Wraps the resolved text of file and snippet items in the configured envelope."""

    def __init__(self, config: Optional[FormatConfig] = None, custom: Optional[CustomFormatter] = None):
        self.config = config or FormatConfig()
        self._custom = custom if custom is not None else self._resolve_custom_formatter()

    @property
    def preset(self) -> FormatPreset:
        return self.config.preset

    def _resolve_custom_formatter(self) -> Optional[CustomFormatter]:
        if self.config.preset is not FormatPreset.CUSTOM:
            return None

        if self.config.custom_plugin:
            plugin_class = get_formatter_by_name(self.config.custom_plugin)
            if plugin_class is None:
                logger.error(f"Formatter plugin '{self.config.custom_plugin}' is not registered.")
            else:
                try:
                    return plugin_class().format
                except Exception as e:
                    logger.error(f"Could not instantiate formatter plugin '{self.config.custom_plugin}': {e}")

        if self.config.custom_template:
            return template_formatter(self.config.custom_template)

        logger.warning("Custom format preset selected but no formatter is available, using xml.")
        return None

    def format(self, item: PromptItem, content: str) -> str:
        kind = item.kind
        if kind is ItemKind.FILE or kind is ItemKind.SNIPPET:
            return self.format_context(self._create_context(item, content))
        elif (kind is ItemKind.TERMINAL or kind is ItemKind.TREE
              or kind is ItemKind.GIT_DIFF or kind is ItemKind.USER_INSTRUCTION):
            return content
        else:
            assert_never(kind)

    def format_context(self, ctx: FormatContext) -> str:
        preset = self.config.preset
        if preset is FormatPreset.XML:
            return format_xml(ctx)
        elif preset is FormatPreset.MARKDOWN:
            return format_markdown(ctx)
        elif preset is FormatPreset.PLAIN:
            return format_plain(ctx)
        elif preset is FormatPreset.GITHUB:
            return format_github(ctx)
        elif preset is FormatPreset.CUSTOM:
            return self._format_custom(ctx)
        else:
            assert_never(preset)

    def _format_custom(self, ctx: FormatContext) -> str:
        if self._custom is None:
            return format_xml(ctx)

        try:
            result = self._custom(ctx)
        except Exception as e:
            logger.error(f"Custom formatter failed for {ctx.location}: {e}. Falling back to xml.")
            return format_xml(ctx)

        if not isinstance(result, str):
            logger.error(f"Custom formatter returned {type(result).__name__} for {ctx.location}, expected str. Falling back to xml.")
            return format_xml(ctx)
        return result

    @staticmethod
    def _create_context(item: PromptItem, content: str) -> FormatContext:
        return FormatContext(
            file_path=item.file_path or "",
            language=item.language or "",
            content=content,
            kind=item.kind,
            line_start=item.line_start if item.kind is ItemKind.SNIPPET else None,
            line_end=item.line_end if item.kind is ItemKind.SNIPPET else None,
        )

    @staticmethod
    def available_presets() -> List[Dict[str, str]]:
        return [
            {"id": preset.value, "label": label, "description": description}
            for preset, (label, description) in _PRESET_DESCRIPTIONS.items()
        ]
