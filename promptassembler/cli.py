# promptassembler/cli.py
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from loguru import logger

from .services.logging import setup_logging
from .config.loader import get_config, load_config
from .config.paths import get_workspace_config_path
from .config.schema import AppConfig, FormatPreset, SortOrder
from .core.formatter import ContentFormatter
from .core.ignore_rules import IgnoreRuleEngine
from .core.session import PromptSession
from .core.token_counter import count_tokens
from .services.async_utils import run_sync
from .services.clipboard import ClipboardError, ClipboardTerminal, SystemClipboard
from .services.host import ConsoleNotifier
from .services.workspace import WorkspaceReader
from .sources.tree import FolderTreeSource
from . import __version__

app = typer.Typer(help="Prompt Assembler - collect files, snippets, trees and diffs into one LLM prompt.")

def version_callback(value: bool):
    if value:
        print(f"Prompt Assembler Version: {__version__}")
        raise typer.Exit()

@app.callback()
def main_options(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."),
):
    """ Main callback to set up logging """
    log_level = "DEBUG" if verbose else "WARNING"
    setup_logging(level=log_level, verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["VERBOSE"] = verbose

def parse_snippet_spec(spec: str) -> Tuple[str, int, int]:
    """Parses 'path:START-END' or 'path:LINE' (1-based, inclusive)."""
    path, sep, line_range = spec.rpartition(":")
    if not sep or not path:
        raise typer.BadParameter(f"Snippet '{spec}' must look like path:START-END")
    start_text, _, end_text = line_range.partition("-")
    try:
        start = int(start_text)
        end = int(end_text) if end_text else start
    except ValueError:
        raise typer.BadParameter(f"Snippet '{spec}' has an invalid line range '{line_range}'")
    if start < 1 or end < start:
        raise typer.BadParameter(f"Snippet '{spec}' has an invalid line range '{line_range}'")
    return path, start, end

def _resolve_config(root: Path, config_path: Optional[Path], format_preset: Optional[FormatPreset],
                    template: Optional[str]) -> AppConfig:
    explicit = config_path or get_workspace_config_path(root)
    config = load_config(explicit) if explicit else get_config()

    format_updates = {}
    if format_preset is not None:
        format_updates["preset"] = format_preset
    if template is not None:
        format_updates["custom_template"] = template
        format_updates.setdefault("preset", FormatPreset.CUSTOM)
    if format_updates:
        config = config.model_copy(update={"format": config.format.model_copy(update=format_updates)})
    return config

@app.command()
def build(
    root: Path = typer.Option(Path("."), "--root", "-r", help="Workspace root; relative paths are resolved against it.", exists=True, file_okay=False, dir_okay=True, resolve_path=True),
    files: Optional[List[str]] = typer.Option(None, "--file", "-f", help="File or directory to add (directories are collected recursively)."),
    snippets: Optional[List[str]] = typer.Option(None, "--snippet", "-s", help="Line range to add as a snippet, e.g. 'src/app.py:10-25'."),
    trees: Optional[List[str]] = typer.Option(None, "--tree", "-t", help="Directory whose folder tree to add."),
    git_diff: bool = typer.Option(False, "--git-diff", help="Add the staged diff of the whole repository."),
    git_diff_files: Optional[List[str]] = typer.Option(None, "--git-diff-file", help="Add the staged diff of one file."),
    instructions: Optional[List[str]] = typer.Option(None, "--instruction", "-m", help="User instruction text."),
    ask_instruction: bool = typer.Option(False, "--ask-instruction", help="Write a user instruction in $EDITOR."),
    terminal: bool = typer.Option(False, "--terminal", help="Add terminal output from the clipboard."),
    sort: Optional[SortOrder] = typer.Option(None, "--sort", help="Order of the Sources section."),
    format_preset: Optional[FormatPreset] = typer.Option(None, "--format", help="Envelope for file and snippet content."),
    template: Optional[str] = typer.Option(None, "--template", help="string.Template for the custom format, e.g. '# $location\\n$content'."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON configuration file.", dir_okay=False, resolve_path=True),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the prompt to this file instead of stdout.", resolve_path=True),
    copy: bool = typer.Option(False, "--copy", help="Also copy the prompt to the clipboard."),
    export_zip: Optional[Path] = typer.Option(None, "--export-zip", help="Also export files and snippets to a ZIP archive.", resolve_path=True),
):
    """
    Collects the given items in order and prints the assembled prompt.
    """
    config = _resolve_config(root, config_path, format_preset, template)
    notifier = ConsoleNotifier()
    session = PromptSession(root, config=config, notifier=notifier)
    parsed_snippets = [parse_snippet_spec(spec) for spec in snippets or []]

    async def collect_and_generate() -> str:
        for text in instructions or []:
            await session.add_instruction(text)
        if ask_instruction:
            await session.add_instruction()
        if terminal:
            await session.add_terminal_output(ClipboardTerminal())
        for tree_path in trees or []:
            await session.add_tree(tree_path)
        if git_diff:
            await session.add_git_diff()
        for diff_path in git_diff_files or []:
            await session.add_git_diff(diff_path)
        await session.add_paths(files or [])
        for path, start, end in parsed_snippets:
            await session.add_snippet_lines(path, start, end)

        if export_zip is not None:
            await session.export_zip(export_zip)
        return await session.generate(sort)

    logger.info(f"Building prompt in workspace: {root}")
    prompt = run_sync(collect_and_generate)
    logger.info(session.status_reporter.text)

    tokens = count_tokens(prompt)
    logger.info(f"Prompt token count: {tokens}")
    if tokens > config.max_context_tokens:
        notifier.warning(f"Prompt is {tokens} tokens, above the configured limit of {config.max_context_tokens}.")

    if output is not None:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(prompt, encoding='utf-8')
        except OSError as e:
            logger.exception(f"Error writing output file: {e}")
            notifier.error(f"Could not write {output}: {e}")
            raise typer.Exit(code=1)
        notifier.info(f"Prompt written to {output} ({tokens} tokens)")
    else:
        typer.echo(prompt)

    if copy:
        try:
            SystemClipboard().write_text(prompt)
            notifier.info("Prompt copied to clipboard")
        except ClipboardError as e:
            notifier.warning(str(e))

@app.command()
def presets():
    """Lists the available content format presets."""
    for preset in ContentFormatter.available_presets():
        typer.echo(f"{preset['id']:<10} {preset['label']:<20} {preset['description']}")

@app.command()
def tree(
    path: Path = typer.Argument(..., help="Directory to render.", exists=True, file_okay=False, dir_okay=True, resolve_path=True),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON configuration file.", dir_okay=False, resolve_path=True),
):
    """Prints the folder tree of a directory using the configured ignore rules."""
    config = load_config(config_path) if config_path else get_config()
    source = FolderTreeSource(WorkspaceReader(path), IgnoreRuleEngine(config.ignore), ConsoleNotifier())
    typer.echo(source.render_tree(path).rstrip("\n"))

if __name__ == "__main__":
    app()
