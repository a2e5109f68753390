"""Command-line interface for code-fix-engine."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from code_fix_engine.analysis.overlap_detector import Overlap
from code_fix_engine.cli.config_loader import load_runtime_config
from code_fix_engine.cli.error_handler import handle_cli_errors
from code_fix_engine.config.runtime_config import OverlapPolicy, RuntimeConfig
from code_fix_engine.core.models import CodeFix, FeedbackCategory, LineReference
from code_fix_engine.core.patcher import ResponsePatcher
from code_fix_engine.extraction.line_numbers import LineNumberStyle, add_line_numbers
from code_fix_engine.feedback.presentation import get_category_label, get_category_style
from code_fix_engine.utils.file_io import atomic_write, read_text
from code_fix_engine.utils.selection import extract_selected_text, is_valid_selection
from code_fix_engine.utils.text import count_lines

console = Console()
logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Turn AI code review responses into feedback sections and safe line edits.

    Defines the top-level `cli` command group with a version option and registers
    the `categorize`, `extract`, `preview` and `apply` subcommands.
    """


def validate_line_number(ctx: click.Context, param: click.Parameter, value: int) -> int:
    """Validate that a line number is positive.

    Raises:
        click.BadParameter: If the line number is less than 1.
    """
    if value < 1:
        raise click.BadParameter("line numbers start at 1", ctx=ctx, param=param)
    return value


def common_options(func: F) -> F:
    """Attach the configuration and logging options shared by every command."""
    options = [
        click.option(
            "--config",
            type=str,
            help=(
                "Configuration preset name (balanced/strict/lenient) "
                "or path to configuration file (YAML/TOML)"
            ),
        ),
        click.option(
            "--overlap-policy",
            type=click.Choice([p.value for p in OverlapPolicy], case_sensitive=False),
            help="How overlapping fixes are handled (default: merge)",
        ),
        click.option(
            "--log-level",
            type=click.Choice(
                ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
            ),
            help="Logging level (default: INFO)",
        ),
        click.option(
            "--log-file",
            type=click.Path(dir_okay=False),
            help="Path to log file (default: stderr only)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def selection_options(func: F) -> F:
    """Attach the --start/--end options describing the reviewed selection."""
    func = click.option(
        "--end",
        "end_line",
        required=True,
        type=int,
        callback=validate_line_number,
        help="Last selected line (1-indexed, inclusive)",
    )(func)
    func = click.option(
        "--start",
        "start_line",
        required=True,
        type=int,
        callback=validate_line_number,
        help="First selected line (1-indexed)",
    )(func)
    return func


def _configure(
    config: str | None,
    overlap_policy: str | None,
    log_level: str | None,
    log_file: str | None,
) -> RuntimeConfig:
    """Load runtime configuration and set up logging from it."""
    cli_overrides = {
        "overlap_policy": overlap_policy,
        "log_level": log_level.upper() if log_level else None,
        "log_file": str(log_file) if log_file else None,
    }

    with handle_cli_errors("loading configuration"):
        runtime_config, preset_name = load_runtime_config(
            config=config, cli_overrides=cli_overrides
        )

        log_handler = (
            logging.FileHandler(runtime_config.log_file)
            if runtime_config.log_file
            else logging.StreamHandler()
        )
        logging.basicConfig(
            level=getattr(logging, runtime_config.log_level),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[log_handler],
            force=True,
        )

    if preset_name:
        logger.info(f"Using preset: {preset_name}")
    return runtime_config


def _read(path: Path, what: str) -> str:
    with handle_cli_errors(f"reading {what}"):
        return read_text(path)


def _selection(start_line: int, end_line: int) -> LineReference:
    if start_line > end_line:
        raise click.BadParameter(
            f"--start ({start_line}) must not be greater than --end ({end_line})"
        )
    return LineReference(start_line=start_line, end_line=end_line)


def _check_selection(source_text: str, selection: LineReference) -> None:
    """Abort when the selection holds nothing to review."""
    selected = extract_selected_text(source_text, selection.start_line, selection.end_line)
    if not is_valid_selection(selection.start_line, selection.end_line, selected):
        console.print(
            f"[yellow]⚠ Lines {selection.start_line}-{selection.end_line} "
            "contain no code to fix[/yellow]"
        )
        raise click.Abort()


def _category_panel(category: FeedbackCategory) -> Panel:
    style = get_category_style(category.type)
    return Panel(
        Text(category.content),
        title=f"[{style}]{get_category_label(category.type)}[/]",
        title_align="left",
        border_style=style,
    )


def _fix_panel(index: int, fix: CodeFix) -> Panel:
    before = add_line_numbers(fix.original_code, LineNumberStyle.PIPE, start=fix.start_line)
    after = add_line_numbers(fix.new_code, LineNumberStyle.PIPE, start=fix.start_line)
    body = Group(
        Text("Before", style="bold red"),
        Text(before),
        Text(""),
        Text("After", style="bold green"),
        Text(after),
    )
    return Panel(
        body,
        title=f"Fix {index}: lines {fix.start_line}-{fix.end_line}",
        title_align="left",
        border_style="cyan",
    )


def _display_overlaps(overlaps: list[Overlap]) -> None:
    table = Table(title="Overlapping Fixes")
    table.add_column("First", style="cyan")
    table.add_column("Second", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Overlap %", style="blue")

    for overlap in overlaps:
        table.add_row(
            f"{overlap.first.start_line}-{overlap.first.end_line}",
            f"{overlap.second.start_line}-{overlap.second.end_line}",
            overlap.kind,
            f"{overlap.percentage:.1f}%",
        )

    console.print(table)


@cli.command()
@click.argument("response_file", type=click.Path(dir_okay=False, path_type=Path))
@common_options
def categorize(
    response_file: Path,
    config: str | None,
    overlap_policy: str | None,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """Split an AI response into errors, suggestions, improvements and explanations.

    Args:
        response_file: File holding the assistant message.
        config: Configuration preset name or path to configuration file (YAML/TOML).
        overlap_policy: Overlap handling (unused by this command).
        log_level: Logging level.
        log_file: Path to log file for output.
    """
    runtime_config = _configure(config, overlap_policy, log_level, log_file)
    response = _read(response_file, "response")

    patcher = ResponsePatcher(runtime_config)
    for category in patcher.categorize(response):
        console.print(_category_panel(category))


@cli.command()
@click.argument("response_file", type=click.Path(dir_okay=False, path_type=Path))
@selection_options
@click.option(
    "--source",
    "source_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Reviewed file; adds the lines each block most resembles",
)
@common_options
def extract(
    response_file: Path,
    start_line: int,
    end_line: int,
    source_file: Path | None,
    config: str | None,
    overlap_policy: str | None,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """List the code blocks of an AI response and the lines each one replaces."""
    runtime_config = _configure(config, overlap_policy, log_level, log_file)
    selection = _selection(start_line, end_line)
    response = _read(response_file, "response")
    source_text = _read(source_file, "source file") if source_file else None

    patcher = ResponsePatcher(runtime_config)
    blocks = patcher.extract_code_blocks(response, selection)
    if not blocks:
        console.print("No code blocks found")
        return

    table = Table(title="Code Blocks")
    table.add_column("#", style="dim")
    table.add_column("Language", style="cyan")
    table.add_column("Lines", style="yellow")
    table.add_column("Code lines", style="magenta")
    if source_text is not None:
        table.add_column("Best match", style="blue")

    for index, block in enumerate(blocks, start=1):
        line_range = block.line_range or selection
        row = [
            str(index),
            escape(block.language or "-"),
            f"{line_range.start_line}-{line_range.end_line}",
            str(count_lines(block.code)),
        ]
        if source_text is not None:
            match = patcher.locate(block.code, source_text, line_range)
            row.append(f"{match.start_line}-{match.end_line}")
        table.add_row(*row)

    console.print(table)


@cli.command()
@click.argument("response_file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("source_file", type=click.Path(dir_okay=False, path_type=Path))
@selection_options
@common_options
def preview(
    response_file: Path,
    source_file: Path,
    start_line: int,
    end_line: int,
    config: str | None,
    overlap_policy: str | None,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """Show the before/after of every fix an AI response proposes for a file."""
    runtime_config = _configure(config, overlap_policy, log_level, log_file)
    selection = _selection(start_line, end_line)
    response = _read(response_file, "response")
    source_text = _read(source_file, "source file")
    _check_selection(source_text, selection)

    fixes = ResponsePatcher(runtime_config).preview(response, source_text, selection)
    if not fixes:
        console.print("✅ No code fixes to preview")
        return

    for index, fix in enumerate(fixes, start=1):
        console.print(_fix_panel(index, fix))
    console.print(f"\n📊 {len(fixes)} fix(es) proposed")


@cli.command()
@click.argument("response_file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("source_file", type=click.Path(dir_okay=False, path_type=Path))
@selection_options
@click.option("--dry-run", is_flag=True, help="Show the outcome without writing any file")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the patched file here instead of overwriting SOURCE_FILE",
)
@click.option("--backup", is_flag=True, help="Keep a .bak copy of the file being overwritten")
@common_options
def apply(
    response_file: Path,
    source_file: Path,
    start_line: int,
    end_line: int,
    dry_run: bool,
    output: Path | None,
    backup: bool,
    config: str | None,
    overlap_policy: str | None,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """Apply the fixes an AI response proposes to a source file.

    Args:
        response_file: File holding the assistant message.
        source_file: File the review was made against.
        start_line: First selected line.
        end_line: Last selected line.
        dry_run: Report the outcome without writing.
        output: Destination for the patched file; defaults to ``source_file``.
        backup: Keep a copy of the overwritten file next to it.
        config: Configuration preset name or path to configuration file (YAML/TOML).
        overlap_policy: Merge or reject overlapping fixes.
        log_level: Logging level.
        log_file: Path to log file for output.

    Raises:
        click.Abort: If the files cannot be read or written, or the configuration
            is invalid.
    """
    runtime_config = _configure(config, overlap_policy, log_level, log_file)
    selection = _selection(start_line, end_line)
    response = _read(response_file, "response")
    source_text = _read(source_file, "source file")
    _check_selection(source_text, selection)

    patcher = ResponsePatcher(runtime_config)
    review = patcher.process(response, source_text, selection)
    result = patcher.apply(source_text, review.replacements)

    if result.overlaps:
        _display_overlaps(result.overlaps)

    if not result.changed:
        if result.rejected:
            console.print(f"[yellow]⚠ {len(result.rejected)} fix(es) rejected[/yellow]")
        console.print("No changes applied")
        return

    summary = f"{len(result.applied)} fix(es)"
    if dry_run:
        console.print(f"[dim]Dry run: would apply {summary}[/dim]")
        return

    destination = output or source_file
    with handle_cli_errors("writing patched file"):
        backup_path = atomic_write(
            destination, result.content, keep_backup=backup, mode_source=source_file
        )
    console.print(f"✅ Applied {summary} to {escape(str(destination))}")
    if backup_path:
        console.print(f"[dim]Backup saved to {escape(str(backup_path))}[/dim]")
