"""Command-line interface for todotxt."""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from .config import Config, get_config, resolve_tracking_enabled
from .exceptions import TodoTxtError
from .registry import AnnotationRegistry
from .scanner import register_annotations, scan_path
from .storage import SaveFormat, load, save
from .task import Task, format_date


console = Console()
err_console = Console(stderr=True)

FORMAT_CHOICES = [f.value for f in SaveFormat]


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    err_console.print(Text.assemble(("Error: ", "red"), message))
    sys.exit(1)


def format_task_row(task: Task) -> List[Union[str, Text]]:
    """Format a task as table cells."""
    return [
        "✓" if task.is_complete else "",
        task.priority or "",
        format_date(task.completed_on) if task.completed_on else "",
        format_date(task.created_on) if task.created_on else "",
        Text(task.description),
        Text(" ".join("+" + p for p in task.projects())),
        Text(" ".join("@" + c for c in task.contexts())),
    ]


def build_task_table(tasks: List[Task], title: str, hits: Optional[Dict[Task, int]] = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold blue")
    table.add_column("Done", style="green", justify="center")
    table.add_column("Pri", style="yellow", justify="center")
    table.add_column("Completed", style="dim")
    table.add_column("Created", style="dim")
    table.add_column("Description", style="white")
    table.add_column("Projects", style="magenta")
    table.add_column("Contexts", style="cyan")
    if hits is not None:
        table.add_column("Hits", style="bold", justify="right")
    for task in tasks:
        row = format_task_row(task)
        if hits is not None:
            row.append(str(hits.get(task, 0)))
        table.add_row(*row)
    return table


def load_or_fail(path: Path) -> List[Task]:
    try:
        return load(path)
    except (TodoTxtError, OSError) as e:
        fail(str(e))


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx, config_path, verbose):
    """todotxt - read, validate, export and collect todo.txt tasks."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config.reload(config_path) if config_path else get_config()


@main.command()
@click.argument("file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--pending", is_flag=True, help="Hide completed tasks")
@click.pass_context
def show(ctx, file: Optional[Path], pending: bool):
    """List the tasks in FILE (defaults to the configured todo file)."""
    file = file or ctx.obj["config"].get_todo_path()
    tasks = load_or_fail(file)
    if pending:
        tasks = [t for t in tasks if not t.is_complete]

    if not tasks:
        console.print(f"[yellow]No tasks in {file}[/yellow]")
        return
    console.print(build_task_table(tasks, title=str(file)))


@main.command()
@click.argument("file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def check(ctx, file: Optional[Path]):
    """Validate every line of FILE (defaults to the configured todo file)."""
    file = file or ctx.obj["config"].get_todo_path()
    tasks = load_or_fail(file)
    console.print(f"[green]{file}: {len(tasks)} valid tasks[/green]")


@main.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(FORMAT_CHOICES), default=SaveFormat.TODO.value, show_default=True)
@click.option("--heading", default=None, help="Markdown heading (defaults to config)")
@click.pass_context
def export(ctx, file: Path, output: Path, fmt: str, heading: Optional[str]):
    """Re-save FILE to OUTPUT as canonical todo.txt or a Markdown checklist."""
    config = ctx.obj["config"]
    tasks = load_or_fail(file)
    try:
        save(output, tasks, fmt, heading=heading or config.markdown_heading)
    except (TodoTxtError, OSError) as e:
        fail(str(e))
    console.print(f"[green]Wrote {len(tasks)} tasks to {output}[/green]")


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Save annotations to this file")
@click.option("--format", "fmt", type=click.Choice(FORMAT_CHOICES), default=SaveFormat.TODO.value, show_default=True)
@click.option("--heading", default=None, help="Markdown heading (defaults to config)")
@click.option("--track/--no-track", default=None, help="Count hits (defaults to TODOTXT_TRACK, config, then session type)")
@click.pass_context
def scan(ctx, paths, output: Optional[Path], fmt: str, heading: Optional[str], track: Optional[bool]):
    """Collect TODO/FIXME comments under PATHS as todo.txt tasks."""
    config = ctx.obj["config"]
    registry = AnnotationRegistry(tracking_enabled=resolve_tracking_enabled(track, config=config))

    for root in paths or (Path("."),):
        annotations = scan_path(
            root,
            markers=config.scan_markers,
            extensions=config.scan_extensions,
            ignored_dirs=config.ignored_dirs,
        )
        register_annotations(annotations, registry)

    entries = registry.items()
    if not entries:
        console.print("[yellow]No annotations found[/yellow]")
    else:
        table = build_task_table(sorted(entries, key=str), title="Annotations", hits=entries)
        console.print(table)

    if output is not None:
        try:
            save(output, sorted(entries, key=str), fmt, heading=heading or config.markdown_heading)
        except (TodoTxtError, OSError) as e:
            fail(str(e))
        console.print(f"[green]Wrote {len(entries)} annotations to {output}[/green]")


if __name__ == "__main__":
    main()
