"""
Rich progress displays and result panels for CLI operations.

All output goes to stderr so stdout stays free for paths and text that
scripts consume.
"""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from facadegen import TechnicalPlanItem

console = Console(stderr=True)


@contextmanager
def operation_progress(description: str, model: str | None = None) -> Iterator[None]:
    """
    Display a transient spinner while a remote call is in flight.

    Args:
        description: What is being generated (e.g. "Generating redesign")
        model: Model id shown next to the description
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    label = description
    if model:
        model_display = model if len(model) <= 40 else f"{model[:37]}..."
        label = f"{description} [dim]({escape(model_display)})[/dim]"

    with progress:
        task = progress.add_task(label, total=None)
        yield
        progress.update(task, completed=True)


def _plan_table(plan: Sequence[TechnicalPlanItem]) -> Table:
    table = Table(show_lines=True, expand=True)
    table.add_column("Item", style="bold cyan")
    table.add_column("Material")
    table.add_column("Dimensions", style="magenta")
    table.add_column("Details", style="dim")
    for entry in plan:
        table.add_row(
            escape(entry.item),
            escape(entry.material),
            escape(entry.dimensions),
            escape(entry.details),
        )
    return table


def print_redesign_result(
    image_path: Path,
    plan_path: Path,
    plan: Sequence[TechnicalPlanItem],
    prompt_used: str,
) -> None:
    """Print the saved redesign paths and the technical plan."""
    details = Table.grid(padding=(0, 2))
    details.add_column(style="cyan", justify="right", vertical="top")
    details.add_column(style="white")
    details.add_row("Image", f"[bold green]{escape(str(image_path))}[/bold green]")
    details.add_row("Plan", f"[bold green]{escape(str(plan_path))}[/bold green]")
    details.add_row("Items", str(len(plan)))
    details.add_row("Prompt", f"[dim]{escape(prompt_used)}[/dim]")

    console.print()
    console.print(
        Panel(
            details,
            title="[bold green]✓ Redesign Generated[/bold green]",
            border_style="green",
            padding=(1, 2),
        )
    )
    if plan:
        console.print(_plan_table(plan))


def print_image_result(title: str, output_path: Path, prompt: str) -> None:
    """Print a panel for a saved logo, pattern or cover image."""
    details = Table.grid(padding=(0, 2))
    details.add_column(style="cyan", justify="right", vertical="top")
    details.add_column(style="white")
    details.add_row("Saved to", f"[bold green]{escape(str(output_path))}[/bold green]")
    if prompt:
        details.add_row("Prompt", f"[dim]{escape(prompt)}[/dim]")

    console.print()
    console.print(
        Panel(
            details,
            title=f"[bold green]✓ {title}[/bold green]",
            border_style="green",
            padding=(1, 2),
        )
    )


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {escape(message)}")
