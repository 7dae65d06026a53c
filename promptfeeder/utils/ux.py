from typing import Dict
from rich.console import Console
from rich.table import Table

from promptfeeder.core.constants import OUTCOME_STYLES

console = Console()


class UX:
    """Centralized Rich console output for the CLI."""

    @staticmethod
    def print_success(message: str):
        console.print(f"[green]✓ {message}[/green]")

    @staticmethod
    def print_error(message: str):
        console.print(f"[red]✗ {message}[/red]")

    @staticmethod
    def print_warning(message: str):
        console.print(f"[yellow]⚠️  {message}[/yellow]")

    @staticmethod
    def outcome_table(outcomes: Dict[str, int]) -> Table:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Outcome")
        table.add_column("Prompts", justify="right")
        for name, style in OUTCOME_STYLES.items():
            count = outcomes.get(name, 0)
            if count:
                table.add_row(f"[{style}]{name}[/{style}]", str(count))
        return table
