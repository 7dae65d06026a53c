import sys
import shutil
import platform
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich import print as rprint

from promptfeeder.core.config import ConfigManager
from promptfeeder.core.constants import OUTPUT_FILE_PREFIX
from promptfeeder.core.errors import ConfigurationError

console = Console(width=100)  # Force width for better rendering in snapshots


def list_outputs(
    outputs: Optional[Path] = typer.Option(None, "--outputs", "-o", help="Directory holding output files"),
):
    """List output files written by previous runs."""
    try:
        outputs_dir = outputs or ConfigManager.load_config().outputs_dir
    except ConfigurationError as e:
        rprint(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    files = sorted(
        outputs_dir.glob(f"{OUTPUT_FILE_PREFIX}-*.txt"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    ) if outputs_dir.exists() else []

    if not files:
        rprint("[yellow]No outputs found.[/yellow]")
        return

    rprint(f"\n[bold cyan]Found {len(files)} output files:[/bold cyan]")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File", style="dim")
    table.add_column("Size", justify="right")
    table.add_column("Written")

    for p in files:
        stat = p.stat()
        written = datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M")
        table.add_row(p.name, f"{stat.st_size} B", written)

    console.print(table)


def doctor():
    """Check environment health."""
    rprint("[bold cyan]Checking promptfeeder environment...[/bold cyan]")

    rprint(f"• OS: {platform.system()} {platform.release()}")
    rprint(f"• Python: {sys.version.split()[0]}")

    try:
        config = ConfigManager.load_config()
        rprint("• Configuration: [green]OK[/green]")
    except ConfigurationError as e:
        rprint(f"• Configuration: [red]INVALID ({e})[/red]")
        config = None

    playwright = shutil.which("playwright")
    rprint(f"• Playwright CLI: {'[green]OK[/green]' if playwright else '[red]MISSING[/red]'}")

    if config:
        source_ok = config.source.exists()
        rprint(f"• Prompt source: {config.source} ({'[green]Found[/green]' if source_ok else '[red]MISSING[/red]'})")
        if config.executable_path:
            exe_ok = Path(config.executable_path).exists()
            rprint(f"• Browser executable: {'[green]OK[/green]' if exe_ok else '[red]MISSING[/red]'}")
        rprint(f"• Profile Directory: {config.profile_dir} ({'[green]Ready[/green]' if config.profile_dir.exists() else '[yellow]Not initialized[/yellow]'})")

    rprint("\n[bold green]System check complete.[/bold green]")
