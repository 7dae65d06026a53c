import typer
from promptfeeder.cli.commands import run, utils

app = typer.Typer(
    name="promptfeeder",
    help="Batch-feed prompts to a chat web app",
    add_completion=False
)

# Register commands
app.command(name="run")(run.run)
app.command(name="outputs")(utils.list_outputs)
app.command()(utils.doctor)

VERSION = "0.3.0"


@app.command()
def version():
    """Show the promptfeeder version."""
    typer.echo(f"promptfeeder {VERSION}")


def version_callback(value: bool):
    if value:
        typer.echo(f"promptfeeder {VERSION}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """
    promptfeeder CLI - submit prompt files to a chat UI and save the answers.
    """
    pass


if __name__ == "__main__":
    app()
