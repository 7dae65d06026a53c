import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from promptfeeder.core.config import ConfigManager
from promptfeeder.core.errors import ConfigurationError
from promptfeeder.core.logging import log, Logger
from promptfeeder.core.orchestrator import Orchestrator
from promptfeeder.utils.ux import UX

console = Console()


def run(
    source: Optional[Path] = typer.Argument(None, help="Prompt file, or directory of prompt files (default: ./prompts)"),
    outputs: Optional[Path] = typer.Option(None, "--outputs", "-o", help="Directory for output files"),
    url: Optional[str] = typer.Option(None, "--url", help="Chat UI URL"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Chat mode to select from the mode menu"),
    profile: Optional[Path] = typer.Option(None, "--profile", help="Browser profile directory (reused across runs)"),
    executable: Optional[str] = typer.Option(None, "--executable", help="Browser executable to launch"),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Run browser in headless mode"),
    policy: Optional[str] = typer.Option(None, "--policy", help="Completion detection: count or stability"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds to wait for each response"),
    poll_interval: Optional[float] = typer.Option(None, "--poll-interval", help="Seconds between completion checks"),
    stable_samples: Optional[int] = typer.Option(None, "--stable-samples", help="Identical samples required by the stability policy"),
    input_method: Optional[str] = typer.Option(None, "--input-method", help="dom or keyboard"),
    capture: Optional[str] = typer.Option(None, "--capture", help="per_prompt or transcript"),
    new_chat: Optional[bool] = typer.Option(None, "--new-chat/--same-chat", help="Start a fresh chat for every prompt file"),
    debug: bool = typer.Option(False, "--debug", help="Include prompt, timestamp and latency in output files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    save: bool = typer.Option(False, "--save-config", help="Store these settings as defaults"),
):
    """
    Submit every prompt to the chat UI and save the responses.
    """
    Logger.setup_logging(verbose=verbose)

    overrides = {
        "source": source,
        "outputs_dir": outputs,
        "chat_url": url,
        "mode_label": mode,
        "profile_dir": profile,
        "executable_path": executable,
        "headless": headless,
        "completion_policy": policy,
        "completion_timeout": timeout,
        "poll_interval": poll_interval,
        "stable_samples": stable_samples,
        "input_method": input_method,
        "capture": capture,
        "new_chat_per_group": new_chat,
        "debug": debug or None,
    }

    try:
        config = ConfigManager.load_config(overrides)
    except ConfigurationError as e:
        UX.print_error(str(e))
        raise typer.Exit(code=1)

    if save:
        ConfigManager.save_config(config)
        log(f"Saved defaults to {ConfigManager.CONFIG_FILE}")

    # Re-setup logging to include run logs beside the outputs
    Logger.setup_logging(log_dir=config.outputs_dir / "logs", verbose=verbose)

    try:
        summary = Orchestrator(config).run()
    except ConfigurationError as e:
        UX.print_error(str(e))
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        log("Run interrupted by user.", level="warning")
        UX.print_warning("Run interrupted by user.")
        raise typer.Exit(code=0)
    except Exception as e:
        log(f"Run failed: {e}", level="error")
        UX.print_error(f"Run failed: {e}")
        log(f"Fatal Traceback: {traceback.format_exc()}", level="debug")
        raise typer.Exit(code=1)

    console.print(UX.outcome_table(summary.outcomes))
    UX.print_success(f"Wrote {len(summary.output_files)} output file(s) to {config.outputs_dir}")
