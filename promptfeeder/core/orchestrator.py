import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, List

from promptfeeder.browser.driver import InteractionDriver
from promptfeeder.browser.polling import build_policy
from promptfeeder.browser.scraper import ResponseScraper
from promptfeeder.browser.session import BrowserSession
from promptfeeder.core.config import RunConfig
from promptfeeder.core.errors import ElementNotFound
from promptfeeder.core.logging import log
from promptfeeder.core.models import PromptGroup, PromptResult, RunSummary
from promptfeeder.core.state import PromptOutcome
from promptfeeder.output.writer import OutputWriter, file_timestamp
from promptfeeder.prompts.source import PromptSource
from promptfeeder.utils.file_io import safe_write_json

SessionFactory = Callable[[RunConfig], BrowserSession]


class Orchestrator:
    """
    Feeds every prompt group through one browser session.

    Prompts are loaded before the browser starts, so a missing source aborts
    the run without launching anything. Once launched, the session is closed
    on every exit path.
    """

    def __init__(self, config: RunConfig, session_factory: SessionFactory = BrowserSession):
        self.config = config
        self.session_factory = session_factory
        self.writer = OutputWriter(config.outputs_dir, verbose=config.debug)
        self.summary = RunSummary()
        self.start_time = time.time()
        if config.debug and config.capture == "transcript":
            log("--debug has no effect with transcript capture; output files hold the raw transcript", level="warning")

    def run(self) -> RunSummary:
        """Main entry point (synchronous)."""
        groups = PromptSource(self.config.source).load()
        self.writer.ensure_dir()
        success = False
        try:
            asyncio.run(self._run_async(groups))
            success = True
        finally:
            self._emit_summary(success)
        return self.summary

    async def _run_async(self, groups: List[PromptGroup]) -> None:
        async with self.session_factory(self.config) as session:
            await session.open_chat()
            if self.config.mode_label:
                await session.select_mode(self.config.mode_label)

            scraper = ResponseScraper(
                session.page,
                self.config.selectors.response,
                self.config.selectors.paragraph,
                timeout=self.config.scrape_timeout,
            )
            policy = build_policy(self.config.completion_policy, self.config.selectors, self.config.stable_samples)
            driver = InteractionDriver(session.page, self.config, policy, scraper)

            exchanges = 0
            for index, group in enumerate(groups):
                log(f"Processing file: {group.source_name}", prompts=len(group.prompts))
                results: List[PromptResult] = []
                try:
                    if index > 0 and self.config.new_chat_per_group:
                        await session.open_chat()
                        exchanges = 0

                    for prompt in group.prompts:
                        result = await self._run_prompt(driver, prompt, exchanges + 1)
                        if driver.submitted:
                            exchanges += 1
                        results.append(result)
                except Exception as e:
                    log(f"Processing of {group.source_name} stopped early: {e}", level="error")

                await self._write_group(group, results, scraper)

    async def _run_prompt(self, driver: InteractionDriver, prompt: str, expected_exchanges: int) -> PromptResult:
        """The per-prompt boundary: nothing raised in here reaches the group loop."""
        log(f"Processing prompt: {prompt}")
        started = datetime.now(timezone.utc)
        try:
            result = await driver.submit(prompt, expected_exchanges)
        except ElementNotFound as e:
            log(f"Skipping prompt, {e}", level="warning", prompt=prompt)
            result = PromptResult(prompt, "", started, 0, PromptOutcome.SKIPPED)
        except Exception as e:
            log(f"Error processing prompt: {prompt}: {e}", level="error", prompt=prompt)
            result = PromptResult(prompt, "", started, 0, PromptOutcome.FAILED)

        self.summary.record(result)
        return result

    async def _write_group(self, group: PromptGroup, results: List[PromptResult], scraper: ResponseScraper) -> None:
        if self.config.capture == "transcript":
            path = self.writer.write_transcript(group, await scraper.capture_all())
        else:
            path = self.writer.write_group(group, results)
        self.summary.output_files.append(path)

    def _emit_summary(self, success: bool) -> None:
        """Log the run outcome and keep a JSON copy beside the outputs."""
        event = {
            "event_type": "run_completion",
            "success": success,
            "duration_seconds": round(time.time() - self.start_time, 2),
            "source": str(self.config.source),
            "total_prompts": self.summary.total_prompts,
            "outcomes": self.summary.outcomes,
            "output_files": [str(p) for p in self.summary.output_files],
            "completion_policy": self.config.completion_policy,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        safe_write_json(self.config.outputs_dir / "logs" / f"run-{file_timestamp()}.json", event)
        log("Run summary", level="debug", **event)
