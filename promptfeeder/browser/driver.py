import asyncio
from datetime import datetime, timezone

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from promptfeeder.browser.polling import CompletionPolicy, poll_until
from promptfeeder.browser.scraper import ResponseScraper
from promptfeeder.core.config import RunConfig
from promptfeeder.core.errors import ElementNotFound
from promptfeeder.core.logging import log
from promptfeeder.core.models import PromptResult
from promptfeeder.core.state import PromptOutcome, PromptState, check_transition

SET_INPUT_TEXT_JS = """([selector, text]) => {
    const editor = document.querySelector(selector);
    editor.textContent = text;
    editor.dispatchEvent(new Event('input', { bubbles: true }));
}"""


class InteractionDriver:
    """
    Submits one prompt at a time and waits for the chat UI to finish answering.

    Walks IDLE -> TYPING -> SUBMITTED -> POLLING -> COMPLETE | TIMED_OUT.
    Errors propagate to the caller; a timeout does not.
    """

    def __init__(self, page: Page, config: RunConfig, policy: CompletionPolicy, scraper: ResponseScraper):
        self.page = page
        self.config = config
        self.policy = policy
        self.scraper = scraper
        self.state = PromptState.IDLE
        self.submitted = False

    def _transition_to(self, new_state: PromptState) -> None:
        check_transition(self.state, new_state)
        log(f"Prompt state: {self.state.value} -> {new_state.value}", level="debug")
        self.state = new_state

    async def submit(self, prompt: str, expected_exchanges: int) -> PromptResult:
        """
        Type, submit and wait for `prompt`.

        Args:
            prompt: The text to submit.
            expected_exchanges: Exchanges in the current chat once this one completes.

        Returns:
            A PromptResult with outcome SUCCESS or TIMED_OUT.
        """
        self.state = PromptState.IDLE
        self.submitted = False
        submitted_at = datetime.now(timezone.utc)
        try:
            self._transition_to(PromptState.TYPING)
            await self._type(prompt)

            await self.policy.prime(self.page)
            baseline = await self.scraper.response_count()
            self._transition_to(PromptState.SUBMITTED)
            await self.page.keyboard.press(self.config.submit_key)
            self.submitted = True

            self._transition_to(PromptState.POLLING)
            poll = await poll_until(
                lambda: self.policy.is_complete(self.page, expected_exchanges),
                interval=self.config.poll_interval,
                timeout=self.config.completion_timeout,
            )
        except Exception:
            self._transition_to(PromptState.FAILED)
            raise

        if poll.completed:
            self._transition_to(PromptState.COMPLETE)
            outcome = PromptOutcome.SUCCESS
        else:
            self._transition_to(PromptState.TIMED_OUT)
            outcome = PromptOutcome.TIMED_OUT
            log(
                f"No completion signal after {self.config.completion_timeout}s; keeping any partial response",
                level="warning",
                prompt=prompt,
                samples=poll.samples,
            )

        text = await self.scraper.capture_latest(after=baseline)
        return PromptResult(
            prompt=prompt,
            response_text=text,
            submitted_at=submitted_at,
            elapsed_ms=poll.elapsed_ms,
            outcome=outcome,
        )

    async def _type(self, prompt: str) -> None:
        selector = self.config.selectors.input
        try:
            await self.page.wait_for_selector(selector, timeout=self.config.element_timeout * 1000)
        except PlaywrightTimeoutError as e:
            raise ElementNotFound(selector, self.config.element_timeout) from e

        if self.config.input_method == "keyboard":
            await self.page.click(selector)
            await self.page.keyboard.type(prompt)
        else:
            await self.page.evaluate(SET_INPUT_TEXT_JS, [selector, prompt])

        if self.config.settle_delay:
            await asyncio.sleep(self.config.settle_delay)
