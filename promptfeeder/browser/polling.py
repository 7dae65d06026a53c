import asyncio
import time
from typing import Awaitable, Callable, Optional

from playwright.async_api import Page

from promptfeeder.core.logging import log
from promptfeeder.core.models import PollResult

Predicate = Callable[[], Awaitable[bool]]

COUNT_MARKERS_JS = "(selector) => document.querySelectorAll(selector).length"

LATEST_TEXT_JS = """(selector) => {
    const nodes = document.querySelectorAll(selector);
    if (!nodes.length) return '';
    const last = nodes[nodes.length - 1];
    return (last.innerText || last.textContent || '').trim();
}"""


async def poll_until(predicate: Predicate, interval: float, timeout: float) -> PollResult:
    """
    Evaluate `predicate` every `interval` seconds until it returns True or
    `timeout` seconds have elapsed.

    The timeout path is a normal return (`completed=False`), not an exception.
    The predicate is always sampled at least once.
    """
    start = time.monotonic()
    samples = 0
    while True:
        samples += 1
        if await predicate():
            return PollResult(True, _elapsed_ms(start), samples)
        if time.monotonic() - start >= timeout:
            return PollResult(False, _elapsed_ms(start), samples)
        await asyncio.sleep(interval)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class CompletionPolicy:
    """Decides from the page whether the latest response has finished rendering."""

    name = "base"

    def reset(self) -> None:
        pass

    async def prime(self, page: Page) -> None:
        """Called right before a prompt is submitted."""
        self.reset()

    async def is_complete(self, page: Page, expected_exchanges: int) -> bool:
        raise NotImplementedError


class CountCompletion(CompletionPolicy):
    """Complete once the number of 'completed' markers equals the exchanges so far."""

    name = "count"

    def __init__(self, marker_selector: str):
        self.marker_selector = marker_selector

    async def is_complete(self, page: Page, expected_exchanges: int) -> bool:
        count = await page.evaluate(COUNT_MARKERS_JS, self.marker_selector)
        return count == expected_exchanges


class StabilityCompletion(CompletionPolicy):
    """
    Complete after `required_samples` consecutive identical, non-empty samples
    of the latest response text.
    """

    name = "stability"

    def __init__(self, response_selector: str, required_samples: int):
        self.response_selector = response_selector
        self.required_samples = required_samples
        self._last: Optional[str] = None
        self._streak = 0
        self._baseline_count = 0

    def reset(self) -> None:
        self._last = None
        self._streak = 0
        self._baseline_count = 0

    async def prime(self, page: Page) -> None:
        """Remember how many responses exist before submitting, so the previous answer is not sampled."""
        self.reset()
        self._baseline_count = await page.evaluate(COUNT_MARKERS_JS, self.response_selector)

    async def is_complete(self, page: Page, expected_exchanges: int) -> bool:
        count = await page.evaluate(COUNT_MARKERS_JS, self.response_selector)
        text = await page.evaluate(LATEST_TEXT_JS, self.response_selector) if count > self._baseline_count else ""
        if not text:
            self._last = None
            self._streak = 0
            return False
        if text == self._last:
            self._streak += 1
        else:
            self._last = text
            self._streak = 1
        return self._streak >= self.required_samples


def build_policy(name: str, selectors, stable_samples: int) -> CompletionPolicy:
    if name == "stability":
        return StabilityCompletion(selectors.response, stable_samples)
    if name != "count":
        log(f"Unknown completion policy '{name}', using count", level="warning")
    return CountCompletion(selectors.completion_marker)
