from typing import List

from bs4 import BeautifulSoup
from playwright.async_api import Page

from promptfeeder.core.constants import SCRAPE_FAILURE_SENTINEL
from promptfeeder.core.errors import ScrapeFailure
from promptfeeder.core.logging import log

RESPONSES_HTML_JS = "(selector) => Array.from(document.querySelectorAll(selector)).map(el => el.outerHTML)"
RESPONSE_COUNT_JS = "(selector) => document.querySelectorAll(selector).length"


class ResponseScraper:
    """
    Extracts rendered response text from the chat page.

    Fails soft: every public method returns SCRAPE_FAILURE_SENTINEL instead
    of raising.
    """

    def __init__(self, page: Page, response_selector: str, paragraph_selector: str = "p", timeout: float = 30):
        self.page = page
        self.response_selector = response_selector
        self.paragraph_selector = paragraph_selector
        self.timeout = timeout

    async def response_count(self) -> int:
        """Number of responses currently on the page."""
        return await self.page.evaluate(RESPONSE_COUNT_JS, self.response_selector)

    async def capture_latest(self, after: int = 0) -> str:
        """
        Text of the most recent response, '' if no response exists beyond the
        first `after` ones.
        """
        try:
            texts = await self._collect(wait=False)
        except ScrapeFailure as e:
            log(f"Error capturing latest response: {e}", level="error")
            return SCRAPE_FAILURE_SENTINEL
        fresh = texts[after:]
        return fresh[-1] if fresh else ""

    async def capture_all(self) -> str:
        """Every response on the page, in order, separated by a blank line."""
        try:
            texts = await self._collect(wait=True)
        except ScrapeFailure as e:
            log(f"Error capturing responses: {e}", level="error")
            return SCRAPE_FAILURE_SENTINEL
        return "\n\n".join(texts)

    async def _collect(self, wait: bool) -> List[str]:
        try:
            if wait:
                await self.page.wait_for_selector(self.response_selector, timeout=self.timeout * 1000)
            blocks = await self.page.evaluate(RESPONSES_HTML_JS, self.response_selector)
            return [extract_text(html, self.paragraph_selector) for html in blocks]
        except Exception as e:
            raise ScrapeFailure(str(e)) from e


def extract_text(html: str, paragraph_selector: str = "p") -> str:
    """Paragraph texts joined by blank lines, or the raw text when there are no paragraphs."""
    soup = BeautifulSoup(html, "html.parser")
    paragraphs = [p.get_text().strip() for p in soup.select(paragraph_selector)]
    joined = "\n\n".join(p for p in paragraphs if p)
    return joined or soup.get_text()
