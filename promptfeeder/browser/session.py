import asyncio
from typing import Optional, Any

from playwright.async_api import async_playwright, Page, BrowserContext
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from promptfeeder.core.config import RunConfig
from promptfeeder.core.constants import MODE_MENU_DELAY
from promptfeeder.core.logging import log

MENU_ITEM_TEXTS_JS = "(selector) => Array.from(document.querySelectorAll(selector)).map(el => el.textContent || '')"

MODE_SELECTED_JS = """([selector, label]) => {
    const text = document.querySelector(selector)?.textContent;
    return !!text && text.includes(label);
}"""


class BrowserSession:
    """
    One persistent-profile Playwright browser with a single page.

    Use as an async context manager; `close()` is safe to call more than once.
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.playwright = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._closed = False

    async def __aenter__(self):
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        """Launch the browser with the persisted profile."""
        self.playwright = await async_playwright().start()

        self.config.profile_dir.mkdir(parents=True, exist_ok=True)
        launch_args: dict = {
            "user_data_dir": str(self.config.profile_dir.resolve()),
            "headless": self.config.headless,
        }
        if self.config.executable_path:
            launch_args["executable_path"] = self.config.executable_path
        if not self.config.headless:
            launch_args["args"] = ["--disable-blink-features=AutomationControlled"]

        log(f"Launching browser (profile: {self.config.profile_dir})", level="debug")
        self.context = await self.playwright.chromium.launch_persistent_context(**launch_args)
        # Persistent contexts open with one blank page already
        self.page = self.context.pages[0] if self.context.pages else await self.context.new_page()

    async def close(self) -> None:
        """Close the browser session."""
        if self._closed:
            return
        self._closed = True
        try:
            if self.context:
                await self.context.close()
        finally:
            if self.playwright:
                await self.playwright.stop()
        log("Browser session closed", level="debug")

    @retry(
        wait=wait_exponential(multiplier=1, min=2, max=10),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(Exception),
        reraise=True
    )
    async def open_chat(self, url: Optional[str] = None) -> Optional[Any]:
        """Navigate to the chat UI, which also starts a fresh conversation."""
        url = url or self.config.chat_url
        log(f"Navigating to {url}", level="debug")
        try:
            return await self.page.goto(
                url, wait_until="domcontentloaded", timeout=self.config.navigation_timeout * 1000
            )
        except Exception as e:
            log(f"Navigation failed: {e}", level="warning")
            raise

    async def select_mode(self, label: str) -> bool:
        """
        Pick the chat mode whose menu entry contains `label`.

        Returns False (and logs) instead of raising when the mode cannot be selected.
        """
        selectors = self.config.selectors
        timeout_ms = self.config.element_timeout * 1000
        try:
            await self.page.wait_for_selector(selectors.mode_menu_button, timeout=timeout_ms)
            await self.page.click(selectors.mode_menu_button)
            await asyncio.sleep(MODE_MENU_DELAY)

            await self.page.wait_for_selector(selectors.mode_menu_item, timeout=timeout_ms)
            texts = await self.page.evaluate(MENU_ITEM_TEXTS_JS, selectors.mode_menu_item)
            index = next((i for i, text in enumerate(texts) if label in text), None)
            if index is None:
                log(f"Mode '{label}' not offered (available: {[t.strip() for t in texts]})", level="warning")
                return False

            await self.page.locator(selectors.mode_menu_item).nth(index).click()
            await self.page.wait_for_function(
                MODE_SELECTED_JS, arg=[selectors.current_mode_title, label], timeout=timeout_ms
            )
            log(f"Selected mode: {label}")
            return True
        except Exception as e:
            log(f"Could not select mode '{label}': {e}", level="warning")
            return False
