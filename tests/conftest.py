import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from promptfeeder.browser.driver import SET_INPUT_TEXT_JS
from promptfeeder.browser.polling import COUNT_MARKERS_JS, LATEST_TEXT_JS
from promptfeeder.browser.scraper import RESPONSES_HTML_JS
from promptfeeder.core.config import RunConfig, Selectors


class FakeKeyboard:
    def __init__(self, page):
        self.page = page
        self.pressed = []
        self.typed = []

    async def press(self, key):
        self.pressed.append(key)
        self.page.on_submit()

    async def type(self, text):
        self.typed.append(text)
        self.page.input_text = text


class FakeChatPage:
    """
    In-memory stand-in for a Playwright page showing a chat UI.

    Submitting a prompt appends "answer to <prompt>" and a completed marker,
    unless the prompt is listed in `stall`.
    """

    def __init__(self, selectors=None, missing=(), stall=(), fail_scrape=False):
        self.selectors = selectors or Selectors()
        self.keyboard = FakeKeyboard(self)
        self.missing = set(missing)
        self.stall = set(stall)
        self.fail_scrape = fail_scrape
        self.input_text = ""
        self.responses = []
        self.markers = 0
        self.submitted = []
        self.clicked = []

    def reset(self):
        self.responses = []
        self.markers = 0

    def on_submit(self):
        prompt = self.input_text
        self.submitted.append(prompt)
        self.input_text = ""
        if prompt not in self.stall:
            self.responses.append(f"answer to {prompt}")
            self.markers += 1

    async def wait_for_selector(self, selector, timeout=None):
        if selector in self.missing:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        if selector == self.selectors.response and not self.responses:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def click(self, selector):
        self.clicked.append(selector)

    async def evaluate(self, script, arg=None):
        if script == SET_INPUT_TEXT_JS:
            self.input_text = arg[1]
            return None
        if script == COUNT_MARKERS_JS:
            if arg == self.selectors.completion_marker:
                return self.markers
            return len(self.responses)
        if script == LATEST_TEXT_JS:
            return self.responses[-1] if self.responses else ""
        if script == RESPONSES_HTML_JS:
            if self.fail_scrape:
                raise RuntimeError("Execution context was destroyed")
            return [f"<div class='model-response-text'><p>{r}</p></div>" for r in self.responses]
        raise AssertionError(f"unexpected script: {script}")


class FakeSession:
    def __init__(self, page, fail_on_open=False):
        self.page = page
        self.fail_on_open = fail_on_open
        self.close_calls = 0
        self.open_calls = 0
        self.modes = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        self.close_calls += 1

    async def open_chat(self, url=None):
        self.open_calls += 1
        if self.fail_on_open:
            raise RuntimeError("net::ERR_NAME_NOT_RESOLVED")
        self.page.reset()

    async def select_mode(self, label):
        self.modes.append(label)
        return True


@pytest.fixture
def fake_page_cls():
    return FakeChatPage


@pytest.fixture
def fake_session_cls():
    return FakeSession


@pytest.fixture
def fast_config(tmp_path):
    """A RunConfig with timings small enough for unit tests."""
    return RunConfig(
        source=tmp_path / "prompts",
        outputs_dir=tmp_path / "outputs",
        profile_dir=tmp_path / "profile",
        completion_timeout=0.2,
        element_timeout=0.1,
        scrape_timeout=0.1,
        poll_interval=0.01,
        settle_delay=0,
        stable_samples=2,
    )
