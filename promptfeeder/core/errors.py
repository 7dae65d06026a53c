class PromptFeederError(Exception):
    """Base class for promptfeeder errors."""


class ConfigurationError(PromptFeederError):
    """A required input path or setting is missing or invalid. Fatal."""


class ElementNotFound(PromptFeederError):
    """An expected UI element did not appear within its wait budget."""

    def __init__(self, selector: str, timeout: float):
        super().__init__(f"Element '{selector}' not found within {timeout}s")
        self.selector = selector
        self.timeout = timeout


class ScrapeFailure(PromptFeederError):
    """Response text could not be extracted from the page."""
