from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Dict, Any, Optional
from urllib.parse import urlparse

from promptfeeder.core.constants import (
    CAPTURE_MODES,
    COMPLETION_POLICIES,
    DEFAULT_CHAT_URL,
    DEFAULT_COMPLETION_TIMEOUT,
    DEFAULT_ELEMENT_TIMEOUT,
    DEFAULT_MODE_LABEL,
    DEFAULT_NAVIGATION_TIMEOUT,
    DEFAULT_OUTPUTS_DIR,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PROFILE_DIR,
    DEFAULT_SCRAPE_TIMEOUT,
    DEFAULT_SELECTORS,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_SOURCE,
    DEFAULT_STABLE_SAMPLES,
    DEFAULT_SUBMIT_KEY,
    INPUT_METHODS,
)
from promptfeeder.core.errors import ConfigurationError
from promptfeeder.core.logging import log
from promptfeeder.utils.file_io import safe_read_json, safe_write_json


@dataclass
class Selectors:
    """CSS selectors for the target chat UI."""
    input: str = DEFAULT_SELECTORS["input"]
    response: str = DEFAULT_SELECTORS["response"]
    paragraph: str = DEFAULT_SELECTORS["paragraph"]
    completion_marker: str = DEFAULT_SELECTORS["completion_marker"]
    mode_menu_button: str = DEFAULT_SELECTORS["mode_menu_button"]
    mode_menu_item: str = DEFAULT_SELECTORS["mode_menu_item"]
    current_mode_title: str = DEFAULT_SELECTORS["current_mode_title"]


@dataclass
class RunConfig:
    """
    Everything a run needs, resolved once before any browser work.
    Timeouts and intervals are in seconds.
    """
    source: Path = Path(DEFAULT_SOURCE)
    outputs_dir: Path = Path(DEFAULT_OUTPUTS_DIR)
    chat_url: str = DEFAULT_CHAT_URL
    profile_dir: Path = Path(DEFAULT_PROFILE_DIR)
    executable_path: Optional[str] = None
    headless: bool = True
    mode_label: Optional[str] = DEFAULT_MODE_LABEL
    completion_policy: str = "count"
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT
    element_timeout: float = DEFAULT_ELEMENT_TIMEOUT
    completion_timeout: float = DEFAULT_COMPLETION_TIMEOUT
    scrape_timeout: float = DEFAULT_SCRAPE_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    stable_samples: int = DEFAULT_STABLE_SAMPLES
    settle_delay: float = DEFAULT_SETTLE_DELAY
    submit_key: str = DEFAULT_SUBMIT_KEY
    input_method: str = "dom"
    capture: str = "per_prompt"
    new_chat_per_group: bool = True
    debug: bool = False
    selectors: Selectors = field(default_factory=Selectors)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_PATH_FIELDS = {"source", "outputs_dir", "profile_dir"}
_FLOAT_FIELDS = {
    "navigation_timeout", "element_timeout", "completion_timeout",
    "scrape_timeout", "poll_interval", "settle_delay",
}
_INT_FIELDS = {"stable_samples"}
_BOOL_FIELDS = {"headless", "new_chat_per_group", "debug"}
_OPTIONAL_STR_FIELDS = {"executable_path", "mode_label"}


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw JSON/CLI value to the RunConfig field type; TypeError/ValueError on mismatch."""
    if key in _PATH_FIELDS:
        if not isinstance(value, (str, Path)):
            raise TypeError("expected a path string")
        return Path(value).expanduser()
    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise TypeError("expected true or false")
        return value
    if key in _INT_FIELDS:
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise TypeError("expected an integer")
        return int(value)
    if key in _FLOAT_FIELDS:
        if isinstance(value, bool):
            raise TypeError("expected a number")
        return float(value)
    if value is None and key in _OPTIONAL_STR_FIELDS:
        return None
    if not isinstance(value, str):
        raise TypeError("expected a string")
    return value


class ConfigManager:
    """Loads, validates and persists promptfeeder configuration."""

    APP_NAME = "promptfeeder"
    CONFIG_DIR = Path.home() / f".{APP_NAME}"
    CONFIG_FILE = CONFIG_DIR / "config.json"

    @classmethod
    def ensure_config_dir(cls):
        """Ensure configuration directory exists."""
        cls.CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load_config(cls, overrides: Optional[Dict[str, Any]] = None) -> RunConfig:
        """
        Build a RunConfig from defaults, the user config file, then `overrides`.

        Override values of None are ignored so unset CLI options do not mask
        the config file.
        """
        data: Dict[str, Any] = safe_read_json(cls.CONFIG_FILE, default={})
        if not isinstance(data, dict):
            log(f"Ignoring {cls.CONFIG_FILE.name}: expected a JSON object", level="warning")
            data = {}
        for key, value in (overrides or {}).items():
            if value is None:
                continue
            if key == "selectors":
                existing = data.get("selectors")
                data["selectors"] = {**(existing if isinstance(existing, dict) else {}), **value}
            else:
                data[key] = value

        config = cls._build(data)
        cls.validate(config)
        return config

    @classmethod
    def _build(cls, data: Dict[str, Any]) -> RunConfig:
        known = {f.name for f in fields(RunConfig)}
        unknown = set(data) - known
        if unknown:
            log(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}", level="warning")

        kwargs = {}
        for key, value in data.items():
            if key not in known or key == "selectors":
                continue
            try:
                kwargs[key] = _coerce(key, value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid value for '{key}': {value!r} ({e})") from e

        selector_data = data.get("selectors")
        if selector_data is None:
            selector_data = {}
        if not isinstance(selector_data, dict):
            raise ConfigurationError(f"'selectors' must be an object, got {type(selector_data).__name__}")
        selector_names = {f.name for f in fields(Selectors)}
        for key, value in selector_data.items():
            if key in selector_names and not isinstance(value, str):
                raise ConfigurationError(f"Selector '{key}' must be a string, got {value!r}")
        selectors = Selectors(**{k: v for k, v in selector_data.items() if k in selector_names})
        return RunConfig(selectors=selectors, **kwargs)

    @classmethod
    def validate(cls, config: RunConfig) -> None:
        """Raise ConfigurationError on the first invalid setting."""
        try:
            cls.validate_url(config.chat_url)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if config.completion_policy not in COMPLETION_POLICIES:
            raise ConfigurationError(
                f"Unknown completion policy '{config.completion_policy}' (expected one of {', '.join(COMPLETION_POLICIES)})"
            )
        if config.input_method not in INPUT_METHODS:
            raise ConfigurationError(
                f"Unknown input method '{config.input_method}' (expected one of {', '.join(INPUT_METHODS)})"
            )
        if config.capture not in CAPTURE_MODES:
            raise ConfigurationError(
                f"Unknown capture mode '{config.capture}' (expected one of {', '.join(CAPTURE_MODES)})"
            )
        if config.stable_samples < 1:
            raise ConfigurationError("stable_samples must be at least 1")
        if config.poll_interval <= 0:
            raise ConfigurationError("poll_interval must be positive")
        for name in ("navigation_timeout", "element_timeout", "completion_timeout", "scrape_timeout"):
            if getattr(config, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")

    @classmethod
    def save_config(cls, config: RunConfig) -> bool:
        """Persist a RunConfig as the user's defaults."""
        cls.ensure_config_dir()
        data = config.to_dict()
        for key in _PATH_FIELDS:
            data[key] = str(data[key])
        return safe_write_json(cls.CONFIG_FILE, data)

    @staticmethod
    def validate_url(url: str) -> str:
        """Robust URL validation using urllib.parse."""
        try:
            parsed = urlparse(url)
            if not (parsed.scheme in ("http", "https") and parsed.netloc):
                raise ValueError(f"Invalid URL: '{url}' - Must be http/https with a valid domain.")
            return url
        except Exception as e:
            if isinstance(e, ValueError):
                raise
            raise ValueError(f"URL parsing failed: {e}")
