from typing import Dict, FrozenSet

# Timeouts (in seconds)
DEFAULT_NAVIGATION_TIMEOUT = 60
DEFAULT_ELEMENT_TIMEOUT = 30
DEFAULT_COMPLETION_TIMEOUT = 120
DEFAULT_SCRAPE_TIMEOUT = 30

# Polling
DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_STABLE_SAMPLES = 3
DEFAULT_SETTLE_DELAY = 1.0
MODE_MENU_DELAY = 1.0

# Target chat UI
DEFAULT_CHAT_URL = "https://gemini.google.com/app"
DEFAULT_MODE_LABEL = None
DEFAULT_SUBMIT_KEY = "Enter"

DEFAULT_SELECTORS: Dict[str, str] = {
    "input": ".ql-editor",
    "response": ".model-response-text",
    "paragraph": "p",
    "completion_marker": 'div.avatar_primary_animation.is-gpi-avatar[data-test-lottie-animation-status="completed"]',
    "mode_menu_button": "button.bard-mode-menu-button",
    "mode_menu_item": ".mat-bottom-sheet-container button.mat-mdc-menu-item",
    "current_mode_title": ".current-mode-title span",
}

# Prompt files
PREFIX_DIRECTIVE = "EXTRA:"
IGNORED_FILENAMES: FrozenSet[str] = frozenset({".DS_Store", "Thumbs.db", "desktop.ini"})
DEFAULT_SOURCE = "prompts"
DEFAULT_OUTPUTS_DIR = "outputs"
DEFAULT_PROFILE_DIR = "chrome-profile"

# Output
OUTPUT_FILE_PREFIX = "output"
SCRAPE_FAILURE_SENTINEL = "Failed to capture responses"

# Enumerated settings
COMPLETION_POLICIES = ("count", "stability")
INPUT_METHODS = ("dom", "keyboard")
CAPTURE_MODES = ("per_prompt", "transcript")

# Resource Limits
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB

# Outcome styling for console tables
OUTCOME_STYLES = {
    "success": "green",
    "skipped": "yellow",
    "timed_out": "yellow",
    "failed": "red",
}
