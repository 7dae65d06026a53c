from enum import Enum


class PromptState(Enum):
    IDLE = "IDLE"
    TYPING = "TYPING"
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    COMPLETE = "COMPLETE"
    TIMED_OUT = "TIMED_OUT"
    FAILED = "FAILED"


class PromptOutcome(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class TransitionError(Exception):
    pass


_ALLOWED = {
    PromptState.IDLE: {PromptState.TYPING, PromptState.FAILED},
    PromptState.TYPING: {PromptState.SUBMITTED, PromptState.FAILED},
    PromptState.SUBMITTED: {PromptState.POLLING, PromptState.FAILED},
    PromptState.POLLING: {PromptState.COMPLETE, PromptState.TIMED_OUT, PromptState.FAILED},
}


def check_transition(current: PromptState, new: PromptState) -> None:
    if new not in _ALLOWED.get(current, set()):
        raise TransitionError(f"Illegal transition {current.value} -> {new.value}")
