import pytest

from promptfeeder.core.models import PromptResult, RunSummary
from promptfeeder.core.state import PromptOutcome, PromptState, TransitionError, check_transition


def test_happy_path_transitions_are_allowed():
    path = [PromptState.IDLE, PromptState.TYPING, PromptState.SUBMITTED, PromptState.POLLING, PromptState.COMPLETE]
    for current, new in zip(path, path[1:]):
        check_transition(current, new)
    check_transition(PromptState.POLLING, PromptState.TIMED_OUT)


@pytest.mark.parametrize("current,new", [
    (PromptState.IDLE, PromptState.POLLING),
    (PromptState.TYPING, PromptState.COMPLETE),
    (PromptState.COMPLETE, PromptState.TYPING),
    (PromptState.TIMED_OUT, PromptState.FAILED),
])
def test_illegal_transitions_raise(current, new):
    with pytest.raises(TransitionError):
        check_transition(current, new)


def test_run_summary_counts_outcomes():
    summary = RunSummary()
    for outcome in (PromptOutcome.SUCCESS, PromptOutcome.SUCCESS, PromptOutcome.FAILED):
        summary.record(PromptResult("p", "", None, 0, outcome))
    assert summary.outcomes == {"success": 2, "failed": 1}
    assert summary.total_prompts == 3
