from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Tuple

from promptfeeder.core.state import PromptOutcome


@dataclass(frozen=True)
class PromptGroup:
    """Prompts read from one input file, prefix already applied."""
    source_name: str
    prompts: Tuple[str, ...]
    prefix: str = ""


@dataclass(frozen=True)
class PromptResult:
    """The captured outcome of submitting ONE prompt."""
    prompt: str
    response_text: str
    submitted_at: datetime
    elapsed_ms: int
    outcome: PromptOutcome = PromptOutcome.SUCCESS


@dataclass(frozen=True)
class PollResult:
    completed: bool
    elapsed_ms: int
    samples: int


@dataclass
class RunSummary:
    output_files: List[Path] = field(default_factory=list)
    outcomes: Dict[str, int] = field(default_factory=dict)

    def record(self, result: PromptResult) -> None:
        key = result.outcome.value
        self.outcomes[key] = self.outcomes.get(key, 0) + 1

    @property
    def total_prompts(self) -> int:
        return sum(self.outcomes.values())
