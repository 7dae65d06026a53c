from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from promptfeeder.core.constants import OUTPUT_FILE_PREFIX
from promptfeeder.core.logging import log
from promptfeeder.core.models import PromptGroup, PromptResult
from promptfeeder.utils.file_io import write_new_text


def file_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with millisecond precision, ':' and '.' replaced by '-'."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


class OutputWriter:
    """
    Renders a group's results and writes them to one timestamped file.

    Verbose mode interleaves prompt, submission time and latency; terse mode
    writes response text only.
    """

    def __init__(self, outputs_dir: Path, verbose: bool = False):
        self.outputs_dir = Path(outputs_dir)
        self.verbose = verbose

    def ensure_dir(self) -> Path:
        self.outputs_dir.mkdir(parents=True, exist_ok=True)
        return self.outputs_dir

    def path_for(self, source_name: str, now: Optional[datetime] = None) -> Path:
        return self.outputs_dir / f"{OUTPUT_FILE_PREFIX}-{source_name}-{file_timestamp(now)}.txt"

    def render(self, results: Sequence[PromptResult]) -> str:
        if not self.verbose:
            return "\n\n".join(r.response_text for r in results)

        entries: List[str] = []
        for i, r in enumerate(results, start=1):
            entries.append(
                f"### Prompt {i}: {r.prompt}\n"
                f"Submitted: {r.submitted_at.isoformat()}\n"
                f"Elapsed: {r.elapsed_ms} ms\n"
                f"Outcome: {r.outcome.value}\n\n"
                f"{r.response_text}"
            )
        return "\n\n".join(entries)

    def write_group(self, group: PromptGroup, results: Sequence[PromptResult]) -> Path:
        return self._write(group, self.render(results))

    def write_transcript(self, group: PromptGroup, text: str) -> Path:
        """Write text scraped in one pass at the end of the group."""
        return self._write(group, text)

    def _write(self, group: PromptGroup, content: str) -> Path:
        self.ensure_dir()
        path = write_new_text(self.path_for(group.source_name), content)
        log(f"Responses from {group.source_name} have been saved to {path}", output=str(path))
        return path
