from pathlib import Path
from typing import List, Tuple

from promptfeeder.core.constants import IGNORED_FILENAMES, PREFIX_DIRECTIVE
from promptfeeder.core.errors import ConfigurationError
from promptfeeder.core.logging import log
from promptfeeder.core.models import PromptGroup
from promptfeeder.utils.file_io import read_lines


class PromptSource:
    """
    Reads prompt groups from a single prompt file or a directory of them.

    A file yields one group with no prefix. In a directory every file is a
    group, and a leading `EXTRA:<text>` line becomes a prefix for the rest.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[PromptGroup]:
        if not self.path.exists():
            raise ConfigurationError(f"Prompt source not found: {self.path}")

        if self.path.is_dir():
            groups = [self._read_directory_file(p) for p in self._prompt_files()]
        else:
            groups = [self._read_single_file(self.path)]

        log(
            f"Loaded {sum(len(g.prompts) for g in groups)} prompts from {len(groups)} file(s)",
            source=str(self.path),
        )
        return groups

    def _prompt_files(self) -> List[Path]:
        return sorted(
            (p for p in self.path.iterdir() if p.is_file() and not is_ignored(p)),
            key=lambda p: p.name,
        )

    @staticmethod
    def _read_single_file(path: Path) -> PromptGroup:
        prompts = tuple(line.strip() for line in read_lines(path) if line.strip())
        return PromptGroup(source_name=path.stem, prompts=prompts)

    @staticmethod
    def _read_directory_file(path: Path) -> PromptGroup:
        prefix, lines = split_directive(read_lines(path))
        prompts = tuple(apply_prefix(prefix, line.strip()) for line in lines if line.strip())
        if not prompts:
            log(f"{path.name} contains no prompts", level="warning")
        return PromptGroup(source_name=path.stem, prompts=prompts, prefix=prefix)


def is_ignored(path: Path) -> bool:
    """OS metadata files never hold prompts."""
    return path.name in IGNORED_FILENAMES or path.name.startswith("._")


def split_directive(lines: List[str]) -> Tuple[str, List[str]]:
    """Strip a leading prefix directive, returning (prefix, remaining lines)."""
    if lines and lines[0].strip().startswith(PREFIX_DIRECTIVE):
        return lines[0].strip()[len(PREFIX_DIRECTIVE):].strip(), lines[1:]
    return "", lines


def apply_prefix(prefix: str, prompt: str) -> str:
    return f"{prefix} {prompt}" if prefix else prompt
