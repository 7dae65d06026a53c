import json
import traceback
from pathlib import Path
from typing import Any, List
from promptfeeder.core.logging import log


def safe_read_json(path: Path, default: Any = None) -> Any:
    """
    Safely read a JSON file, falling back to `default` on any read or parse error.
    """
    if default is None:
        default = {}

    try:
        if path.exists():
            content = path.read_text(encoding="utf-8")
            if not content.strip():
                return default
            return json.loads(content)
    except json.JSONDecodeError as e:
        log(f"Corrupted JSON in {path.name}: {e}", level="error")
    except PermissionError as e:
        log(f"Permission denied reading {path.name}: {e}", level="error")
    except OSError as e:
        log(f"IO error reading {path.name}: {e}", level="warning")

    return default


def safe_write_json(path: Path, data: Any) -> bool:
    """
    Safely write data to a JSON file, ensuring parent directories exist.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
        return True
    except PermissionError as e:
        log(f"Permission denied writing to {path.name}: {e}", level="error")
    except OSError as e:
        log(f"IO error writing to {path.name}: {e}", level="error")
    except Exception:
        log(f"Unexpected error writing to {path.name}: {traceback.format_exc()}", level="error")
        raise

    return False


def read_lines(path: Path) -> List[str]:
    """Read a UTF-8 text file into lines, tolerating CRLF and undecodable bytes."""
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def write_new_text(path: Path, content: str) -> Path:
    """
    Write `content` to `path` without ever replacing an existing file.

    If `path` is taken, `-1`, `-2`, ... is appended to the stem until a free
    name is found. Returns the path actually written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    candidate = path
    counter = 0
    while True:
        try:
            with open(candidate, "x", encoding="utf-8") as f:
                f.write(content)
            return candidate
        except FileExistsError:
            counter += 1
            candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
