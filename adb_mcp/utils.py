import itertools
import os
import sys
import time
from typing import Any, List

_stamp_counter = itertools.count(1)


def log_error(message: str) -> None:
    print(f"[ADB-MCP] {message}", file=sys.stderr, flush=True)


def clamp_int(value: Any, default: int, min_value: int, max_value: int) -> int:
    if isinstance(value, bool):
        numeric = default
    else:
        try:
            numeric = int(value)
        except (TypeError, ValueError):
            numeric = default
    if numeric < min_value:
        return min_value
    if numeric > max_value:
        return max_value
    return numeric


def to_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    s = str(value).lower().strip()
    if s in ("true", "1", "yes", "on"):
        return True
    if s in ("false", "0", "no", "off"):
        return False
    return default


def expand_local_path(path: str) -> str:
    # No local shell is involved, so ~ and $VARS are expanded here.
    if not path:
        return ""
    return os.path.expanduser(os.path.expandvars(path.strip()))


def split_words(text: str) -> List[str]:
    return (text or "").split()


def tail_lines(text: str, count: int) -> str:
    lines = (text or "").splitlines()
    if count < len(lines):
        lines = lines[-count:]
    return "\n".join(lines)


def unique_stamp() -> str:
    """Millisecond timestamp, pid and a per-process counter, distinct on every call."""
    return f"{int(time.time() * 1000)}_{os.getpid()}_{next(_stamp_counter)}"
