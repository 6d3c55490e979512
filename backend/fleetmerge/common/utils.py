from __future__ import annotations

import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from fleetmerge.common.errors import ScratchCleanupFailure

__all__ = [
    "iso_timestamp",
    "reset_directory",
    "load_yaml",
    "normalize_path",
    "resolve_placeholders",
]

def iso_timestamp(when: Optional[datetime] = None) -> str:
    """
    UTC ISO-8601 timestamp with millisecond precision, made filename-safe:
    2026-10-19T12:27:00.123Z -> 2026-10-19T12-27-00-123Z
    """
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    stamp = when.strftime("%Y-%m-%dT%H:%M:%S") + f".{when.microsecond // 1000:03d}Z"
    return stamp.replace(":", "-").replace(".", "-")

def load_yaml(fp: Path) -> Dict[str, Any]:
    return yaml.safe_load(fp.read_text(encoding="utf-8")) or {}

def normalize_path(p: Path | str) -> Path:
    return Path(str(p)).expanduser().resolve()

def resolve_placeholders(s: Optional[str], variables: Mapping[str, str]) -> str:
    """Support {VAR}, ${VAR}, and $VAR placeholders."""
    if s is None:
        return ""
    def repl_curly(m):        return variables.get(m.group(1), m.group(0))
    def repl_dollar_brace(m): return variables.get(m.group(1), m.group(0))
    def repl_dollar(m):       return variables.get(m.group(1), m.group(0))
    s = re.sub(r"\$\{([A-Za-z0-9_]+)\}", repl_dollar_brace, s)
    s = re.sub(r"\{([A-Za-z0-9_]+)\}", repl_curly, s)
    s = re.sub(r"\$([A-Za-z0-9_]+)", repl_dollar, s)
    return s

def reset_directory(p: Path) -> None:
    """
    Remove `p` and everything under it, then recreate it empty.
    Raises ScratchCleanupFailure if the old tree cannot be removed.
    """
    if p.exists():
        try:
            if p.is_dir() and not p.is_symlink():
                shutil.rmtree(p)
            else:
                p.unlink()
        except OSError as e:
            raise ScratchCleanupFailure(f"Could not clear scratch directory {p}: {e}", p) from e
    p.mkdir(parents=True, exist_ok=True)
