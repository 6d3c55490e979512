from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional

from fleetmerge.common.errors import ExtractionFailure
from fleetmerge.common.utils import normalize_path, resolve_placeholders

OUTPUT_DIR_ENV = "FLEETMERGE_OUTPUT_DIR"
SCRATCH_DIR_ENV = "FLEETMERGE_SCRATCH_DIR"


def default_output_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Where combined workbooks land when nothing else is configured:
    $FLEETMERGE_OUTPUT_DIR, then $XDG_DOWNLOAD_DIR, then ~/Downloads, then ~.
    """
    env = os.environ if env is None else env
    for key in (OUTPUT_DIR_ENV, "XDG_DOWNLOAD_DIR"):
        val = env.get(key)
        if val:
            return normalize_path(resolve_placeholders(val, env))
    downloads = Path.home() / "Downloads"
    return downloads if downloads.is_dir() else Path.home()


def resolve_output_dir(
    explicit: Optional[Path | str],
    configured: Optional[str],
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    env = os.environ if env is None else env
    if explicit:
        return normalize_path(explicit)
    if configured:
        return normalize_path(resolve_placeholders(configured, env))
    return default_output_dir(env)


@contextmanager
def scratch_space(root: Optional[Path | str] = None) -> Iterator[Path]:
    """
    Per-run extraction area. The directory and everything staged into it are
    removed when the block exits, whether it succeeded or raised.
    """
    base = None
    if root is not None:
        base = normalize_path(resolve_placeholders(str(root), os.environ))
    elif os.environ.get(SCRATCH_DIR_ENV):
        base = normalize_path(os.environ[SCRATCH_DIR_ENV])

    try:
        if base is not None:
            base.mkdir(parents=True, exist_ok=True)
        tmp = tempfile.TemporaryDirectory(prefix="fleetmerge-", dir=base, ignore_cleanup_errors=True)
    except OSError as e:
        raise ExtractionFailure(f"Could not create scratch area under {base or tempfile.gettempdir()}: {e}", base) from e

    with tmp as path:
        yield Path(path)
