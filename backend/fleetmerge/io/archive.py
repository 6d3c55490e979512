from __future__ import annotations
import os
import zipfile
from pathlib import Path
from typing import List

from fleetmerge.common.errors import ExtractionFailure
from fleetmerge.common.logger import get_logger
from fleetmerge.common.utils import reset_directory

log = get_logger()


def stage(archive_path: Path | str, scratch_dir: Path | str) -> List[str]:
    """
    Unpack a zip archive into a freshly emptied scratch directory.

    Anything already in `scratch_dir` is deleted first. Returns the names of
    the directory's top-level entries in filesystem order.

    Raises:
        ScratchCleanupFailure: the old scratch contents could not be removed
        ExtractionFailure: the archive is missing or malformed, or the
            filesystem refused the extraction
    """
    archive = Path(archive_path)
    scratch = Path(scratch_dir)

    try:
        reset_directory(scratch)
    except OSError as e:
        raise ExtractionFailure(f"Could not create scratch directory {scratch}: {e}", scratch) from e

    if not archive.is_file():
        raise ExtractionFailure(f"Archive not found: {archive}", archive)

    try:
        with zipfile.ZipFile(archive) as zf:
            members = zf.infolist()
            log.debug(f"Archive {archive.name}: {len(members)} member(s)")
            zf.extractall(scratch)
    except zipfile.BadZipFile as e:
        raise ExtractionFailure(f"Not a valid zip archive: {archive} ({e})", archive) from e
    except (OSError, RuntimeError) as e:
        # RuntimeError covers encrypted members
        raise ExtractionFailure(f"Could not extract {archive}: {e}", archive) from e

    names = os.listdir(scratch)
    log.dev(f"  Extracted {len(names)} entr{'y' if len(names) == 1 else 'ies'} into {scratch}")
    for name in names:
        log.debug(f"    {name}")
    return names
