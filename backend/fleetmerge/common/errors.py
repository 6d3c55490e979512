# fleetmerge/common/errors.py
from __future__ import annotations
from pathlib import Path
from typing import Optional


class CombineError(Exception):
    """Base class for every failure a combine run can report."""
    kind = "combine_error"

    def __init__(self, message: str, path: Optional[Path | str] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ExtractionFailure(CombineError):
    """Archive missing, malformed, or could not be unpacked."""
    kind = "extraction_failure"


class ScratchCleanupFailure(CombineError):
    """Scratch directory could not be wiped before extraction."""
    kind = "scratch_cleanup_failure"


class SpreadsheetReadFailure(CombineError):
    """A staged file is not a readable spreadsheet or has no sheets."""
    kind = "spreadsheet_read_failure"


class WriteFailure(CombineError):
    """Combined workbook could not be written."""
    kind = "write_failure"
