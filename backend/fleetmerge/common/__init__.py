from __future__ import annotations
# Re-export common things for convenience
from .utils import iso_timestamp, load_yaml, reset_directory
from .headers import header_text, make_unique_headers, apply_aliases
from .errors import (
    CombineError,
    ExtractionFailure,
    ScratchCleanupFailure,
    SpreadsheetReadFailure,
    WriteFailure,
)

__all__ = [
    "CombineError",
    "ExtractionFailure",
    "ScratchCleanupFailure",
    "SpreadsheetReadFailure",
    "WriteFailure",
]
