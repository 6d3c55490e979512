"""
JSON-Lines formatter for structured logging output

Lets a desktop shell spawn the CLI and render its progress. One JSON object
per line:
{
    "timestamp": "2026-10-19T10:30:00.123+00:00",
    "level": "info",
    "category": "combine",
    "message": "[combine] stops",
    "data": {...}  // Optional metadata
}
The last line of a run is the reply: {"type": "reply", "success": true, ...}
"""
from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO
from enum import Enum


class JSONLogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class JSONLogCategory(str, Enum):
    """Log categories for semantic grouping"""
    RUN = "run"
    STAGE = "stage"
    JOB = "job"
    EXTRACT = "extract"
    COMBINE = "combine"
    LOAD = "load"
    SYSTEM = "system"


# Job events are filed under their stage when it has a category of its own
_STAGE_CATEGORIES = {
    "extract": JSONLogCategory.EXTRACT,
    "combine": JSONLogCategory.COMBINE,
    "load": JSONLogCategory.LOAD,
}


def job_category(stage: str) -> JSONLogCategory:
    return _STAGE_CATEGORIES.get(stage, JSONLogCategory.JOB)


class JSONLogger:
    """
    Structured JSON logger that outputs one JSON object per line.

    Each log entry includes:
    - timestamp: ISO 8601 format with timezone
    - level: debug, info, success, warning, error
    - category: Semantic category (run, job, extract, combine, ...)
    - message: Human-readable message
    - data: Optional structured metadata
    """

    def __init__(self, output_stream: Optional[TextIO] = None):
        self._stream = output_stream

    @property
    def output_stream(self) -> TextIO:
        # Looked up per write so redirected stdout is honoured
        return self._stream or sys.stdout

    def _write(self, entry: Dict[str, Any]) -> None:
        try:
            json_line = json.dumps(entry, ensure_ascii=False, default=str)
            self.output_stream.write(json_line + "\n")
            self.output_stream.flush()
        except (TypeError, ValueError, OSError) as e:
            sys.stderr.write(f"JSON logging error: {e}\n")
            sys.stderr.write(f"Message: {entry.get('message')}\n")

    def _emit(
        self,
        level: JSONLogLevel,
        category: JSONLogCategory,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.value,
            "category": category.value,
            "message": message,
        }
        if data:
            entry["data"] = data
        entry.update(kwargs)
        self._write(entry)

    # ========== STANDARD LOG LEVELS ==========

    def debug(self, message: str, data: Optional[Dict[str, Any]] = None, category: JSONLogCategory = JSONLogCategory.SYSTEM) -> None:
        self._emit(JSONLogLevel.DEBUG, category, message, data)

    def info(self, message: str, data: Optional[Dict[str, Any]] = None, category: JSONLogCategory = JSONLogCategory.SYSTEM) -> None:
        self._emit(JSONLogLevel.INFO, category, message, data)

    def success(self, message: str, data: Optional[Dict[str, Any]] = None, category: JSONLogCategory = JSONLogCategory.SYSTEM) -> None:
        self._emit(JSONLogLevel.SUCCESS, category, message, data)

    def warning(self, message: str, data: Optional[Dict[str, Any]] = None, category: JSONLogCategory = JSONLogCategory.SYSTEM) -> None:
        self._emit(JSONLogLevel.WARNING, category, message, data)

    def error(self, message: str, data: Optional[Dict[str, Any]] = None, category: JSONLogCategory = JSONLogCategory.SYSTEM) -> None:
        self._emit(JSONLogLevel.ERROR, category, message, data)

    # ========== RUN-SPECIFIC METHODS ==========

    def run_start(self, name: str, version: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        msg = f"Starting: {name}"
        if version:
            msg += f" (v{version})"

        run_data = {"name": name}
        if version:
            run_data["version"] = version
        if data:
            run_data.update(data)

        self._emit(JSONLogLevel.INFO, JSONLogCategory.RUN, msg, run_data)

    def run_summary(self, total: int, success: int, failed: int, elapsed: float) -> None:
        summary_data = {
            "total_reports": total,
            "success": success,
            "failed": failed,
            "elapsed_seconds": round(elapsed, 2)
        }
        self._emit(JSONLogLevel.INFO, JSONLogCategory.RUN, "Run Summary", summary_data)

    def stage_start(self, stage_name: str, data: Optional[Dict[str, Any]] = None) -> None:
        stage_data = {"stage": stage_name}
        if data:
            stage_data.update(data)
        self._emit(JSONLogLevel.INFO, JSONLogCategory.STAGE, f"STAGE: {stage_name.upper()}", stage_data)

    def job_start(self, stage: str, job_name: str, description: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        job_data = {"stage": stage, "job": job_name}
        if description:
            job_data["description"] = description
        if data:
            job_data.update(data)
        self._emit(JSONLogLevel.INFO, job_category(stage), f"[{stage}] {job_name}", job_data)

    def job_success(self, stage: str, job_name: str, details: str = "", data: Optional[Dict[str, Any]] = None) -> None:
        job_data = {"stage": stage, "job": job_name}
        if details:
            job_data["details"] = details
        if data:
            job_data.update(data)

        msg = f"[{stage}] {job_name}"
        if details:
            msg += f": {details}"

        self._emit(JSONLogLevel.SUCCESS, job_category(stage), msg, job_data)

    def job_failed(self, stage: str, job_name: str, error: str, data: Optional[Dict[str, Any]] = None) -> None:
        job_data = {"stage": stage, "job": job_name, "error": error}
        if data:
            job_data.update(data)
        self._emit(JSONLogLevel.ERROR, job_category(stage), f"[{stage}] {job_name} FAILED: {error}", job_data)

    # ========== STAGE-SPECIFIC LOGGING ==========

    def combine_file(self, file_name: str, rows: int, anchor: bool = False) -> None:
        self._emit(
            JSONLogLevel.DEBUG,
            JSONLogCategory.COMBINE,
            f"Reading: {file_name} ({rows} rows)",
            {"file": file_name, "rows": rows, "anchor": anchor},
        )

    def reply(self, payload: Dict[str, Any]) -> None:
        """Emit the single request outcome. Not a log entry: no level/category."""
        self._write({"type": "reply", **payload})
