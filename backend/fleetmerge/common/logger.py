"""
Logging module for fleetmerge with dev/user modes

User mode: Clean, simple logging showing only important steps
Dev mode: Detailed logging (archive entries, files read, row counts, output paths)
JSON mode: Structured JSON-Lines output for the desktop shell
"""
from __future__ import annotations

import sys
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from pathlib import Path


class LogLevel(Enum):
    """Logging levels"""
    USER = "user"      # Simple, clean logging for end users
    DEV = "dev"        # Detailed logging for developers
    DEBUG = "debug"    # Very verbose logging


class LogFormat(Enum):
    """Log output formats"""
    TEXT = "text"      # Human-readable text with colors
    JSON = "json"      # Structured JSON-Lines format


class Logger:
    """fleetmerge logger with configurable verbosity and output format"""

    def __init__(self, level: LogLevel = LogLevel.USER, format: LogFormat = LogFormat.TEXT):
        self.level = level
        self.format = format
        self._colors_enabled = sys.stdout.isatty() and format == LogFormat.TEXT
        self._json_logger = None

        if format == LogFormat.JSON:
            from fleetmerge.common.json_formatter import JSONLogger
            self._json_logger = JSONLogger()

    def _timestamp(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def _format_message(self, msg: str, prefix: str = "", color: str = "") -> str:
        """Format a log message with optional color"""
        ts = self._timestamp()
        if self._colors_enabled and color:
            return f"{color}[{ts}]{prefix} {msg}\033[0m"
        return f"[{ts}]{prefix} {msg}"

    # ========== USER-LEVEL LOGGING (Always shown) ==========

    def info(self, msg: str) -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.info(msg)
        else:
            print(self._format_message(msg, color="\033[36m"))  # Cyan

    def success(self, msg: str) -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.success(msg)
        else:
            print(self._format_message(msg, prefix=" [OK]", color="\033[32m"))  # Green

    def warning(self, msg: str) -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.warning(msg)
        else:
            print(self._format_message(msg, prefix=" [WARN]", color="\033[33m"))  # Yellow

    def error(self, msg: str) -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.error(msg)
        else:
            print(self._format_message(msg, prefix=" [ERROR]", color="\033[31m"))  # Red

    def stage(self, stage_name: str) -> None:
        """Stage header (shown in all modes)"""
        if self.format == LogFormat.JSON:
            self._json_logger.stage_start(stage_name)
        else:
            line = "=" * 60
            magenta = "\033[35m"
            print(f"\n{self._format_message(line, color=magenta)}")
            print(self._format_message(f"STAGE: {stage_name.upper()}", color=magenta + "\033[1m"))
            print(f"{self._format_message(line, color=magenta)}\n")

    # ========== DEV-LEVEL LOGGING (Shown in dev/debug modes) ==========

    def dev(self, msg: str) -> None:
        if self.level in (LogLevel.DEV, LogLevel.DEBUG):
            if self.format == LogFormat.JSON:
                self._json_logger.debug(msg)
            else:
                print(self._format_message(msg, prefix=" [DEV]", color="\033[90m"))  # Gray

    def dev_detail(self, label: str, value: Any) -> None:
        if self.level in (LogLevel.DEV, LogLevel.DEBUG):
            if self.format == LogFormat.JSON:
                self._json_logger.debug(f"{label}: {value}", data={"label": label.strip(), "value": str(value)})
            else:
                print(self._format_message(f"{label}: {value}", prefix=" [DEV]", color="\033[90m"))

    # ========== DEBUG-LEVEL LOGGING (Shown only in debug mode) ==========

    def debug(self, msg: str) -> None:
        if self.level == LogLevel.DEBUG:
            if self.format == LogFormat.JSON:
                self._json_logger.debug(msg)
            else:
                print(self._format_message(msg, prefix=" [DEBUG]", color="\033[90m"))

    # ========== JOB LOGGING ==========

    def job_start(self, stage: str, job_name: str, description: str = "") -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.job_start(stage, job_name, description)
        elif self.level == LogLevel.USER:
            print(self._format_message(f"[{stage}] {job_name}", color="\033[36m"))
        else:
            print(self._format_message(f"[{stage}] Running: {job_name}", color="\033[36m"))
            if description:
                self.dev(f"  Description: {description}")

    def job_success(self, stage: str, job_name: str, details: str = "") -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.job_success(stage, job_name, details)
        elif self.level == LogLevel.USER:
            msg = f"[{stage}] {job_name}"
            if details:
                msg += f" - {details}"
            self.success(msg)
        else:
            self.success(f"[{stage}] {job_name}: {details if details else 'completed'}")

    def job_failed(self, stage: str, job_name: str, error: str) -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.job_failed(stage, job_name, error)
        else:
            self.error(f"[{stage}] {job_name} FAILED: {error}")

    # ========== EXTRACT STAGE LOGGING ==========

    def extract_start(self, job_name: str, archive: Path, scratch_dir: Path) -> None:
        self.job_start("extract", job_name)
        self.dev_detail("  Archive", archive)
        self.dev_detail("  Scratch dir", scratch_dir)

    def extract_success(self, job_name: str, entries: int) -> None:
        self.job_success("extract", job_name, f"{entries} file(s)")

    # ========== COMBINE STAGE LOGGING ==========

    def combine_file(self, file_path: Path, rows: int, anchor: bool = False) -> None:
        if self.format == LogFormat.JSON:
            if self.level in (LogLevel.DEV, LogLevel.DEBUG):
                self._json_logger.combine_file(file_path.name, rows, anchor)
            return
        tag = " (anchor)" if anchor else ""
        self.dev(f"    Reading: {file_path.name}{tag} ({rows} rows)")

    def combine_success(self, job_name: str, total_rows: int, files_count: int, columns: int) -> None:
        if self.level == LogLevel.USER:
            self.job_success("combine", job_name, f"{total_rows} rows")
        else:
            self.job_success("combine", job_name, f"{total_rows} rows x {columns} columns from {files_count} file(s)")

    # ========== LOAD STAGE LOGGING ==========

    def load_success(self, job_name: str, output_path: str, row_count: int) -> None:
        if self.level == LogLevel.USER:
            self.job_success("load", job_name, Path(output_path).name)
        else:
            self.job_success("load", job_name, f"{row_count} rows -> {output_path}")

    # ========== RUN SUMMARY ==========

    def run_start(self, name: str, version: str = "") -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.run_start(name, version)
        else:
            msg = f"Starting: {name}"
            if version:
                msg += f" (v{version})"
            self.info(msg)

    def run_summary(self, total: int, success: int, failed: int, elapsed: float) -> None:
        if self.format == LogFormat.JSON:
            self._json_logger.run_summary(total, success, failed, elapsed)
        else:
            line = "=" * 60
            print(f"\n{line}")
            print("RUN SUMMARY")
            print(line)
            print(f"  Reports:       {total}")
            print(f"  Written:       {success}")
            if failed > 0:
                print(f"  Failed:        {failed}")
            print(f"  Elapsed Time:  {elapsed:.2f}s")
            print(line)

    def reply(self, payload: Dict[str, Any]) -> None:
        """Final outcome of a request. JSON mode emits it as a 'reply' line."""
        if self.format == LogFormat.JSON:
            self._json_logger.reply(payload)
        elif payload.get("success"):
            self.success(str(payload.get("message") or "Done"))
        else:
            self.error(str(payload.get("error") or "Failed"))


# Global logger instance
_logger: Optional[Logger] = None


def get_logger() -> Logger:
    """Get the global logger instance"""
    global _logger
    if _logger is None:
        _logger = Logger(LogLevel.USER)
    return _logger


def init_logger(level: LogLevel | str = LogLevel.USER, format: LogFormat | str = LogFormat.TEXT) -> Logger:
    """
    (Re)configure the global logger and return it.

    The existing instance is updated in place rather than replaced, since
    modules bind `log = get_logger()` at import time.
    """
    global _logger
    if isinstance(level, str):
        level = LogLevel(level.lower())
    if isinstance(format, str):
        format = LogFormat(format.lower())

    fresh = Logger(level, format)
    if _logger is None:
        _logger = fresh
    else:
        _logger.__dict__.update(fresh.__dict__)
    return _logger
