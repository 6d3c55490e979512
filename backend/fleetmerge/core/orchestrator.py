"""
Orchestrator: one request = two archives in, two combined workbooks out

extract  -> unpack each archive into its own scratch directory
combine  -> reconcile the extracted spreadsheets per category
load     -> run processors (drop columns, normalize times) and write
"""
from __future__ import annotations

import fnmatch
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from fleetmerge import __version__
from fleetmerge.common.config_models import CategoryConfig, CombinerConfig, ExecutionPolicy, default_config
from fleetmerge.common.errors import CombineError, ExtractionFailure, ScratchCleanupFailure
from fleetmerge.common.logger import get_logger
from fleetmerge.common.paths import resolve_output_dir, scratch_space
from fleetmerge.core.table import Table
from fleetmerge.io.archive import stage
from fleetmerge.io.writers.excel_writer import build_output_path, write_table
from fleetmerge.plugins.registry import get_applicable_processors
from fleetmerge.proc.reconcile import reconcile

__all__ = ["CombineResult", "combine_reports", "run_category", "select_files"]

log = get_logger()

SUCCESS_MESSAGE = "Spreadsheets combined. Please check output directory"
EXTRACT_FAILED = "Issue unzipping the files"


@dataclass
class CombineResult:
    """Single outcome of a request"""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    outputs: Dict[str, Path] = field(default_factory=dict)

    def to_reply(self) -> Dict[str, Any]:
        reply: Dict[str, Any] = {"success": self.success}
        if self.message is not None:
            reply["message"] = self.message
        if self.error is not None:
            reply["error"] = self.error
        if self.outputs:
            reply["outputs"] = {k: str(v) for k, v in self.outputs.items()}
        return reply


def select_files(names: Sequence[str], patterns: Sequence[str], sort: bool = True) -> List[str]:
    """Names matching any pattern (case-insensitive), optionally in lexicographic order."""
    picked: List[str] = []
    for name in names:
        if any(fnmatch.fnmatch(name.lower(), p.lower()) for p in patterns):
            picked.append(name)
        else:
            log.warning(f"Skipping '{name}': not a spreadsheet")
    return sorted(picked) if sort else picked


def run_category(
    key: str,
    category: CategoryConfig,
    scratch_dir: Path,
    names: Sequence[str],
    output_path: Path,
    execution: Optional[ExecutionPolicy] = None,
) -> Table:
    """Combine, post-process and write one category. Returns the written Table."""
    execution = execution or ExecutionPolicy()
    files = select_files(names, category.file_patterns, execution.sort_files)

    log.job_start("combine", key, f"{len(files)} file(s) from {scratch_dir}")
    table = reconcile(
        files,
        scratch_dir,
        category.header_skip,
        category.header_aliases,
        engines=execution.engine_list,
        name=category.name,
    )
    log.combine_success(key, len(table), len(files), len(table.columns))

    ctx = {"category": category, "category_key": key}
    for proc in get_applicable_processors(ctx):
        log.dev(f"  Processor: {proc.name}")
        table = proc.process(table, ctx)

    write_table(table, output_path, category.output_sheet, engine=execution.writer_engine)
    log.load_success(key, str(output_path), len(table))
    return table


def combine_reports(
    stops_archive: Path | str,
    work_times_archive: Path | str,
    config: Optional[CombinerConfig] = None,
    *,
    output_dir: Optional[Path | str] = None,
    now: Optional[datetime] = None,
) -> CombineResult:
    """
    Unpack both archives, combine each into one workbook, and report one outcome.

    Never raises for run failures; they come back as CombineResult(success=False).
    """
    config = config or default_config()
    t0 = time.perf_counter()
    now = now or datetime.now(timezone.utc)
    archives = {"stops": Path(stops_archive), "work_times": Path(work_times_archive)}
    out_dir = resolve_output_dir(output_dir, config.output_dir)

    log.run_start("fleetmerge", __version__)
    log.dev_detail("  Output dir", out_dir)

    outputs: Dict[str, Path] = {}
    failures: List[str] = []
    try:
        with scratch_space(config.scratch_root) as scratch:
            # ---------------- extract ----------------
            log.stage("extract")
            staged: Dict[str, List[str]] = {}
            for key, archive in archives.items():
                scratch_dir = scratch / key
                log.extract_start(key, archive, scratch_dir)
                try:
                    staged[key] = stage(archive, scratch_dir)
                    log.extract_success(key, len(staged[key]))
                except (ExtractionFailure, ScratchCleanupFailure) as e:
                    log.job_failed("extract", key, str(e))
                    failures.append(str(e))
                    staged[key] = [p.name for p in scratch_dir.iterdir()] if scratch_dir.is_dir() else []

            if failures and config.execution.stop_on_extract_failure:
                return _finish(
                    CombineResult(False, error=f"{EXTRACT_FAILED}: {'; '.join(failures)}"),
                    len(archives), t0,
                )

            # ---------------- combine + load ----------------
            log.stage("combine")
            for key in archives:
                category = config.categories[key]
                path = build_output_path(out_dir, category.report_kind, now)
                run_category(key, category, scratch / key, staged[key], path, config.execution)
                outputs[key] = path
    except CombineError as e:
        log.error(f"Run failed: {e}")
        failures.append(str(e))
        return _finish(CombineResult(False, error=str(e), outputs=outputs), len(archives), t0)

    if failures:
        # Extraction failed but the policy let the run continue
        return _finish(
            CombineResult(False, error=f"{EXTRACT_FAILED}: {'; '.join(failures)}", outputs=outputs),
            len(archives), t0,
        )
    return _finish(CombineResult(True, message=SUCCESS_MESSAGE, outputs=outputs), len(archives), t0)


def _finish(result: CombineResult, total: int, t0: float) -> CombineResult:
    written = len(result.outputs)
    log.run_summary(total, written, total - written, time.perf_counter() - t0)
    return result
