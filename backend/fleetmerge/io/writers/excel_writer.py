from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from fleetmerge.common.errors import WriteFailure
from fleetmerge.common.logger import get_logger
from fleetmerge.common.utils import iso_timestamp
from fleetmerge.core.table import Table

log = get_logger()


def build_output_path(output_dir: Path | str, report_kind: str, when: Optional[datetime] = None) -> Path:
    """<output_dir>/<report_kind>-<UTC ISO timestamp, ':' and '.' replaced>.xlsx"""
    return Path(output_dir) / f"{report_kind}-{iso_timestamp(when)}.xlsx"


def to_frame(table: Table) -> pd.DataFrame:
    return pd.DataFrame.from_records(table.to_records(), columns=table.columns)


def write_table(
    table: Table,
    path: Path | str,
    sheet_name: Optional[str] = None,
    engine: str = "openpyxl",
) -> Path:
    """
    Write one Table as a single-sheet workbook.

    The header row is `table.columns`; unset cells are left blank.

    Raises:
        WriteFailure: the directory isn't writable or the engine rejected the data
    """
    out = Path(path)
    sheet = (sheet_name or table.name or "Sheet1")[:31]
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        frame = to_frame(table)
        with pd.ExcelWriter(out, engine=engine, mode="w") as xw:
            frame.to_excel(xw, sheet_name=sheet, index=False)
    except Exception as e:
        raise WriteFailure(f"Could not write {out}: {e}", out) from e

    log.debug(f"Wrote {len(table)} row(s) to sheet '{sheet}' of {out}")
    return out
