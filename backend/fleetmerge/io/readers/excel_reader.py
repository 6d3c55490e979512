from __future__ import annotations
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from fleetmerge.common.errors import SpreadsheetReadFailure
from fleetmerge.common.logger import get_logger
from fleetmerge.core.table import Cell

log = get_logger()

DEFAULT_ENGINES: Sequence[str] = ("calamine", "openpyxl")


def _to_cell(value: Any) -> Cell:
    """Plain Python value for a pandas cell. NaN/NaT become None."""
    if value is None:
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, pd.Timedelta):
        return value.to_pytimedelta()
    if hasattr(value, "item") and not isinstance(value, (str, bytes, datetime)):
        # numpy scalar
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
    # Numeric columns padded with blanks come back as float64
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _load_sheets(path: Path, engines: Sequence[str]) -> Dict[str, pd.DataFrame]:
    last_err: Exception | None = None
    for eng in engines:
        try:
            log.debug(f"Trying engine: {eng} ({path.name})")
            kwargs: Dict[str, Any] = dict(
                sheet_name=None,
                header=None,
                keep_default_na=False,
                na_values=[""],
                engine=eng,
            )
            # calamine doesn't accept dtype=object
            if eng != "calamine":
                kwargs["dtype"] = object
            sheets = pd.read_excel(path, **kwargs)  # type: ignore[call-overload]
            log.debug(f"Success with engine: {eng}, {len(sheets)} sheet(s): {list(sheets.keys())}")
            return sheets
        except Exception as e:
            log.debug(f"Engine {eng} failed: {e}")
            last_err = e

    raise SpreadsheetReadFailure(
        f"Could not read {path.name} as a spreadsheet (engines tried: {', '.join(engines)}): {last_err}",
        path,
    ) from last_err


def read_first_sheet(
    path: Path | str,
    skip_rows: int = 0,
    engines: Optional[Sequence[str]] = None,
) -> List[List[Cell]]:
    """
    Cell grid of the workbook's first sheet, minus the first `skip_rows` rows.

    Rows are counted from the top of the sheet, blank rows included. Only the
    empty string counts as a missing value; text like "NA" is kept.

    Raises:
        SpreadsheetReadFailure: missing file, unreadable by every engine, or no sheets
    """
    fp = Path(path)
    if not fp.is_file():
        raise SpreadsheetReadFailure(f"Spreadsheet not found: {fp}", fp)

    sheets = _load_sheets(fp, list(engines or DEFAULT_ENGINES))
    if not sheets:
        raise SpreadsheetReadFailure(f"Workbook has no sheets: {fp.name}", fp)

    sheet_name, pdf = next(iter(sheets.items()))
    grid = [[_to_cell(v) for v in row] for row in pdf.itertuples(index=False, name=None)]
    log.debug(f"Sheet '{sheet_name}' of {fp.name}: {len(grid)} row(s) x {pdf.shape[1]} column(s)")
    return grid[skip_rows:]
