# fleetmerge/proc/time_fields.py
from __future__ import annotations
import math
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, Mapping

from openpyxl.utils.datetime import to_excel

from fleetmerge.common.config_models import CategoryConfig, NonNumericPolicy, TimeEncoding
from fleetmerge.common.logger import get_logger
from fleetmerge.core.table import Cell, Table
from fleetmerge.plugins.api import Processor
from fleetmerge.plugins.registry import register_processor

log = get_logger()

SECONDS_PER_DAY = 24 * 3600
ZERO_HMS = "00:00:00"


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def seconds_to_hms(total_seconds: int) -> str:
    sign = "-" if total_seconds < 0 else ""
    hours, rest = divmod(abs(total_seconds), 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


def fraction_to_hms(fraction: float) -> str:
    """Fraction of a 24h day -> HH:MM:SS. Hours run past 23 when fraction > 1."""
    return seconds_to_hms(_round_half_up(fraction * SECONDS_PER_DAY))


def minutes_to_hms(minutes: float) -> str:
    """Minutes (possibly fractional) -> HH:MM:SS."""
    return seconds_to_hms(_round_half_up(minutes * 60))


def to_number(value: Any) -> float:
    """
    Numeric value of a cell, NaN when there isn't one.

    Blank strings count as 0, numeric strings are parsed, and date/time cells
    become spreadsheet serial days (so a time of 12:00 is 0.5).
    """
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, (datetime, date, time, timedelta)):
        serial = to_excel(value)
        return math.nan if serial is None else float(serial)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return 0.0
        try:
            return float(s)
        except ValueError:
            return math.nan
    return math.nan


_CONVERTERS: Dict[TimeEncoding, Callable[[float], str]] = {
    TimeEncoding.FRACTION_OF_DAY: fraction_to_hms,
    TimeEncoding.MINUTES: minutes_to_hms,
}


def normalize_value(value: Cell, encoding: TimeEncoding, non_numeric: NonNumericPolicy) -> Cell:
    num = to_number(value)
    if math.isnan(num) or math.isinf(num):
        return ZERO_HMS if non_numeric == NonNumericPolicy.ZERO else value
    return _CONVERTERS[encoding](num)


@register_processor
class NormalizeTimeFields(Processor):
    """
    Rewrite configured time columns as HH:MM:SS strings.

    Options (ctx["category"].time_columns):
      - column: label in the combined table
      - encoding: fraction_of_day | minutes
      - non_numeric: keep (leave the cell alone) | zero ("00:00:00")
    """
    name = "normalize_time_fields"
    order = 50

    def applies_to(self, ctx: Mapping[str, Any]) -> bool:
        category: CategoryConfig | None = ctx.get("category")
        return bool(category and category.time_columns)

    def process(self, table: Table, ctx: Mapping[str, Any]) -> Table:
        category: CategoryConfig = ctx["category"]
        for target in category.time_columns:
            if target.column not in table.columns:
                log.warning(f"[normalize] {table.name}: column '{target.column}' not found, left as-is")
                continue
            untouched = 0
            for row in table.rows:
                before = row[target.column]
                after = normalize_value(before, target.encoding, target.non_numeric)
                if after is before:
                    untouched += 1
                row[target.column] = after
            log.dev(f"    {target.column}: {len(table.rows) - untouched} value(s) -> HH:MM:SS ({target.encoding.value})")
            if untouched:
                log.debug(f"    {target.column}: {untouched} non-numeric value(s) kept")
        return table
