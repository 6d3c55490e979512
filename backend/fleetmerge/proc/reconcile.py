"""
Row reconciliation: concatenate several exports of the same report into one Table.

The first file (the anchor) defines the columns. Every later file is mapped
onto those columns by position, not by header text. Exports from the telemetry
system share a column layout even when a header differs cosmetically; if a
batch ever mixes layouts, the later files' values land under the wrong labels.
"""
from __future__ import annotations
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from fleetmerge.common.headers import apply_aliases, header_text, make_unique_headers
from fleetmerge.common.logger import get_logger
from fleetmerge.core.table import Cell, Row, Table
from fleetmerge.io.readers.excel_reader import read_first_sheet

log = get_logger()

__all__ = ["reconcile", "anchor_rows", "positional_rows"]


def _is_blank(row: Sequence[Cell]) -> bool:
    return all(v is None for v in row)


def anchor_rows(
    grid: List[List[Cell]],
    alias_map: Optional[Mapping[str, str]] = None,
) -> tuple[List[str], List[Row]]:
    """
    Columns and rows of the anchor file.

    grid[0] is the header row. Blank cells default to "", fully blank rows
    are skipped. Labels are deduplicated, then renamed through alias_map.
    """
    if not grid:
        return [], []

    raw = make_unique_headers([header_text(v) for v in grid[0]])
    labels = apply_aliases(raw, alias_map)
    # An alias can land on a label that already exists; the later value wins
    columns = list(dict.fromkeys(labels))

    rows: List[Row] = []
    for values in grid[1:]:
        if _is_blank(values):
            continue
        row: Row = dict.fromkeys(columns, "")
        for label, value in zip(labels, values):
            row[label] = "" if value is None else value
        rows.append(row)
    return columns, rows


def positional_rows(grid: List[List[Cell]], columns: Sequence[str]) -> List[Row]:
    """
    Data rows of a non-anchor file keyed onto `columns` by position.

    grid[0] (the file's own header) is discarded. Blank or missing cells are
    left unset (None); cells beyond the anchor's width are dropped.
    """
    target = Table(name="", columns=list(columns))
    return [target.row_from_values(values) for values in grid[1:]]


def reconcile(
    file_names: Sequence[str],
    base_dir: Path | str,
    header_skip: int,
    alias_map: Optional[Mapping[str, str]] = None,
    *,
    engines: Optional[Sequence[str]] = None,
    name: str = "combined",
) -> Table:
    """
    Merge the first sheet of every file into one Table.

    Args:
        file_names: files in processing order; the first is the anchor
        base_dir: directory holding the files
        header_skip: title rows above the header row in every file
        alias_map: header renames, applied to the anchor only

    Raises:
        SpreadsheetReadFailure: a file can't be read as a spreadsheet
    """
    base = Path(base_dir)
    table = Table(name=name, meta={"files": list(file_names), "base_dir": str(base)})
    if not file_names:
        log.dev(f"  No files to combine for {name}")
        return table

    anchor, *others = file_names
    anchor_path = base / anchor
    columns, rows = anchor_rows(read_first_sheet(anchor_path, header_skip, engines), alias_map)
    table.columns = columns
    table.extend(rows)
    table.meta["anchor"] = anchor
    log.combine_file(anchor_path, len(rows), anchor=True)
    log.debug(f"    Columns: {columns}")

    for file_name in others:
        path = base / file_name
        grid = read_first_sheet(path, header_skip, engines)
        if grid and len(grid[0]) != len(columns):
            log.dev(f"    {file_name}: {len(grid[0])} columns vs {len(columns)} in anchor, mapping by position")
        rows = positional_rows(grid, table.columns)
        table.extend(rows)
        log.combine_file(path, len(rows))

    return table
