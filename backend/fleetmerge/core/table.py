from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, Iterator, List, Union

# None marks an unset cell; "" is an explicit empty string.
Cell = Union[str, int, float, bool, datetime, date, time, timedelta, None]
Row = Dict[str, Cell]


@dataclass
class Table:
    """
    A combined report held in memory.

    `columns` is the anchor file's label order. Every row carries exactly
    those keys, in that order.
    """
    name: str
    columns: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def row_from_values(self, values: Iterable[Cell], fill: Cell = None) -> Row:
        """Key values by position onto `columns`. Missing positions get `fill`, extras are dropped."""
        row: Row = dict.fromkeys(self.columns, fill)
        for label, value in zip(self.columns, values):
            row[label] = value
        return row

    def extend(self, rows: Iterable[Row]) -> None:
        self.rows.extend(rows)

    def column(self, label: str) -> List[Cell]:
        return [row.get(label) for row in self.rows]

    def drop(self, labels: Iterable[str]) -> List[str]:
        """Remove labels from the columns and from every row. Returns the ones that were present."""
        wanted = set(labels)
        present = [c for c in self.columns if c in wanted]
        if not present:
            return []
        self.columns = [c for c in self.columns if c not in present]
        for row in self.rows:
            for label in present:
                row.pop(label, None)
        return present

    def to_records(self) -> List[List[Cell]]:
        return [[row.get(c) for c in self.columns] for row in self.rows]
