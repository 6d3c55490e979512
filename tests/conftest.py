from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence

import pytest
from openpyxl import Workbook

from fleetmerge.common.logger import init_logger

STOPS_TITLE = [
    ["Stops report"],
    [],
    ["Period", "01.03.2025 - 31.03.2025"],
    ["Generated", "2025-04-01"],
    [],
]
STOPS_HEADER = ["Vehicle", "Address", "Arrival", "Parking time", "Ignition on", "Engine on"]

WORK_TITLE = [
    ["Work times report"],
    ["Period", "March 2025"],
    [],
    [],
]
WORK_HEADER = [
    None, None, None, None, None,
    "Driving time", "Driving time", "Distance", "Distance", "Excessive idling",
]


def write_xlsx(path: Path, rows: Sequence[Sequence[Any]], sheet: str = "Report", extra_sheets: Sequence[str] = ()) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet
    for row in rows:
        ws.append(list(row))
    for name in extra_sheets:
        wb.create_sheet(name).append(["not", "read"])
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def zip_files(zip_path: Path, files: Dict[str, Path | bytes]) -> Path:
    with zipfile.ZipFile(zip_path, "w") as zf:
        for arcname, src in files.items():
            if isinstance(src, bytes):
                zf.writestr(arcname, src)
            else:
                zf.write(src, arcname)
    return zip_path


def stops_rows(data: List[List[Any]], header: Sequence[Any] = STOPS_HEADER) -> List[List[Any]]:
    return [*STOPS_TITLE, list(header), *data]


def work_rows(data: List[List[Any]], header: Sequence[Any] = WORK_HEADER) -> List[List[Any]]:
    return [*WORK_TITLE, list(header), *data]


@pytest.fixture(autouse=True)
def _reset_logger():
    init_logger("user", "text")
    yield
    init_logger("user", "text")


@pytest.fixture
def make_xlsx(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, rows: Sequence[Sequence[Any]], **kwargs) -> Path:
        return write_xlsx(tmp_path / "src" / name, rows, **kwargs)
    return _make


@pytest.fixture
def stops_archive(tmp_path: Path) -> Path:
    a = write_xlsx(tmp_path / "src" / "stops_a.xlsx", stops_rows([
        ["Truck 1", "Depot", "08:00", 0.5, 0.25, 0.125],
        ["Truck 1", "Site 4", "13:10", 0.0104166667, 0.0, 0.75],
    ]))
    b = write_xlsx(tmp_path / "src" / "stops_b.xlsx", stops_rows([
        ["Truck 2", "Depot", "07:45", 1.5, 0.041666667, 0.0],
        ["Truck 2", "Yard", "16:20", 0.0, 0.0, 0.0],
        ["Truck 2", "Site 9", "18:00", 0.000011574, 0.5, 0.5],
    ], header=["Vehicle ", "Address", "Arrival time", "Parking", "Ignition", "Engine"]))
    return zip_files(tmp_path / "stops.zip", {"stops_a.xlsx": a, "stops_b.xlsx": b})


@pytest.fixture
def work_times_archive(tmp_path: Path) -> Path:
    a = write_xlsx(tmp_path / "src" / "work_a.xlsx", work_rows([
        ["2025-03-01", "AB 123", "Truck 1", "Truck 1 (north)", 8.5, 6.0, 6.1, 120, 121, 1.5],
        ["2025-03-02", "AB 123", "Truck 1", "Truck 1 (north)", 7.0, 5.5, 5.6, 90, 91, "n/a"],
    ]))
    b = write_xlsx(tmp_path / "src" / "work_b.xlsx", work_rows([
        ["2025-03-01", "CD 456", "Truck 2", "Truck 2 (south)", 9.0, 7.0, 7.2, 150, 151, 90],
    ]))
    return zip_files(tmp_path / "work_times.zip", {"work_a.xlsx": a, "work_b.xlsx": b})
