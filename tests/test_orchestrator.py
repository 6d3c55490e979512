from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from openpyxl import load_workbook

from fleetmerge.common.config_models import CombinerConfig, default_config_dict
from fleetmerge.common.errors import ScratchCleanupFailure
from fleetmerge.core.orchestrator import (
    EXTRACT_FAILED,
    SUCCESS_MESSAGE,
    CombineResult,
    combine_reports,
    select_files,
)
from fleetmerge.io import archive as archive_module

from conftest import STOPS_HEADER, stops_rows, write_xlsx, zip_files

NOW = datetime(2026, 10, 19, 12, 27, 0, 123000, tzinfo=timezone.utc)
STAMP = "2026-10-19T12-27-00-123Z"

WORK_COLUMNS = [
    "Date", "Licence plate", "Vehicle", "Vehicle Title",
    "Driving time", "Distance", "Excessive idling",
]


def _config(tmp_path: Path, **execution: Any) -> CombinerConfig:
    raw: Dict[str, Any] = default_config_dict()
    raw["scratch_root"] = str(tmp_path / "scratch")
    raw["execution"] = execution
    return CombinerConfig(**raw)


def _sheet(path: Path):
    wb = load_workbook(path)
    assert len(wb.sheetnames) == 1
    ws = wb[wb.sheetnames[0]]
    rows = list(ws.iter_rows(values_only=True))
    return ws.title, list(rows[0]), [list(r) for r in rows[1:]]


class TestSelectFiles:

    def test_sorted_and_filtered(self) -> None:
        names = ["b.xlsx", "notes.txt", "A.XLSX", "c.xls", "__MACOSX"]
        assert select_files(names, ["*.xlsx", "*.xls"]) == ["A.XLSX", "b.xlsx", "c.xls"]

    def test_archive_order_kept(self) -> None:
        assert select_files(["b.xlsx", "a.xlsx"], ["*.xlsx"], sort=False) == ["b.xlsx", "a.xlsx"]


class TestCombineReports:

    def test_end_to_end(self, tmp_path: Path, stops_archive: Path, work_times_archive: Path) -> None:
        out_dir = tmp_path / "out"
        result = combine_reports(stops_archive, work_times_archive, _config(tmp_path), output_dir=out_dir, now=NOW)

        assert result.success
        assert result.message == SUCCESS_MESSAGE
        assert result.error is None
        assert result.outputs == {
            "stops": out_dir / f"combinedStopsReport-{STAMP}.xlsx",
            "work_times": out_dir / f"combinedWorkTimesReport-{STAMP}.xlsx",
        }
        assert sorted(p.name for p in out_dir.iterdir()) == sorted(p.name for p in result.outputs.values())

    def test_stops_workbook(self, tmp_path: Path, stops_archive: Path, work_times_archive: Path) -> None:
        result = combine_reports(stops_archive, work_times_archive, _config(tmp_path), output_dir=tmp_path / "out", now=NOW)
        title, header, rows = _sheet(result.outputs["stops"])

        assert title == "Stops"
        # anchor header wins; stops_b's differing labels are ignored
        assert header == STOPS_HEADER
        assert len(rows) == 5
        assert [r[0] for r in rows] == ["Truck 1", "Truck 1", "Truck 2", "Truck 2", "Truck 2"]
        assert [r[3:] for r in rows] == [
            ["12:00:00", "06:00:00", "03:00:00"],
            ["00:15:00", "00:00:00", "18:00:00"],
            ["36:00:00", "01:00:00", "00:00:00"],
            ["00:00:00", "00:00:00", "00:00:00"],
            ["00:00:01", "12:00:00", "12:00:00"],
        ]

    def test_work_times_workbook(self, tmp_path: Path, stops_archive: Path, work_times_archive: Path) -> None:
        result = combine_reports(stops_archive, work_times_archive, _config(tmp_path), output_dir=tmp_path / "out", now=NOW)
        title, header, rows = _sheet(result.outputs["work_times"])

        assert title == "Work Times"
        assert header == WORK_COLUMNS
        for dropped in ("Driving time_1", "Total Driving Time", "_5", "Distance_1"):
            assert dropped not in header
        assert [r[1] for r in rows] == ["AB 123", "AB 123", "CD 456"]
        assert [r[4] for r in rows] == [6, 5.5, 7]
        assert [r[5] for r in rows] == [120, 90, 150]
        assert [r[6] for r in rows] == ["00:01:30", "00:00:00", "01:30:00"]

    def test_scratch_removed_after_run(self, tmp_path: Path, stops_archive: Path, work_times_archive: Path) -> None:
        combine_reports(stops_archive, work_times_archive, _config(tmp_path), output_dir=tmp_path / "out", now=NOW)
        assert list((tmp_path / "scratch").iterdir()) == []

    def test_extract_failure_short_circuits(self, tmp_path: Path, work_times_archive: Path) -> None:
        bogus = tmp_path / "stops.zip"
        bogus.write_bytes(b"not a zip")
        out_dir = tmp_path / "out"

        result = combine_reports(bogus, work_times_archive, _config(tmp_path), output_dir=out_dir, now=NOW)

        assert not result.success
        assert result.error.startswith(EXTRACT_FAILED)
        assert result.message is None
        assert result.outputs == {}
        assert not out_dir.exists() or list(out_dir.iterdir()) == []

    def test_extract_failure_can_continue(self, tmp_path: Path, work_times_archive: Path) -> None:
        config = _config(tmp_path, stop_on_extract_failure=False)
        result = combine_reports(tmp_path / "missing.zip", work_times_archive, config, output_dir=tmp_path / "out", now=NOW)

        assert not result.success
        assert result.error.startswith(EXTRACT_FAILED)
        assert set(result.outputs) == {"stops", "work_times"}
        _, header, rows = _sheet(result.outputs["work_times"])
        assert header == WORK_COLUMNS
        assert len(rows) == 3

    def test_non_spreadsheet_entries_skipped(self, tmp_path: Path, work_times_archive: Path) -> None:
        a = write_xlsx(tmp_path / "src" / "only.xlsx", stops_rows([["T9", "Depot", "09:00", 0.5, 0.5, 0.5]]))
        archive = zip_files(tmp_path / "stops.zip", {"only.xlsx": a, "readme.txt": b"hello"})

        result = combine_reports(archive, work_times_archive, _config(tmp_path), output_dir=tmp_path / "out", now=NOW)

        assert result.success
        _, _, rows = _sheet(result.outputs["stops"])
        assert rows == [["T9", "Depot", "09:00", "12:00:00", "12:00:00", "12:00:00"]]

    def test_unreadable_spreadsheet_fails_run(self, tmp_path: Path, work_times_archive: Path) -> None:
        a = write_xlsx(tmp_path / "src" / "a.xlsx", stops_rows([["T1", "Depot", "08:00", 0.5, 0.5, 0.5]]))
        archive = zip_files(tmp_path / "stops.zip", {"a.xlsx": a, "b.xlsx": b"corrupt"})

        result = combine_reports(archive, work_times_archive, _config(tmp_path), output_dir=tmp_path / "out", now=NOW)

        assert not result.success
        assert "b.xlsx" in result.error

    def test_scratch_cleanup_failure_reported(self, tmp_path: Path, stops_archive: Path, work_times_archive: Path, monkeypatch) -> None:
        def _locked(path):
            raise ScratchCleanupFailure(f"Could not clear scratch directory {path}: Permission denied", path)

        monkeypatch.setattr(archive_module, "reset_directory", _locked)
        out_dir = tmp_path / "out"

        result = combine_reports(stops_archive, work_times_archive, _config(tmp_path), output_dir=out_dir, now=NOW)

        assert not result.success
        assert result.error.startswith(EXTRACT_FAILED)
        assert "Could not clear scratch directory" in result.error
        assert result.outputs == {}
        assert not out_dir.exists()


class TestCombineResult:

    def test_success_reply(self, tmp_path: Path) -> None:
        result = CombineResult(True, message=SUCCESS_MESSAGE, outputs={"stops": tmp_path / "s.xlsx"})
        assert result.to_reply() == {
            "success": True,
            "message": SUCCESS_MESSAGE,
            "outputs": {"stops": str(tmp_path / "s.xlsx")},
        }

    def test_failure_reply(self) -> None:
        assert CombineResult(False, error="boom").to_reply() == {"success": False, "error": "boom"}


def test_files_combined_in_name_order(tmp_path: Path, work_times_archive: Path) -> None:
    b = write_xlsx(tmp_path / "src" / "b.xlsx", stops_rows([["from b", "", "", 0, 0, 0]]))
    a = write_xlsx(tmp_path / "src" / "a.xlsx", stops_rows([["from a", "", "", 0, 0, 0]]))
    archive = zip_files(tmp_path / "stops.zip", {"b.xlsx": b, "a.xlsx": a})

    result = combine_reports(archive, work_times_archive, _config(tmp_path), output_dir=tmp_path / "out", now=NOW)

    _, _, rows = _sheet(result.outputs["stops"])
    assert [r[0] for r in rows] == ["from a", "from b"]
