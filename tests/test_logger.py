from __future__ import annotations

import io
import json

from fleetmerge.common.json_formatter import JSONLogCategory, JSONLogger
from fleetmerge.common.logger import LogFormat, LogLevel, get_logger, init_logger


def _lines(stream: io.StringIO):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestJSONLogger:

    def test_entry_shape(self) -> None:
        stream = io.StringIO()
        JSONLogger(stream).warning("careful", {"file": "a.xlsx"}, category=JSONLogCategory.COMBINE)
        (entry,) = _lines(stream)
        assert entry["level"] == "warning"
        assert entry["category"] == "combine"
        assert entry["message"] == "careful"
        assert entry["data"] == {"file": "a.xlsx"}
        assert "timestamp" in entry

    def test_reply_has_no_level(self) -> None:
        stream = io.StringIO()
        JSONLogger(stream).reply({"success": True, "message": "done"})
        assert _lines(stream) == [{"type": "reply", "success": True, "message": "done"}]

    def test_job_failed(self) -> None:
        stream = io.StringIO()
        JSONLogger(stream).job_failed("extract", "stops", "bad zip")
        (entry,) = _lines(stream)
        assert entry["level"] == "error"
        assert entry["category"] == "extract"
        assert entry["data"] == {"stage": "extract", "job": "stops", "error": "bad zip"}

    def test_job_category_follows_stage(self) -> None:
        stream = io.StringIO()
        logger = JSONLogger(stream)
        logger.job_start("load", "stops")
        logger.job_success("combine", "stops", "5 rows")
        logger.job_start("cleanup", "stops")
        assert [e["category"] for e in _lines(stream)] == ["load", "combine", "job"]

    def test_run_summary(self) -> None:
        stream = io.StringIO()
        JSONLogger(stream).run_summary(2, 1, 1, 0.123)
        (entry,) = _lines(stream)
        assert entry["data"] == {"total_reports": 2, "success": 1, "failed": 1, "elapsed_seconds": 0.12}


class TestLogger:

    def test_init_updates_shared_instance(self) -> None:
        log = get_logger()
        same = init_logger("debug", "json")
        assert same is log
        assert log.level is LogLevel.DEBUG
        assert log.format is LogFormat.JSON

    def test_user_level_hides_dev(self, capsys) -> None:
        log = init_logger("user", "text")
        log.dev("hidden detail")
        log.info("visible")
        out = capsys.readouterr().out
        assert "hidden detail" not in out
        assert "visible" in out

    def test_text_reply(self, capsys) -> None:
        log = init_logger("user", "text")
        log.reply({"success": False, "error": "Issue unzipping the files"})
        out = capsys.readouterr().out
        assert "[ERROR]" in out
        assert "Issue unzipping the files" in out

    def test_json_reply(self, capsys) -> None:
        log = init_logger("user", "json")
        log.reply({"success": True, "message": "ok"})
        assert json.loads(capsys.readouterr().out) == {"type": "reply", "success": True, "message": "ok"}
