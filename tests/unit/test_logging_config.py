"""Unit tests for logging configuration."""

import json
import logging
import sys

import pytest

from contentstudio.utils.logging_config import JsonFormatter, configure_logging, pipeline_stage_logger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJsonFormatter:
    def test_formats_record_with_extra(self):
        record = logging.LogRecord("contentstudio.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.stage = "audio"

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "contentstudio.test"
        assert data["message"] == "hello world"
        assert data["extra"] == {"stage": "audio"}

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError: boom" in data["exception"]


class TestConfigureLogging:
    def test_file_output(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "pipeline.log"

        configure_logging(level="DEBUG", log_file=log_file, json_format=True, console_output=False)
        logging.getLogger("contentstudio.test").info("to file")
        for handler in restore_root_logger.handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert restore_root_logger.level == logging.DEBUG
        assert any(line["message"] == "to file" for line in lines)


class TestPipelineStageLogger:
    def test_logs_start_and_completion(self, caplog):
        caplog.set_level(logging.INFO)
        parent = logging.getLogger("contentstudio.pipeline.test")

        with pipeline_stage_logger("quality_gate", parent, topic_id=17) as log:
            log.info("inside")

        records = [r for r in caplog.records if r.name == "contentstudio.pipeline.test.quality_gate"]
        assert [r.status for r in records if hasattr(r, "status")] == ["started", "completed"]
        assert all(r.topic_id == 17 for r in records if hasattr(r, "status"))

    def test_logs_failure_and_reraises(self, caplog):
        caplog.set_level(logging.INFO)

        with pytest.raises(RuntimeError):
            with pipeline_stage_logger("audio", logging.getLogger("contentstudio.pipeline.test")):
                raise RuntimeError("tts down")

        failed = [r for r in caplog.records if getattr(r, "status", None) == "failed"]
        assert len(failed) == 1
        assert failed[0].error == "tts down"
