"""Logging configuration with optional structured JSON output.

Log lines are for operators; the caller-facing progress narrative lives in
``StatusTrail`` and is never built from log records.
"""

import json
import logging
import sys
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from contentstudio.constants import LOG_FORMAT, LOG_LEVEL

_STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """Render a log record as one JSON object per line.

    Fields: timestamp (UTC ISO 8601), level, logger, message, optional
    exception, and any ``extra=`` context under ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_logging(
    level: Union[str, int, None] = None,
    log_file: Optional[Union[str, Path]] = None,
    json_format: Optional[bool] = None,
    console_output: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Logging level (default: LOG_LEVEL setting)
        log_file: Optional file path for log output
        json_format: Use the JSON formatter (default: LOG_FORMAT == "json")
        console_output: Log to stdout (default: True)
    """
    level = level or LOG_LEVEL
    if json_format is None:
        json_format = LOG_FORMAT == "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger(__name__).info(
        f"Logging configured: level={logging.getLevelName(root_logger.level)}, json_format={json_format}"
    )


@contextmanager
def pipeline_stage_logger(
    stage_name: str,
    logger: Optional[logging.Logger] = None,
    **context: Any,
) -> Iterator[logging.Logger]:
    """Log entry, exit and failure of one pipeline stage with its duration.

    Args:
        stage_name: Name of the stage (e.g. "language_gate")
        logger: Parent logger; the stage logs to a child of it
        **context: Extra fields attached to every stage record

    Example:
        >>> with pipeline_stage_logger("history_archive", topic_id=17) as log:
        ...     log.info("Saving snapshot")
    """
    parent = logger or logging.getLogger("contentstudio.pipeline")
    stage_logger = parent.getChild(stage_name)
    start_time = datetime.now(UTC)
    stage_logger.info(
        f"Starting pipeline stage: {stage_name}",
        extra={"stage": stage_name, "status": "started", **context},
    )

    try:
        yield stage_logger
    except Exception as e:
        duration_ms = (datetime.now(UTC) - start_time).total_seconds() * 1000
        stage_logger.error(
            f"Failed pipeline stage: {stage_name}",
            extra={
                "stage": stage_name,
                "status": "failed",
                "duration_ms": round(duration_ms, 2),
                "error": str(e)[:200],
                **context,
            },
        )
        raise

    duration_ms = (datetime.now(UTC) - start_time).total_seconds() * 1000
    stage_logger.info(
        f"Completed pipeline stage: {stage_name}",
        extra={
            "stage": stage_name,
            "status": "completed",
            "duration_ms": round(duration_ms, 2),
            **context,
        },
    )
