from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog
from structlog.typing import EventDict, Processor

from ytscribe.config import AppSettings

APP_LOGGER_NAME = "ytscribe"
TELEMETRY_LOGGER_NAME = "ytscribe.telemetry"
LOG_FILE_NAME = "ytscribe.log"
TELEMETRY_LOG_FILE_NAME = "ytscribe-telemetry.log"


def configure_application_logging(settings: AppSettings) -> Path:
    """Console plus JSON file logging for the API server."""
    log_dir = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    telemetry_log_file = log_dir / TELEMETRY_LOG_FILE_NAME

    _configure_structlog()

    logger = _reset_app_logger()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_build_file_formatter())

    logger.addHandler(_build_console_handler(sys.stdout, settings.log_level))
    logger.addHandler(file_handler)
    _configure_telemetry_logger(telemetry_log_file)

    logger.info(
        "logging configured console_level=%s file_level=%s path=%s telemetry_path=%s",
        settings.log_level.upper(),
        "DEBUG",
        log_file,
        telemetry_log_file,
    )
    return log_file


def configure_cli_logging(*, verbose: bool, stream: TextIO | None = None) -> None:
    """
    Console-only logging for the command line.

    Logs go to stderr so stdout carries nothing but the command output.
    """
    _configure_structlog()
    logger = _reset_app_logger()
    console_stream = stream if stream is not None else sys.stderr
    logger.addHandler(
        _build_console_handler(console_stream, "DEBUG" if verbose else "WARNING")
    )


def _reset_app_logger() -> logging.Logger:
    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    _reset_handlers(logger)
    return logger


def _build_console_handler(stream: TextIO, raw_level: str) -> logging.Handler:
    console_handler = logging.StreamHandler(stream=stream)
    console_handler.setLevel(_resolve_log_level(raw_level))
    console_handler.setFormatter(
        _build_console_formatter(enable_colors=_stream_supports_color(stream))
    )
    return console_handler


def _resolve_log_level(raw_level: str) -> int:
    normalized = raw_level.strip().upper()
    resolved = getattr(logging, normalized, None)
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _configure_telemetry_logger(log_file: Path) -> None:
    telemetry_logger = logging.getLogger(TELEMETRY_LOGGER_NAME)
    telemetry_logger.setLevel(logging.INFO)
    telemetry_logger.propagate = False
    _reset_handlers(telemetry_logger)

    telemetry_file_handler = logging.FileHandler(log_file, encoding="utf-8")
    telemetry_file_handler.setLevel(logging.INFO)
    telemetry_file_handler.setFormatter(_build_file_formatter())
    telemetry_logger.addHandler(telemetry_file_handler)


def _build_console_formatter(*, enable_colors: bool) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_pre_chain(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=enable_colors),
        ],
    )


def _build_file_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_pre_chain(),
        processors=[
            _add_record_metadata,
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
    )


def _shared_pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]


def _add_record_metadata(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        event_dict["pathname"] = record.pathname
        event_dict["lineno"] = record.lineno
        event_dict["func_name"] = record.funcName
        event_dict["process"] = record.process
    return event_dict


def _stream_supports_color(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    if callable(isatty):
        try:
            return bool(isatty())
        except Exception:
            return False
    return False
