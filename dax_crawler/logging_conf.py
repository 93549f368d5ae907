"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path

import structlog

_LOGGING_INITIALISED = False
_LOG_DIR: Path | None = None


def _default_log_dir() -> Path:
    env_root = os.environ.get("DAX_CRAWLER_HOME")
    root = Path(env_root).expanduser() if env_root else Path.cwd()
    return root / "logs"


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the application logger."""

    global _LOGGING_INITIALISED, _LOG_DIR
    if not _LOGGING_INITIALISED:
        log_dir = log_dir or _default_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        scraper_log = log_dir / "scraper.log"
        error_log = log_dir / "error.log"
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(process)d %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "plain",
                    },
                    "scraper_file": {
                        "class": "logging.FileHandler",
                        "level": "INFO",
                        "filename": str(scraper_log),
                        "formatter": "plain",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(error_log),
                        "formatter": "plain",
                    },
                },
                "loggers": {
                    "dax_crawler": {
                        "handlers": ["console", "scraper_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOG_DIR = log_dir
        _LOGGING_INITIALISED = True
    return structlog.get_logger("dax_crawler")


def worker_logger(index: int) -> structlog.BoundLogger:
    """Return a logger bound to one worker of the current session.

    Once :func:`configure_logging` has run, the worker's events are also
    written to ``logs/workers/worker-<index>.log``.
    """

    logger_name = f"dax_crawler.worker.{index}"
    if _LOG_DIR is not None:
        worker_log_path = (_LOG_DIR / "workers" / f"worker-{index}.log").resolve()
        worker_log_path.parent.mkdir(parents=True, exist_ok=True)
        py_logger = logging.getLogger(logger_name)
        if not any(
            isinstance(handler, logging.FileHandler) and handler.baseFilename == str(worker_log_path)
            for handler in py_logger.handlers
        ):
            file_handler = logging.FileHandler(worker_log_path, encoding="utf-8")
            app_logger = logging.getLogger("dax_crawler")
            if app_logger.handlers:
                file_handler.setFormatter(app_logger.handlers[0].formatter)
            file_handler.setLevel(logging.DEBUG)
            py_logger.addHandler(file_handler)

    return structlog.get_logger(logger_name).bind(worker=index, pid=os.getpid())


__all__ = ["configure_logging", "worker_logger"]
