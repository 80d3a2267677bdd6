"""
Structured logging configuration.

Events are key-value pairs rendered as JSON (or colored console output
in development). Transfer logs carry counts and paths, never item
payloads, unless TRANSFER_DEBUG_LOG is switched on.
"""
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, List, Optional

import structlog
from structlog.types import Processor

from motioncore.core.config import get_settings

_HANDLER_NAME = "motioncore"

# Loggers that are too chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "multipart")


def _processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.

    Args:
        level: Log level name, defaults to LOG_LEVEL
        fmt: "json" or "console", defaults to LOG_FORMAT
    """
    settings = get_settings()
    level = (level or settings.LOG_LEVEL).upper()
    fmt = fmt or settings.LOG_FORMAT

    shared = _processors()
    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)
    )

    # Replace our handler on repeated setup (reload, tests)
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# ========================================
# Export / Import Transfer Logging
# ========================================

@dataclass
class TransferLog:
    """Outcome of one export, import or delete run."""
    operation: str
    kind: str
    transfer_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    path: Optional[str] = None
    item_count: int = 0
    warnings: List[str] = field(default_factory=list)
    started: float = 0.0
    elapsed_ms: float = 0.0
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_code is None

    def to_dict(self) -> dict:
        return {
            "transferId": self.transfer_id,
            "operation": self.operation,
            "kind": self.kind,
            "path": self.path,
            "items": self.item_count,
            "warnings": list(self.warnings),
            "durationMs": round(self.elapsed_ms, 2),
            "success": self.ok,
        }


class TransferLogger:
    """
    Wraps a structlog logger for backup/restore runs.

    Example:
        with TransferLogger(logger).track("import", "cardio") as transfer:
            transfer.set_path(str(path))
            transfer.set_items(len(sessions))

    One summary event is emitted when the block exits. Exceptions are
    recorded on the summary and re-raised.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger, debug: Optional[bool] = None):
        self.logger = logger
        self.debug = get_settings().TRANSFER_DEBUG_LOG if debug is None else debug

    @contextmanager
    def track(self, operation: str, kind: str) -> Generator["TransferTracker", None, None]:
        tracker = TransferTracker(self.logger.bind(operation=operation, kind=kind), self.debug,
                                  TransferLog(operation=operation, kind=kind))
        tracker.start()
        try:
            yield tracker
        except Exception as exc:
            tracker.set_error(getattr(exc, "code", type(exc).__name__), str(exc))
            raise
        finally:
            tracker.finish()


class TransferTracker:
    """Collects counts, warnings and timing for a single transfer."""

    def __init__(self, logger: structlog.stdlib.BoundLogger, debug: bool, log: TransferLog):
        self.logger = logger.bind(transfer_id=log.transfer_id)
        self.debug = debug
        self.log = log

    def start(self) -> None:
        self.log.started = time.perf_counter()
        if self.debug:
            self.logger.debug("Transfer started")

    def set_path(self, path: str) -> None:
        self.log.path = path

    def set_items(self, count: int) -> None:
        self.log.item_count = count

    def add_item(self, index: int, **fields: Any) -> None:
        """Per-item event, only with TRANSFER_DEBUG_LOG."""
        if self.debug:
            self.logger.debug("Transfer item", index=index, **fields)

    def add_warning(self, message: str) -> None:
        self.log.warnings.append(message)
        self.logger.warning("Transfer warning", warning=message)

    def set_error(self, error_code: str, error_message: str) -> None:
        self.log.error_code = error_code
        self.log.error_message = error_message

    def finish(self) -> None:
        self.log.elapsed_ms = (time.perf_counter() - self.log.started) * 1000
        elapsed = round(self.log.elapsed_ms, 2)

        if self.log.ok:
            self.logger.info(
                "Transfer completed",
                items=self.log.item_count,
                warnings=len(self.log.warnings),
                path=self.log.path,
                duration_ms=elapsed,
            )
        else:
            self.logger.error(
                "Transfer failed",
                path=self.log.path,
                duration_ms=elapsed,
                error_code=self.log.error_code,
                error_message=self.log.error_message,
            )

    def get_summary(self) -> dict:
        return self.log.to_dict()
