"""
Royalty Engine Logging Configuration
Structured logging setup with file rotation for ledger and metering events
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from .config import get_settings


def setup_logging() -> logging.Logger:
    """Set up structured logging for the royalty engine"""
    settings = get_settings()

    # Ledger and metering logs land beside each other in one rotating file
    Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    # Standard library logging backs the structlog loggers
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper()),
        format=settings.LOG_FORMAT,
        handlers=[]  # Will be set below
    )

    # Replace handlers left by uvicorn or earlier calls
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # Console: plain text while debugging, JSON otherwise
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)

    if settings.is_development:
        console_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )
    else:
        console_formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s'
        )

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    # File handler with rotation
    file_handler = logging.handlers.RotatingFileHandler(
        settings.LOG_FILE_PATH,
        maxBytes=settings.LOG_MAX_SIZE,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)

    # File records keep source location for payout audits
    file_handler.setFormatter(jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(pathname)s %(lineno)d %(funcName)s %(message)s'
    ))
    root_logger.addHandler(file_handler)

    # Event dicts from LedgerLogger and MeteringLogger render through the handlers above
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if not settings.is_development
            else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Framework noise
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    # Every resolution skip and rejected split is kept
    logging.getLogger("royalty_engine.ledger").setLevel(logging.DEBUG)
    logging.getLogger("royalty_engine.metering").setLevel(logging.INFO)

    logger = logging.getLogger("royalty_engine")
    logger.info(f"Logging configured - Level: {settings.LOG_LEVEL}")

    return logger


class LedgerLogger:
    """Logger for split model, resolution and payment events"""

    def __init__(self):
        self.logger = structlog.get_logger("royalty_engine.ledger")

    def log_split_rejected(self, reason: str, work_id: Optional[str] = None) -> None:
        """Log a split model rejected by validation"""
        self.logger.warning(
            "Split model rejected",
            reason=reason,
            work_id=work_id
        )

    def log_resolution_skip(self, work_id: str, reason: str, **kwargs: Any) -> None:
        """Log a work skipped during pending resolution"""
        self.logger.warning(
            "Pending resolution skipped work",
            work_id=work_id,
            reason=reason,
            **kwargs
        )

    def log_resolution_applied(self, work_id: str, fields_updated: int) -> None:
        """Log a work whose pending slots were rewritten"""
        self.logger.info(
            "Pending resolution applied",
            work_id=work_id,
            fields_updated=fields_updated
        )

    def log_resolution_complete(
        self,
        pending_name: str,
        updated_field_count: int,
        works_processed: int
    ) -> None:
        """Log the outcome of a resolution batch"""
        self.logger.info(
            "Pending resolution completed",
            pending_name=pending_name,
            updated_field_count=updated_field_count,
            works_processed=works_processed
        )

    def log_payment_prepared(
        self,
        source_work_ids: list,
        blocks: int,
        total_cost: str,
        pending_recipients: int
    ) -> None:
        """Log a prepared recording payment breakdown"""
        self.logger.info(
            "Recording payment prepared",
            source_work_ids=source_work_ids,
            blocks=blocks,
            total_cost=total_cost,
            pending_recipients=pending_recipients
        )

    def log_display_error(self, operation: str, error: str) -> None:
        """Log a display-only formatting failure"""
        self.logger.warning(
            "Display formatting failed",
            operation=operation,
            error=error
        )


class MeteringLogger:
    """Logger for pass issuance and play metering"""

    def __init__(self):
        self.logger = structlog.get_logger("royalty_engine.metering")

    def log_pass_issued(self, pass_id: str, payer_identity: str, expires_at: str) -> None:
        """Log a newly issued pass"""
        self.logger.info(
            "Pass issued",
            pass_id=pass_id,
            payer_identity=payer_identity,
            expires_at=expires_at
        )

    def log_play_accepted(
        self,
        pass_id: str,
        work_id: str,
        content_category: str,
        credits: int
    ) -> None:
        """Log a play record accepted under a pass"""
        self.logger.info(
            "Play logged",
            pass_id=pass_id,
            work_id=work_id,
            content_category=content_category,
            credits=credits
        )

    def log_play_rejected(self, pass_id: str, reason: str) -> None:
        """Log a play rejected at log time"""
        self.logger.info(
            "Play rejected",
            pass_id=pass_id,
            reason=reason
        )

    def log_preview_failed(self, work_id: str, error: str) -> None:
        """Log a preview play that could not be stored"""
        self.logger.warning(
            "Preview play not recorded",
            work_id=work_id,
            error=error
        )


class PerformanceLogger:
    """Logger for performance monitoring"""

    def __init__(self):
        self.logger = structlog.get_logger("royalty_engine.performance")

    def log_database_query(
        self,
        query: str,
        duration_ms: float,
        rows_affected: int = None
    ) -> None:
        """Log database query performance"""
        self.logger.debug(
            "Database query",
            query=query[:100] + "..." if len(query) > 100 else query,
            duration_ms=duration_ms,
            rows_affected=rows_affected
        )


# Create global logger instances
ledger_logger = LedgerLogger()
metering_logger = MeteringLogger()
performance_logger = PerformanceLogger()

__all__ = [
    "setup_logging",
    "LedgerLogger",
    "MeteringLogger",
    "PerformanceLogger",
    "ledger_logger",
    "metering_logger",
    "performance_logger"
]
