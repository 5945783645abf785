"""
Logging configuration for the Leave Ledger Backend
"""
import logging
import sys
from typing import Optional

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Ledger, log and transition records; these follow LOG_LEVEL even when it is
# raised above INFO for everything else
LEDGER_LOGGERS = (
    "app.services.leave_balance_service",
    "app.services.adjustment_log_service",
    "app.services.leave_state_machine",
    "app.services.leave_accounting",
)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure stdout logging at `level` (default settings.LOG_LEVEL).

    uvicorn access lines, SQLAlchemy engine echo and Alembic chatter are
    kept at WARNING so ledger records stay readable.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in LEDGER_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "alembic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s env=%s calendar_tz=%s", level_name, settings.APP_ENV, settings.CALENDAR_TZ
    )


def get_logger(name: str) -> logging.Logger:
    """Logger for scripts run outside the app; configures logging on first use."""
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
