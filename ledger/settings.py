"""Runtime settings resolved from the environment."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class LedgerSettings(BaseModel):
    app_name: str = Field(default="Finance Ledger")
    # unset means the built-in demo records
    seed_path: Optional[str] = Field(default_factory=lambda: os.getenv("LEDGER_SEED_PATH"))
    currency: str = Field(default_factory=lambda: os.getenv("LEDGER_CURRENCY", "INR"))
    recent_limit: int = Field(default_factory=lambda: int(os.getenv("LEDGER_RECENT_LIMIT", "8")))
    chart_period: str = Field(default_factory=lambda: os.getenv("LEDGER_CHART_PERIOD", "7d"))
    # Collapse "week"/"year" totals to the month window, as older releases did.
    legacy_month_periods: bool = Field(default_factory=lambda: _env_flag("LEDGER_LEGACY_MONTH_PERIODS"))
    log_level: str = Field(default_factory=lambda: os.getenv("LEDGER_LOG_LEVEL", "INFO"))


@lru_cache()
def get_settings() -> LedgerSettings:
    return LedgerSettings()


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once; later calls only adjust the level."""
    level_name = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level_name,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    root.setLevel(level_name)
