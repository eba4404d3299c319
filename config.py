"""
Configuration for the SettleUp ledger service.

Values come from SETTLEUP_* environment variables, falling back to the
defaults declared on Settings.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel

ENV_PREFIX = "SETTLEUP_"


class Settings(BaseModel):
    app_title: str = "SettleUp Ledger API"
    app_description: str = "Shared expenses, net balances and minimal settlement plans"
    version: str = "1.0.0"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment, ignoring unset variables."""
    environ = os.environ if environ is None else environ
    values = {}
    for field in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field.upper()}")
        if raw is not None and raw.strip():
            values[field] = raw.strip()
    return Settings(**values)
