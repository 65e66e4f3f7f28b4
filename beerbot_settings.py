"""
Tuning knobs for the BeerBot engine, read from environment variables.

    SAFETY_STOCK  buffer for the simple policy            (default 10)
    MA_WINDOW     weeks in the demand moving average      (default 4)
    MAX_ORDER     hard cap per role, 0 = no cap            (default 0)
    POLICY        "pipeline" or "simple"                   (default pipeline)

The lead time is not configurable here; the pipeline policy always uses
beerbot.LEAD_TIME.
"""
from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from beerbot import DEFAULT_POLICY, SettingsError, TuningParameters

__all__ = ["SettingsError", "TuningParameters", "load_settings"]

logger = logging.getLogger(__name__)


def _getenv(environ: Mapping[str, str], key: str, default: str) -> str:
    value = environ.get(key, "")
    return value if value != "" else default


def _getenv_int(environ: Mapping[str, str], key: str, default: int) -> int:
    value = environ.get(key, "")
    if value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("%s=%r is not an integer, using default %d", key, value, default)
        return default


def load_settings(environ: Optional[Mapping[str, str]] = None) -> TuningParameters:
    """Build validated TuningParameters from `environ` (os.environ by default)."""
    if environ is None:
        environ = os.environ
    params = TuningParameters(
        safety_stock=_getenv_int(environ, "SAFETY_STOCK", 10),
        ma_window=_getenv_int(environ, "MA_WINDOW", 4),
        max_order=_getenv_int(environ, "MAX_ORDER", 0),
        policy=_getenv(environ, "POLICY", DEFAULT_POLICY).strip().lower(),
    )
    return params.validate()
