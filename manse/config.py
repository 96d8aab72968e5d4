"""
Runtime configuration for the manse engine.

Every value can be overridden through an environment variable so the same
package runs in tests, CLI and server deployments without code changes.
Values are read once at import time and never mutated afterwards.
"""

import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


# Swiss Ephemeris data files. If the directory has no .se1 files the library
# falls back to the built-in Moshier ephemeris, which is plenty for solar terms.
EPHE_PATH = os.getenv("MANSE_EPHE_PATH", str(Path(__file__).parent.parent / "ephe"))

# Birth times without an explicit zone or coordinates are read as Korean clock time.
DEFAULT_TIMEZONE = os.getenv("MANSE_TIMEZONE", "Asia/Seoul")

# A birth instant this close to a Jie (절) crossing gets a near-boundary month pillar.
BOUNDARY_WINDOW_HOURS = _env_float("MANSE_BOUNDARY_WINDOW_HOURS", 24.0)

# Supported solar years. korean-lunar-calendar tables stop at 2050.
MIN_YEAR = _env_int("MANSE_MIN_YEAR", 1900)
MAX_YEAR = _env_int("MANSE_MAX_YEAR", 2049)

LOG_LEVEL = os.getenv("MANSE_LOG_LEVEL", "WARNING").upper()
