"""
METAR Decoder - Configuration
Decoder policy settings, shared group vocabularies and logging setup.
"""

from dataclasses import dataclass
import logging
import os
from typing import Optional

from dotenv import load_dotenv

# ============================================================================
# DECODER POLICY
# ============================================================================

# Groups of the visibility/weather/cloud families after CAVOK are recorded
# as unclassified by default; strict mode rejects the report instead.
STRICT_CAVOK_DEFAULT = False

# Unit for RVR groups without the FT marker (ICAO convention)
DEFAULT_RVR_UNIT = "meters"

# ============================================================================
# GROUP VOCABULARIES
# ============================================================================

# Keywords opening the trend section (runs until RMK)
TREND_KEYWORDS = ("NOSIG", "BECMG", "TEMPO")

REMARKS_KEYWORD = "RMK"

# Compass points allowed after a directional minimum visibility (e.g. 2000SW)
COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

# ============================================================================
# LOGGING
# ============================================================================

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_DEFAULT = "WARNING"


@dataclass
class DecoderSettings:
    """Runtime policy for a decode call."""
    strict_cavok: bool = STRICT_CAVOK_DEFAULT
    log_level: str = LOG_LEVEL_DEFAULT


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_path: Optional[str] = None) -> DecoderSettings:
    """
    Build settings from the environment (and an optional .env file).

    Recognised variables:
    - METAR_STRICT_CAVOK: reject visibility/weather/cloud groups after CAVOK
    - METAR_LOG_LEVEL: level for configure_logging()
    """
    load_dotenv(env_path)
    return DecoderSettings(
        strict_cavok=_env_flag("METAR_STRICT_CAVOK", STRICT_CAVOK_DEFAULT),
        log_level=os.environ.get("METAR_LOG_LEVEL", LOG_LEVEL_DEFAULT).strip().upper() or LOG_LEVEL_DEFAULT,
    )


def configure_logging(settings: Optional[DecoderSettings] = None) -> None:
    """Install the project log format for host applications."""
    settings = settings or load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING), format=LOG_FORMAT)
