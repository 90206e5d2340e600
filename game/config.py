"""Process-level settings read from the environment."""

import logging
import os

logger = logging.getLogger(__name__)

# Env var names
ENV_NIGHT_SECONDS = "MAFIA_NIGHT_SECONDS"
ENV_DAY_SECONDS = "MAFIA_DAY_SECONDS"
ENV_LOG_LEVEL = "MAFIA_LOG_LEVEL"
ENV_SEND_TIMEOUT = "MAFIA_SEND_TIMEOUT"

DEFAULT_NIGHT_SECONDS = 30.0
DEFAULT_DAY_SECONDS = 90.0
# Longest wait for one outbound message before the player counts as gone
DEFAULT_SEND_TIMEOUT = 5.0


def _positive_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value


def night_seconds() -> float:
    return _positive_float(ENV_NIGHT_SECONDS, DEFAULT_NIGHT_SECONDS)


def day_seconds() -> float:
    return _positive_float(ENV_DAY_SECONDS, DEFAULT_DAY_SECONDS)


def send_timeout() -> float:
    return _positive_float(ENV_SEND_TIMEOUT, DEFAULT_SEND_TIMEOUT)


def log_level() -> str:
    return os.environ.get(ENV_LOG_LEVEL, "INFO").upper()
