from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from .simulation.sun import DEFAULT_REFERENCE_YEAR

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _load_dotenv(path: str = ".env") -> Dict[str, str]:
    """
    Basic .env loader to populate os.environ without overriding variables
    that are already set. Returns a mapping of parsed key/value pairs.
    """
    env_path = Path(path)
    if not env_path.exists():
        return {}

    parsed: Dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)
        parsed[key] = value
    return parsed


_load_dotenv()


def get_log_level() -> int:
    """
    Logging level from ``SIM_LAYOUT_PV_LOG_LEVEL`` (name or number, default INFO).

    Raises:
        ValueError: If the variable names no known level.
    """
    raw = os.getenv("SIM_LAYOUT_PV_LOG_LEVEL", "INFO").strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid SIM_LAYOUT_PV_LOG_LEVEL: {raw!r}")
    return level


def get_default_seed() -> int | None:
    """
    Seed for the shadow sampling RNG from ``SIM_LAYOUT_PV_SEED``.

    Returns:
        The seed, or None to seed from entropy.
    """
    raw = os.getenv("SIM_LAYOUT_PV_SEED")
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid SIM_LAYOUT_PV_SEED: {raw!r}") from exc


def get_reference_year() -> int:
    """Year of the 15th-of-month sun samples (``SIM_LAYOUT_PV_REFERENCE_YEAR``)."""
    raw = os.getenv("SIM_LAYOUT_PV_REFERENCE_YEAR")
    if raw is None or not raw.strip():
        return DEFAULT_REFERENCE_YEAR
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid SIM_LAYOUT_PV_REFERENCE_YEAR: {raw!r}") from exc


def configure_logging(level: int | None = None) -> None:
    """
    Install a single stream handler on the root logger.

    Calling it again only updates the level.
    """
    root = logging.getLogger()
    root.setLevel(get_log_level() if level is None else level)
    if not any(getattr(handler, "_sim_layout_pv", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._sim_layout_pv = True  # type: ignore[attr-defined]
        root.addHandler(handler)
