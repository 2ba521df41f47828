"""Environment-driven runtime configuration for the frame player."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from frameplay.core.paths import LOGS_DIR

LOG = logging.getLogger(__name__)

DEFAULT_MAX_COLUMNS = 80
MIN_COLUMNS = 2
MAX_COLUMNS_LIMIT = 1000
# Terminal glyphs are roughly twice as tall as they are wide.
DEFAULT_CELL_ASPECT = 0.5
MIN_CELL_ASPECT = 0.1
MAX_CELL_ASPECT = 4.0
DEFAULT_CONSOLE_LOG_LEVEL = "WARNING"
_TRUTHY = {"1", "true", "yes", "on"}


def _clamp_max_columns(value):
    """Clamp the column cap within bounds."""
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        LOG.warning("[CONFIG] invalid max columns %r, using %d", value, DEFAULT_MAX_COLUMNS)
        numeric = DEFAULT_MAX_COLUMNS
    return max(MIN_COLUMNS, min(MAX_COLUMNS_LIMIT, numeric))


def _clamp_cell_aspect(value):
    """Clamp the character cell aspect within bounds."""
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        LOG.warning("[CONFIG] invalid cell aspect %r, using %s", value, DEFAULT_CELL_ASPECT)
        numeric = DEFAULT_CELL_ASPECT
    if numeric != numeric:  # NaN
        numeric = DEFAULT_CELL_ASPECT
    return max(MIN_CELL_ASPECT, min(MAX_CELL_ASPECT, numeric))


def _resolve_log_level(value) -> str:
    name = str(value or "").strip().upper()
    if name in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return name
    return DEFAULT_CONSOLE_LOG_LEVEL


@dataclass(frozen=True)
class PlayerConfig:
    max_columns: int = DEFAULT_MAX_COLUMNS
    cell_aspect: float = DEFAULT_CELL_ASPECT
    log_dir: Path | None = LOGS_DIR
    console_log_level: str = DEFAULT_CONSOLE_LOG_LEVEL
    ffmpeg_debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PlayerConfig":
        env = os.environ if environ is None else environ
        raw_log_dir = env.get("FRAMEPLAY_LOG_DIR")
        if raw_log_dir is None:
            log_dir = LOGS_DIR
        else:
            log_dir = Path(raw_log_dir) if raw_log_dir.strip() else None
        return cls(
            max_columns=_clamp_max_columns(env.get("FRAMEPLAY_MAX_COLUMNS", DEFAULT_MAX_COLUMNS)),
            cell_aspect=_clamp_cell_aspect(env.get("FRAMEPLAY_CELL_ASPECT", DEFAULT_CELL_ASPECT)),
            log_dir=log_dir,
            console_log_level=_resolve_log_level(env.get("FRAMEPLAY_LOG_LEVEL")),
            ffmpeg_debug=env.get("FFMPEG_DEBUG", "").strip().lower() in _TRUTHY,
        )

    def with_max_columns(self, max_columns) -> "PlayerConfig":
        """Return a copy with a command-line column cap applied."""
        return replace(self, max_columns=_clamp_max_columns(max_columns))
