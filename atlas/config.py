from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_FILE = BASE_DIR / "data" / "entities.json"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def read_env_file(path: Path) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines, allowing comments, quotes and an ``export`` prefix."""
    values: dict[str, str] = {}
    if not path.exists():
        return values
    for number, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, separator, value = line.partition("=")
        key = key.strip()
        if not separator or not key:
            logger.warning(f"Ignoring malformed line {number} in {path}")
            continue
        values[key] = _unquote(value.strip())
    return values


def load_env_file(base_dir: Path, filename: str = ".env") -> list[str]:
    """Apply a local .env file to the environment; variables already set win.

    Returns the names that were applied.
    """
    env_path = base_dir / filename
    applied: list[str] = []
    for key, value in read_env_file(env_path).items():
        if key in os.environ:
            continue
        os.environ[key] = value
        applied.append(key)
    if applied:
        logger.debug(f"Loaded {', '.join(applied)} from {env_path}")
    return applied


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Expected a number for '{name}', got '{raw}'") from None


@dataclass(frozen=True, slots=True)
class Settings:
    data_file: Path = DEFAULT_DATA_FILE
    analytics_url: str = ""
    analytics_timeout_seconds: float = 5.0
    search_debounce_ms: int = 500
    camera_duration_ms: int = 1500
    marker_size_factor: float = 0.3
    marker_min_size: float = 0.3
    marker_max_size: float = 2.0

    @classmethod
    def from_env(cls, base_dir: Path | None = None) -> Settings:
        if base_dir is not None:
            load_env_file(base_dir)
        data_file = os.getenv("ATLAS_DATA_FILE", "").strip()
        return cls(
            data_file=Path(data_file) if data_file else DEFAULT_DATA_FILE,
            analytics_url=os.getenv("ATLAS_ANALYTICS_URL", "").strip(),
            analytics_timeout_seconds=_env_float("ATLAS_ANALYTICS_TIMEOUT", 5.0),
            search_debounce_ms=int(_env_float("ATLAS_SEARCH_DEBOUNCE_MS", 500)),
            camera_duration_ms=int(_env_float("ATLAS_CAMERA_DURATION_MS", 1500)),
            marker_size_factor=_env_float("ATLAS_MARKER_SIZE_FACTOR", 0.3),
            marker_min_size=_env_float("ATLAS_MARKER_MIN_SIZE", 0.3),
            marker_max_size=_env_float("ATLAS_MARKER_MAX_SIZE", 2.0),
        )
