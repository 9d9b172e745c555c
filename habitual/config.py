from pathlib import Path

import yaml

from .core.models import FrequencyUnit

HABITUAL_DIR = Path.home() / ".habitual"
DB_PATH = HABITUAL_DIR / "habitual.db"
CONFIG_PATH = HABITUAL_DIR / "config.yaml"
LOG_PATH = HABITUAL_DIR / "habitual.log"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Config:
    """Single-instance config manager. Load once, cache in memory."""

    _instance: "Config | None" = None
    _data: dict[str, object]

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
            cls._instance._load()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next access re-reads disk."""
        cls._instance = None

    def _load(self) -> None:
        """Load config from disk."""
        if not CONFIG_PATH.exists():
            self._data = {}
            return
        try:
            with CONFIG_PATH.open() as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            loaded = None
        self._data = loaded if isinstance(loaded, dict) else {}

    def _save(self) -> None:
        """Persist config to disk."""
        HABITUAL_DIR.mkdir(parents=True, exist_ok=True)
        with CONFIG_PATH.open("w") as f:
            yaml.dump(self._data, f, default_flow_style=False, allow_unicode=True)

    def get(self, key: str, default: object = None) -> object:
        """Get config value."""
        return self._data.get(key, default)

    def set(self, key: str, value: object) -> None:
        """Set config value and persist."""
        self._data[key] = value
        self._save()


def get_log_level() -> str:
    """Logging level name for the log file. Unknown values fall back to WARNING."""
    val = str(Config().get("log_level", "WARNING")).strip().upper()
    return val if val in _LOG_LEVELS else "WARNING"


def get_default_unit() -> FrequencyUnit:
    val = str(Config().get("default_unit", FrequencyUnit.DAY)).strip().lower()
    try:
        return FrequencyUnit(val)
    except ValueError:
        return FrequencyUnit.DAY


def get_default_count() -> int:
    val = Config().get("default_count", 1)
    try:
        count = int(val)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return 1
    return count if count > 0 else 1
