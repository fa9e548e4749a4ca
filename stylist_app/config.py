"""Configuration helpers for the prompt stylist app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_FETCH_LIMIT = 600
DEFAULT_BAND_MARGIN = 10
DEFAULT_MAX_ITEMS = 5
DEFAULT_DECK_SIZE = 2


def _as_int(value: Optional[str], default: int) -> int:
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"Expected an integer config value, got {value!r}") from None


@dataclass
class StylistConfig:
    """Configuration values for the stylist services.

    Paths left as ``None`` select the in-memory stores, which is what the tests
    and the evaluation harness use.
    """

    wardrobe_db_path: Optional[str] = None
    outfits_db_path: Optional[str] = None
    fetch_limit: int = DEFAULT_FETCH_LIMIT
    band_margin: int = DEFAULT_BAND_MARGIN
    max_items: int = DEFAULT_MAX_ITEMS
    deck_size: int = DEFAULT_DECK_SIZE
    environment: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "StylistConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific files live in ``config/environments/<env>.yaml`` by
        default; environment variables take precedence over file values.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("STYLIST_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        return cls(
            wardrobe_db_path=get_value("wardrobe_db_path") or None,
            outfits_db_path=get_value("outfits_db_path") or None,
            fetch_limit=_as_int(get_value("fetch_limit"), DEFAULT_FETCH_LIMIT),
            band_margin=_as_int(get_value("band_margin"), DEFAULT_BAND_MARGIN),
            max_items=_as_int(get_value("max_items"), DEFAULT_MAX_ITEMS),
            deck_size=_as_int(get_value("deck_size"), DEFAULT_DECK_SIZE),
            environment=env_name,
            log_level=str(get_value("log_level", "INFO") or "INFO").upper(),
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config


__all__ = ["StylistConfig"]
