"""Engine settings.

Values come from built-in defaults, then the first ``.scatterbrain.toml``
found, then ``SCATTERBRAIN_*`` environment variables, then CLI flags. Each
layer only replaces what it explicitly sets.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".scatterbrain.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "scatterbrain" / "config.toml"


class StorageConfig(BaseModel):
    """[storage] section."""

    data_dir: str = "~/.scatterbrain"
    max_records: int = 0  # 0 = unlimited

    @property
    def path(self) -> Path:
        return Path(self.data_dir).expanduser()

    def user_dir(self, user_id: str) -> Path:
        return self.path / user_id


class GenerationConfig(BaseModel):
    """[generation] section."""

    model: str | None = None
    timeout: int = 120


class ProfileSectionConfig(BaseModel):
    """[profile] section."""

    recent_days: int = 7
    top_n: int = 5
    tables_file: str = ""


class UserConfig(BaseModel):
    """[user] section: whose data the CLI operates on."""

    id: str = "local"


class ScatterbrainConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    profile: ProfileSectionConfig = Field(default_factory=ProfileSectionConfig)
    user: UserConfig = Field(default_factory=UserConfig)


# (section, field) for every setting that env vars or CLI flags may replace
_OVERRIDABLE: dict[str, tuple[str, str]] = {
    "data_dir": ("storage", "data_dir"),
    "max_records": ("storage", "max_records"),
    "model": ("generation", "model"),
    "timeout": ("generation", "timeout"),
    "user": ("user", "id"),
}
_INT_SETTINGS = frozenset({"max_records", "timeout"})
_ENV_PREFIX = "SCATTERBRAIN_"


def load_config(path: str | Path | None = None) -> ScatterbrainConfig:
    """Read settings from TOML and the environment.

    With an explicit ``path`` only that file is read; a missing file logs a
    warning and falls back to defaults. Without one, ``./.scatterbrain.toml``
    wins over ``~/.config/scatterbrain/config.toml``.
    """
    if path is not None:
        source: Path | None = Path(path)
        if not source.exists():
            logger.warning("Config file not found: %s", source)
            source = None
    else:
        source = _discover()

    data = _read_toml(source) if source is not None else {}
    config = ScatterbrainConfig.model_validate(data)
    return _overlay(config, _env_overrides())


def merge_cli_overrides(config: ScatterbrainConfig, **cli_kwargs: object) -> ScatterbrainConfig:
    """Apply CLI flags that were actually given (``None`` means unset).

    Unknown keyword names are ignored.
    """
    return _overlay(config, {k: v for k, v in cli_kwargs.items() if v is not None})


def _discover() -> Path | None:
    for search_dir in CONFIG_SEARCH_PATHS:
        candidate = search_dir / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    if GLOBAL_CONFIG_PATH.exists():
        return GLOBAL_CONFIG_PATH
    return None


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    logger.info("Loaded config from %s", path)
    return data


def _env_overrides() -> dict[str, object]:
    found: dict[str, object] = {}
    for key in _OVERRIDABLE:
        env_var = _ENV_PREFIX + key.upper()
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        if key in _INT_SETTINGS:
            try:
                found[key] = int(raw)
            except ValueError:
                logger.warning("Ignoring non-integer %s=%r", env_var, raw)
            continue
        found[key] = raw
    return found


def _overlay(config: ScatterbrainConfig, overrides: dict[str, object]) -> ScatterbrainConfig:
    data = config.model_dump()
    for key, value in overrides.items():
        target = _OVERRIDABLE.get(key)
        if target is None:
            continue
        section, field = target
        data[section][field] = value
    return ScatterbrainConfig.model_validate(data)
