"""
Purpose:
    - Loads a config file
    - Validate the [bus] table into a BusConfig
"""

import tomllib
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from typedbus.config.configs import BusConfig, BusSettings
from typedbus.errors.errors import ConfigError


def bus_config_from_mapping(data: Mapping[str, Any]) -> BusConfig:
    try:
        settings = BusSettings.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"Invalid bus config: {exc}") from exc
    return settings.to_config()


class ConfigLoader:
    """
    Config-loader; loading toml file.
    """

    def __init__(self, base_dir: str = ".") -> None:
        self._base_dir = base_dir

    def load(self, file_name: str) -> dict[str, Any]:
        path = Path(file_name)
        if not path.is_absolute():
            path = Path(self._base_dir) / file_name

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open("rb") as f:
            try:
                return tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc

    def load_bus_config(self, file_name: str) -> BusConfig:
        data = self.load(file_name)
        section = data.get("bus", {})
        if not isinstance(section, Mapping):
            raise ConfigError(f"[bus] must be a table, got {type(section).__name__}")
        return bus_config_from_mapping(section)
