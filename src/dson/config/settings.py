"""Unified settings: init kwargs, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  : passed to :meth:`DsonSettings.load`
  2. Env vars     : ``DSON_*`` prefix
  3. TOML file    : ``dson.toml``, or the ``[tool.dson]`` table of a
                     ``pyproject.toml``
  4. Code defaults: baked into the fields below
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

CONFIG_FILENAME = "dson.toml"


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from an explicit TOML file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path is None or not toml_path.is_file():
            return
        try:
            data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_path}: {exc}"
            raise ValueError(msg) from exc
        if toml_path.name == "pyproject.toml":
            data = data.get("tool", {}).get("dson", {})
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class DsonSettings(BaseSettings):
    """Runtime options for conversion, logging, and plugin loading.

    Attributes:
        verbose: DEBUG logging for ``dson.*`` loggers.
        log_json: JSON log lines instead of console output.
        sort_keys: Serialize mappings with keys in sorted order rather
            than the mapping's iteration order.
        strict: Reject container elements without a Convertible capability
            instead of passing them through unchanged.
        load_plugins: Discover ``dson.plugins`` entry points when a
            converter is built from these settings.
        config_path: TOML file the settings were read from, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DSON_",
    }

    verbose: bool = False
    log_json: bool = False
    sort_keys: bool = False
    strict: bool = False
    load_plugins: bool = True
    config_path: Path | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(cls, *, config_path: str | Path | None = None, **overrides: Any) -> DsonSettings:
        """Construct settings, reading *config_path* if it names a file.

        *overrides* take priority over both environment and TOML values.
        """
        toml_path = Path(config_path) if config_path else None
        if toml_path is not None and not toml_path.is_file():
            toml_path = None

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None
