"""TOML settings for the feed dumper: paths, load/save and env overrides."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w  # type: ignore[import]

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

from .aprs.aprsis_client import DEFAULT_PORT, DEFAULT_SERVER
from .formatters import FORMATTER_NAMES

CONFIG_VERSION = 1
CONFIG_ENV_VAR = "OGN_APRS_CONFIG_PATH"
ENV_OVERRIDE_PREFIX = "OGN_APRS_"
CONFIG_DIR_NAME = "ogn-aprs"
CONFIG_FILENAME = "config.toml"


def _xdg_path(env_var: str, default: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return default


def get_config_dir() -> Path:
    """Return ``$XDG_CONFIG_HOME/ogn-aprs`` (``~/.config/ogn-aprs`` by default)."""
    default = Path.home() / ".config"
    return _xdg_path("XDG_CONFIG_HOME", default) / CONFIG_DIR_NAME


def get_data_dir() -> Path:
    """Return ``$XDG_DATA_HOME/ogn-aprs``; log files live below it."""
    default = Path.home() / ".local" / "share"
    return _xdg_path("XDG_DATA_HOME", default) / CONFIG_DIR_NAME


def get_logs_dir() -> Path:
    return get_data_dir() / "logs"


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Pick the config file: explicit path, then ``OGN_APRS_CONFIG_PATH``, then XDG."""
    if path is not None:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / CONFIG_FILENAME


@dataclass(slots=True)
class DumpConfig:
    """Feed server, range filter, and output settings for the dumper."""

    latitude: float | None = None
    longitude: float | None = None
    radius_km: int = 50
    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    callsign: str | None = None
    output: str = "ogn"
    mqtt_host: str | None = None
    mqtt_port: int = 1883
    mqtt_topic: str = "ogn"

    def to_dict(self) -> dict[str, Any]:
        """Return the sectioned layout written to ``config.toml``; unset values are omitted."""
        return {
            "version": CONFIG_VERSION,
            "aprs": _drop_none(
                {
                    "server": self.server,
                    "port": self.port,
                    "callsign": self.callsign,
                }
            ),
            "filter": _drop_none(
                {
                    "latitude": self.latitude,
                    "longitude": self.longitude,
                    "radius_km": self.radius_km,
                }
            ),
            "output": {"format": self.output},
            "mqtt": _drop_none(
                {
                    "host": self.mqtt_host,
                    "port": self.mqtt_port,
                    "topic": self.mqtt_topic,
                }
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DumpConfig:
        """Build a config from the sectioned layout, validating version and format."""
        version = data.get("version", CONFIG_VERSION)
        if version != CONFIG_VERSION:
            raise ValueError(f"Unsupported config version: {version}")

        aprs = data.get("aprs", {})
        range_filter = data.get("filter", {})
        output = data.get("output", {})
        mqtt = data.get("mqtt", {})

        output_format = str(output.get("format", "ogn")).lower()
        if output_format not in FORMATTER_NAMES:
            raise ValueError(f"Unsupported output format: {output_format}")

        try:
            return cls(
                latitude=_optional_float(range_filter.get("latitude")),
                longitude=_optional_float(range_filter.get("longitude")),
                radius_km=int(range_filter.get("radius_km", 50)),
                server=str(aprs.get("server", DEFAULT_SERVER)),
                port=int(aprs.get("port", DEFAULT_PORT)),
                callsign=aprs.get("callsign") or None,
                output=output_format,
                mqtt_host=mqtt.get("host") or None,
                mqtt_port=int(mqtt.get("port", 1883)),
                mqtt_topic=str(mqtt.get("topic", "ogn")),
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid configuration value: {exc}") from exc


def _optional_float(value: Any) -> float | None:
    if value in (None, ""):
        return None
    return float(value)


def _drop_none(mapping: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in mapping.items() if value is not None}


def load_config(path: str | Path | None = None) -> DumpConfig:
    """Load persisted configuration, applying environment overrides."""
    config_path = resolve_config_path(path)
    with config_path.open("rb") as handle:
        try:
            data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"{config_path}: {exc}") from exc
    return DumpConfig.from_dict(_deep_merge(data, extract_env_overrides()))


def env_config() -> DumpConfig:
    """Return the built-in defaults with environment overrides applied."""
    return DumpConfig.from_dict(_deep_merge(DumpConfig().to_dict(), extract_env_overrides()))


def save_config(config: DumpConfig, path: str | Path | None = None) -> Path:
    """Write ``config`` as TOML readable only by the owner; return the path."""
    config_path = resolve_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    toml_text = tomli_w.dumps(config.to_dict())
    config_path.write_text(toml_text, encoding="utf-8")
    try:
        os.chmod(config_path, stat.S_IRUSR | stat.S_IWUSR)
    except PermissionError:  # pragma: no cover - some FS disallow chmod
        pass
    return config_path


def config_summary(config: DumpConfig) -> str:
    """Return the settings as aligned ``label : value`` lines for logging."""
    area = "not set"
    if config.latitude is not None and config.longitude is not None:
        area = f"{config.latitude:.4f}, {config.longitude:.4f} r={config.radius_km}km"
    mqtt = f"{config.mqtt_host}:{config.mqtt_port}/{config.mqtt_topic}" if config.mqtt_host else "off"
    return (
        f"  APRS-IS : {config.server}:{config.port}\n"
        f"  Login   : {config.callsign or 'random'}\n"
        f"  Filter  : {area}\n"
        f"  Output  : {config.output}\n"
        f"  MQTT    : {mqtt}"
    )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def extract_env_overrides() -> dict[str, Any]:
    """Extract OGN_APRS_SECTION__KEY environment variables into a nested dict.

    Example:
        OGN_APRS_FILTER__RADIUS_KM=80 -> {"filter": {"radius_km": 80}}

    Only two-level names are considered, so ``OGN_APRS_CONFIG_PATH`` and
    ``OGN_APRS_LOG_LEVEL`` never leak into the configuration.
    """
    overrides: dict[str, Any] = {}
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_OVERRIDE_PREFIX):
            continue
        parts = env_key[len(ENV_OVERRIDE_PREFIX) :].lower().split("__")
        if len(parts) != 2 or not all(parts):
            continue
        section, key = parts
        overrides.setdefault(section, {})[key] = _parse_env_value(env_value)
    return overrides


_ENV_BOOLEANS = {"true": True, "false": False}


def _parse_env_value(raw: str) -> Any:
    if raw.lower() in _ENV_BOOLEANS:
        return _ENV_BOOLEANS[raw.lower()]
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            continue
    return raw
