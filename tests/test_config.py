"""Tests for configuration helpers."""

from __future__ import annotations

import os
import stat
import sys

import pytest

from ogn_aprs import config as config_module
from ogn_aprs.config import DumpConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in list(os.environ):
        if key.startswith(config_module.ENV_OVERRIDE_PREFIX):
            monkeypatch.delenv(key, raising=False)


def test_save_and_load_roundtrip(tmp_path) -> None:
    cfg = DumpConfig(
        latitude=48.3537,
        longitude=11.786,
        radius_km=80,
        server="glidern1.glidernet.org",
        port=10152,
        callsign="DMP123456",
        output="sbs1",
        mqtt_host="broker.local",
        mqtt_port=1884,
        mqtt_topic="gliders",
    )

    path = tmp_path / "config.toml"
    config_module.save_config(cfg, path=path)

    loaded = config_module.load_config(path)

    assert loaded == cfg


def test_save_omits_unset_values(tmp_path) -> None:
    path = config_module.save_config(DumpConfig(), path=tmp_path / "config.toml")
    text = path.read_text(encoding="utf-8")

    assert "callsign" not in text
    assert "latitude" not in text
    assert config_module.load_config(path) == DumpConfig()


@pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permissions")
def test_save_restricts_permissions(tmp_path) -> None:
    path = config_module.save_config(DumpConfig(), path=tmp_path / "nested" / "config.toml")

    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_load_defaults_for_missing_sections(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("version = 1\n[filter]\nlatitude = 51.5\nlongitude = -0.1\n", encoding="utf-8")

    loaded = config_module.load_config(path)

    assert loaded.latitude == 51.5
    assert loaded.longitude == -0.1
    assert loaded.radius_km == 50
    assert loaded.server == "aprs.glidernet.org"
    assert loaded.port == 14580
    assert loaded.output == "ogn"
    assert loaded.mqtt_host is None


def test_env_overrides_file_values(monkeypatch, tmp_path) -> None:
    path = config_module.save_config(DumpConfig(latitude=1.0, longitude=2.0), path=tmp_path / "c.toml")
    monkeypatch.setenv("OGN_APRS_FILTER__RADIUS_KM", "120")
    monkeypatch.setenv("OGN_APRS_OUTPUT__FORMAT", "json")
    monkeypatch.setenv("OGN_APRS_LOG_LEVEL", "debug")

    loaded = config_module.load_config(path)

    assert loaded.radius_km == 120
    assert loaded.output == "json"
    assert loaded.latitude == 1.0


def test_extract_env_overrides_parses_values(monkeypatch) -> None:
    monkeypatch.setenv("OGN_APRS_FILTER__LATITUDE", "48.5")
    monkeypatch.setenv("OGN_APRS_APRS__SERVER", "glidern2.glidernet.org")
    monkeypatch.setenv("OGN_APRS_MQTT__ENABLED", "true")
    monkeypatch.setenv("OGN_APRS_CONFIG_PATH", "/tmp/ignored.toml")

    overrides = config_module.extract_env_overrides()

    assert overrides == {
        "filter": {"latitude": 48.5},
        "aprs": {"server": "glidern2.glidernet.org"},
        "mqtt": {"enabled": True},
    }


def test_unsupported_version(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("version = 2\n", encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        config_module.load_config(path)

    assert "version" in str(excinfo.value)


def test_invalid_output_format(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[output]\nformat = "csv"\n', encoding="utf-8")

    with pytest.raises(ValueError):
        config_module.load_config(path)


def test_invalid_value_is_chained(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[filter]\nradius_km = "far"\n', encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        config_module.load_config(path)

    assert isinstance(excinfo.value.__cause__, ValueError)


def test_malformed_toml(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[filter\nlatitude = ", encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        config_module.load_config(path)

    assert str(path) in str(excinfo.value)


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        config_module.load_config(tmp_path / "absent.toml")


def test_resolve_config_path_env_override(monkeypatch, tmp_path) -> None:
    path = tmp_path / "custom.toml"
    monkeypatch.setenv(config_module.CONFIG_ENV_VAR, str(path))

    assert config_module.resolve_config_path() == path
    assert config_module.resolve_config_path(tmp_path / "explicit.toml") == tmp_path / "explicit.toml"


def test_xdg_directories(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    assert config_module.get_config_dir() == tmp_path / "cfg" / "ogn-aprs"
    assert config_module.resolve_config_path() == tmp_path / "cfg" / "ogn-aprs" / "config.toml"
    assert config_module.get_logs_dir() == tmp_path / "data" / "ogn-aprs" / "logs"


def test_config_summary() -> None:
    summary = config_module.config_summary(DumpConfig(latitude=48.3537, longitude=11.786))

    assert "aprs.glidernet.org:14580" in summary
    assert "48.3537, 11.7860 r=50km" in summary
    assert "random" in summary
    assert "MQTT    : off" in summary


def test_env_config_without_file(monkeypatch) -> None:
    monkeypatch.setenv("OGN_APRS_FILTER__LATITUDE", "48.5")
    monkeypatch.setenv("OGN_APRS_FILTER__LONGITUDE", "7.85")
    monkeypatch.setenv("OGN_APRS_MQTT__HOST", "broker.local")

    config = config_module.env_config()

    assert config.latitude == 48.5
    assert config.longitude == 7.85
    assert config.mqtt_host == "broker.local"
    assert config.radius_km == 50


def test_env_config_rejects_bad_values(monkeypatch) -> None:
    monkeypatch.setenv("OGN_APRS_OUTPUT__FORMAT", "kml")

    with pytest.raises(ValueError, match="Unsupported output format"):
        config_module.env_config()
