"""Unit tests — Settings.load, RecordingConfig, get_settings, override_settings."""

from __future__ import annotations

from pathlib import Path

import pytest

import tapedeck.config as config_module
from tapedeck.config import RecordingConfig, Settings, get_settings, override_settings
from tapedeck.exceptions import InvalidModeError
from tapedeck.orchestration.modes import Mode


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    return tmp_path


@pytest.mark.unit
class TestRecordingConfig:
    def test_defaults(self) -> None:
        config = RecordingConfig()
        assert config.mode is Mode.REPLAY
        assert config.expiry_strategy == "warn"
        assert config.logging is False
        assert config.match_requests_by["order"] is True

    def test_mode_parsed_case_insensitively(self) -> None:
        assert RecordingConfig(mode="PassThrough").mode is Mode.PASSTHROUGH

    def test_invalid_mode_raises_tapedeck_error(self) -> None:
        with pytest.raises(InvalidModeError):
            RecordingConfig(mode="rewind")

    def test_match_requests_by_not_shared(self) -> None:
        a, b = RecordingConfig(), RecordingConfig()
        a.match_requests_by["method"] = False
        assert b.match_requests_by["method"] is True


@pytest.mark.unit
class TestSettingsLoad:
    def test_load_defaults_when_no_files(self, home: Path) -> None:
        settings = Settings.load()
        assert settings.logging.level == "info"
        assert settings.recording.mode is Mode.REPLAY

    def test_load_user_config(self, home: Path) -> None:
        (home / ".tapedeck").mkdir()
        (home / ".tapedeck" / "config.yaml").write_text("recording:\n  mode: record\n")
        assert Settings.load().recording.mode is Mode.RECORD

    def test_explicit_file_overrides_user_config(self, home: Path, tmp_path: Path) -> None:
        (home / ".tapedeck").mkdir()
        (home / ".tapedeck" / "config.yaml").write_text("recording:\n  mode: record\n")
        extra = tmp_path / "extra.yaml"
        extra.write_text(
            "recording:\n  mode: PASSTHROUGH\n  adapters: [httpx]\nlogging:\n  format: json\n"
        )
        settings = Settings.load(config_file=extra)
        assert settings.recording.mode is Mode.PASSTHROUGH
        assert settings.recording.adapters == ["httpx"]
        assert settings.logging.format == "json"

    def test_empty_file(self, home: Path, tmp_path: Path) -> None:
        extra = tmp_path / "empty.yaml"
        extra.write_text("")
        assert Settings.load(config_file=extra).recording.mode is Mode.REPLAY

    def test_environment_variables(self, home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TAPEDECK_LOGGING__LEVEL", "debug")
        monkeypatch.setenv("TAPEDECK_RECORDING__MODE", "record")
        settings = Settings.load()
        assert settings.logging.level == "debug"
        assert settings.recording.mode is Mode.RECORD

    def test_invalid_mode_in_file(self, home: Path, tmp_path: Path) -> None:
        extra = tmp_path / "bad.yaml"
        extra.write_text("recording:\n  mode: rewind\n")
        with pytest.raises(InvalidModeError):
            Settings.load(config_file=extra)

    def test_recording_defaults_is_a_plain_dict(self) -> None:
        defaults = Settings().recording_defaults()
        assert isinstance(defaults, dict)
        assert defaults["mode"] is Mode.REPLAY
        assert defaults["adapters"] == []


@pytest.mark.unit
class TestSettingsSingleton:
    def test_override_and_get(self) -> None:
        custom = Settings(recording=RecordingConfig(mode=Mode.RECORD))
        override_settings(custom)
        assert get_settings() is custom

    def test_get_settings_loads_once(self, home: Path) -> None:
        override_settings(None)
        first = get_settings()
        assert get_settings() is first
        assert config_module._settings is first
