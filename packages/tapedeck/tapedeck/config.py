"""tapedeck — Configuration.

Two layers live here:

``RecordingConfig``
    The per-recording configuration (mode, adapters, persister and the
    options owned by plugins).  Unknown keys are kept so plugins can carry
    their own extension fields.

``Settings``
    Process-wide settings loaded from (in order of increasing priority):
        1. Built-in defaults (this file)
        2. User config:   ~/.tapedeck/config.yaml
        3. An explicit config file passed to ``Settings.load()``
        4. Environment variables prefixed with TAPEDECK_
    ``Settings.recording`` is the bottom layer every recording's
    configuration is merged onto.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tapedeck.orchestration.modes import Mode
from tapedeck.plugins.base import BaseAdapter, BasePersister


def _default_match_requests_by() -> dict[str, Any]:
    return {
        "method": True,
        "headers": True,
        "body": True,
        "order": True,
        "url": {
            "protocol": True,
            "username": True,
            "password": True,
            "hostname": True,
            "port": True,
            "pathname": True,
            "query": True,
            "hash": False,
        },
    }


class RecordingConfig(BaseModel):
    """Resolved configuration of one recording."""

    model_config = ConfigDict(extra="allow")

    mode: Mode = Mode.REPLAY
    adapters: list[Union[str, Type[BaseAdapter]]] = Field(
        default_factory=list,
        description="Adapters to connect, by PLUGIN_ID or class, in connection order.",
    )
    adapter_options: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-adapter options keyed by PLUGIN_ID.",
    )
    persister: Optional[Union[str, Type[BasePersister]]] = Field(
        default=None,
        description="Persister to load, by PLUGIN_ID or class. None = no persistence.",
    )
    persister_options: dict[str, Any] = Field(default_factory=dict)
    logging: bool = Field(
        default=False,
        description="Log every observed request through the request logger.",
    )
    record_if_missing: bool = True
    record_failed_requests: bool = False
    expires_in: Optional[str] = Field(
        default=None,
        description="Recording age after which it is considered expired (e.g. '30d').",
    )
    expiry_strategy: Literal["warn", "error", "record"] = "warn"
    match_requests_by: dict[str, Any] = Field(default_factory=_default_match_requests_by)

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: object) -> Mode:
        return Mode.parse(v)


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["json", "console"] = "console"
    file: Optional[Path] = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TAPEDECK_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from file + environment variables."""
        data: dict[str, object] = {}

        candidates = [Path.home() / ".tapedeck" / "config.yaml"]
        if config_file:
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml

                with path.open() as f:
                    loaded = yaml.safe_load(f) or {}
                    data.update(loaded)

        return cls(**data)

    def recording_defaults(self) -> dict[str, Any]:
        """Return the default recording configuration as a merge layer."""
        return self.recording.model_dump()


# Module-level singleton, replaced by ``Settings.load()`` on first use.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings | None) -> None:
    """Replace the module-level singleton. Used in tests."""
    global _settings
    _settings = settings
