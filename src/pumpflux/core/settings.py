"""Settings management for pumpflux with environment variable override support."""

import json
import logging
import os
import stat
import tempfile
import threading
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".pumpflux"


def pumpflux_home() -> Path:
    """Directory for settings and local state; ``PUMPFLUX_HOME`` overrides it."""
    return Path(os.getenv("PUMPFLUX_HOME") or DEFAULT_HOME).expanduser()


class ApiSettings(BaseModel):
    """Connection settings for the PumpFlux REST API."""

    base_url: str = Field(default="http://localhost:5000")
    token: Optional[str] = Field(default=None, description="Bearer token sent with every request")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_retries: int = Field(default=3, description="Attempts for the template list fetch")
    retry_wait: float = Field(default=1.0, description="Base wait in seconds, doubled after each attempt")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base_url: {v}. Must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout", "max_retries")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Must be a positive integer, got: {v}")
        return v


class StorageSettings(BaseModel):
    """Where local state lives. Unset paths resolve under the pumpflux home directory."""

    storage_path: Optional[str] = Field(
        default=None,
        description="Key-value file holding favorites and other local state (default: <home>/storage.json)",
    )
    workflows_dir: Optional[str] = Field(
        default=None,
        description="Directory for workflows saved with --local (default: <home>/workflows)",
    )


class PumpfluxSettings(BaseModel):
    """Main settings configuration."""

    version: str = Field(default="1.0.0")
    api: ApiSettings = Field(default_factory=ApiSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


class SettingsManager:
    """Manages pumpflux settings with environment variable override support."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or pumpflux_home() / "settings.json"
        self._settings: Optional[PumpfluxSettings] = None
        self._lock = threading.Lock()

    def load(self) -> PumpfluxSettings:
        """Load settings with environment variable overrides."""
        if self._settings is None:
            self._settings = self._load_from_file()
            self._validate_permissions(self._settings)
        settings = self._settings
        self._apply_env_overrides(settings)
        return settings

    def reload(self) -> PumpfluxSettings:
        """Force reload settings from file."""
        self._settings = None
        return self.load()

    def _load_from_file(self) -> PumpfluxSettings:
        """Load settings from file or return defaults."""
        if not self.settings_path.exists():
            return PumpfluxSettings()
        try:
            with open(self.settings_path) as f:
                data = json.load(f)
            return PumpfluxSettings(**data)
        except Exception as e:
            # Corrupted file: fall back to defaults
            logger.warning(f"Failed to load settings from {self.settings_path} ({e}); using defaults")
            return PumpfluxSettings()

    def _apply_env_overrides(self, settings: PumpfluxSettings) -> None:
        """Apply environment variable overrides."""
        env_url = os.getenv("PUMPFLUX_API_URL")
        if env_url:
            if env_url.startswith(("http://", "https://")):
                settings.api.base_url = env_url.rstrip("/")
            else:
                logger.warning(f"Invalid PUMPFLUX_API_URL: {env_url}. Using: {settings.api.base_url}")

        env_token = os.getenv("PUMPFLUX_API_TOKEN")
        if env_token:
            settings.api.token = env_token

        env_timeout = os.getenv("PUMPFLUX_TIMEOUT")
        if env_timeout is not None:
            try:
                timeout = int(env_timeout)
                if timeout <= 0:
                    raise ValueError(timeout)
                settings.api.timeout = timeout
            except ValueError:
                logger.warning(f"Invalid PUMPFLUX_TIMEOUT: {env_timeout}. Using: {settings.api.timeout}")

    def save(self, settings: Optional[PumpfluxSettings] = None) -> None:
        """Save settings to file with atomic operations and secure permissions."""
        if settings is None:
            settings = self.load()

        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(dir=self.settings_path.parent, prefix=".settings.", suffix=".tmp")

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                json.dump(settings.model_dump(), f, indent=2)

            os.replace(temp_path, self.settings_path)
            # Owner read/write only, the file may hold an API token
            os.chmod(self.settings_path, stat.S_IRUSR | stat.S_IWUSR)

            self._settings = None
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def set_api_url(self, url: str) -> None:
        """Persist a new API base URL."""
        with self._lock:
            settings = self._load_from_file()
            settings.api = ApiSettings(**{**settings.api.model_dump(), "base_url": url})
            self.save(settings)

    def set_api_token(self, token: Optional[str]) -> None:
        """Persist (or clear, with None) the API bearer token."""
        with self._lock:
            settings = self._load_from_file()
            settings.api.token = token
            self.save(settings)

    def _validate_permissions(self, settings: PumpfluxSettings) -> None:
        """Warn when a settings file holding a token is readable by others."""
        if not self.settings_path.exists() or not settings.api.token:
            return
        try:
            mode = stat.S_IMODE(os.stat(self.settings_path).st_mode)
        except OSError as e:
            logger.debug(f"Permission check failed: {e}")
            return
        if mode & (stat.S_IROTH | stat.S_IRGRP):
            logger.warning(
                f"Settings file {self.settings_path} contains an API token "
                f"but has insecure permissions {oct(mode)}. "
                f"Run: chmod 600 {self.settings_path}"
            )
