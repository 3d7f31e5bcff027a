"""Shared state and terminal adapters for CLI commands."""

import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import click

from pumpflux.api.client import PumpfluxClient
from pumpflux.catalog.favorites import FavoritesStore
from pumpflux.core.exceptions import ApiError
from pumpflux.core.notifications import DESTRUCTIVE, DEFAULT
from pumpflux.core.settings import PumpfluxSettings, SettingsManager, pumpflux_home
from pumpflux.core.storage import JsonFileStorage
from pumpflux.core.user_errors import ApiUnavailableError, UserFriendlyError
from pumpflux.core.workflow_manager import WorkflowManager


class ClickNotifier:
    """Prints notifications: successes to stdout, destructive ones to stderr."""

    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> None:
        text = f"{title} {description}".strip()
        if variant == DESTRUCTIVE:
            click.echo(f"❌ {text}", err=True)
        else:
            click.echo(f"✓ {text}")


class ClickNavigator:
    """Turns UI navigation into a hint about the next command."""

    HINTS = {"/": "Browse more templates: pumpflux templates list"}

    def __init__(self) -> None:
        self.history: list[str] = []

    def navigate(self, path: str) -> None:
        self.history.append(path)
        hint = self.HINTS.get(path)
        if hint:
            click.echo(hint)


class AppContext:
    """Lazily built collaborators, shared by every command in one invocation.

    Tests pass a prepared instance through ``CliRunner.invoke(..., obj=...)``.
    """

    def __init__(
        self,
        home: Optional[Path] = None,
        client: Optional[Any] = None,
        verbose: bool = False,
    ):
        self.home = Path(home) if home is not None else pumpflux_home()
        self.verbose = verbose
        self._client = client
        self._settings_manager: Optional[SettingsManager] = None

    @property
    def settings_manager(self) -> SettingsManager:
        if self._settings_manager is None:
            self._settings_manager = SettingsManager(self.home / "settings.json")
        return self._settings_manager

    @property
    def settings(self) -> PumpfluxSettings:
        return self.settings_manager.load()

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = PumpfluxClient.from_settings(self.settings.api)
        return self._client

    def favorites(self) -> FavoritesStore:
        path = self.settings.storage.storage_path or self.home / "storage.json"
        return FavoritesStore(JsonFileStorage(Path(path)), ClickNotifier())

    def workflow_manager(self) -> WorkflowManager:
        path = self.settings.storage.workflows_dir or self.home / "workflows"
        return WorkflowManager(Path(path))

    def fail(self, error: UserFriendlyError) -> NoReturn:
        click.echo(error.format_for_cli(verbose=self.verbose), err=True)
        sys.exit(1)

    def fail_api(self, error: ApiError) -> NoReturn:
        self.fail(ApiUnavailableError(self.settings.api.base_url, technical_details=str(error)))
