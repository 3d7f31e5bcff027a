"""Notification and navigation interfaces.

Components report outcomes through a ``Notifier`` (the toast of the web UI)
and move the user on through a ``Navigator`` instead of touching global
state. The CLI provides terminal implementations; tests use the recording
ones below.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


class Notifier(Protocol):
    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> None: ...


class Navigator(Protocol):
    def navigate(self, path: str) -> None: ...


class LoggingNotifier:
    """Notifier that writes to the module logger."""

    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> None:
        level = logging.WARNING if variant == DESTRUCTIVE else logging.INFO
        logger.log(level, f"{title}: {description}" if description else title)


@dataclass
class Notification:
    title: str
    description: str
    variant: str


@dataclass
class RecordingNotifier:
    """Notifier that keeps every notification in memory."""

    notifications: list[Notification] = field(default_factory=list)

    def notify(self, title: str, description: str = "", variant: str = DEFAULT) -> None:
        self.notifications.append(Notification(title, description, variant))

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]


@dataclass
class RecordingNavigator:
    """Navigator that remembers visited paths."""

    history: list[str] = field(default_factory=list)

    def navigate(self, path: str) -> None:
        self.history.append(path)

    @property
    def current(self) -> str:
        return self.history[-1] if self.history else ""
