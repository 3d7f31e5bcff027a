"""Favorite templates, persisted in local key-value storage."""

import json
import logging
from typing import Optional

from pumpflux.core.notifications import Notifier
from pumpflux.core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favoriteTemplates"


def _as_id(item: object) -> int:
    if isinstance(item, bool):
        raise ValueError(f"not a template id: {item!r}")
    if isinstance(item, float):
        if not item.is_integer():
            raise ValueError(f"not a template id: {item!r}")
        return int(item)
    if isinstance(item, (int, str)):
        return int(item)
    raise TypeError(f"not a template id: {item!r}")


class FavoritesStore:
    """Set of favorite template ids stored as a JSON array.

    Every toggle is written through immediately. A corrupted entry is reset
    rather than raised, so the catalog always loads.
    """

    def __init__(self, storage: KeyValueStorage, notifier: Optional[Notifier] = None):
        self.storage = storage
        self.notifier = notifier
        self._ids: Optional[list[int]] = None

    def load(self) -> list[int]:
        """Read favorites from storage, resetting unusable data."""
        raw = self.storage.get_item(FAVORITES_KEY)
        if raw is None:
            self._ids = []
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            ids = [_as_id(item) for item in data]
        except (ValueError, TypeError) as e:
            logger.error(f"Error parsing favorite templates, resetting: {e}")
            self.storage.remove_item(FAVORITES_KEY)
            ids = []

        # Preserve first-seen order, drop duplicates
        self._ids = list(dict.fromkeys(ids))
        return list(self._ids)

    @property
    def ids(self) -> list[int]:
        if self._ids is None:
            self.load()
        return list(self._ids or [])

    def is_favorite(self, template_id: int) -> bool:
        return template_id in self.ids

    def toggle(self, template_id: int) -> bool:
        """Add or remove a template.

        Returns:
            True if the template is a favorite after the toggle
        """
        ids = self.ids
        if template_id in ids:
            ids.remove(template_id)
            added = False
        else:
            ids.append(template_id)
            added = True

        self.storage.set_item(FAVORITES_KEY, json.dumps(ids))
        self._ids = ids
        logger.debug(f"Template {template_id} {'added to' if added else 'removed from'} favorites")

        if self.notifier is not None:
            self.notifier.notify("Template added to favorites" if added else "Template removed from favorites")
        return added
