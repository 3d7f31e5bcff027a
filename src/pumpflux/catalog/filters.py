"""Search, filtering and sorting of the template catalog.

Filtering happens client-side over an already fetched list; the same filter
can also be turned into query parameters for servers that filter themselves.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from pumpflux.core.models import WorkflowTemplate

logger = logging.getLogger(__name__)

ALL = "all"

SORT_OPTIONS = ("name", "recent", "complexity", "popular")
COMPLEXITY_LEVELS = ("simple", "medium", "complex")

_COMPLEXITY_RANK = {level: rank for rank, level in enumerate(COMPLEXITY_LEVELS)}


def _unconstrained(value: Optional[str]) -> bool:
    return not value or value == ALL


@dataclass
class TemplateFilter:
    """Criteria for narrowing the catalog.

    Each criterion is optional; ``"all"`` or an empty value disables it.
    """

    search: str = ""
    category: str = ALL
    complexity: str = ALL
    favorites_only: bool = False
    sort: str = "name"

    def matches_search(self, template: WorkflowTemplate) -> bool:
        term = self.search.strip().lower()
        if not term:
            return True
        haystacks = [template.name, template.description or "", *template.tags]
        return any(term in text.lower() for text in haystacks)

    def matches_category(self, template: WorkflowTemplate) -> bool:
        return _unconstrained(self.category) or template.category == self.category

    def matches_complexity(self, template: WorkflowTemplate) -> bool:
        return _unconstrained(self.complexity) or template.level == self.complexity

    def matches(self, template: WorkflowTemplate, favorites: Iterable[int] = ()) -> bool:
        if self.favorites_only and template.id not in set(favorites):
            return False
        return self.matches_search(template) and self.matches_category(template) and self.matches_complexity(template)

    def apply(self, templates: list[WorkflowTemplate], favorites: Iterable[int] = ()) -> list[WorkflowTemplate]:
        """Filter then sort templates.

        Args:
            templates: Catalog as fetched
            favorites: Favorite template ids, only consulted with favorites_only

        Returns:
            New list; the input is not modified
        """
        favorite_ids = set(favorites)
        selected = [t for t in templates if self.matches(t, favorite_ids)]
        logger.debug(
            f"Filtered catalog to {len(selected)} of {len(templates)} templates",
            extra={"search": self.search, "category": self.category, "complexity": self.complexity},
        )
        return sort_templates(selected, self.sort)

    def to_query_params(self) -> dict[str, str]:
        """Query parameters for ``GET /api/workflow/templates``."""
        params: dict[str, str] = {}
        if self.search.strip():
            params["search"] = self.search.strip()
        if not _unconstrained(self.category):
            params["category"] = self.category
        if not _unconstrained(self.complexity):
            params["complexity"] = self.complexity
        if self.sort:
            params["sort"] = self.sort
        return params


def sort_templates(templates: list[WorkflowTemplate], sort: Optional[str] = "name") -> list[WorkflowTemplate]:
    """Return templates ordered by one of ``SORT_OPTIONS``.

    Unknown sort keys keep the incoming order.
    """
    if sort == "name":
        return sorted(templates, key=lambda t: t.name.lower())
    if sort == "recent":
        # ISO timestamps sort lexically; undated templates go last
        dated = sorted((t for t in templates if t.created_at), key=lambda t: t.created_at or "", reverse=True)
        return dated + [t for t in templates if not t.created_at]
    if sort == "complexity":
        return sorted(templates, key=lambda t: _COMPLEXITY_RANK.get(t.level or "", len(_COMPLEXITY_RANK)))
    if sort == "popular":
        return sorted(templates, key=lambda t: t.popularity, reverse=True)
    if sort:
        logger.warning(f"Unknown sort option '{sort}', keeping server order")
    return list(templates)


def category_counts(templates: list[WorkflowTemplate]) -> dict[str, int]:
    """Count templates per category, with ``"all"`` first."""
    counts: dict[str, int] = {ALL: len(templates)}
    for template in templates:
        if template.category:
            counts[template.category] = counts.get(template.category, 0) + 1
    return counts
