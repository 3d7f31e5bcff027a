"""Template catalog: filtering, favorites and previews."""

from pumpflux.catalog.favorites import FAVORITES_KEY, FavoritesStore
from pumpflux.catalog.filters import TemplateFilter, category_counts, sort_templates
from pumpflux.catalog.preview import TemplatePreview, parse_workflow_data

__all__ = [
    "FAVORITES_KEY",
    "FavoritesStore",
    "TemplateFilter",
    "TemplatePreview",
    "category_counts",
    "parse_workflow_data",
    "sort_templates",
]
