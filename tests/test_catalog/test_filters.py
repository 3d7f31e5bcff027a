"""Tests for template filtering, sorting and category counts."""

import pytest

from pumpflux.catalog.filters import TemplateFilter, category_counts, sort_templates
from pumpflux.core.models import WorkflowTemplate


def _template(id, name, **kwargs):
    return WorkflowTemplate(id=id, name=name, **kwargs)


@pytest.fixture
def catalog():
    return [
        _template(1, "Lead Sync", description="Sheets to Slack", category="sales", tags=["sheets"],
                  complexity="simple", popularity=10, created_at="2024-01-01T00:00:00Z"),
        _template(2, "AI Summaries", description="Summarize rows with Claude", category="ai", tags=["claude"],
                  difficulty="complex", popularity=50, created_at="2024-03-01T00:00:00Z"),
        _template(3, "CRM Bridge", description="HubSpot to Pipedrive", category="sales", tags=["crm"],
                  complexity="medium", popularity=30),
    ]


def _ids(templates):
    return [t.id for t in templates]


class TestTemplateFilter:
    def test_no_constraints_returns_everything(self, catalog):
        assert _ids(TemplateFilter().apply(catalog)) == [2, 3, 1]

    def test_search_is_case_insensitive_over_name_description_tags(self, catalog):
        assert _ids(TemplateFilter(search="SLACK").apply(catalog)) == [1]
        assert _ids(TemplateFilter(search="crm").apply(catalog)) == [3]
        assert _ids(TemplateFilter(search="  claude ").apply(catalog)) == [2]

    def test_category_all_and_empty_mean_no_constraint(self, catalog):
        assert len(TemplateFilter(category="all").apply(catalog)) == 3
        assert len(TemplateFilter(category="").apply(catalog)) == 3
        assert _ids(TemplateFilter(category="sales").apply(catalog)) == [3, 1]

    def test_complexity_falls_back_to_difficulty(self, catalog):
        assert _ids(TemplateFilter(complexity="complex").apply(catalog)) == [2]

    def test_favorites_only(self, catalog):
        assert _ids(TemplateFilter(favorites_only=True).apply(catalog, favorites=[3, 99])) == [3]
        assert TemplateFilter(favorites_only=True).apply(catalog) == []

    def test_predicates_compose(self, catalog):
        template_filter = TemplateFilter(search="s", category="sales", complexity="simple", favorites_only=True)
        assert _ids(template_filter.apply(catalog, favorites={1, 3})) == [1]

    def test_input_not_modified(self, catalog):
        before = list(catalog)
        TemplateFilter(sort="popular").apply(catalog)
        assert catalog == before

    def test_query_params(self):
        assert TemplateFilter().to_query_params() == {"sort": "name"}
        params = TemplateFilter(search=" crm ", category="sales", complexity="medium", sort="recent").to_query_params()
        assert params == {"search": "crm", "category": "sales", "complexity": "medium", "sort": "recent"}


class TestSortTemplates:
    def test_by_name(self, catalog):
        assert _ids(sort_templates(catalog, "name")) == [2, 3, 1]

    def test_recent_puts_undated_last(self, catalog):
        assert _ids(sort_templates(catalog, "recent")) == [2, 1, 3]

    def test_complexity_order(self, catalog):
        assert _ids(sort_templates(catalog, "complexity")) == [1, 3, 2]

    def test_popular(self, catalog):
        assert _ids(sort_templates(catalog, "popular")) == [2, 3, 1]

    def test_unknown_keeps_order(self, catalog):
        assert _ids(sort_templates(catalog, "random")) == [1, 2, 3]


def test_category_counts(catalog):
    assert category_counts(catalog) == {"all": 3, "sales": 2, "ai": 1}
    assert category_counts([]) == {"all": 0}
