"""Tests for category and crawled property reconciliation."""

import pytest

from search_schema.exceptions import (
    AmbiguousCrawledProperty,
    InvalidEnumValue,
    InvalidParameter,
    UnknownCategory,
)
from search_schema.models import Action, EntityKind
from search_schema.reconcilers import (
    CategoryReconciler,
    CrawledPropertyReconciler,
    PropertySetResolver,
)
from search_schema.reconcilers.crawled_property import find_crawled_property


@pytest.fixture
def crawled(store, report):
    return CrawledPropertyReconciler(store, PropertySetResolver(store), report)


class TestCategoryReconciler:
    def test_creates_missing_category(self, store, report, property_set_factory):
        categories = CategoryReconciler(store, report, property_set_factory)

        category = categories.ensure("SharePoint")

        assert category.property_sets == ("ps-1",)
        assert report.actions[-1].kind == EntityKind.CATEGORY
        assert report.actions[-1].action == Action.CREATED

    def test_existing_category_untouched(self, store, report):
        store.create_category("SharePoint", "existing")
        store.reset_journal()

        CategoryReconciler(store, report).ensure("SharePoint")

        assert store.mutations == []
        assert report.actions[-1].action == Action.UNCHANGED

    def test_default_property_set_ids_are_unique(self, store):
        categories = CategoryReconciler(store)

        first = categories.ensure("One").property_sets[0]
        second = categories.ensure("Two").property_sets[0]

        assert first != second


class TestCrawledPropertyReconciler:
    def test_creates_in_resolved_property_set(self, store, crawled, report):
        store.create_category("SharePoint", "S1")
        store.add_property_set("SharePoint", "S2")
        store.create_crawled_property("existing", "SharePoint", 31, "S2")

        prop = crawled.ensure("ows_Title", "text", "SharePoint")

        assert prop.property_set == "S2"
        assert prop.type == 31
        entry = report.actions[-1]
        assert (entry.kind, entry.name, entry.action) == (
            EntityKind.CRAWLED_PROPERTY,
            "SharePoint:ows_Title",
            Action.CREATED,
        )

    def test_existing_property_is_unchanged(self, store, crawled, report):
        store.create_category("SharePoint", "S1")
        store.create_crawled_property("ows_Title", "SharePoint", 31, "S1")
        store.reset_journal()

        crawled.ensure("ows_Title", "integer", "SharePoint")

        assert store.mutations == []
        assert report.actions[-1].action == Action.UNCHANGED

    def test_type_not_needed_when_property_exists(self, store, crawled):
        store.create_category("SharePoint", "S1")
        store.create_crawled_property("ows_Title", "SharePoint", 31, "S1")

        prop = crawled.ensure("ows_Title", None, "SharePoint")

        assert prop.name == "ows_Title"

    def test_missing_type_on_create(self, store, crawled):
        store.create_category("SharePoint", "S1")

        with pytest.raises(InvalidParameter, match="no type was given"):
            crawled.ensure("ows_Title", None, "SharePoint")
        assert store.crawled_properties == []

    def test_invalid_type_on_create(self, store, crawled):
        store.create_category("SharePoint", "S1")

        with pytest.raises(InvalidEnumValue):
            crawled.ensure("ows_Title", "string", "SharePoint")

    def test_unknown_category(self, crawled):
        with pytest.raises(UnknownCategory):
            crawled.ensure("ows_Title", "text", "Nowhere")

    def test_same_name_in_other_category_is_distinct(self, store, crawled, report):
        store.create_category("SharePoint", "S1")
        store.create_category("Custom", "C1")
        store.create_crawled_property("Title", "Custom", 31, "C1")

        crawled.ensure("Title", "text", "SharePoint")

        assert len(store.find_crawled_properties("Title")) == 2
        assert report.actions[-1].action == Action.CREATED


class TestLookup:
    def test_duplicate_identity_is_ambiguous(self, store):
        store.create_category("SharePoint", "S1")
        store.create_crawled_property("Title", "SharePoint", 31, "S1")
        store.create_crawled_property("Title", "SharePoint", 31, "S1")

        with pytest.raises(AmbiguousCrawledProperty) as exc_info:
            find_crawled_property(store, "Title", "SharePoint")
        assert exc_info.value.context["matches"] == 2

    def test_lookup_filters_by_category(self, store):
        store.create_category("SharePoint", "S1")
        store.create_category("Custom", "C1")
        store.create_crawled_property("Title", "SharePoint", 31, "S1")
        store.create_crawled_property("Title", "Custom", 31, "C1")

        found = find_crawled_property(store, "Title", "Custom")

        assert found.category == "Custom"

    def test_lookup_missing(self, store):
        assert find_crawled_property(store, "Title", "SharePoint") is None
