"""Tests for crawled-to-managed mapping reconciliation."""

import pytest

from search_schema.exceptions import CrawledPropertyNotFound, ManagedPropertyNotFound
from search_schema.models import Action, EntityKind
from search_schema.reconcilers import MappingReconciler


@pytest.fixture
def populated(store):
    store.create_category("Cat", "ps")
    for name in ("A", "B", "C", "D"):
        store.create_crawled_property(name, "Cat", 31, "ps")
    store.create_managed_property("MP", 1)
    store.create_managed_property("Other", 1)
    store.reset_journal()
    return store


@pytest.fixture
def mappings(populated, report):
    return MappingReconciler(populated, report)


def map_directly(store, managed, *crawled_names):
    prop = store.get_managed_property(managed)
    for name in crawled_names:
        store.create_mapping(store.find_crawled_properties(name, "Cat")[0], prop)


def mapped_names(store, managed):
    prop = store.get_managed_property(managed)
    return sorted(cp.name for cp in store.get_mapped_crawled_properties(prop))


def test_create_mapping(mappings, populated, report):
    mappings.create_mapping("MP", "A", "Cat")

    assert mapped_names(populated, "MP") == ["A"]
    entry = report.actions[-1]
    assert (entry.kind, entry.name, entry.action) == (
        EntityKind.MAPPING,
        "Cat:A -> MP",
        Action.CREATED,
    )


def test_existing_mapping_is_unchanged(mappings, populated, report):
    map_directly(populated, "MP", "A")
    populated.reset_journal()

    mappings.create_mapping("MP", "A", "Cat")

    assert populated.mutations == []
    assert report.actions[-1].action == Action.UNCHANGED


def test_mapping_to_another_property_does_not_count(mappings, populated):
    map_directly(populated, "Other", "A")

    mappings.create_mapping("MP", "A", "Cat")

    assert mapped_names(populated, "MP") == ["A"]
    assert mapped_names(populated, "Other") == ["A"]


def test_missing_crawled_property(mappings):
    with pytest.raises(CrawledPropertyNotFound):
        mappings.create_mapping("MP", "Z", "Cat")


def test_crawled_property_in_wrong_category(mappings):
    with pytest.raises(CrawledPropertyNotFound):
        mappings.create_mapping("MP", "A", "Elsewhere")


def test_missing_managed_property(mappings):
    with pytest.raises(ManagedPropertyNotFound):
        mappings.create_mapping("Nope", "A", "Cat")


def test_remove_mapping(mappings, populated, report):
    map_directly(populated, "MP", "A")

    mappings.remove_mapping("MP", "A", "Cat")

    assert mapped_names(populated, "MP") == []
    assert report.actions[-1].action == Action.REMOVED


@pytest.mark.parametrize(
    "managed,crawled,category",
    [("MP", "A", "Cat"), ("Nope", "A", "Cat"), ("MP", "Z", "Cat")],
)
def test_remove_absent_mapping_is_noop(mappings, populated, report, managed, crawled, category):
    mappings.remove_mapping(managed, crawled, category)

    assert populated.mutations == []
    assert report.actions[-1].action == Action.ABSENT


def test_reconcile_all_prunes_undeclared(mappings, populated, report):
    map_directly(populated, "MP", "A", "B", "C")
    populated.reset_journal()

    mappings.reconcile_all("MP", [("A", "Cat"), ("D", "Cat")])

    assert mapped_names(populated, "MP") == ["A", "D"]
    assert sorted(populated.mutations) == [
        ("create_mapping", "MP", "D", "Cat"),
        ("delete_mapping", "MP", "B", "Cat"),
        ("delete_mapping", "MP", "C", "Cat"),
    ]
    actions = {a.name: a.action for a in report.filter(kind=EntityKind.MAPPING)}
    assert actions == {
        "Cat:A -> MP": Action.UNCHANGED,
        "Cat:D -> MP": Action.CREATED,
        "Cat:B -> MP": Action.REMOVED,
        "Cat:C -> MP": Action.REMOVED,
    }


def test_reconcile_all_creates_before_pruning(mappings, populated):
    map_directly(populated, "MP", "A")
    populated.reset_journal()

    mappings.reconcile_all("MP", [("B", "Cat")])

    assert populated.mutations == [
        ("create_mapping", "MP", "B", "Cat"),
        ("delete_mapping", "MP", "A", "Cat"),
    ]


def test_reconcile_all_empty_removes_everything(mappings, populated):
    map_directly(populated, "MP", "A", "B")

    mappings.reconcile_all("MP", [])

    assert mapped_names(populated, "MP") == []


def test_reconcile_all_leaves_other_properties_alone(mappings, populated):
    map_directly(populated, "Other", "B")

    mappings.reconcile_all("MP", [("A", "Cat")])

    assert mapped_names(populated, "Other") == ["B"]


def test_reconcile_all_is_idempotent(mappings, populated):
    mappings.reconcile_all("MP", [("A", "Cat"), ("B", "Cat")])
    populated.reset_journal()

    mappings.reconcile_all("MP", [("A", "Cat"), ("B", "Cat")])

    assert populated.mutations == []


def test_reconcile_all_missing_managed_property(mappings):
    with pytest.raises(ManagedPropertyNotFound):
        mappings.reconcile_all("Nope", [])
