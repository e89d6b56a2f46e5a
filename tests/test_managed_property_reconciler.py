"""Tests for managed property reconciliation.

Covers type immutability, declared-field diffing, the full-text importance
transitions and the dynamic summary fallback.
"""

import pytest

from search_schema.enum_registry import SortMode, SummaryMode
from search_schema.exceptions import (
    InvalidEnumValue,
    InvalidParameter,
    TypeImmutableConflict,
)
from search_schema.models import Action, EntityKind, ManagedPropertySettings
from search_schema.reconcilers import ManagedPropertyReconciler
from search_schema.store.memory import DEFAULT_INDEX_NAME


@pytest.fixture
def index(store):
    return store.get_full_text_index(DEFAULT_INDEX_NAME)


@pytest.fixture
def reconciler(store, report):
    return ManagedPropertyReconciler(store, report)


def settings(**overrides):
    values = {"name": "ProjectCode", "type": "text"}
    values.update(overrides)
    return ManagedPropertySettings(**values)


def managed_actions(report):
    return report.filter(kind=EntityKind.MANAGED_PROPERTY)


def mapping_actions(report):
    return report.filter(kind=EntityKind.FULL_TEXT_INDEX_MAPPING)


class TestCreateAndUpdate:
    def test_creates_property_with_declared_fields(self, reconciler, store, index, report):
        prop = reconciler.reconcile(
            settings(description="Code", query=True, refine=True, sort="latent"), index
        )

        assert prop.type == 1
        assert prop.description == "Code"
        assert prop.queryable is True
        assert prop.refinement_enabled is True
        assert prop.sort_mode == SortMode.LATENT
        assert managed_actions(report)[-1].action == Action.CREATED

    def test_create_then_update_is_two_writes(self, reconciler, store, index):
        reconciler.reconcile(settings(query=True), index)

        assert store.mutations == [
            ("create_managed_property", "ProjectCode"),
            ("update_managed_property", "ProjectCode"),
        ]

    def test_create_without_declared_fields_is_one_write(self, reconciler, store, index):
        reconciler.reconcile(settings(), index)

        assert store.mutations == [("create_managed_property", "ProjectCode")]

    def test_changed_fields_applied_in_single_update(
        self, reconciler, store, index, report
    ):
        reconciler.reconcile(settings(query=False, merge=False), index)
        store.reset_journal()

        reconciler.reconcile(
            settings(query=True, merge=True, stemming=False, summary="static"), index
        )

        assert store.mutations == [("update_managed_property", "ProjectCode")]
        prop = store.get_managed_property("ProjectCode")
        assert prop.queryable is True
        assert prop.merge_crawled_properties is True
        assert prop.summary_mode == SummaryMode.STATIC
        entry = managed_actions(report)[-1]
        assert entry.action == Action.UPDATED
        assert entry.detail == "merge_crawled_properties, queryable, summary_mode"

    def test_undeclared_fields_keep_store_values(self, reconciler, store, index, report):
        reconciler.reconcile(settings(description="Keep me", refine=True), index)
        store.reset_journal()

        prop = reconciler.reconcile(settings(), index)

        assert prop.description == "Keep me"
        assert prop.refinement_enabled is True
        assert store.mutations == []
        assert managed_actions(report)[-1].action == Action.UNCHANGED

    def test_reconcile_is_idempotent(self, reconciler, store, index):
        declared = settings(
            description="Code", query=True, sort="enabled", summary="dynamic", level=4
        )
        reconciler.reconcile(declared, index)
        store.reset_journal()

        reconciler.reconcile(declared, index)

        assert store.mutations == []


class TestValidation:
    def test_type_change_is_rejected_before_mutation(self, reconciler, store, index):
        store.create_managed_property("ProjectCode", 2)
        store.reset_journal()

        with pytest.raises(TypeImmutableConflict) as exc_info:
            reconciler.reconcile(settings(type="text", query=True, level=3), index)

        assert store.mutations == []
        assert exc_info.value.context["current_type"] == "integer"
        assert exc_info.value.context["requested_type"] == "text"

    def test_unknown_type(self, reconciler, store, index):
        with pytest.raises(InvalidEnumValue):
            reconciler.reconcile(settings(type="string"), index)
        assert store.mutations == []

    def test_unknown_sort_mode(self, reconciler, store, index):
        with pytest.raises(InvalidEnumValue) as exc_info:
            reconciler.reconcile(settings(sort="ascending"), index)

        assert exc_info.value.legal_values == ["disabled", "enabled", "latent"]
        assert store.get_managed_property("ProjectCode") is None
        assert store.mutations == []

    def test_unknown_summary_mode(self, reconciler, store, index):
        with pytest.raises(InvalidEnumValue):
            reconciler.reconcile(settings(summary="full"), index)
        assert store.mutations == []

    @pytest.mark.parametrize("level", [-1, 8, True])
    def test_level_out_of_range(self, reconciler, store, index, level):
        with pytest.raises(InvalidParameter, match="Importance level"):
            reconciler.reconcile(settings(level=level), index)
        assert store.mutations == []


class TestFullTextIndexMapping:
    def test_positive_level_creates_mapping(self, reconciler, store, index, report):
        reconciler.reconcile(settings(level=5), index)

        mapping = store.full_text_mappings[("ProjectCode", DEFAULT_INDEX_NAME)]
        assert mapping.importance == 5
        entry = mapping_actions(report)[-1]
        assert entry.action == Action.CREATED
        assert entry.name == f"ProjectCode -> {DEFAULT_INDEX_NAME}"

    def test_zero_level_without_mapping_does_nothing(self, reconciler, store, index, report):
        reconciler.reconcile(settings(level=0), index)

        assert store.full_text_mappings == {}
        assert mapping_actions(report) == []

    def test_level_change_updates_in_place(self, reconciler, store, index, report):
        reconciler.reconcile(settings(level=5), index)
        store.reset_journal()

        reconciler.reconcile(settings(level=3), index)

        assert store.mutations == [
            ("update_full_text_index_mapping", "ProjectCode", DEFAULT_INDEX_NAME)
        ]
        assert store.full_text_mappings[("ProjectCode", DEFAULT_INDEX_NAME)].importance == 3
        assert mapping_actions(report)[-1].detail == "level 5 -> 3"

    def test_zero_level_removes_mapping(self, reconciler, store, index, report):
        reconciler.reconcile(settings(level=5), index)

        reconciler.reconcile(settings(level=0), index)

        assert store.full_text_mappings == {}
        assert mapping_actions(report)[-1].action == Action.REMOVED

    def test_omitted_level_removes_mapping(self, reconciler, store, index):
        reconciler.reconcile(settings(level=5), index)

        reconciler.reconcile(settings(), index)

        assert store.full_text_mappings == {}

    def test_remapping_after_removal(self, reconciler, store, index):
        reconciler.reconcile(settings(level=5), index)
        reconciler.reconcile(settings(level=0), index)
        store.reset_journal()

        reconciler.reconcile(settings(level=3), index)

        assert store.mutations == [
            ("create_full_text_index_mapping", "ProjectCode", DEFAULT_INDEX_NAME)
        ]

    def test_same_level_is_noop(self, reconciler, store, index):
        reconciler.reconcile(settings(level=7), index)
        store.reset_journal()

        reconciler.reconcile(settings(level=7), index)

        assert store.mutations == []


class TestResultFallback:
    def test_dynamic_summary_falls_back_to_itself(self, reconciler, store, index):
        prop = reconciler.reconcile(settings(summary="dynamic"), index)

        assert prop.summary_mode == SummaryMode.DYNAMIC
        assert prop.result_fallback == "ProjectCode"

    def test_existing_fallback_is_kept(self, reconciler, store, index):
        store.create_managed_property("ProjectCode", 1)
        store.update_managed_property(
            store.get_managed_property("ProjectCode"),
            {"summary_mode": 2, "result_fallback": "Title"},
        )
        store.reset_journal()

        prop = reconciler.reconcile(settings(summary="dynamic"), index)

        assert prop.result_fallback == "Title"
        assert store.mutations == []

    def test_static_summary_gets_no_fallback(self, reconciler, index):
        prop = reconciler.reconcile(settings(summary="static"), index)

        assert prop.result_fallback is None

    def test_fallback_uses_store_summary_when_undeclared(self, reconciler, store, index):
        store.create_managed_property("ProjectCode", 1)
        store.update_managed_property(
            store.get_managed_property("ProjectCode"), {"summary_mode": 2}
        )

        prop = reconciler.reconcile(settings(), index)

        assert prop.result_fallback == "ProjectCode"


class TestRemove:
    def test_remove_cascades_mappings(self, reconciler, store, index, report):
        reconciler.reconcile(settings(level=5), index)

        reconciler.remove("ProjectCode")

        assert store.get_managed_property("ProjectCode") is None
        assert store.full_text_mappings == {}
        assert managed_actions(report)[-1].action == Action.REMOVED

    def test_remove_missing_is_noop(self, reconciler, store, report):
        reconciler.remove("Nothing")

        assert store.mutations == []
        assert managed_actions(report)[-1].action == Action.ABSENT
