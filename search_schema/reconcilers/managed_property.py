"""Managed property reconciliation.

A managed property is fully validated before the store is touched, so a bad
sort mode or level never leaves a property half updated.
"""

from typing import Any, Dict, Optional

import structlog

from search_schema import enum_registry
from search_schema.enum_registry import EnumCategory, SummaryMode
from search_schema.exceptions import InvalidParameter, TypeImmutableConflict
from search_schema.models import Action, EntityKind, ManagedPropertySettings
from search_schema.reconcilers.base import BaseReconciler
from search_schema.store.base import FullTextIndex, ManagedProperty

logger = structlog.get_logger(__name__)

MIN_IMPORTANCE = 0
MAX_IMPORTANCE = 7


class ManagedPropertyReconciler(BaseReconciler):
    def reconcile(
        self, settings: ManagedPropertySettings, index: FullTextIndex
    ) -> ManagedProperty:
        """Get or create the property, apply declared fields and its index mapping.

        Raises:
            InvalidParameter: On an unknown type, sort or summary name, or a
                level outside 0-7. Raised before any store mutation.
            TypeImmutableConflict: If the property exists with another type.
        """
        name = settings.name
        type_code = enum_registry.resolve(EnumCategory.MANAGED_PROPERTY_TYPE, settings.type)
        importance = self._validate_level(settings)
        sort_code = (
            enum_registry.resolve(EnumCategory.SORT_MODE, settings.sort)
            if settings.sort is not None
            else None
        )
        summary_code = (
            enum_registry.resolve(EnumCategory.SUMMARY_MODE, settings.summary)
            if settings.summary is not None
            else None
        )

        prop = self.store.get_managed_property(name)
        created = False
        if prop is not None and prop.type != type_code:
            raise TypeImmutableConflict(
                name,
                enum_registry.name_for(EnumCategory.MANAGED_PROPERTY_TYPE, prop.type),
                settings.type,
            )
        if prop is None:
            prop = self.store.create_managed_property(name, type_code)
            created = True
            logger.info("Created managed property", managed_property=name, type=settings.type)

        changes = self._diff(prop, settings, sort_code, summary_code)
        if changes:
            self.store.update_managed_property(prop, changes)
            logger.info(
                "Updated managed property", managed_property=name, fields=sorted(changes)
            )
        if created:
            self.report.record(EntityKind.MANAGED_PROPERTY, name, Action.CREATED)
        elif changes:
            self.report.record(
                EntityKind.MANAGED_PROPERTY,
                name,
                Action.UPDATED,
                detail=", ".join(sorted(changes)),
            )
        else:
            self.report.record(EntityKind.MANAGED_PROPERTY, name, Action.UNCHANGED)
            logger.debug("Managed property up to date", managed_property=name)

        prop = self.store.get_managed_property(name) or prop
        self._reconcile_index_mapping(prop, index, importance)
        return self._ensure_result_fallback(prop)

    @staticmethod
    def _validate_level(settings: ManagedPropertySettings) -> int:
        importance = settings.importance
        if (
            isinstance(importance, bool)
            or not isinstance(importance, int)
            or not MIN_IMPORTANCE <= importance <= MAX_IMPORTANCE
        ):
            raise InvalidParameter(
                f"Importance level must be an integer between {MIN_IMPORTANCE} "
                f"and {MAX_IMPORTANCE}",
                parameter="level",
                value=settings.level,
                entity=settings.name,
            )
        return importance

    @staticmethod
    def _diff(
        prop: ManagedProperty,
        settings: ManagedPropertySettings,
        sort_code: Optional[int],
        summary_code: Optional[int],
    ) -> Dict[str, Any]:
        desired = {
            "description": settings.description,
            "sort_mode": sort_code,
            "queryable": settings.query,
            "refinement_enabled": settings.refine,
            "stemming_enabled": settings.stemming,
            "merge_crawled_properties": settings.merge,
            "summary_mode": summary_code,
        }
        return {
            field: value
            for field, value in desired.items()
            if value is not None and getattr(prop, field) != value
        }

    def _reconcile_index_mapping(
        self, prop: ManagedProperty, index: FullTextIndex, importance: int
    ) -> None:
        mapping = self.store.get_full_text_index_mapping(prop, index)
        label = f"{prop.name} -> {index.name}"

        if mapping is None and importance > 0:
            self.store.create_full_text_index_mapping(prop, index, importance)
            self.report.record(
                EntityKind.FULL_TEXT_INDEX_MAPPING,
                label,
                Action.CREATED,
                detail=f"level {importance}",
            )
            logger.info(
                "Mapped managed property into full-text index",
                managed_property=prop.name,
                index=index.name,
                level=importance,
            )
        elif mapping is not None and importance == 0:
            self.store.delete_full_text_index_mapping(mapping)
            self.report.record(EntityKind.FULL_TEXT_INDEX_MAPPING, label, Action.REMOVED)
            logger.info(
                "Unmapped managed property from full-text index",
                managed_property=prop.name,
                index=index.name,
            )
        elif mapping is not None and mapping.importance != importance:
            self.store.update_full_text_index_mapping(mapping, importance)
            self.report.record(
                EntityKind.FULL_TEXT_INDEX_MAPPING,
                label,
                Action.UPDATED,
                detail=f"level {mapping.importance} -> {importance}",
            )
            logger.info(
                "Changed full-text importance",
                managed_property=prop.name,
                index=index.name,
                level=importance,
            )

    def _ensure_result_fallback(self, prop: ManagedProperty) -> ManagedProperty:
        """Dynamic summaries need a fallback source; default it to the property itself."""
        if prop.summary_mode != SummaryMode.DYNAMIC or prop.result_fallback is not None:
            return prop
        self.store.update_managed_property(prop, {"result_fallback": prop.name})
        logger.info("Set result fallback to self", managed_property=prop.name)
        return self.store.get_managed_property(prop.name) or prop

    def remove(self, name: str) -> None:
        """Delete the property; the store drops its mappings with it."""
        prop = self.store.get_managed_property(name)
        if prop is None:
            self.report.record(EntityKind.MANAGED_PROPERTY, name, Action.ABSENT)
            logger.debug("Managed property already absent", managed_property=name)
            return
        self.store.delete_managed_property(prop)
        self.report.record(EntityKind.MANAGED_PROPERTY, name, Action.REMOVED)
        logger.info("Removed managed property", managed_property=name)
