"""Crawled property and category reconciliation.

Neither kind has an update path: categories carry no mutable attributes and
a crawled property's type is fixed once it exists.
"""

import uuid
from typing import Callable, List, Optional

import structlog

from search_schema import enum_registry
from search_schema.enum_registry import EnumCategory
from search_schema.exceptions import (
    AmbiguousCrawledProperty,
    InvalidParameter,
    UnknownCategory,
)
from search_schema.models import Action, EntityKind, SyncReport
from search_schema.reconcilers.base import BaseReconciler
from search_schema.reconcilers.property_sets import PropertySetResolver
from search_schema.store.base import (
    CrawledProperty,
    CrawledPropertyCategory,
    MetadataStore,
)

logger = structlog.get_logger(__name__)


def _new_property_set() -> str:
    return str(uuid.uuid4())


def find_crawled_properties(
    store: MetadataStore, name: str, category: str
) -> List[CrawledProperty]:
    """Crawled properties matching the (name, category) identity."""
    return [
        cp for cp in store.find_crawled_properties(name, category) if cp.category == category
    ]


def find_crawled_property(
    store: MetadataStore, name: str, category: str
) -> Optional[CrawledProperty]:
    """Single crawled property for (name, category), or None.

    Raises:
        AmbiguousCrawledProperty: If the store holds several matches.
    """
    matches = find_crawled_properties(store, name, category)
    if len(matches) > 1:
        raise AmbiguousCrawledProperty(name, category, len(matches))
    return matches[0] if matches else None


class CategoryReconciler(BaseReconciler):
    def __init__(
        self,
        store: MetadataStore,
        report: Optional[SyncReport] = None,
        property_set_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        super().__init__(store, report)
        self.property_set_factory = property_set_factory or _new_property_set

    def ensure(self, name: str) -> CrawledPropertyCategory:
        category = self.store.get_category(name)
        if category is not None:
            self.report.record(EntityKind.CATEGORY, name, Action.UNCHANGED)
            return category
        property_set = self.property_set_factory()
        category = self.store.create_category(name, property_set)
        self.report.record(
            EntityKind.CATEGORY, name, Action.CREATED, detail=f"property set {property_set}"
        )
        logger.info("Created crawled property category", category=name, property_set=property_set)
        return category


class CrawledPropertyReconciler(BaseReconciler):
    def __init__(
        self,
        store: MetadataStore,
        resolver: PropertySetResolver,
        report: Optional[SyncReport] = None,
    ) -> None:
        super().__init__(store, report)
        self.resolver = resolver

    def ensure(
        self, name: str, type_name: Optional[str], category: str
    ) -> CrawledProperty:
        """Create the crawled property in its category if it does not exist.

        ``type_name`` is only required, and only validated, when creating.
        """
        if self.store.get_category(category) is None:
            raise UnknownCategory(category)
        property_set = self.resolver.resolve(category)
        label = f"{category}:{name}"

        existing = find_crawled_property(self.store, name, category)
        if existing is not None:
            self.report.record(EntityKind.CRAWLED_PROPERTY, label, Action.UNCHANGED)
            logger.debug("Crawled property exists", crawled_property=name, category=category)
            return existing

        if type_name is None:
            raise InvalidParameter(
                f"Crawled property '{name}' does not exist and no type was given",
                parameter="type",
                entity=label,
                recovery_suggestion="Add a type attribute, one of: "
                + ", ".join(enum_registry.legal_names(EnumCategory.CRAWLED_PROPERTY_TYPE)),
            )
        type_code = enum_registry.resolve(EnumCategory.CRAWLED_PROPERTY_TYPE, type_name)
        crawled = self.store.create_crawled_property(name, category, type_code, property_set)
        self.report.record(EntityKind.CRAWLED_PROPERTY, label, Action.CREATED)
        logger.info(
            "Created crawled property",
            crawled_property=name,
            category=category,
            property_set=property_set,
        )
        return crawled
