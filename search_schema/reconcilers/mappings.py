"""Crawled-to-managed property mapping reconciliation.

Unlike every other entity kind, mappings are fully declarative: mappings a
managed property has in the store but not in the document are pruned.
"""

from typing import Iterable, Set, Tuple

import structlog

from search_schema.exceptions import CrawledPropertyNotFound, ManagedPropertyNotFound
from search_schema.models import Action, EntityKind
from search_schema.reconcilers.base import BaseReconciler
from search_schema.reconcilers.crawled_property import find_crawled_property

logger = structlog.get_logger(__name__)

CrawledKey = Tuple[str, str]


def _label(managed_name: str, crawled_name: str, category: str) -> str:
    return f"{category}:{crawled_name} -> {managed_name}"


class MappingReconciler(BaseReconciler):
    def create_mapping(self, managed_name: str, crawled_name: str, category: str) -> None:
        """Map a crawled property into a managed property if not already mapped.

        Raises:
            CrawledPropertyNotFound: If (crawled_name, category) does not exist.
            AmbiguousCrawledProperty: If it matches several crawled properties.
            ManagedPropertyNotFound: If the managed property does not exist.
        """
        label = _label(managed_name, crawled_name, category)
        crawled = find_crawled_property(self.store, crawled_name, category)
        if crawled is None:
            raise CrawledPropertyNotFound(crawled_name, category)

        mapped = self.store.get_mapped_managed_properties(crawled)
        if any(prop.name == managed_name for prop in mapped):
            self.report.record(EntityKind.MAPPING, label, Action.UNCHANGED)
            logger.debug("Mapping exists", mapping=label)
            return

        prop = self.store.get_managed_property(managed_name)
        if prop is None:
            raise ManagedPropertyNotFound(managed_name)
        self.store.create_mapping(crawled, prop)
        self.report.record(EntityKind.MAPPING, label, Action.CREATED)
        logger.info("Created mapping", mapping=label)

    def remove_mapping(self, managed_name: str, crawled_name: str, category: str) -> None:
        """Remove a mapping; missing endpoints or mapping are a no-op."""
        label = _label(managed_name, crawled_name, category)
        prop = self.store.get_managed_property(managed_name)
        crawled = find_crawled_property(self.store, crawled_name, category)
        if prop is None or crawled is None:
            self.report.record(EntityKind.MAPPING, label, Action.ABSENT)
            logger.debug("Mapping endpoint already absent", mapping=label)
            return

        mapped = self.store.get_mapped_managed_properties(crawled)
        if not any(p.name == managed_name for p in mapped):
            self.report.record(EntityKind.MAPPING, label, Action.ABSENT)
            logger.debug("Mapping already absent", mapping=label)
            return
        self.store.delete_mapping(crawled, prop)
        self.report.record(EntityKind.MAPPING, label, Action.REMOVED)
        logger.info("Removed mapping", mapping=label)

    def reconcile_all(self, managed_name: str, desired: Iterable[CrawledKey]) -> None:
        """Make the managed property's mappings exactly ``desired``.

        ``desired`` holds (crawled name, category) pairs. Every declared
        mapping is created first, then undeclared ones are removed.
        """
        wanted: Set[CrawledKey] = set()
        for crawled_name, category in desired:
            wanted.add((crawled_name, category))
            self.create_mapping(managed_name, crawled_name, category)

        prop = self.store.get_managed_property(managed_name)
        if prop is None:
            raise ManagedPropertyNotFound(managed_name)
        stale = [
            cp.key
            for cp in self.store.get_mapped_crawled_properties(prop)
            if cp.key not in wanted
        ]
        for crawled_name, category in dict.fromkeys(stale):
            self.remove_mapping(managed_name, crawled_name, category)
