"""Property set resolution for crawled property categories.

A category may be associated with several property sets. New crawled
properties go into the set that already holds most of the category's
crawled properties, so they stay co-located with the majority.
"""

from typing import Dict

import structlog

from search_schema.exceptions import InvalidParameter, UnknownCategory
from search_schema.store.base import MetadataStore

logger = structlog.get_logger(__name__)


class PropertySetResolver:
    """Memoizes the chosen property set per category for one run.

    Counting requires enumerating crawled properties, so each category is
    resolved at most once; later population changes do not move the choice.
    """

    def __init__(self, store: MetadataStore) -> None:
        self.store = store
        self._cache: Dict[str, str] = {}

    def resolve(self, category: str) -> str:
        if category in self._cache:
            return self._cache[category]

        found = self.store.get_category(category)
        if found is None:
            raise UnknownCategory(category)
        if not found.property_sets:
            raise InvalidParameter(
                f"Category '{category}' has no property set",
                parameter="property_set",
                entity=category,
            )

        counts = {
            property_set: self.store.count_crawled_properties(category, property_set)
            for property_set in found.property_sets
        }
        # max() keeps the first property set on ties. This mirrors the
        # historical selection rule and may be accidental rather than policy.
        chosen = max(found.property_sets, key=lambda ps: counts[ps])
        self._cache[category] = chosen
        logger.debug(
            "Resolved property set", category=category, property_set=chosen, counts=counts
        )
        return chosen

    def clear(self) -> None:
        self._cache.clear()
