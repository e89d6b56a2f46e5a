"""In-process metadata store.

Holds the whole store state in dictionaries and journals every mutation so
callers can verify that a reconciliation run wrote nothing.
"""

import logging
from dataclasses import asdict, replace
from typing import Any, Dict, List, Optional, Tuple

from search_schema.exceptions import StoreError
from search_schema.store.base import (
    FULL_TEXT_INDEX_FIELDS,
    MANAGED_PROPERTY_FIELDS,
    CrawledProperty,
    CrawledPropertyCategory,
    FullTextIndex,
    FullTextIndexMapping,
    ManagedProperty,
    MetadataStore,
)

logger = logging.getLogger(__name__)

DEFAULT_INDEX_NAME = "DefaultFullTextIndex"

MappingKey = Tuple[Tuple[str, str], str]


class InMemoryMetadataStore(MetadataStore):
    """Metadata store kept entirely in memory."""

    def __init__(self, default_index: Optional[str] = DEFAULT_INDEX_NAME) -> None:
        self.indexes: Dict[str, FullTextIndex] = {}
        self.managed_properties: Dict[str, ManagedProperty] = {}
        self.full_text_mappings: Dict[Tuple[str, str], FullTextIndexMapping] = {}
        self.categories: Dict[str, CrawledPropertyCategory] = {}
        self.crawled_properties: List[CrawledProperty] = []
        self.mappings: List[MappingKey] = []
        self.mutations: List[Tuple[str, ...]] = []
        if default_index:
            self.indexes[default_index] = FullTextIndex(
                name=default_index,
                description="Default full-text index",
                is_default=True,
            )

    def _record(self, operation: str, *key: str) -> None:
        self.mutations.append((operation, *key))
        logger.debug(f"Store mutation: {operation} {' / '.join(key)}")

    def reset_journal(self) -> None:
        self.mutations.clear()

    @staticmethod
    def _check_fields(changes: Dict[str, Any], allowed: frozenset, kind: str) -> None:
        unknown = set(changes) - allowed
        if unknown:
            raise StoreError(
                f"Cannot update {kind} fields: {sorted(unknown)}",
                operation=f"update_{kind}",
            )

    # Full-text indexes
    def list_full_text_indexes(self) -> List[FullTextIndex]:
        return list(self.indexes.values())

    def get_full_text_index(self, name: str) -> Optional[FullTextIndex]:
        return self.indexes.get(name)

    def create_full_text_index(
        self, name: str, description: str, stemming_enabled: bool
    ) -> FullTextIndex:
        if name in self.indexes:
            raise StoreError(
                f"Full-text index '{name}' already exists",
                operation="create_full_text_index",
            )
        index = FullTextIndex(
            name=name, description=description, stemming_enabled=stemming_enabled
        )
        self.indexes[name] = index
        self._record("create_full_text_index", name)
        return index

    def update_full_text_index(
        self, index: FullTextIndex, changes: Dict[str, Any]
    ) -> None:
        self._check_fields(changes, FULL_TEXT_INDEX_FIELDS, "full_text_index")
        current = self.indexes[index.name]
        self.indexes[index.name] = replace(current, **changes)
        self._record("update_full_text_index", index.name)

    def delete_full_text_index(self, index: FullTextIndex) -> None:
        current = self.indexes.get(index.name)
        if current is None:
            return
        if current.is_default:
            raise StoreError(
                "The default full-text index cannot be deleted",
                operation="delete_full_text_index",
            )
        del self.indexes[index.name]
        for key in [k for k in self.full_text_mappings if k[1] == index.name]:
            del self.full_text_mappings[key]
        self._record("delete_full_text_index", index.name)

    # Managed properties
    def get_managed_property(self, name: str) -> Optional[ManagedProperty]:
        return self.managed_properties.get(name)

    def create_managed_property(self, name: str, type_code: int) -> ManagedProperty:
        if name in self.managed_properties:
            raise StoreError(
                f"Managed property '{name}' already exists",
                operation="create_managed_property",
            )
        prop = ManagedProperty(name=name, type=type_code)
        self.managed_properties[name] = prop
        self._record("create_managed_property", name)
        return prop

    def update_managed_property(
        self, prop: ManagedProperty, changes: Dict[str, Any]
    ) -> None:
        self._check_fields(changes, MANAGED_PROPERTY_FIELDS, "managed_property")
        current = self.managed_properties[prop.name]
        self.managed_properties[prop.name] = replace(current, **changes)
        self._record("update_managed_property", prop.name)

    def delete_managed_property(self, prop: ManagedProperty) -> None:
        if prop.name not in self.managed_properties:
            return
        del self.managed_properties[prop.name]
        for key in [k for k in self.full_text_mappings if k[0] == prop.name]:
            del self.full_text_mappings[key]
        self.mappings = [m for m in self.mappings if m[1] != prop.name]
        self._record("delete_managed_property", prop.name)

    # Full-text index mappings
    def get_full_text_index_mapping(
        self, prop: ManagedProperty, index: FullTextIndex
    ) -> Optional[FullTextIndexMapping]:
        return self.full_text_mappings.get((prop.name, index.name))

    def create_full_text_index_mapping(
        self, prop: ManagedProperty, index: FullTextIndex, importance: int
    ) -> FullTextIndexMapping:
        mapping = FullTextIndexMapping(
            managed_property=prop.name,
            full_text_index=index.name,
            importance=importance,
        )
        self.full_text_mappings[(prop.name, index.name)] = mapping
        self._record("create_full_text_index_mapping", prop.name, index.name)
        return mapping

    def update_full_text_index_mapping(
        self, mapping: FullTextIndexMapping, importance: int
    ) -> None:
        key = (mapping.managed_property, mapping.full_text_index)
        self.full_text_mappings[key] = replace(mapping, importance=importance)
        self._record("update_full_text_index_mapping", *key)

    def delete_full_text_index_mapping(self, mapping: FullTextIndexMapping) -> None:
        key = (mapping.managed_property, mapping.full_text_index)
        if self.full_text_mappings.pop(key, None) is not None:
            self._record("delete_full_text_index_mapping", *key)

    # Crawled property categories
    def get_category(self, name: str) -> Optional[CrawledPropertyCategory]:
        return self.categories.get(name)

    def create_category(self, name: str, property_set: str) -> CrawledPropertyCategory:
        if name in self.categories:
            raise StoreError(
                f"Category '{name}' already exists", operation="create_category"
            )
        category = CrawledPropertyCategory(name=name, property_sets=(property_set,))
        self.categories[name] = category
        self._record("create_category", name)
        return category

    def add_property_set(self, category: str, property_set: str) -> None:
        """Associate an extra property set with a category (platform quirk)."""
        current = self.categories[category]
        self.categories[category] = replace(
            current, property_sets=current.property_sets + (property_set,)
        )
        self._record("add_property_set", category, property_set)

    # Crawled properties
    def find_crawled_properties(
        self, name: str, category: Optional[str] = None
    ) -> List[CrawledProperty]:
        return [
            cp
            for cp in self.crawled_properties
            if cp.name == name and (category is None or cp.category == category)
        ]

    def create_crawled_property(
        self, name: str, category: str, type_code: int, property_set: str
    ) -> CrawledProperty:
        if category not in self.categories:
            raise StoreError(
                f"Category '{category}' does not exist",
                operation="create_crawled_property",
            )
        crawled = CrawledProperty(
            name=name, category=category, type=type_code, property_set=property_set
        )
        self.crawled_properties.append(crawled)
        self._record("create_crawled_property", category, name)
        return crawled

    def count_crawled_properties(self, category: str, property_set: str) -> int:
        return sum(
            1
            for cp in self.crawled_properties
            if cp.category == category and cp.property_set == property_set
        )

    # Crawled-to-managed mappings
    def get_mapped_crawled_properties(
        self, prop: ManagedProperty
    ) -> List[CrawledProperty]:
        keys = [m[0] for m in self.mappings if m[1] == prop.name]
        return [cp for key in keys for cp in self.crawled_properties if cp.key == key]

    def get_mapped_managed_properties(
        self, crawled: CrawledProperty
    ) -> List[ManagedProperty]:
        return [
            self.managed_properties[m[1]]
            for m in self.mappings
            if m[0] == crawled.key and m[1] in self.managed_properties
        ]

    def create_mapping(self, crawled: CrawledProperty, prop: ManagedProperty) -> None:
        key = (crawled.key, prop.name)
        if key not in self.mappings:
            self.mappings.append(key)
            self._record("create_mapping", prop.name, *crawled.key)

    def delete_mapping(self, crawled: CrawledProperty, prop: ManagedProperty) -> None:
        key = (crawled.key, prop.name)
        if key in self.mappings:
            self.mappings.remove(key)
            self._record("delete_mapping", prop.name, *crawled.key)

    # Serialization
    def to_dict(self) -> Dict[str, Any]:
        return {
            "full_text_indexes": [asdict(i) for i in self.indexes.values()],
            "managed_properties": [asdict(p) for p in self.managed_properties.values()],
            "full_text_index_mappings": [
                asdict(m) for m in self.full_text_mappings.values()
            ],
            "categories": [
                {"name": c.name, "property_sets": list(c.property_sets)}
                for c in self.categories.values()
            ],
            "crawled_properties": [asdict(cp) for cp in self.crawled_properties],
            "mappings": [
                {"crawled_property": name, "category": category, "managed_property": mp}
                for (name, category), mp in self.mappings
            ],
        }

    def load_dict(self, data: Dict[str, Any]) -> None:
        """Replace the current state with a previously serialized one."""
        self.indexes = {
            i["name"]: FullTextIndex(**i) for i in data.get("full_text_indexes", [])
        }
        self.managed_properties = {
            p["name"]: ManagedProperty(**p) for p in data.get("managed_properties", [])
        }
        self.full_text_mappings = {
            (m["managed_property"], m["full_text_index"]): FullTextIndexMapping(**m)
            for m in data.get("full_text_index_mappings", [])
        }
        self.categories = {
            c["name"]: CrawledPropertyCategory(
                name=c["name"], property_sets=tuple(c.get("property_sets", []))
            )
            for c in data.get("categories", [])
        }
        self.crawled_properties = [
            CrawledProperty(**cp) for cp in data.get("crawled_properties", [])
        ]
        self.mappings = [
            ((m["crawled_property"], m["category"]), m["managed_property"])
            for m in data.get("mappings", [])
        ]
