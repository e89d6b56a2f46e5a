"""Metadata store interface and entity snapshots.

The metadata store is the system of record; this package only ever sees
immutable snapshots of its entities and asks the store to change them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FullTextIndex:
    name: str
    description: str = ""
    stemming_enabled: bool = False
    is_default: bool = False


@dataclass(frozen=True)
class ManagedProperty:
    name: str
    type: int
    description: str = ""
    sort_mode: int = 0
    queryable: bool = False
    refinement_enabled: bool = False
    stemming_enabled: bool = False
    merge_crawled_properties: bool = False
    summary_mode: int = 0
    # Name of the managed property used as result fallback, self-reference allowed
    result_fallback: Optional[str] = None


@dataclass(frozen=True)
class CrawledPropertyCategory:
    name: str
    property_sets: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CrawledProperty:
    name: str
    category: str
    type: int
    property_set: str

    @property
    def key(self) -> Tuple[str, str]:
        """(name, category) identity; the name alone is not unique."""
        return (self.name, self.category)


@dataclass(frozen=True)
class FullTextIndexMapping:
    managed_property: str
    full_text_index: str
    importance: int


# Fields a caller may pass to the update operations
FULL_TEXT_INDEX_FIELDS = frozenset({"description", "stemming_enabled"})
MANAGED_PROPERTY_FIELDS = frozenset(
    {
        "description",
        "sort_mode",
        "queryable",
        "refinement_enabled",
        "stemming_enabled",
        "merge_crawled_properties",
        "summary_mode",
        "result_fallback",
    }
)


class MetadataStore(ABC):
    """CRUD and relationship queries per entity kind.

    Lookups return ``None`` (or an empty list) for absent entities. Update
    operations receive only the fields that changed.
    """

    # Full-text indexes
    @abstractmethod
    def list_full_text_indexes(self) -> List[FullTextIndex]: ...

    @abstractmethod
    def get_full_text_index(self, name: str) -> Optional[FullTextIndex]: ...

    @abstractmethod
    def create_full_text_index(
        self, name: str, description: str, stemming_enabled: bool
    ) -> FullTextIndex: ...

    @abstractmethod
    def update_full_text_index(
        self, index: FullTextIndex, changes: Dict[str, Any]
    ) -> None: ...

    @abstractmethod
    def delete_full_text_index(self, index: FullTextIndex) -> None: ...

    # Managed properties
    @abstractmethod
    def get_managed_property(self, name: str) -> Optional[ManagedProperty]: ...

    @abstractmethod
    def create_managed_property(self, name: str, type_code: int) -> ManagedProperty: ...

    @abstractmethod
    def update_managed_property(
        self, prop: ManagedProperty, changes: Dict[str, Any]
    ) -> None: ...

    @abstractmethod
    def delete_managed_property(self, prop: ManagedProperty) -> None:
        """Delete the property together with all of its mappings."""

    # Full-text index mappings
    @abstractmethod
    def get_full_text_index_mapping(
        self, prop: ManagedProperty, index: FullTextIndex
    ) -> Optional[FullTextIndexMapping]: ...

    @abstractmethod
    def create_full_text_index_mapping(
        self, prop: ManagedProperty, index: FullTextIndex, importance: int
    ) -> FullTextIndexMapping: ...

    @abstractmethod
    def update_full_text_index_mapping(
        self, mapping: FullTextIndexMapping, importance: int
    ) -> None: ...

    @abstractmethod
    def delete_full_text_index_mapping(self, mapping: FullTextIndexMapping) -> None: ...

    # Crawled property categories
    @abstractmethod
    def get_category(self, name: str) -> Optional[CrawledPropertyCategory]: ...

    @abstractmethod
    def create_category(
        self, name: str, property_set: str
    ) -> CrawledPropertyCategory: ...

    # Crawled properties
    @abstractmethod
    def find_crawled_properties(
        self, name: str, category: Optional[str] = None
    ) -> List[CrawledProperty]:
        """Return crawled properties named ``name``.

        Adapters may ignore ``category``; callers filter by category again.
        """

    @abstractmethod
    def create_crawled_property(
        self, name: str, category: str, type_code: int, property_set: str
    ) -> CrawledProperty: ...

    @abstractmethod
    def count_crawled_properties(self, category: str, property_set: str) -> int: ...

    # Crawled-to-managed mappings
    @abstractmethod
    def get_mapped_crawled_properties(
        self, prop: ManagedProperty
    ) -> List[CrawledProperty]: ...

    @abstractmethod
    def get_mapped_managed_properties(
        self, crawled: CrawledProperty
    ) -> List[ManagedProperty]: ...

    @abstractmethod
    def create_mapping(self, crawled: CrawledProperty, prop: ManagedProperty) -> None: ...

    @abstractmethod
    def delete_mapping(self, crawled: CrawledProperty, prop: ManagedProperty) -> None: ...

    def close(self) -> None:
        """Release any resources held by the adapter."""
