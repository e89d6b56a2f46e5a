"""Per-entity reconcilers driving the metadata store toward a declared state."""

from search_schema.reconcilers.crawled_property import (
    CategoryReconciler,
    CrawledPropertyReconciler,
)
from search_schema.reconcilers.full_text_index import FullTextIndexReconciler
from search_schema.reconcilers.managed_property import ManagedPropertyReconciler
from search_schema.reconcilers.mappings import MappingReconciler
from search_schema.reconcilers.property_sets import PropertySetResolver

__all__ = [
    "CategoryReconciler",
    "CrawledPropertyReconciler",
    "FullTextIndexReconciler",
    "ManagedPropertyReconciler",
    "MappingReconciler",
    "PropertySetResolver",
]
