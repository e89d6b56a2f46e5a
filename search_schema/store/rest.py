"""HTTP/JSON metadata store adapter.

Talks to a search administration endpoint that exposes the schema of one
search application as REST resources:

    /searchapplications/{app}/fulltextindexes[/{name}]
    /searchapplications/{app}/managedproperties[/{name}]
    /searchapplications/{app}/managedproperties/{name}/fulltextindexes/{index}
    /searchapplications/{app}/managedproperties/{name}/crawledproperties
    /searchapplications/{app}/categories[/{name}]
    /searchapplications/{app}/crawledproperties[/count]
"""

import logging
from dataclasses import fields
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import requests

from search_schema.exceptions import StoreError, wrap_store_exception
from search_schema.store.base import (
    CrawledProperty,
    CrawledPropertyCategory,
    FullTextIndex,
    FullTextIndexMapping,
    ManagedProperty,
    MetadataStore,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _build(cls: Type[T], data: Dict[str, Any]) -> T:
    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    values = {k: v for k, v in data.items() if k in known}
    if "property_sets" in values:
        values["property_sets"] = tuple(values["property_sets"])
    return cls(**values)


class RestMetadataStore(MetadataStore):
    """Metadata store reached over HTTP."""

    def __init__(
        self,
        base_url: str,
        search_application: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (
            f"{base_url.rstrip('/')}/searchapplications/{quote(search_application, safe='')}"
        )
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, *(quote(p, safe="") for p in parts)])

    def _request(
        self,
        method: str,
        operation: str,
        *parts: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Any:
        url = self._url(*parts)
        logger.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(
                method, url, params=params, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise wrap_store_exception(e, operation=operation) from e

        if allow_missing and response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise StoreError(
                f"Metadata store rejected {operation}: {response.text[:200]}",
                operation=operation,
                status_code=response.status_code,
                cause=e,
            ) from e
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Full-text indexes
    def list_full_text_indexes(self) -> List[FullTextIndex]:
        data = self._request("GET", "list_full_text_indexes", "fulltextindexes")
        return [_build(FullTextIndex, item) for item in data or []]

    def get_full_text_index(self, name: str) -> Optional[FullTextIndex]:
        data = self._request(
            "GET", "get_full_text_index", "fulltextindexes", name, allow_missing=True
        )
        return _build(FullTextIndex, data) if data else None

    def create_full_text_index(
        self, name: str, description: str, stemming_enabled: bool
    ) -> FullTextIndex:
        data = self._request(
            "POST",
            "create_full_text_index",
            "fulltextindexes",
            payload={
                "name": name,
                "description": description,
                "stemming_enabled": stemming_enabled,
            },
        )
        return _build(FullTextIndex, data)

    def update_full_text_index(
        self, index: FullTextIndex, changes: Dict[str, Any]
    ) -> None:
        self._request(
            "PATCH",
            "update_full_text_index",
            "fulltextindexes",
            index.name,
            payload=changes,
        )

    def delete_full_text_index(self, index: FullTextIndex) -> None:
        self._request(
            "DELETE",
            "delete_full_text_index",
            "fulltextindexes",
            index.name,
            allow_missing=True,
        )

    # Managed properties
    def get_managed_property(self, name: str) -> Optional[ManagedProperty]:
        data = self._request(
            "GET", "get_managed_property", "managedproperties", name, allow_missing=True
        )
        return _build(ManagedProperty, data) if data else None

    def create_managed_property(self, name: str, type_code: int) -> ManagedProperty:
        data = self._request(
            "POST",
            "create_managed_property",
            "managedproperties",
            payload={"name": name, "type": type_code},
        )
        return _build(ManagedProperty, data)

    def update_managed_property(
        self, prop: ManagedProperty, changes: Dict[str, Any]
    ) -> None:
        self._request(
            "PATCH",
            "update_managed_property",
            "managedproperties",
            prop.name,
            payload=changes,
        )

    def delete_managed_property(self, prop: ManagedProperty) -> None:
        self._request(
            "DELETE",
            "delete_managed_property",
            "managedproperties",
            prop.name,
            allow_missing=True,
        )

    # Full-text index mappings
    def get_full_text_index_mapping(
        self, prop: ManagedProperty, index: FullTextIndex
    ) -> Optional[FullTextIndexMapping]:
        data = self._request(
            "GET",
            "get_full_text_index_mapping",
            "managedproperties",
            prop.name,
            "fulltextindexes",
            index.name,
            allow_missing=True,
        )
        if not data:
            return None
        return FullTextIndexMapping(
            managed_property=prop.name,
            full_text_index=index.name,
            importance=int(data["importance"]),
        )

    def create_full_text_index_mapping(
        self, prop: ManagedProperty, index: FullTextIndex, importance: int
    ) -> FullTextIndexMapping:
        self._request(
            "PUT",
            "create_full_text_index_mapping",
            "managedproperties",
            prop.name,
            "fulltextindexes",
            index.name,
            payload={"importance": importance},
        )
        return FullTextIndexMapping(
            managed_property=prop.name,
            full_text_index=index.name,
            importance=importance,
        )

    def update_full_text_index_mapping(
        self, mapping: FullTextIndexMapping, importance: int
    ) -> None:
        self._request(
            "PATCH",
            "update_full_text_index_mapping",
            "managedproperties",
            mapping.managed_property,
            "fulltextindexes",
            mapping.full_text_index,
            payload={"importance": importance},
        )

    def delete_full_text_index_mapping(self, mapping: FullTextIndexMapping) -> None:
        self._request(
            "DELETE",
            "delete_full_text_index_mapping",
            "managedproperties",
            mapping.managed_property,
            "fulltextindexes",
            mapping.full_text_index,
            allow_missing=True,
        )

    # Crawled property categories
    def get_category(self, name: str) -> Optional[CrawledPropertyCategory]:
        data = self._request(
            "GET", "get_category", "categories", name, allow_missing=True
        )
        return _build(CrawledPropertyCategory, data) if data else None

    def create_category(self, name: str, property_set: str) -> CrawledPropertyCategory:
        data = self._request(
            "POST",
            "create_category",
            "categories",
            payload={"name": name, "property_set": property_set},
        )
        return _build(CrawledPropertyCategory, data)

    # Crawled properties
    def find_crawled_properties(
        self, name: str, category: Optional[str] = None
    ) -> List[CrawledProperty]:
        params = {"name": name}
        if category is not None:
            params["category"] = category
        data = self._request(
            "GET", "find_crawled_properties", "crawledproperties", params=params
        )
        return [_build(CrawledProperty, item) for item in data or []]

    def create_crawled_property(
        self, name: str, category: str, type_code: int, property_set: str
    ) -> CrawledProperty:
        data = self._request(
            "POST",
            "create_crawled_property",
            "crawledproperties",
            payload={
                "name": name,
                "category": category,
                "type": type_code,
                "property_set": property_set,
            },
        )
        return _build(CrawledProperty, data)

    def count_crawled_properties(self, category: str, property_set: str) -> int:
        data = self._request(
            "GET",
            "count_crawled_properties",
            "crawledproperties",
            "count",
            params={"category": category, "property_set": property_set},
        )
        return int(data["count"])

    # Crawled-to-managed mappings
    def get_mapped_crawled_properties(
        self, prop: ManagedProperty
    ) -> List[CrawledProperty]:
        data = self._request(
            "GET",
            "get_mapped_crawled_properties",
            "managedproperties",
            prop.name,
            "crawledproperties",
        )
        return [_build(CrawledProperty, item) for item in data or []]

    def get_mapped_managed_properties(
        self, crawled: CrawledProperty
    ) -> List[ManagedProperty]:
        data = self._request(
            "GET",
            "get_mapped_managed_properties",
            "crawledproperties",
            "mappings",
            params={"name": crawled.name, "category": crawled.category},
        )
        return [_build(ManagedProperty, item) for item in data or []]

    def create_mapping(self, crawled: CrawledProperty, prop: ManagedProperty) -> None:
        self._request(
            "POST",
            "create_mapping",
            "managedproperties",
            prop.name,
            "crawledproperties",
            payload={"name": crawled.name, "category": crawled.category},
        )

    def delete_mapping(self, crawled: CrawledProperty, prop: ManagedProperty) -> None:
        self._request(
            "DELETE",
            "delete_mapping",
            "managedproperties",
            prop.name,
            "crawledproperties",
            params={"name": crawled.name, "category": crawled.category},
            allow_missing=True,
        )

    def close(self) -> None:
        self.session.close()
