"""Pydantic models for the desired-state schema document.

A document lists full-text indexes; each index declares its managed properties,
and each managed property declares the crawled properties mapped into it.
"""

from typing import Any, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from search_schema.enum_registry import parse_bool
from search_schema.exceptions import InvalidEnumValue
from search_schema.models import ManagedPropertySettings


def _boolean_literal(value: Any) -> Optional[bool]:
    if value is None:
        return None
    try:
        return parse_bool(value)
    except InvalidEnumValue as e:
        raise ValueError(f"{e.message}, expected one of: {', '.join(e.legal_values)}") from e


class CrawledPropertySpec(BaseModel):
    """
    A crawled property mapped into the enclosing managed property.

    Fields:
        name: Crawled property name, unique only within its category.
        category: Category the crawled property belongs to.
        type: Variant type name, only needed when the property is new.
    """

    name: str = Field(..., min_length=1, description="Crawled property name.")
    category: str = Field(..., min_length=1, description="Crawled property category.")
    type: Optional[str] = Field(
        None, description="Crawled property type, required only at creation."
    )

    model_config = ConfigDict(extra="forbid")


class ManagedPropertySpec(BaseModel):
    """
    A managed property declared inside a full-text index.

    Fields left unset keep whatever value the store currently holds.
    """

    name: str = Field(..., min_length=1, description="Managed property name.")
    type: str = Field(..., min_length=1, description="Managed property type name.")
    description: Optional[str] = None
    sort: Optional[str] = Field(None, description="disabled, enabled or latent.")
    query: Optional[bool] = None
    refine: Optional[bool] = None
    stemming: Optional[bool] = None
    merge: Optional[bool] = None
    summary: Optional[str] = Field(None, description="disabled, static or dynamic.")
    level: Optional[int] = Field(
        None, description="Full-text importance 1-7, 0 or absent for unmapped."
    )
    crawled_properties: List[CrawledPropertySpec] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("query", "refine", "stemming", "merge", mode="before")
    @classmethod
    def parse_boolean(cls, v: Any) -> Optional[bool]:
        return _boolean_literal(v)

    def to_settings(self) -> ManagedPropertySettings:
        return ManagedPropertySettings(
            name=self.name,
            type=self.type,
            description=self.description,
            level=self.level,
            query=self.query,
            refine=self.refine,
            stemming=self.stemming,
            merge=self.merge,
            sort=self.sort,
            summary=self.summary,
        )


class FullTextIndexSpec(BaseModel):
    """
    A full-text index and the managed properties declared under it.

    An empty name stands for the store's default full-text index.
    """

    name: str = Field("", description="Index name, empty for the default index.")
    description: Optional[str] = None
    stemming: Optional[bool] = None
    managed_properties: List[ManagedPropertySpec] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("stemming", mode="before")
    @classmethod
    def parse_boolean(cls, v: Any) -> Optional[bool]:
        return _boolean_literal(v)

    @property
    def is_default(self) -> bool:
        return not self.name


class SchemaDocument(BaseModel):
    """Desired search schema, as declared in a schema document."""

    full_text_indexes: List[FullTextIndexSpec] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def iter_managed_properties(
        self,
    ) -> Iterator[Tuple[FullTextIndexSpec, ManagedPropertySpec]]:
        for index in self.full_text_indexes:
            for prop in index.managed_properties:
                yield index, prop
