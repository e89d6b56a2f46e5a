"""Enumerated type registry.

Fixed, read-only mappings from the human-readable names used in schema
documents to the metadata store's internal codes. Lookups are
case-insensitive and fail with InvalidEnumValue listing the legal names.
"""

from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Mapping

from search_schema.exceptions import InvalidEnumValue


class EnumCategory(str, Enum):
    """Categories of enumerated names understood by the registry."""

    CRAWLED_PROPERTY_TYPE = "crawled property type"
    MANAGED_PROPERTY_TYPE = "managed property type"
    SORT_MODE = "sort mode"
    SUMMARY_MODE = "summary mode"
    BOOLEAN = "boolean"


class CrawledPropertyType(IntEnum):
    """Variant types of crawled properties."""

    DOUBLE = 5
    BOOLEAN = 11
    DECIMAL = 14
    INTEGER = 20
    TEXT = 31
    DATETIME = 64
    BINARY = 65
    GUID = 72


class ManagedPropertyType(IntEnum):
    """Data types of managed properties."""

    TEXT = 1
    INTEGER = 2
    DECIMAL = 3
    DATETIME = 4
    YESNO = 5
    BINARY = 6
    DOUBLE = 7


class SortMode(IntEnum):
    DISABLED = 0
    ENABLED = 1
    LATENT = 2


class SummaryMode(IntEnum):
    DISABLED = 0
    STATIC = 1
    DYNAMIC = 2


def _table(enum_cls: type[IntEnum]) -> Mapping[str, int]:
    return MappingProxyType({member.name.lower(): int(member) for member in enum_cls})


REGISTRY: Mapping[EnumCategory, Mapping[str, Any]] = MappingProxyType(
    {
        EnumCategory.CRAWLED_PROPERTY_TYPE: _table(CrawledPropertyType),
        EnumCategory.MANAGED_PROPERTY_TYPE: _table(ManagedPropertyType),
        EnumCategory.SORT_MODE: _table(SortMode),
        EnumCategory.SUMMARY_MODE: _table(SummaryMode),
        EnumCategory.BOOLEAN: MappingProxyType({"true": True, "false": False}),
    }
)


def legal_names(category: EnumCategory) -> list[str]:
    return sorted(REGISTRY[category])


def resolve(category: EnumCategory, name: Any) -> Any:
    """Return the internal code for ``name`` within ``category``.

    Raises:
        InvalidEnumValue: If ``name`` is not a legal name for the category.
    """
    table = REGISTRY[category]
    key = str(name).strip().lower() if name is not None else ""
    if key not in table:
        raise InvalidEnumValue(name, category.value, table.keys())
    return table[key]


def name_for(category: EnumCategory, code: Any) -> str:
    """Reverse lookup used when reporting store values back to the operator."""
    for name, value in REGISTRY[category].items():
        if value == code:
            return name
    return str(code)


def parse_bool(value: Any) -> bool:
    """Accept real booleans as-is and document literals through the registry."""
    if isinstance(value, bool):
        return value
    return bool(resolve(EnumCategory.BOOLEAN, value))
