"""Tests for the exception hierarchy."""

import requests

from search_schema.exceptions import (
    AmbiguousCrawledProperty,
    ConfigurationError,
    DocumentInvalid,
    InvalidConfigurationError,
    InvalidEnumValue,
    InvalidParameter,
    SchemaSyncError,
    StoreConnectionError,
    StoreError,
    TypeImmutableConflict,
    UnknownCategory,
    wrap_store_exception,
)


def test_str_includes_code_context_and_suggestion():
    error = SchemaSyncError(
        "Something failed",
        error_code="E1",
        context={"entity": "Title"},
        recovery_suggestion="Retry",
    )

    assert str(error) == (
        "[E1] Something failed (context: entity=Title) (suggestion: Retry)"
    )


def test_to_dict():
    cause = ValueError("bad")
    error = UnknownCategory("SharePoint", cause=cause)

    data = error.to_dict()

    assert data["error_type"] == "UnknownCategory"
    assert data["error_code"] == "UNKNOWN_CATEGORY"
    assert data["context"] == {"category": "SharePoint"}
    assert data["cause"] == "bad"


def test_invalid_enum_value_carries_legal_set():
    error = InvalidEnumValue("Texty", "managed property type", {"text", "integer"})

    assert isinstance(error, InvalidParameter)
    assert isinstance(error, SchemaSyncError)
    assert error.legal_values == ["integer", "text"]
    assert error.context["value"] == "Texty"
    assert error.recovery_suggestion == "Use one of: integer, text"


def test_type_conflict_message():
    error = TypeImmutableConflict("ProjectCode", "integer", "text")

    assert "cannot change it to 'text'" in error.message
    assert error.error_code == "TYPE_IMMUTABLE_CONFLICT"


def test_ambiguous_crawled_property_context():
    error = AmbiguousCrawledProperty("Title", "SharePoint", 3)
    assert error.context == {"crawled_property": "Title", "category": "SharePoint", "matches": 3}


def test_document_invalid_joins_errors():
    error = DocumentInvalid("Invalid", path="a.xml", errors=["one", "two"])

    assert error.message == "Invalid: one; two"
    assert error.errors == ["one", "two"]
    assert error.context == {"path": "a.xml"}


def test_configuration_errors():
    error = InvalidConfigurationError("bad url", config_section="store")

    assert isinstance(error, ConfigurationError)
    assert error.context == {"config_section": "store"}
    assert error.recovery_suggestion


def test_store_connection_error_strips_credentials():
    error = StoreConnectionError("down", url="https://user:pw@search.example.com")

    assert isinstance(error, StoreError)
    assert error.context["url"] == "search.example.com"


def test_wrap_connection_failure():
    wrapped = wrap_store_exception(
        requests.ConnectionError("Connection aborted"), operation="get_category"
    )

    assert isinstance(wrapped, StoreConnectionError)
    assert wrapped.context["operation"] == "get_category"


def test_wrap_other_failure():
    wrapped = wrap_store_exception(
        requests.RequestException("invalid header"), context={"entity": "Title"}
    )

    assert type(wrapped) is StoreError
    assert wrapped.context == {"entity": "Title"}
    assert isinstance(wrapped.cause, requests.RequestException)
