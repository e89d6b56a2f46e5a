"""
Custom Exception Hierarchy for Search Schema Sync

This module provides the exception hierarchy used across the reconciliation
core, the document front end and the store adapters. Every error carries
structured context so the CLI can print the offending value, the legal set
and the entity involved before stopping.
"""

from typing import Any, Dict, Iterable, Optional


class SchemaSyncError(Exception):
    """
    Base exception class for all Search Schema Sync related errors.

    Provides structured error information including context, error codes,
    and optional recovery suggestions.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recovery_suggestion: Optional[str] = None,
    ) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context
            cause: Optional underlying exception that caused this error
            recovery_suggestion: Optional suggestion for error recovery
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.recovery_suggestion = recovery_suggestion

    def __str__(self) -> str:
        """Return a formatted error message with context."""
        result = self.message
        if self.error_code:
            result = f"[{self.error_code}] {result}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            result += f" (context: {context_str})"
        if self.cause:
            result += f" (caused by: {self.cause})"
        if self.recovery_suggestion:
            result += f" (suggestion: {self.recovery_suggestion})"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "recovery_suggestion": self.recovery_suggestion,
        }


def _with_context(kwargs: Dict[str, Any], **values: Any) -> Dict[str, Any]:
    context = kwargs.get("context") or {}
    for key, value in values.items():
        if value is not None:
            context[key] = value
    kwargs["context"] = context
    return kwargs


# Parameter validation
class InvalidParameter(SchemaSyncError):
    """Raised when a reconciler receives a value it cannot apply."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Any = None,
        entity: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        _with_context(kwargs, parameter=parameter, value=value, entity=entity)
        kwargs.setdefault("error_code", "INVALID_PARAMETER")
        super().__init__(message, **kwargs)


class InvalidEnumValue(InvalidParameter):
    """Raised when a name is not part of an enumerated type category."""

    def __init__(
        self,
        value: Any,
        category: str,
        legal_values: Iterable[str],
        **kwargs: Any,
    ) -> None:
        self.value = value
        self.category = category
        self.legal_values = sorted(legal_values)
        kwargs.setdefault("error_code", "INVALID_ENUM_VALUE")
        kwargs.setdefault(
            "recovery_suggestion",
            f"Use one of: {', '.join(self.legal_values)}",
        )
        super().__init__(
            f"'{value}' is not a valid {category}",
            parameter=kwargs.pop("parameter", category),
            value=value,
            **kwargs,
        )


# Entity state conflicts
class TypeImmutableConflict(SchemaSyncError):
    """Raised when a managed property is redeclared with a different type."""

    def __init__(
        self,
        name: str,
        current_type: str,
        requested_type: str,
        **kwargs: Any,
    ) -> None:
        _with_context(
            kwargs,
            managed_property=name,
            current_type=current_type,
            requested_type=requested_type,
        )
        kwargs.setdefault("error_code", "TYPE_IMMUTABLE_CONFLICT")
        kwargs.setdefault(
            "recovery_suggestion",
            "Delete and recreate the managed property manually to change its type",
        )
        super().__init__(
            f"Managed property '{name}' already exists with type "
            f"'{current_type}', cannot change it to '{requested_type}'",
            **kwargs,
        )


class UnknownCategory(SchemaSyncError):
    """Raised when a crawled property refers to a category that does not exist."""

    def __init__(self, category: str, **kwargs: Any) -> None:
        _with_context(kwargs, category=category)
        kwargs.setdefault("error_code", "UNKNOWN_CATEGORY")
        super().__init__(f"Crawled property category '{category}' not found", **kwargs)


class CrawledPropertyNotFound(SchemaSyncError):
    """Raised when a (name, category) pair resolves to no crawled property."""

    def __init__(self, name: str, category: str, **kwargs: Any) -> None:
        _with_context(kwargs, crawled_property=name, category=category)
        kwargs.setdefault("error_code", "CRAWLED_PROPERTY_NOT_FOUND")
        super().__init__(
            f"Crawled property '{name}' not found in category '{category}'", **kwargs
        )


class ManagedPropertyNotFound(SchemaSyncError):
    """Raised when a managed property required for a mapping is missing."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        _with_context(kwargs, managed_property=name)
        kwargs.setdefault("error_code", "MANAGED_PROPERTY_NOT_FOUND")
        super().__init__(f"Managed property '{name}' not found", **kwargs)


class AmbiguousCrawledProperty(SchemaSyncError):
    """Raised when more than one crawled property matches a (name, category) pair."""

    def __init__(self, name: str, category: str, matches: int, **kwargs: Any) -> None:
        _with_context(kwargs, crawled_property=name, category=category, matches=matches)
        kwargs.setdefault("error_code", "AMBIGUOUS_CRAWLED_PROPERTY")
        kwargs.setdefault(
            "recovery_suggestion",
            "Inspect the metadata store; a crawled property identity is duplicated",
        )
        super().__init__(
            f"Found {matches} crawled properties named '{name}' in category '{category}'",
            **kwargs,
        )


class NoDefaultIndex(SchemaSyncError):
    """Raised when the store does not designate exactly one default full-text index."""

    def __init__(self, found: int, **kwargs: Any) -> None:
        _with_context(kwargs, default_indexes_found=found)
        kwargs.setdefault("error_code", "NO_DEFAULT_INDEX")
        super().__init__(
            "Expected exactly one default full-text index in the metadata store",
            **kwargs,
        )


# Document front end
class DocumentInvalid(SchemaSyncError):
    """Raised when the desired-state document is missing required structure."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        errors: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> None:
        self.errors = errors or []
        _with_context(kwargs, path=path)
        kwargs.setdefault("error_code", "DOCUMENT_INVALID")
        if self.errors:
            message = message + ": " + "; ".join(self.errors)
        super().__init__(message, **kwargs)


# Configuration-related exceptions
class ConfigurationError(SchemaSyncError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(
        self, message: str, config_section: Optional[str] = None, **kwargs: Any
    ) -> None:
        _with_context(kwargs, config_section=config_section)
        kwargs.setdefault("error_code", "INVALID_CONFIG")
        kwargs.setdefault(
            "recovery_suggestion", "Check the .env file and environment variables"
        )
        super().__init__(message, **kwargs)


# Metadata store exceptions
class StoreError(SchemaSyncError):
    """Raised when a metadata store call fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        _with_context(kwargs, operation=operation, status_code=status_code)
        kwargs.setdefault("error_code", "STORE_OPERATION_FAILED")
        super().__init__(message, **kwargs)


class StoreConnectionError(StoreError):
    """Raised when the metadata store cannot be reached."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs: Any) -> None:
        if url:
            # Don't include credentials in context
            kwargs = _with_context(kwargs, url=url.split("@")[-1])
        kwargs.setdefault("error_code", "STORE_CONNECTION_FAILED")
        kwargs.setdefault(
            "recovery_suggestion",
            "Check SCHEMA_STORE_URL and that the metadata store is reachable",
        )
        super().__init__(message, **kwargs)


def wrap_store_exception(
    exc: Exception,
    operation: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> StoreError:
    """
    Wrap a transport-level exception in our custom exception hierarchy.

    Args:
        exc: The original exception
        operation: Store operation that was being performed
        context: Optional context information

    Returns:
        StoreError: Wrapped exception with enhanced context
    """
    error_message = str(exc)
    status_code = getattr(getattr(exc, "response", None), "status_code", None)

    if "connection" in error_message.lower() or "timed out" in error_message.lower():
        return StoreConnectionError(
            f"Metadata store unreachable: {error_message}",
            operation=operation,
            context=context,
            cause=exc,
        )
    return StoreError(
        f"Metadata store operation failed: {error_message}",
        operation=operation,
        status_code=status_code,
        context=context,
        cause=exc,
    )
