import itertools
import logging

import pytest

from search_schema.document_loader import parse_xml, validate_document
from search_schema.example_schema import EXAMPLE_DOCUMENT
from search_schema.models import SyncReport
from search_schema.orchestrator import SchemaDeployer
from search_schema.store.memory import InMemoryMetadataStore


# ============================================================================
# Logging isolation
# ============================================================================


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI runs replace root handlers; put the originals back after each test."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration variables so defaults apply."""
    for name in (
        "SCHEMA_STORE_URL",
        "SCHEMA_STORE_API_KEY",
        "SCHEMA_STORE_TIMEOUT",
        "SCHEMA_SEARCH_APPLICATION",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "LOG_FILE",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ============================================================================
# Store and reconciliation fixtures
# ============================================================================


@pytest.fixture
def store():
    """Empty in-memory store seeded only with the default full-text index."""
    return InMemoryMetadataStore()


@pytest.fixture
def report():
    return SyncReport()


@pytest.fixture
def property_set_factory():
    """Deterministic property set ids: ps-1, ps-2, ..."""
    counter = itertools.count(1)
    return lambda: f"ps-{next(counter)}"


@pytest.fixture
def deployer(store, property_set_factory):
    return SchemaDeployer(store, property_set_factory=property_set_factory)


@pytest.fixture
def example_document():
    return validate_document(parse_xml(EXAMPLE_DOCUMENT))


@pytest.fixture
def example_file(tmp_path):
    path = tmp_path / "schema.xml"
    path.write_text(EXAMPLE_DOCUMENT, encoding="utf-8")
    return path
