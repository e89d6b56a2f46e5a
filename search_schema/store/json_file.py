"""JSON file backed metadata store.

Persists the in-memory store state to a single JSON file after every
mutation, which makes offline planning and demos possible without a live
search service.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from search_schema.exceptions import StoreError
from search_schema.store.memory import DEFAULT_INDEX_NAME, InMemoryMetadataStore

logger = logging.getLogger(__name__)


class JsonFileMetadataStore(InMemoryMetadataStore):
    """Manages metadata store state in a JSON file."""

    def __init__(
        self, state_file: Path, default_index: Optional[str] = DEFAULT_INDEX_NAME
    ) -> None:
        """Initialize the store.

        Args:
            state_file: JSON file holding the store state, created if missing
            default_index: Name of the default index seeded into a new store
        """
        super().__init__(default_index=default_index)
        self.state_file = Path(state_file)
        self._load_state()

    def _load_state(self) -> None:
        """Load the store state from disk."""
        if not self.state_file.exists():
            logger.info(f"Initializing new metadata store file {self.state_file}")
            self._save_state()
            return
        try:
            with open(self.state_file, "r") as f:
                self.load_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise StoreError(
                f"Failed to load metadata store file {self.state_file}",
                operation="load",
                cause=e,
            ) from e

    def _save_state(self) -> None:
        """Save the store state to disk."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.state_file, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def _record(self, operation: str, *key: str) -> None:
        super()._record(operation, *key)
        self._save_state()
