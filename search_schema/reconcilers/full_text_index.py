"""Full-text index reconciliation."""

from typing import Any, Dict, Optional

import structlog

from search_schema.exceptions import NoDefaultIndex
from search_schema.models import Action, EntityKind
from search_schema.reconcilers.base import BaseReconciler
from search_schema.store.base import FullTextIndex

logger = structlog.get_logger(__name__)


class FullTextIndexReconciler(BaseReconciler):
    def default_index(self) -> FullTextIndex:
        """Return the index the store designates as default.

        Raises:
            NoDefaultIndex: If the store reports zero or several defaults.
        """
        defaults = [i for i in self.store.list_full_text_indexes() if i.is_default]
        if len(defaults) != 1:
            raise NoDefaultIndex(len(defaults))
        return defaults[0]

    def reconcile(
        self,
        name: str = "",
        description: Optional[str] = None,
        stemming: Optional[bool] = None,
    ) -> FullTextIndex:
        """Get or create the index and bring the declared fields up to date.

        An empty name targets the store's default index. Fields left as None
        are not compared and never written. An empty description counts as
        undeclared, so a new index gets the generated description.
        """
        index = self.default_index() if not name else self.store.get_full_text_index(name)
        description = description or None

        if index is None:
            index = self.store.create_full_text_index(
                name,
                description or f"Full-text index {name}",
                bool(stemming),
            )
            self.report.record(EntityKind.FULL_TEXT_INDEX, name, Action.CREATED)
            logger.info("Created full-text index", index=name)
            return index

        changes: Dict[str, Any] = {}
        if description is not None and description != index.description:
            changes["description"] = description
        if stemming is not None and stemming != index.stemming_enabled:
            changes["stemming_enabled"] = stemming

        if not changes:
            self.report.record(EntityKind.FULL_TEXT_INDEX, index.name, Action.UNCHANGED)
            logger.debug("Full-text index up to date", index=index.name)
            return index

        self.store.update_full_text_index(index, changes)
        self.report.record(
            EntityKind.FULL_TEXT_INDEX,
            index.name,
            Action.UPDATED,
            detail=", ".join(sorted(changes)),
        )
        logger.info("Updated full-text index", index=index.name, fields=sorted(changes))
        return self.store.get_full_text_index(index.name) or index

    def remove(self, name: str) -> None:
        """Delete the index unless it is missing or the store's default."""
        index = self.store.get_full_text_index(name)
        if index is None:
            self.report.record(EntityKind.FULL_TEXT_INDEX, name, Action.ABSENT)
            logger.debug("Full-text index already absent", index=name)
            return
        if index.is_default:
            self.report.record(
                EntityKind.FULL_TEXT_INDEX, name, Action.SKIPPED, detail="default index"
            )
            logger.debug("Refusing to remove the default full-text index", index=name)
            return
        self.store.delete_full_text_index(index)
        self.report.record(EntityKind.FULL_TEXT_INDEX, name, Action.REMOVED)
        logger.info("Removed full-text index", index=name)
