from typing import Optional

from search_schema.models import SyncReport
from search_schema.store.base import MetadataStore


class BaseReconciler:
    """Shared wiring for reconcilers: the store they drive and the run report."""

    def __init__(self, store: MetadataStore, report: Optional[SyncReport] = None) -> None:
        self.store = store
        self.report = report if report is not None else SyncReport()
