"""Schema deployment orchestration.

Walks a SchemaDocument and drives the reconcilers in dependency order:

deploy:   full-text index -> managed property (+ index mapping)
          -> categories and crawled properties -> crawled-to-managed mappings
undeploy: managed properties (mappings go with them) -> non-default
          full-text indexes -> report crawled properties left behind

Calls are strictly sequential; a fatal error stops the run where it is and
the store keeps whatever was already applied.
"""

from typing import Callable, Optional

import structlog

from search_schema.models import RunMode, SyncReport
from search_schema.reconcilers import (
    CategoryReconciler,
    CrawledPropertyReconciler,
    FullTextIndexReconciler,
    ManagedPropertyReconciler,
    MappingReconciler,
    PropertySetResolver,
)
from search_schema.schema_models import SchemaDocument
from search_schema.store.base import MetadataStore

logger = structlog.get_logger(__name__)


class SchemaDeployer:
    """Runs deploy and undeploy passes against one metadata store.

    Each run gets a fresh report and property-set cache.
    """

    def __init__(
        self,
        store: MetadataStore,
        property_set_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.store = store
        self.property_set_factory = property_set_factory

    def _start_run(self, mode: RunMode) -> SyncReport:
        report = SyncReport(mode=mode)
        self.resolver = PropertySetResolver(self.store)
        self.indexes = FullTextIndexReconciler(self.store, report)
        self.managed_properties = ManagedPropertyReconciler(self.store, report)
        self.categories = CategoryReconciler(
            self.store, report, property_set_factory=self.property_set_factory
        )
        self.crawled_properties = CrawledPropertyReconciler(
            self.store, self.resolver, report
        )
        self.mappings = MappingReconciler(self.store, report)
        return report

    def deploy(self, document: SchemaDocument) -> SyncReport:
        report = self._start_run(RunMode.DEPLOY)
        log = logger.bind(mode=RunMode.DEPLOY.value)
        log.info("Deploying search schema", indexes=len(document.full_text_indexes))

        for index_spec in document.full_text_indexes:
            index = self.indexes.reconcile(
                index_spec.name, index_spec.description, index_spec.stemming
            )
            for prop_spec in index_spec.managed_properties:
                self.managed_properties.reconcile(prop_spec.to_settings(), index)
                for cp in prop_spec.crawled_properties:
                    self.categories.ensure(cp.category)
                    self.crawled_properties.ensure(cp.name, cp.type, cp.category)
                self.mappings.reconcile_all(
                    prop_spec.name,
                    [(cp.name, cp.category) for cp in prop_spec.crawled_properties],
                )

        log.info("Deploy finished", steps=len(report.actions), changed=report.changed)
        return report

    def undeploy(self, document: SchemaDocument) -> SyncReport:
        report = self._start_run(RunMode.UNDEPLOY)
        log = logger.bind(mode=RunMode.UNDEPLOY.value)
        log.info("Undeploying search schema", indexes=len(document.full_text_indexes))

        for index_spec, prop_spec in document.iter_managed_properties():
            self.managed_properties.remove(prop_spec.name)
            for cp in prop_spec.crawled_properties:
                report.add_stale_crawled_property(cp.category, cp.name)

        for index_spec in document.full_text_indexes:
            if index_spec.is_default:
                continue
            self.indexes.remove(index_spec.name)

        if report.stale_crawled_properties:
            log.warning(
                "Crawled properties are not removed automatically",
                crawled_properties=len(report.stale_crawled_properties),
                categories=len(report.stale_categories),
            )
        log.info("Undeploy finished", steps=len(report.actions), changed=report.changed)
        return report
