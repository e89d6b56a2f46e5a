"""Models for reconciliation runs.

Public API:
    EntityKind: Kind of schema entity a reconciliation step touched
    Action: What a reconciliation step did to the entity
    ReconcileAction: One recorded step
    SyncReport: Everything a deploy or undeploy run did
    ManagedPropertySettings: Desired managed property state, None meaning "leave as is"
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class EntityKind(str, Enum):
    """Kind of schema entity."""

    FULL_TEXT_INDEX = "full-text index"
    MANAGED_PROPERTY = "managed property"
    FULL_TEXT_INDEX_MAPPING = "full-text index mapping"
    CATEGORY = "crawled property category"
    CRAWLED_PROPERTY = "crawled property"
    MAPPING = "crawled-to-managed mapping"


class Action(str, Enum):
    """Outcome of a single reconciliation step."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REMOVED = "removed"
    ABSENT = "absent"  # nothing to remove
    SKIPPED = "skipped"


class RunMode(str, Enum):
    DEPLOY = "deploy"
    UNDEPLOY = "undeploy"


@dataclass(frozen=True)
class ReconcileAction:
    kind: EntityKind
    name: str
    action: Action
    detail: Optional[str] = None


@dataclass
class SyncReport:
    """Result of a reconciliation run.

    Contains every step taken plus, for undeploy, the crawled properties and
    categories that must be removed by hand.
    """

    mode: RunMode = RunMode.DEPLOY
    actions: List[ReconcileAction] = field(default_factory=list)
    stale_crawled_properties: List[Tuple[str, str]] = field(default_factory=list)
    stale_categories: List[str] = field(default_factory=list)

    def record(
        self,
        kind: EntityKind,
        name: str,
        action: Action,
        detail: Optional[str] = None,
    ) -> ReconcileAction:
        entry = ReconcileAction(kind=kind, name=name, action=action, detail=detail)
        self.actions.append(entry)
        return entry

    def add_stale_crawled_property(self, category: str, name: str) -> None:
        if (category, name) not in self.stale_crawled_properties:
            self.stale_crawled_properties.append((category, name))
        if category not in self.stale_categories:
            self.stale_categories.append(category)

    def filter(
        self, kind: Optional[EntityKind] = None, action: Optional[Action] = None
    ) -> List[ReconcileAction]:
        return [
            a
            for a in self.actions
            if (kind is None or a.kind == kind) and (action is None or a.action == action)
        ]

    def counts(self) -> Dict[Tuple[EntityKind, Action], int]:
        return dict(Counter((a.kind, a.action) for a in self.actions))

    @property
    def changed(self) -> bool:
        return any(
            a.action in (Action.CREATED, Action.UPDATED, Action.REMOVED)
            for a in self.actions
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for structured output."""
        return {
            "mode": self.mode.value,
            "actions": [
                {
                    "kind": a.kind.value,
                    "name": a.name,
                    "action": a.action.value,
                    "detail": a.detail,
                }
                for a in self.actions
            ],
            "stale_crawled_properties": [
                {"category": c, "name": n} for c, n in self.stale_crawled_properties
            ],
            "stale_categories": list(self.stale_categories),
        }


@dataclass(frozen=True)
class ManagedPropertySettings:
    """Desired state of a managed property.

    Every optional field uses None for "not declared"; only declared fields
    take part in the diff against the store.
    """

    name: str
    type: str
    description: Optional[str] = None
    level: Optional[int] = None
    query: Optional[bool] = None
    refine: Optional[bool] = None
    stemming: Optional[bool] = None
    merge: Optional[bool] = None
    sort: Optional[str] = None
    summary: Optional[str] = None

    @property
    def importance(self) -> int:
        """Full-text importance; an undeclared level means unmapped."""
        return 0 if self.level is None else self.level
