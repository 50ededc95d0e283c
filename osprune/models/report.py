"""Run report model.

Accumulates the outcome of one pruning pass: what was found stale, what was
deleted and what failed to delete.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .resource import Resource


@dataclass
class ReportEntry:
    """Summary of one resource as it appears in the report.

    Attributes:
        resource_type: Kind label (e.g. "volume")
        resource_id: Resource identifier
        name: Resource name
        created_at: Timestamp the staleness check used
        cluster_id: Owning cluster, if known (optional)
        error: Error that stopped the deletion (failed entries only)
    """

    resource_type: str
    resource_id: str
    name: str
    created_at: datetime
    cluster_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_resource(cls, resource: Resource, error: Optional[BaseException] = None) -> "ReportEntry":
        return cls(
            resource_type=resource.kind,
            resource_id=resource.id,
            name=resource.name,
            created_at=resource.timestamp,
            cluster_id=resource.cluster_id,
            error=str(error) if error is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.resource_type,
            "id": self.resource_id,
            "name": self.name,
        }
        if self.cluster_id:
            data["cluster_id"] = self.cluster_id
        data["created_at"] = self.created_at.isoformat()
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class RunReport:
    """Outcome of a pruning run.

    The three lists are append-only and only written by the consuming loop.

    Attributes:
        timestamp: When the run started
        found: Resources that passed every filter
        deleted: Resources deleted successfully
        failed_to_delete: Resources whose deletion (or a cascade step) failed
    """

    timestamp: datetime
    found: List[ReportEntry] = field(default_factory=list)
    deleted: List[ReportEntry] = field(default_factory=list)
    failed_to_delete: List[ReportEntry] = field(default_factory=list)

    def add_found(self, resource: Resource) -> None:
        self.found.append(ReportEntry.from_resource(resource))

    def add_deleted(self, resource: Resource) -> None:
        self.deleted.append(ReportEntry.from_resource(resource))

    def add_failed_to_delete(self, resource: Resource, error: Optional[BaseException] = None) -> None:
        self.failed_to_delete.append(ReportEntry.from_resource(resource, error))

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_to_delete)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "found": [entry.to_dict() for entry in self.found],
            "deleted": [entry.to_dict() for entry in self.deleted],
            "failed_to_delete": [entry.to_dict() for entry in self.failed_to_delete],
        }
