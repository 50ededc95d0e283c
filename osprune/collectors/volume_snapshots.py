"""Volume snapshot lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..models.resource import Resource, parse_timestamp
from .base import BaseKindLister


@dataclass(frozen=True)
class VolumeSnapshot(Resource):
    kind = "volume snapshot"

    def delete(self) -> None:
        self.client.delete_snapshot(self.id, ignore_missing=False)


class VolumeSnapshotLister(BaseKindLister):
    """Lister for Cinder volume snapshots. Snapshots carry no tags."""

    resource_class = VolumeSnapshot

    def _iter_resources(self) -> Iterator[VolumeSnapshot]:
        for snapshot in self.client.snapshots(details=True):
            yield VolumeSnapshot(
                client=self.client,
                id=snapshot.id,
                name=snapshot.name or "",
                timestamp=parse_timestamp(snapshot.created_at),
            )
