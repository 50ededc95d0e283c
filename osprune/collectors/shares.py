"""Shared filesystem lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..errors import DeleteError
from ..models.resource import Resource, parse_timestamp
from .base import BaseKindLister

# Share metadata key set by the Manila CSI driver
CLUSTER_METADATA_KEY = "manila.csi.openstack.org/cluster"


@dataclass(frozen=True)
class Share(Resource):
    kind = "share"

    def delete(self) -> None:
        """Delete every snapshot of the share, then the share.

        Raises:
            DeleteError: If a snapshot could not be deleted; the share is kept
        """
        for snapshot in self.client.share_snapshots(details=True, share_id=self.id):
            try:
                self.client.delete_share_snapshot(snapshot.id, ignore_missing=False)
            except Exception as e:
                raise DeleteError(f"cannot delete snapshot {snapshot.id} of share {self.id}: {e}") from e
        self.client.delete_share(self.id, ignore_missing=False)


class ShareLister(BaseKindLister):
    """Lister for Manila shares."""

    resource_class = Share

    def _iter_resources(self) -> Iterator[Share]:
        for share in self.client.shares(details=True):
            metadata = share.metadata or {}
            yield Share(
                client=self.client,
                id=share.id,
                name=share.name or "",
                timestamp=parse_timestamp(share.created_at),
                cluster_id=metadata.get(CLUSTER_METADATA_KEY) or None,
            )
