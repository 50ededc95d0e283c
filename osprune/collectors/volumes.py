"""Volume lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Tuple

from openstack import exceptions

from ..errors import DeleteError
from ..models.resource import Resource, parse_timestamp
from .base import BaseKindLister

# Volume metadata key set by the Cinder CSI driver
CLUSTER_METADATA_KEY = "cinder.csi.openstack.org/cluster"

# Attachment API microversion needed to delete attachments
ATTACHMENT_MICROVERSION = "3.44"


def delete_attachment(client: Any, attachment_id: str) -> None:
    """Delete a volume attachment using the attachments API.

    Raises:
        openstack.exceptions.SDKException: If the service rejected the call
    """
    response = client.delete(f"/attachments/{attachment_id}", microversion=ATTACHMENT_MICROVERSION)
    exceptions.raise_from_response(response)


@dataclass(frozen=True)
class Volume(Resource):
    """Cinder volume.

    Attributes:
        attachments: Attachment ids live at listing time
    """

    kind = "volume"

    attachments: Tuple[str, ...] = ()

    def delete(self) -> None:
        """Detach the volume, then delete it together with its snapshots.

        Raises:
            DeleteError: If an attachment could not be removed; no delete is issued
        """
        for attachment_id in self.attachments:
            try:
                delete_attachment(self.client, attachment_id)
            except Exception as e:
                raise DeleteError(f"cannot delete attachment {attachment_id} of volume {self.id}: {e}") from e
        self.client.delete_volume(self.id, ignore_missing=False, cascade=True)


class VolumeLister(BaseKindLister):
    """Lister for Cinder volumes."""

    resource_class = Volume

    def _iter_resources(self) -> Iterator[Volume]:
        for volume in self.client.volumes(details=True):
            metadata = volume.metadata or {}
            attachments = tuple(
                attachment["attachment_id"]
                for attachment in volume.attachments or []
                if attachment.get("attachment_id")
            )
            yield Volume(
                client=self.client,
                id=volume.id,
                name=volume.name or "",
                timestamp=parse_timestamp(volume.created_at),
                cluster_id=metadata.get(CLUSTER_METADATA_KEY) or None,
                attachments=attachments,
            )
