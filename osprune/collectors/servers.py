"""Compute instance lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..models.resource import Resource, parse_timestamp, tag_set
from .base import BaseKindLister

# Server metadata key set by the installer on cluster machines
CLUSTER_ID_METADATA_KEY = "openshiftClusterID"


@dataclass(frozen=True)
class Server(Resource):
    kind = "server"

    def delete(self) -> None:
        self.client.delete_server(self.id, ignore_missing=False)


class ServerLister(BaseKindLister):
    """Lister for Nova servers.

    Server tags require compute microversion 2.26 or later, which the SDK
    negotiates automatically.
    """

    resource_class = Server

    def _iter_resources(self) -> Iterator[Server]:
        for server in self.client.servers(details=True):
            metadata = server.metadata or {}
            yield Server(
                client=self.client,
                id=server.id,
                name=server.name or "",
                timestamp=parse_timestamp(server.created_at),
                cluster_id=metadata.get(CLUSTER_ID_METADATA_KEY) or None,
                tags=tag_set(getattr(server, "tags", None)),
            )
