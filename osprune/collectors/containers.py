"""Object storage container lister."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import islice
from typing import Any, Iterable, Iterator, Mapping, Optional
from urllib.parse import quote

from openstack import exceptions

from ..errors import DeleteError
from ..models.resource import UNKNOWN_TIMESTAMP, Resource
from .base import BaseKindLister

logger = logging.getLogger(__name__)

# Objects removed per bulk-delete request
OBJECT_PAGE_SIZE = 50

# Container metadata set by the installer (X-Container-Meta-Openshiftclusterid)
CLUSTER_METADATA_KEY = "openshiftclusterid"


def container_cluster_id(metadata: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Look up the cluster id in container metadata, ignoring key case."""
    for key, value in (metadata or {}).items():
        if key.lower() == CLUSTER_METADATA_KEY and value:
            return str(value)
    return None


def bulk_delete(client: Any, container: str, names: Iterable[str]) -> None:
    """Delete objects of a container with a single bulk-delete request.

    Raises:
        openstack.exceptions.SDKException: If the request itself failed
        DeleteError: If the service reported per-object errors
    """
    body = "\n".join(quote(f"{container}/{name}") for name in names)
    response = client.post(
        "",
        params={"bulk-delete": "true"},
        data=body.encode("utf-8"),
        headers={"Content-Type": "text/plain", "Accept": "application/json"},
    )
    exceptions.raise_from_response(response)

    errors = (response.json() or {}).get("Errors") or []
    if errors:
        details = "; ".join(f"cannot delete object {name}: {status}" for name, status in errors)
        raise DeleteError(f"errors occurred during bulk deleting of container {container} objects: {details}")


@dataclass(frozen=True)
class Container(Resource):
    """Swift container. Its id and name are the container name.

    Containers carry no creation time of their own; the timestamp is borrowed
    from the network of the same cluster.
    """

    kind = "container"

    def delete(self) -> None:
        """Empty the container page by page, then delete it.

        A container that no longer exists counts as deleted.
        """
        try:
            self._delete_objects()
        except exceptions.NotFoundException:
            logger.info(f"Container {self.id!r} disappeared while deleting its objects")

        logger.info(f"Deleting container {self.id!r}")
        try:
            self.client.delete_container(self.id, ignore_missing=False)
        except exceptions.NotFoundException:
            logger.info(f"Cannot find container {self.id!r}. It's probably already been deleted.")

    def _delete_objects(self) -> None:
        names = (obj.name for obj in self.client.objects(self.id, limit=OBJECT_PAGE_SIZE))
        while True:
            page = list(islice(names, OBJECT_PAGE_SIZE))
            if not page:
                return
            bulk_delete(self.client, self.id, page)


class ContainerLister(BaseKindLister):
    """Lister for Swift containers.

    Takes a completed network index (cluster id to network, see
    ``networks.build_network_index``) to attach a timestamp to each
    container. Listing without authorization is skipped.

    Attributes:
        network_index: Networks keyed by cluster id
    """

    resource_class = Container
    unavailable_errors = BaseKindLister.unavailable_errors + (exceptions.ForbiddenException,)

    def __init__(self, client: Any, network_index: Mapping[str, Resource]) -> None:
        super().__init__(client)
        self.network_index = network_index

    def _iter_resources(self) -> Iterator[Container]:
        for container in self.client.containers():
            name = container.name
            metadata = self.client.get_container_metadata(name).metadata
            cluster_id = container_cluster_id(metadata)

            network = self.network_index.get(cluster_id) if cluster_id else None
            yield Container(
                client=self.client,
                id=name,
                name=name,
                timestamp=network.timestamp if network is not None else UNKNOWN_TIMESTAMP,
                cluster_id=cluster_id,
            )
