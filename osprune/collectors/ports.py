"""Port lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from ..models.resource import Resource, cluster_id_from_tags, parse_timestamp, tag_set
from .base import BaseKindLister

# Device id marker of OVN metadata ports
OVN_METADATA_DEVICE_MARKER = "ovnmeta"

# Ports owned by Neutron itself (router interfaces, DHCP, gateways, ...)
CONTROL_PLANE_OWNER_PREFIX = "network:"


@dataclass(frozen=True)
class Port(Resource):
    kind = "port"

    def delete(self) -> None:
        self.client.delete_port(self.id, ignore_missing=False)


def is_independently_deletable(port: Any) -> bool:
    """Tell whether a port can be deleted on its own.

    Control-plane ports and OVN metadata ports are reclaimed together with
    their router or network.
    """
    device_id = port.device_id or ""
    device_owner = port.device_owner or ""
    if OVN_METADATA_DEVICE_MARKER in device_id:
        return False
    return not device_owner.startswith(CONTROL_PLANE_OWNER_PREFIX)


class PortLister(BaseKindLister):
    """Lister for Neutron ports that are not managed by the control plane."""

    resource_class = Port

    def _iter_resources(self) -> Iterator[Port]:
        for port in self.client.ports():
            if not is_independently_deletable(port):
                continue
            tags = getattr(port, "tags", None)
            yield Port(
                client=self.client,
                id=port.id,
                name=port.name or "",
                timestamp=parse_timestamp(port.created_at),
                cluster_id=cluster_id_from_tags(tags),
                tags=tag_set(tags),
            )
