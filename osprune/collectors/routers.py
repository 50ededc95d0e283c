"""Router lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Tuple

from ..errors import DeleteError
from ..models.resource import Resource, cluster_id_from_tags, parse_timestamp, tag_set
from .base import BaseKindLister

ROUTER_INTERFACE_OWNER = "network:router_interface"


@dataclass(frozen=True)
class Router(Resource):
    """Neutron router.

    Attributes:
        subnets: Subnets attached through router interfaces, discovered at
            listing time
    """

    kind = "router"

    subnets: Tuple[str, ...] = ()

    def delete(self) -> None:
        """Detach every subnet interface, then delete the router.

        Raises:
            DeleteError: If detaching a subnet failed; the router is left in place
        """
        for subnet_id in self.subnets:
            try:
                self.client.remove_interface_from_router(self.id, subnet_id=subnet_id)
            except Exception as e:
                raise DeleteError(f"cannot detach subnet {subnet_id} from router {self.id}: {e}") from e
        self.client.delete_router(self.id, ignore_missing=False)


class RouterLister(BaseKindLister):
    """Lister for Neutron routers.

    For each router the interface ports are queried so the subnets to detach
    are known before deletion.
    """

    resource_class = Router

    def _iter_resources(self) -> Iterator[Router]:
        for router in self.client.routers():
            tags = getattr(router, "tags", None)
            yield Router(
                client=self.client,
                id=router.id,
                name=router.name or "",
                timestamp=parse_timestamp(router.created_at),
                cluster_id=cluster_id_from_tags(tags),
                tags=tag_set(tags),
                subnets=tuple(self._interface_subnets(router)),
            )

    def _interface_subnets(self, router: Any) -> List[str]:
        subnets: List[str] = []
        for port in self.client.ports(device_id=router.id, device_owner=ROUTER_INTERFACE_OWNER):
            for fixed_ip in port.fixed_ips or []:
                subnet_id = fixed_ip.get("subnet_id")
                if subnet_id:
                    subnets.append(subnet_id)
        return subnets
