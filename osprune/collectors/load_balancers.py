"""Load balancer lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..models.resource import Resource, parse_timestamp, tag_set
from .base import BaseKindLister


@dataclass(frozen=True)
class LoadBalancer(Resource):
    """Octavia load balancer.

    Deletion cascades to listeners, pools and members on the service side.
    """

    kind = "load balancer"

    def delete(self) -> None:
        self.client.delete_load_balancer(self.id, ignore_missing=False, cascade=True)


class LoadBalancerLister(BaseKindLister):
    """Lister for Octavia load balancers."""

    resource_class = LoadBalancer

    def _iter_resources(self) -> Iterator[LoadBalancer]:
        for lb in self.client.load_balancers():
            yield LoadBalancer(
                client=self.client,
                id=lb.id,
                name=lb.name or "",
                timestamp=parse_timestamp(lb.created_at),
                tags=tag_set(getattr(lb, "tags", None)),
            )
