"""Floating IP lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..models.resource import (
    CLUSTER_ID_TAG_PREFIX,
    PROW_CLUSTER_TAG_PREFIX,
    Resource,
    cluster_id_from_tags,
    parse_timestamp,
    tag_set,
)
from .base import BaseKindLister


@dataclass(frozen=True)
class FloatingIP(Resource):
    """Neutron floating IP. Its name is the floating address."""

    kind = "floating ip"

    def delete(self) -> None:
        self.client.delete_ip(self.id, ignore_missing=False)


class FloatingIPLister(BaseKindLister):
    """Lister for Neutron floating IPs."""

    resource_class = FloatingIP

    def _iter_resources(self) -> Iterator[FloatingIP]:
        for ip in self.client.ips():
            tags = getattr(ip, "tags", None)
            yield FloatingIP(
                client=self.client,
                id=ip.id,
                name=ip.floating_ip_address or "",
                timestamp=parse_timestamp(ip.created_at),
                cluster_id=cluster_id_from_tags(tags, CLUSTER_ID_TAG_PREFIX, PROW_CLUSTER_TAG_PREFIX),
                tags=tag_set(tags),
            )
