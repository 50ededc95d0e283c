"""Network lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator

from ..models.resource import Resource, cluster_id_from_tags, parse_timestamp, tag_set
from .base import BaseKindLister

# Substrings of shared infrastructure network names that are never pruned
INFRASTRUCTURE_NETWORK_MARKERS = (
    "lb-mgmt-net",
    "octavia-provider-net",
    "hostonly",
    "external",
    "sahara-access",
    "mellanox",
    "intel",
    "public",
    "provider",
)


@dataclass(frozen=True)
class Network(Resource):
    kind = "network"

    def delete(self) -> None:
        self.client.delete_network(self.id, ignore_missing=False)


class NetworkLister(BaseKindLister):
    """Lister for Neutron networks."""

    resource_class = Network

    def _iter_resources(self) -> Iterator[Network]:
        for network in self.client.networks():
            tags = getattr(network, "tags", None)
            yield Network(
                client=self.client,
                id=network.id,
                name=network.name or "",
                timestamp=parse_timestamp(network.created_at),
                cluster_id=cluster_id_from_tags(tags),
                tags=tag_set(tags),
            )


def build_network_index(networks: Iterable[Resource]) -> Dict[str, Resource]:
    """Index networks by cluster id.

    Drains the iterable completely. Networks without cluster id are skipped;
    when several networks share a cluster id the last one listed wins.

    Args:
        networks: Network resources

    Returns:
        Mapping of cluster id to network
    """
    index: Dict[str, Resource] = {}
    for network in networks:
        if network.cluster_id:
            index[network.cluster_id] = network
    return index
