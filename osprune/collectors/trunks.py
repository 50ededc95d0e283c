"""Trunk lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..models.resource import Resource, cluster_id_from_tags, parse_timestamp, tag_set
from .base import BaseKindLister


@dataclass(frozen=True)
class Trunk(Resource):
    kind = "trunk"

    def delete(self) -> None:
        self.client.delete_trunk(self.id, ignore_missing=False)


class TrunkLister(BaseKindLister):
    resource_class = Trunk

    def _iter_resources(self) -> Iterator[Trunk]:
        for trunk in self.client.trunks():
            tags = getattr(trunk, "tags", None)
            yield Trunk(
                client=self.client,
                id=trunk.id,
                name=trunk.name or "",
                timestamp=parse_timestamp(trunk.created_at),
                cluster_id=cluster_id_from_tags(tags),
                tags=tag_set(tags),
            )
