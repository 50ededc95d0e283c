"""Security group lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..models.resource import Resource, cluster_id_from_tags, parse_timestamp, tag_set
from .base import BaseKindLister


@dataclass(frozen=True)
class SecurityGroup(Resource):
    kind = "security group"

    def delete(self) -> None:
        self.client.delete_security_group(self.id, ignore_missing=False)


class SecurityGroupLister(BaseKindLister):
    """Lister for Neutron security groups of the current project."""

    resource_class = SecurityGroup

    def _iter_resources(self) -> Iterator[SecurityGroup]:
        for group in self.client.security_groups():
            tags = getattr(group, "tags", None)
            yield SecurityGroup(
                client=self.client,
                id=group.id,
                name=group.name or "",
                timestamp=parse_timestamp(group.created_at),
                cluster_id=cluster_id_from_tags(tags),
                tags=tag_set(tags),
            )
