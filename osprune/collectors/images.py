"""Image lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..models.resource import Resource, cluster_id_from_tags, parse_timestamp, tag_set
from .base import BaseKindLister

# Name patterns of images uploaded by the installer; other images are never pruned
INSTALLER_IMAGE_PATTERNS = (
    r".{8}-.{5}-.{5}-ignition",
    r".{8}-.{5}-.{5}-rhcos",
    r"bootstrap-ign-.{8}-.{5}-.{5}",
    r"rhcos-.{7,8}-.{5}",
)


@dataclass(frozen=True)
class Image(Resource):
    kind = "image"

    def delete(self) -> None:
        self.client.delete_image(self.id, ignore_missing=False)


class ImageLister(BaseKindLister):
    """Lister for Glance images."""

    resource_class = Image

    def _iter_resources(self) -> Iterator[Image]:
        for image in self.client.images():
            tags = getattr(image, "tags", None)
            yield Image(
                client=self.client,
                id=image.id,
                name=image.name or "",
                timestamp=parse_timestamp(image.created_at),
                cluster_id=cluster_id_from_tags(tags),
                tags=tag_set(tags),
            )
