"""Resource model shared by every kind lister.

A Resource is an immutable, kind-tagged view of one catalog entry together
with the service proxy needed to delete it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, FrozenSet, Iterable, Optional, Union

# Creation time of resources whose age cannot be determined. Always stale.
UNKNOWN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)

CLUSTER_ID_TAG_PREFIX = "openshiftClusterID="
PROW_CLUSTER_TAG_PREFIX = "PROW_CLUSTER_NAME="


def parse_timestamp(value: Union[str, datetime, None]) -> datetime:
    """Convert an API timestamp into an aware UTC datetime.

    Accepts ISO 8601 strings as returned by the OpenStack services, with or
    without a trailing ``Z`` and with or without fractional seconds. Naive
    values are assumed to be UTC.

    Args:
        value: Timestamp string, datetime or None

    Returns:
        Aware datetime, or UNKNOWN_TIMESTAMP if value is empty
    """
    if value is None or value == "":
        return UNKNOWN_TIMESTAMP

    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def cluster_id_from_tags(tags: Optional[Iterable[str]], *prefixes: str) -> Optional[str]:
    """Return the value of the first tag starting with one of the prefixes."""
    prefixes = prefixes or (CLUSTER_ID_TAG_PREFIX,)
    for tag in tags or ():
        for prefix in prefixes:
            if tag.startswith(prefix):
                return tag[len(prefix) :]
    return None


def tag_set(tags: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Freeze a tag list. Taggable kinds without tags get an empty set."""
    return frozenset(tags or ())


@dataclass(frozen=True)
class Resource(ABC):
    """Base class for every prunable resource kind.

    Optional capabilities default to "absent": a kind without tags reports
    ``tags=None`` and a resource without owning cluster reports
    ``cluster_id=None``.

    Attributes:
        client: Service proxy used to delete the resource
        id: Service-unique identifier
        name: Display name (not guaranteed unique)
        timestamp: Instant the staleness threshold is compared against
        cluster_id: Identifier of the owning cluster, if any
        tags: Tags carried by the resource, None if the kind has no tags
    """

    kind: ClassVar[str] = ""

    client: Any = field(repr=False, compare=False)
    id: str
    name: str
    timestamp: datetime
    cluster_id: Optional[str] = None
    tags: Optional[FrozenSet[str]] = None

    @abstractmethod
    def delete(self) -> None:
        """Delete the resource, including any dependent children.

        Raises:
            Exception: Whatever the service raised for the failing step
        """

    def __str__(self) -> str:
        return f"{self.kind} {self.id!r}"
