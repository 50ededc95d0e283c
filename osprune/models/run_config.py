"""Run configuration model.

The single configuration object handed to the pruning pipeline. Built once
at startup from CLI options, the config file and the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence, Tuple

from ..collectors.registry import RESOURCE_TYPES
from ..errors import ConfigurationError

DEFAULT_RESOURCE_TTL = timedelta(hours=7)
DEFAULT_PROTECTION_TAG = "shiftstack-prune=keep"

# Largest TTL accepted, the range of a signed 64-bit nanosecond count (about 2562047h)
MAX_RESOURCE_TTL = timedelta(microseconds=(2**63 - 1) // 1000)


def split_kinds(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated kind list, dropping empty items."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class RunConfig:
    """Pruning run configuration.

    Attributes:
        resource_ttl: Minimum age of resources to prune
        dry_run: Only report stale resources, never delete (default: True)
        include: Kind keys to process exclusively (optional)
        exclude: Kind keys to skip (optional)
        slack_hook: Slack incoming webhook for failure notifications (optional)
        protection_tag: Tag that exempts a resource from pruning
        cluster_label: Label prefixed to notifications (optional)
        ignore_file: Path of the ignore list (optional)
        cloud: Name of the clouds.yaml entry to use (optional)
    """

    resource_ttl: timedelta = DEFAULT_RESOURCE_TTL
    dry_run: bool = True
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    slack_hook: Optional[str] = None
    protection_tag: str = DEFAULT_PROTECTION_TAG
    cluster_label: Optional[str] = None
    ignore_file: Optional[str] = None
    cloud: Optional[str] = None

    def validate(self, available: Sequence[str] = RESOURCE_TYPES) -> bool:
        """Validate configuration invariants.

        Validation rules:
            - resource_ttl must be positive and at most MAX_RESOURCE_TTL
            - include and exclude may only name available kinds
            - no kind may be both included and excluded

        Returns:
            True if validation passes

        Raises:
            ConfigurationError: If any validation rule fails
        """
        if self.resource_ttl <= timedelta(0):
            raise ConfigurationError(f"resource TTL must be positive, got {self.resource_ttl}")
        if self.resource_ttl > MAX_RESOURCE_TTL:
            raise ConfigurationError(f"resource TTL {self.resource_ttl} exceeds the maximum of {MAX_RESOURCE_TTL}")

        valid = set(available)
        for kind in self.include + self.exclude:
            if kind not in valid:
                raise ConfigurationError(
                    f"invalid resource type {kind!r}, valid types are: {','.join(available)}"
                )

        both = [kind for kind in self.include if kind in self.exclude]
        if both:
            raise ConfigurationError(f"resource type {both[0]!r} cannot be both included and excluded")

        return True

    def selected_kinds(self, available: Sequence[str] = RESOURCE_TYPES) -> Tuple[str, ...]:
        """Return the kinds to process, in catalog order.

        An include list takes precedence over the exclude list.
        """
        if self.include:
            return tuple(kind for kind in available if kind in self.include)
        return tuple(kind for kind in available if kind not in self.exclude)
