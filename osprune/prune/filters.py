"""Filter pipeline.

Predicates decide whether a resource is eligible for pruning. They only use
the Resource interface, so they work for every kind.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, List, Optional

from ..models.ignore import IgnoreSet
from ..models.resource import Resource

if TYPE_CHECKING:
    from ..models.run_config import RunConfig

Predicate = Callable[[Resource], bool]


def filter_resources(resources: Iterable[Resource], *predicates: Predicate) -> Iterator[Resource]:
    """Yield the resources for which every predicate returns True.

    Predicates are evaluated in the order given and evaluation stops at the
    first one that rejects the resource.
    """
    for resource in resources:
        if all(predicate(resource) for predicate in predicates):
            yield resource


def older_than(threshold: datetime) -> Predicate:
    """Accept resources whose timestamp is strictly before the threshold."""

    def predicate(resource: Resource) -> bool:
        return resource.timestamp < threshold

    return predicate


def id_is_not(*ids: str) -> Predicate:
    """Reject resources whose id is one of the given ids."""
    excluded = frozenset(ids)

    def predicate(resource: Resource) -> bool:
        return resource.id not in excluded

    return predicate


def name_is_not(*names: str) -> Predicate:
    """Reject resources whose name is one of the given names."""
    excluded = frozenset(names)

    def predicate(resource: Resource) -> bool:
        return resource.name not in excluded

    return predicate


def name_does_not_contain(*substrings: str) -> Predicate:
    """Reject resources whose name contains any of the substrings."""

    def predicate(resource: Resource) -> bool:
        return not any(substring in resource.name for substring in substrings)

    return predicate


def name_matches_any_of(*patterns: str) -> Predicate:
    """Accept only resources whose name matches at least one pattern.

    Raises:
        re.error: If a pattern does not compile
    """
    compiled = [re.compile(pattern) for pattern in patterns]

    def predicate(resource: Resource) -> bool:
        return any(pattern.search(resource.name) for pattern in compiled)

    return predicate


def lacks_protection_tag(tag: str) -> Predicate:
    """Reject resources carrying the protection tag.

    Kinds without tag support cannot carry the tag and always pass.
    """

    def predicate(resource: Resource) -> bool:
        return resource.tags is None or tag not in resource.tags

    return predicate


def not_ignored(ignore_set: IgnoreSet) -> Predicate:
    """Reject resources listed in the ignore set."""

    def predicate(resource: Resource) -> bool:
        return not ignore_set.contains(resource)

    return predicate


def default_predicates(
    config: "RunConfig",
    now: datetime,
    ignore_set: Optional[IgnoreSet] = None,
) -> List[Predicate]:
    """Build the staleness predicates for a run, cheapest first.

    Args:
        config: Run configuration (protection tag and TTL)
        now: Run start time the TTL is measured from
        ignore_set: Explicitly ignored resources (optional)

    Returns:
        Ordered list of predicates
    """
    predicates: List[Predicate] = []
    if ignore_set is not None and len(ignore_set) > 0:
        predicates.append(not_ignored(ignore_set))
    predicates.append(lacks_protection_tag(config.protection_tag))
    predicates.append(older_than(now - config.resource_ttl))
    return predicates
