"""Ignore list model.

Explicit ``{type, id|name}`` entries that exempt resources from pruning
regardless of their age.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

import yaml

from .resource import Resource


@dataclass(frozen=True)
class IgnoreEntry:
    """One ignore list entry.

    Validation rules:
        - type must be non-empty
        - when aliases are supplied, type must name a known kind
        - exactly one of id or name must be set

    Attributes:
        type: Kind label the entry applies to (e.g. "volume")
        id: Resource identifier to ignore (optional)
        name: Resource name to ignore (optional)
    """

    type: str
    id: Optional[str] = None
    name: Optional[str] = None

    def validate(self) -> bool:
        if not self.type:
            raise ValueError("Ignore entry requires a type")
        if bool(self.id) == bool(self.name):
            raise ValueError(f"Ignore entry for {self.type!r} must set exactly one of 'id' or 'name'")
        return True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], aliases: Optional[Mapping[str, str]] = None) -> "IgnoreEntry":
        requested = str(data.get("type", "")).strip()
        resource_type = requested
        if aliases:
            resource_type = aliases.get(requested, requested)
            if resource_type and resource_type not in set(aliases.values()):
                raise ValueError(f"Unknown ignore entry type {requested!r}")
        entry = cls(
            type=resource_type,
            id=str(data["id"]) if data.get("id") else None,
            name=str(data["name"]) if data.get("name") else None,
        )
        entry.validate()
        return entry


class IgnoreSet:
    """Set of resources excluded from pruning by kind and id or name."""

    def __init__(self, entries: Iterable[IgnoreEntry] = ()) -> None:
        self.entries: List[IgnoreEntry] = list(entries)
        self._ids: FrozenSet[Tuple[str, str]] = frozenset((e.type, e.id) for e in self.entries if e.id)
        self._names: FrozenSet[Tuple[str, str]] = frozenset((e.type, e.name) for e in self.entries if e.name)

    def __len__(self) -> int:
        return len(self.entries)

    def contains(self, resource: Resource) -> bool:
        """Check whether the resource is ignored by id or by name, scoped to its kind."""
        return (resource.kind, resource.id) in self._ids or (resource.kind, resource.name) in self._names

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[Mapping[str, Any]],
        aliases: Optional[Mapping[str, str]] = None,
    ) -> "IgnoreSet":
        """Build an ignore set from raw mappings.

        Args:
            entries: Mappings with a ``type`` and either ``id`` or ``name``
            aliases: Optional mapping of alternative type names to kind labels;
                when given, types that name no kind are rejected

        Raises:
            ValueError: If an entry is malformed or names an unknown type
        """
        return cls(IgnoreEntry.from_dict(entry, aliases) for entry in entries)

    @classmethod
    def load(cls, path: Union[str, Path], aliases: Optional[Mapping[str, str]] = None) -> "IgnoreSet":
        """Load an ignore list from a YAML or JSON file.

        The file holds either a list of entries or a mapping with an
        ``ignore`` key holding that list.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the content is not a list of entries
        """
        with open(path, "r") as f:
            data: Union[Dict[str, Any], List[Any], None] = yaml.safe_load(f)

        if data is None:
            return cls()
        if isinstance(data, dict):
            data = data.get("ignore") or []
        if not isinstance(data, list):
            raise ValueError(f"Ignore file {path} must contain a list of entries")

        for entry in data:
            if not isinstance(entry, dict):
                raise ValueError(f"Invalid ignore entry in {path}: {entry!r}")

        return cls.from_entries(data, aliases)
