"""Exceptions raised by osprune."""

from __future__ import annotations

from typing import Optional


class OsPruneError(Exception):
    """Base class for osprune errors."""


class ConfigurationError(OsPruneError):
    """Invalid run configuration. Fatal before enumeration starts."""


class ServiceUnavailableError(OsPruneError):
    """A required service has no endpoint in the cloud catalog."""

    def __init__(self, kind: str, service_type: str) -> None:
        super().__init__(f"Cannot list {kind}: no {service_type} endpoint found in the service catalog")
        self.kind = kind
        self.service_type = service_type


class ListingIncompleteError(OsPruneError):
    """A kind lister stopped before reaching the end of its catalog."""

    def __init__(self, kind: str, listed: int, cause: Optional[BaseException] = None) -> None:
        message = f"Listing of {kind} terminated early after {listed} resource(s)"
        super().__init__(f"{message}: {cause}" if cause is not None else message)
        self.kind = kind
        self.listed = listed
        self.cause = cause


class DeleteError(OsPruneError):
    """A step of a cascading deletion failed."""


class NotificationError(OsPruneError):
    """The failure notification could not be delivered."""
