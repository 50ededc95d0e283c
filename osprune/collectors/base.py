"""Base class for kind listers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterator, Tuple, Type

from keystoneauth1.exceptions.catalog import EndpointNotFound

from ..errors import ListingIncompleteError
from ..models.resource import Resource


class BaseKindLister(ABC):
    """Lazily lists the resources of one kind.

    Subclasses implement ``_iter_resources`` by walking the paginated SDK
    listing of their service. ``list`` wraps it with the error policy shared
    by every kind:

    - errors in ``unavailable_errors`` (no endpoint, by default) end the
      listing quietly, after one log line
    - any other error ends the listing and raises ListingIncompleteError so
      the caller knows the kind was only partially listed

    Attributes:
        client: Service proxy for the kind's service
        logger: Logger named after the kind's module
    """

    resource_class: ClassVar[Type[Resource]]
    unavailable_errors: ClassVar[Tuple[Type[BaseException], ...]] = (EndpointNotFound,)

    def __init__(self, client: Any) -> None:
        self.client = client
        self.logger = logging.getLogger(self.__class__.__module__)

    @property
    def kind(self) -> str:
        return self.resource_class.kind

    @abstractmethod
    def _iter_resources(self) -> Iterator[Resource]:
        """Yield resources page by page in catalog order."""

    def list(self) -> Iterator[Resource]:
        """List the kind's resources.

        Yields:
            Resource values in catalog order

        Raises:
            ListingIncompleteError: If listing failed part way
        """
        listed = 0
        try:
            for resource in self._iter_resources():
                yield resource
                listed += 1
        except self.unavailable_errors as e:
            self.logger.warning(f"Skipping {self.kind} listing after {listed} resource(s): {e}")
            return
        except Exception as e:
            self.logger.error(f"Error listing {self.kind} after {listed} resource(s): {e}")
            raise ListingIncompleteError(self.kind, listed, e) from e

        self.logger.debug(f"Listed {listed} resource(s) of kind {self.kind}")
