"""Application credential lister."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional

from ..models.resource import PROW_CLUSTER_TAG_PREFIX, Resource, parse_timestamp
from .base import BaseKindLister


def cluster_id_from_description(description: Optional[str]) -> Optional[str]:
    """Extract the cluster name from a ``PROW_CLUSTER_NAME=<name>`` description token."""
    for token in (description or "").split(" "):
        if token.startswith(PROW_CLUSTER_TAG_PREFIX):
            return token[len(PROW_CLUSTER_TAG_PREFIX) :]
    return None


@dataclass(frozen=True)
class ApplicationCredential(Resource):
    """Keystone application credential.

    Its timestamp is the expiry date: a credential becomes stale once it
    has been expired for longer than the TTL.

    Attributes:
        user_id: Owner of the credential
    """

    kind = "application credential"

    user_id: str = ""

    def delete(self) -> None:
        self.client.delete_application_credential(self.user_id, self.id, ignore_missing=False)


class ApplicationCredentialLister(BaseKindLister):
    """Lister for the current user's expiring application credentials.

    Credentials without expiry are never listed.
    """

    resource_class = ApplicationCredential

    def __init__(self, client: Any, user_id: str) -> None:
        super().__init__(client)
        self.user_id = user_id

    def _iter_resources(self) -> Iterator[ApplicationCredential]:
        for credential in self.client.application_credentials(user=self.user_id):
            if not credential.expires_at:
                continue
            yield ApplicationCredential(
                client=self.client,
                id=credential.id,
                name=credential.name or "",
                timestamp=parse_timestamp(credential.expires_at),
                cluster_id=cluster_id_from_description(credential.description),
                user_id=self.user_id,
            )
