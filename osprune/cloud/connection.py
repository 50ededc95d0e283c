"""OpenStack connection factory.

Credentials come from clouds.yaml or ``OS_*`` environment variables, as
resolved by openstacksdk.
"""

from __future__ import annotations

import logging
from typing import Optional

import openstack
from openstack.connection import Connection

logger = logging.getLogger(__name__)


def create_connection(cloud: Optional[str] = None) -> Connection:
    """Create an authenticated OpenStack connection.

    Args:
        cloud: Name of the clouds.yaml entry (default: OS_CLOUD or environment)

    Returns:
        openstacksdk Connection
    """
    if cloud:
        logger.debug(f"Connecting to cloud '{cloud}'")
        return openstack.connect(cloud=cloud)
    return openstack.connect()


def has_service(conn: Connection, service_type: str) -> bool:
    """Check whether the service catalog exposes an endpoint for the service."""
    return bool(conn.has_service(service_type))
