"""Kind registry.

Maps each kind key to its service, its lister and the name rules applied to
that kind's stream before it is merged with the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Collection, Dict, Iterable, Iterator

from openstack.connection import Connection

from ..cloud.connection import has_service
from ..errors import ServiceUnavailableError
from ..models.resource import Resource
from ..prune.filters import filter_resources, name_does_not_contain, name_is_not, name_matches_any_of
from .application_credentials import ApplicationCredentialLister
from .containers import ContainerLister
from .floating_ips import FloatingIPLister
from .images import INSTALLER_IMAGE_PATTERNS, ImageLister
from .load_balancers import LoadBalancerLister
from .networks import INFRASTRUCTURE_NETWORK_MARKERS, NetworkLister, build_network_index
from .ports import PortLister
from .routers import RouterLister
from .security_groups import SecurityGroupLister
from .servers import ServerLister
from .shares import ShareLister
from .trunks import TrunkLister
from .volume_snapshots import VolumeSnapshotLister
from .volumes import VolumeLister

logger = logging.getLogger(__name__)


def _floating_ips(conn: Connection) -> Iterable[Resource]:
    return FloatingIPLister(conn.network).list()


def _load_balancers(conn: Connection) -> Iterable[Resource]:
    return LoadBalancerLister(conn.load_balancer).list()


def _servers(conn: Connection) -> Iterable[Resource]:
    return filter_resources(ServerLister(conn.compute).list(), name_is_not("metrics"))


def _routers(conn: Connection) -> Iterable[Resource]:
    return filter_resources(RouterLister(conn.network).list(), name_is_not("dualstack"))


def _trunks(conn: Connection) -> Iterable[Resource]:
    return TrunkLister(conn.network).list()


def _ports(conn: Connection) -> Iterable[Resource]:
    return PortLister(conn.network).list()


def _networks(conn: Connection) -> Iterable[Resource]:
    return filter_resources(
        NetworkLister(conn.network).list(),
        name_does_not_contain(*INFRASTRUCTURE_NETWORK_MARKERS),
    )


def _volume_snapshots(conn: Connection) -> Iterable[Resource]:
    return VolumeSnapshotLister(conn.block_storage).list()


def _volumes(conn: Connection) -> Iterable[Resource]:
    return VolumeLister(conn.block_storage).list()


def _security_groups(conn: Connection) -> Iterable[Resource]:
    return filter_resources(
        SecurityGroupLister(conn.network).list(),
        name_is_not("default", "ssh", "allow_ssh", "allow_ping"),
    )


def _shares(conn: Connection) -> Iterable[Resource]:
    return ShareLister(conn.shared_file_system).list()


def _application_credentials(conn: Connection) -> Iterator[Resource]:
    # Resolving the user id needs a token, so it happens in the lister's own task
    lister = ApplicationCredentialLister(conn.identity, conn.current_user_id)
    yield from lister.list()


def _containers(conn: Connection) -> Iterator[Resource]:
    # The network index is complete before the first container is listed
    network_index = build_network_index(NetworkLister(conn.network).list())
    yield from filter_resources(
        ContainerLister(conn.object_store, network_index).list(),
        name_is_not("shiftstack-metrics", "shiftstack-bot"),
    )


def _images(conn: Connection) -> Iterable[Resource]:
    return filter_resources(ImageLister(conn.image).list(), name_matches_any_of(*INSTALLER_IMAGE_PATTERNS))


@dataclass(frozen=True)
class KindSpec:
    """Registry entry for one resource kind.

    Attributes:
        key: Kind key used on the command line (e.g. "volumes")
        label: Kind label used in reports (e.g. "volume")
        service_type: Service catalog type the kind lives in
        optional: Skip the kind when the service has no endpoint
        build: Creates the kind's lazy resource stream from a connection
    """

    key: str
    label: str
    service_type: str
    optional: bool
    build: Callable[[Connection], Iterable[Resource]]


KIND_SPECS = (
    KindSpec("floatingips", "floating ip", "network", False, _floating_ips),
    KindSpec("loadbalancers", "load balancer", "load-balancer", True, _load_balancers),
    KindSpec("servers", "server", "compute", False, _servers),
    KindSpec("routers", "router", "network", False, _routers),
    KindSpec("trunks", "trunk", "network", False, _trunks),
    KindSpec("ports", "port", "network", False, _ports),
    KindSpec("networks", "network", "network", False, _networks),
    KindSpec("volumesnapshots", "volume snapshot", "block-storage", False, _volume_snapshots),
    KindSpec("volumes", "volume", "block-storage", False, _volumes),
    KindSpec("securitygroups", "security group", "network", False, _security_groups),
    KindSpec("shares", "share", "shared-file-system", True, _shares),
    KindSpec("appcreds", "application credential", "identity", False, _application_credentials),
    KindSpec("containers", "container", "object-store", True, _containers),
    KindSpec("images", "image", "image", False, _images),
)

RESOURCE_TYPES = tuple(spec.key for spec in KIND_SPECS)

KIND_LABELS: Dict[str, str] = {spec.key: spec.label for spec in KIND_SPECS}


def build_sources(kinds: Collection[str], connect: Callable[[], Connection]) -> Dict[str, Iterable[Resource]]:
    """Create the lazy resource stream of every selected kind.

    Each kind gets a connection of its own. Nothing is listed until the
    returned iterables are consumed.

    Args:
        kinds: Kind keys to build
        connect: Factory returning a new authenticated connection

    Returns:
        Mapping of kind key to resource iterable, in registry order

    Raises:
        ServiceUnavailableError: If a required service has no endpoint
    """
    probe = connect()
    sources: Dict[str, Iterable[Resource]] = {}

    for spec in KIND_SPECS:
        if spec.key not in kinds:
            continue

        if not has_service(probe, spec.service_type):
            if not spec.optional:
                raise ServiceUnavailableError(spec.label, spec.service_type)
            logger.warning(f"Skipping {spec.label} listing because the {spec.service_type} endpoint was not found")
            continue

        sources[spec.key] = spec.build(connect())

    return sources
