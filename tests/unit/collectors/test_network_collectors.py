"""Tests for the Neutron kind listers: floating IPs, ports, trunks, networks, security groups."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import Mock

import pytest

from osprune.collectors.floating_ips import FloatingIP, FloatingIPLister
from osprune.collectors.networks import NetworkLister, build_network_index
from osprune.collectors.ports import PortLister, is_independently_deletable
from osprune.collectors.security_groups import SecurityGroupLister
from osprune.collectors.trunks import TrunkLister
from osprune.models.resource import UNKNOWN_TIMESTAMP
from tests.fixtures.resources import NOW, iso, sdk_record


def port_record(port_id: str, device_id: str = "", device_owner: str = "", tags=None):
    return sdk_record(
        id=port_id,
        name=port_id,
        created_at=iso(NOW),
        device_id=device_id,
        device_owner=device_owner,
        tags=tags or [],
    )


class TestFloatingIPLister:
    """Test suite for FloatingIPLister."""

    def test_lists_floating_ips(self) -> None:
        """Test listing floating IPs named by address."""
        client = Mock()
        client.ips.return_value = [
            sdk_record(
                id="fip-1",
                floating_ip_address="203.0.113.10",
                created_at=iso(NOW - timedelta(hours=2)),
                tags=["PROW_CLUSTER_NAME=ci-op-1", "other"],
            )
        ]

        [fip] = list(FloatingIPLister(client).list())

        assert isinstance(fip, FloatingIP)
        assert fip.kind == "floating ip"
        assert fip.id == "fip-1"
        assert fip.name == "203.0.113.10"
        assert fip.timestamp == NOW - timedelta(hours=2)
        assert fip.cluster_id == "ci-op-1"
        assert fip.tags == frozenset({"PROW_CLUSTER_NAME=ci-op-1", "other"})

    def test_delete(self) -> None:
        """Test floating IP deletion."""
        client = Mock()
        client.ips.return_value = [sdk_record(id="fip-1", floating_ip_address="x", created_at=None)]

        [fip] = list(FloatingIPLister(client).list())
        fip.delete()

        assert fip.timestamp == UNKNOWN_TIMESTAMP
        client.delete_ip.assert_called_once_with("fip-1", ignore_missing=False)


class TestPortLister:
    """Test suite for PortLister."""

    @pytest.mark.parametrize(
        "device_id, device_owner, expected",
        [
            ("", "", True),
            ("server-1", "compute:nova", True),
            ("", "trunk:subport", True),
            ("router-1", "network:router_interface", False),
            ("dhcp-1", "network:dhcp", False),
            ("ovnmeta-net-1", "network:distributed", False),
            ("ovnmeta-net-1", "", False),
        ],
    )
    def test_is_independently_deletable(self, device_id: str, device_owner: str, expected: bool) -> None:
        """Test which ports may be deleted on their own."""
        assert is_independently_deletable(port_record("p", device_id, device_owner)) is expected

    def test_skips_control_plane_ports(self) -> None:
        """Test that router and metadata ports are not listed."""
        client = Mock()
        client.ports.return_value = [
            port_record("keep-1", device_owner="network:router_gateway"),
            port_record("p-1", device_owner="compute:nova", tags=["openshiftClusterID=c-1"]),
            port_record("keep-2", device_id="ovnmeta-123"),
            port_record("p-2"),
        ]

        ports = list(PortLister(client).list())

        assert [p.id for p in ports] == ["p-1", "p-2"]
        assert ports[0].cluster_id == "c-1"

    def test_delete(self) -> None:
        """Test port deletion."""
        client = Mock()
        client.ports.return_value = [port_record("p-1")]

        [port] = list(PortLister(client).list())
        port.delete()

        client.delete_port.assert_called_once_with("p-1", ignore_missing=False)


class TestTrunkLister:
    """Test suite for TrunkLister."""

    def test_list_and_delete(self) -> None:
        """Test listing trunks and deleting one."""
        client = Mock()
        client.trunks.return_value = [
            sdk_record(id="t-1", name="trunk", created_at=iso(NOW), tags=["openshiftClusterID=c-2"])
        ]

        [trunk] = list(TrunkLister(client).list())
        trunk.delete()

        assert trunk.kind == "trunk"
        assert trunk.cluster_id == "c-2"
        client.delete_trunk.assert_called_once_with("t-1", ignore_missing=False)


class TestSecurityGroupLister:
    """Test suite for SecurityGroupLister."""

    def test_list_and_delete(self) -> None:
        """Test listing security groups and deleting one."""
        client = Mock()
        client.security_groups.return_value = [
            sdk_record(id="sg-1", name="ostest-master", created_at=iso(NOW), tags=[])
        ]

        [group] = list(SecurityGroupLister(client).list())
        group.delete()

        assert group.kind == "security group"
        assert group.tags == frozenset()
        client.delete_security_group.assert_called_once_with("sg-1", ignore_missing=False)


class TestNetworkLister:
    """Test suite for NetworkLister and the network index."""

    def test_list_and_delete(self) -> None:
        """Test listing networks and deleting one."""
        client = Mock()
        client.networks.return_value = [
            sdk_record(id="net-1", name="ostest-openshift", created_at=iso(NOW), tags=["openshiftClusterID=c-1"])
        ]

        [network] = list(NetworkLister(client).list())
        network.delete()

        assert network.cluster_id == "c-1"
        client.delete_network.assert_called_once_with("net-1", ignore_missing=False)

    def test_build_network_index(self) -> None:
        """Test the cluster id to network creation time index."""
        client = Mock()
        client.networks.return_value = [
            sdk_record(id="net-1", name="a", created_at=iso(NOW), tags=["openshiftClusterID=c-1"]),
            sdk_record(id="net-2", name="b", created_at=iso(NOW), tags=[]),
            sdk_record(id="net-3", name="c", created_at=iso(NOW), tags=["openshiftClusterID=c-3"]),
        ]

        index = build_network_index(NetworkLister(client).list())

        assert sorted(index) == ["c-1", "c-3"]
        assert index["c-3"].id == "net-3"
