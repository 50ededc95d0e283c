"""Tests for the kind registry and source building."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock

import pytest

from osprune.collectors.registry import KIND_LABELS, KIND_SPECS, RESOURCE_TYPES, build_sources
from osprune.errors import ServiceUnavailableError
from tests.fixtures.resources import NOW, iso, sdk_record


def make_connection(missing=()) -> MagicMock:
    conn = MagicMock()
    conn.has_service.side_effect = lambda service_type: service_type not in missing
    return conn


class TestRegistry:
    """Test suite for the registry constants."""

    def test_resource_types_order(self) -> None:
        """Test the catalog order of kind keys."""
        assert RESOURCE_TYPES == (
            "floatingips",
            "loadbalancers",
            "servers",
            "routers",
            "trunks",
            "ports",
            "networks",
            "volumesnapshots",
            "volumes",
            "securitygroups",
            "shares",
            "appcreds",
            "containers",
            "images",
        )

    def test_labels(self) -> None:
        """Test kind key to label mapping."""
        assert KIND_LABELS["floatingips"] == "floating ip"
        assert KIND_LABELS["appcreds"] == "application credential"
        assert len(KIND_LABELS) == len(KIND_SPECS)

    def test_optional_services(self) -> None:
        """Test which kinds depend on optional services."""
        optional = {spec.key for spec in KIND_SPECS if spec.optional}

        assert optional == {"loadbalancers", "shares", "containers"}


class TestBuildSources:
    """Test suite for build_sources."""

    def test_one_connection_per_kind(self) -> None:
        """Test that each kind gets its own connection."""
        connections = [make_connection() for _ in range(3)]
        connect = Mock(side_effect=connections)

        sources = build_sources(["servers", "images"], connect)

        assert list(sources) == ["servers", "images"]
        assert connect.call_count == 3

    def test_sources_are_lazy(self) -> None:
        """Test that building sources lists nothing."""
        conn = make_connection()

        build_sources(["floatingips"], Mock(return_value=conn))

        conn.network.ips.assert_not_called()

    def test_missing_optional_service_is_skipped(self) -> None:
        """Test that a kind with a missing optional service is skipped."""
        connect = Mock(side_effect=lambda: make_connection(missing={"load-balancer", "object-store"}))

        sources = build_sources(["loadbalancers", "containers", "volumes"], connect)

        assert list(sources) == ["volumes"]

    def test_missing_required_service_is_fatal(self) -> None:
        """Test that a missing required service raises ServiceUnavailableError."""
        connect = Mock(side_effect=lambda: make_connection(missing={"block-storage"}))

        with pytest.raises(ServiceUnavailableError) as exc_info:
            build_sources(["servers", "volumes"], connect)

        assert exc_info.value.kind == "volume"
        assert exc_info.value.service_type == "block-storage"

    def test_kind_name_rules(self) -> None:
        """Test the naming rule applied to each kind."""
        conn = make_connection()
        conn.compute.servers.return_value = [
            sdk_record(id="s-1", name="metrics", created_at=iso(NOW), metadata={}),
            sdk_record(id="s-2", name="ostest-master-0", created_at=iso(NOW), metadata={}),
        ]
        conn.network.security_groups.return_value = [
            sdk_record(id=f"sg-{name}", name=name, created_at=iso(NOW), tags=[])
            for name in ("default", "ssh", "allow_ssh", "allow_ping", "ostest-worker")
        ]
        conn.network.networks.return_value = [
            sdk_record(id="n-1", name="external-net", created_at=iso(NOW), tags=[]),
            sdk_record(id="n-2", name="ostest-openshift", created_at=iso(NOW), tags=[]),
        ]

        sources = build_sources(["servers", "networks", "securitygroups"], Mock(return_value=conn))

        assert [r.id for r in sources["servers"]] == ["s-2"]
        assert [r.id for r in sources["networks"]] == ["n-2"]
        assert [r.id for r in sources["securitygroups"]] == ["sg-ostest-worker"]

    def test_containers_use_network_index(self) -> None:
        """Test that containers take timestamps from the network index."""
        conn = make_connection()
        conn.network.networks.return_value = [
            sdk_record(id="n-1", name="ostest", created_at="2024-03-01T03:00:00Z", tags=["openshiftClusterID=c-1"])
        ]
        conn.object_store.containers.return_value = [sdk_record(name="c-1-registry"), sdk_record(name="shiftstack-bot")]
        conn.object_store.get_container_metadata.return_value = sdk_record(metadata={"openshiftclusterid": "c-1"})

        sources = build_sources(["containers"], Mock(return_value=conn))
        [container] = list(sources["containers"])

        assert container.id == "c-1-registry"
        assert container.timestamp.hour == 3

    def test_application_credentials_resolve_current_user(self) -> None:
        """Test that application credentials are listed for the current user."""
        conn = make_connection()
        conn.current_user_id = "user-1"
        conn.identity.application_credentials.return_value = []

        sources = build_sources(["appcreds"], Mock(return_value=conn))
        assert list(sources["appcreds"]) == []

        conn.identity.application_credentials.assert_called_once_with(user="user-1")
