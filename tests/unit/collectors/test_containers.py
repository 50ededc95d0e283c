"""Tests for container listing and bulk deletion."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import Mock
from urllib.parse import quote

import pytest
from openstack import exceptions

from osprune.collectors.containers import (
    OBJECT_PAGE_SIZE,
    Container,
    ContainerLister,
    bulk_delete,
    container_cluster_id,
)
from osprune.collectors.networks import Network
from osprune.errors import DeleteError
from osprune.models.resource import UNKNOWN_TIMESTAMP
from tests.fixtures.resources import NOW, http_response, sdk_record


def make_container(client: Mock, name: str = "ostest-abcde-image-registry") -> Container:
    return Container(client=client, id=name, name=name, timestamp=NOW)


def objects(count: int):
    return [sdk_record(name=f"obj-{i}") for i in range(count)]


class TestContainerClusterId:
    """Test suite for container_cluster_id."""

    def test_case_insensitive_lookup(self) -> None:
        """Test cluster id header lookup ignoring case."""
        assert container_cluster_id({"Openshiftclusterid": "ostest-abcde"}) == "ostest-abcde"
        assert container_cluster_id({"openshiftClusterID": "ostest-abcde"}) == "ostest-abcde"

    def test_missing(self) -> None:
        """Test a container without the cluster id header."""
        assert container_cluster_id({"other": "x"}) is None
        assert container_cluster_id(None) is None


class TestContainerLister:
    """Test suite for ContainerLister."""

    def test_timestamp_borrowed_from_cluster_network(self) -> None:
        """Test container timestamp taken from its cluster network."""
        network = Network(client=Mock(), id="net-1", name="ostest", timestamp=NOW - timedelta(hours=9))
        client = Mock()
        client.containers.return_value = [sdk_record(name="registry"), sdk_record(name="orphan")]
        client.get_container_metadata.side_effect = [
            sdk_record(metadata={"openshiftclusterid": "ostest-abcde"}),
            sdk_record(metadata={}),
        ]

        registry, orphan = list(ContainerLister(client, {"ostest-abcde": network}).list())

        assert registry.id == registry.name == "registry"
        assert registry.cluster_id == "ostest-abcde"
        assert registry.timestamp == NOW - timedelta(hours=9)
        assert registry.tags is None
        assert orphan.cluster_id is None
        assert orphan.timestamp == UNKNOWN_TIMESTAMP

    def test_unknown_cluster_is_always_stale(self) -> None:
        """Test that a container without a known network is always stale."""
        client = Mock()
        client.containers.return_value = [sdk_record(name="registry")]
        client.get_container_metadata.return_value = sdk_record(metadata={"openshiftclusterid": "gone"})

        [container] = list(ContainerLister(client, {}).list())

        assert container.timestamp == UNKNOWN_TIMESTAMP

    def test_forbidden_listing_is_skipped(self) -> None:
        """Test that a forbidden container listing yields nothing."""
        client = Mock()
        client.containers.side_effect = exceptions.ForbiddenException("no swift access")

        assert list(ContainerLister(client, {}).list()) == []


class TestBulkDelete:
    """Test suite for bulk_delete."""

    def test_posts_quoted_paths(self) -> None:
        """Test that bulk delete posts URL-quoted object paths."""
        client = Mock()
        client.post.return_value = http_response(200, {"Number Deleted": 2, "Errors": []})

        bulk_delete(client, "registry", ["a b", "dir/c"])

        client.post.assert_called_once()
        kwargs = client.post.call_args.kwargs
        assert kwargs["params"] == {"bulk-delete": "true"}
        assert kwargs["data"] == f"{quote('registry/a b')}\n{quote('registry/dir/c')}".encode("utf-8")
        assert kwargs["headers"]["Accept"] == "application/json"

    def test_per_object_errors_fail(self) -> None:
        """Test that per-object errors in the bulk response fail the call."""
        client = Mock()
        client.post.return_value = http_response(200, {"Errors": [["registry/a", "409 Conflict"]]})

        with pytest.raises(DeleteError, match="cannot delete object registry/a: 409 Conflict"):
            bulk_delete(client, "registry", ["a"])


class TestContainerDelete:
    """Test suite for Container.delete."""

    def test_empty_container(self) -> None:
        """Test that a container with zero objects needs no bulk request."""
        client = Mock()
        client.objects.return_value = iter([])

        make_container(client).delete()

        client.post.assert_not_called()
        client.delete_container.assert_called_once_with("ostest-abcde-image-registry", ignore_missing=False)

    def test_objects_deleted_in_pages(self) -> None:
        """Test that objects are bulk deleted one page at a time."""
        client = Mock()
        client.objects.return_value = iter(objects(OBJECT_PAGE_SIZE * 2 + 1))
        client.post.return_value = http_response(200, {"Errors": []})

        make_container(client).delete()

        assert client.post.call_count == 3
        client.objects.assert_called_once_with("ostest-abcde-image-registry", limit=OBJECT_PAGE_SIZE)
        client.delete_container.assert_called_once()

    def test_bulk_errors_abort(self) -> None:
        """Test that a bulk delete error aborts the container deletion."""
        client = Mock()
        client.objects.return_value = iter(objects(1))
        client.post.return_value = http_response(200, {"Errors": [["x/obj-0", "500 Internal Error"]]})

        with pytest.raises(DeleteError):
            make_container(client).delete()

        client.delete_container.assert_not_called()

    def test_container_gone_during_object_deletion(self) -> None:
        """Test that a container removed concurrently counts as deleted."""
        client = Mock()
        client.objects.side_effect = exceptions.NotFoundException("container not found")

        make_container(client).delete()

        client.delete_container.assert_called_once()

    def test_container_already_absent(self) -> None:
        """Test that deleting an absent container succeeds."""
        client = Mock()
        client.objects.return_value = iter([])
        client.delete_container.side_effect = exceptions.NotFoundException("container not found")

        make_container(client).delete()

    def test_container_delete_conflict_propagates(self) -> None:
        """Test that a conflict on the container delete propagates."""
        client = Mock()
        client.objects.return_value = iter([])
        client.delete_container.side_effect = exceptions.ConflictException("container not empty")

        with pytest.raises(exceptions.ConflictException):
            make_container(client).delete()
