"""
Unit tests for StoragePathService.

Tests path resolution per level, graceful degradation and container creation
through the in-memory blob service.
"""

from unittest.mock import MagicMock

import pytest

from portal_resources.core.errors import ContainerCreationFailure, UpstreamTransportFailure
from portal_resources.core.models.resource_models import ResourceLevel
from portal_resources.core.storage.storage_path_service import StoragePathService, resource_path


class TestResourcePath:
    """Test pure path generation."""

    @pytest.mark.parametrize(
        "level, depth",
        [
            (ResourceLevel.TERM, 1),
            (ResourceLevel.DOMAIN, 2),
            (ResourceLevel.SUBJECT, 3),
            (ResourceLevel.SESSION, 3),
        ],
    )
    def test_length_follows_level_depth(self, level, depth):
        path = resource_path("2024-26", level, "Term-1", "Finance", "Accounting")
        assert len(path) == 2 + depth
        assert path[:2] == ["2024-26", "Resources"]

    def test_subject_and_session_share_a_folder(self):
        subject = resource_path("B1", "Subject", "T1", "D1", "S1")
        session = resource_path("B1", "Session", "T1", "D1", "S1")
        assert subject == session == ["B1", "Resources", "T1", "D1", "S1"]

    def test_level_as_plain_string(self):
        assert resource_path("B1", "Term", "T1") == ["B1", "Resources", "T1"]

    def test_other_level_uses_prefix(self):
        assert resource_path("B1", ResourceLevel.OTHER, "T1", "D1", "S1") == ["B1", "Resources"]

    def test_unknown_level_uses_prefix(self):
        assert resource_path("B1", "Module", "T1", "D1", "S1") == ["B1", "Resources"]

    def test_missing_required_field_degrades_to_prefix(self):
        assert resource_path("B1", "Domain", "T1", "") == ["B1", "Resources"]
        assert resource_path("B1", "Subject", "T1", "D1", None) == ["B1", "Resources"]
        assert resource_path("B1", "Term", "  ") == ["B1", "Resources"]

    def test_values_are_trimmed(self):
        assert resource_path(" B1 ", "Domain", " T1", "D1 ") == ["B1", "Resources", "T1", "D1"]


class TestEnsureContainer:
    """Test walking the path through a container store."""

    def test_creates_every_segment(self, blob_service):
        paths = StoragePathService(blob_service)
        container = paths.ensure_container("B1", "Subject", "T1", "D1", "S1")

        assert blob_service.path_of(container) == ["B1", "Resources", "T1", "D1", "S1"]
        assert container.url

    def test_is_idempotent(self, blob_service):
        paths = StoragePathService(blob_service)
        first = paths.ensure_container("B1", "Domain", "T1", "D1")
        count = len(blob_service.containers)

        second = paths.ensure_container("B1", "Domain", "T1", "D1")

        assert second.id == first.id
        assert len(blob_service.containers) == count

    def test_reuses_shared_prefix(self, blob_service):
        paths = StoragePathService(blob_service)
        paths.ensure_container("B1", "Subject", "T1", "D1", "S1")
        before = len(blob_service.containers)

        paths.ensure_container("B1", "Subject", "T1", "D1", "S2")

        assert len(blob_service.containers) == before + 1

    def test_empty_batch_fails(self, blob_service):
        with pytest.raises(ContainerCreationFailure):
            StoragePathService(blob_service).ensure_container("  ", "Term", "T1")

    def test_store_error_becomes_container_failure(self):
        store = MagicMock()
        store.get_root.return_value = MagicMock(id="root")
        store.get_or_create_container.side_effect = UpstreamTransportFailure("HTTP 403")

        with pytest.raises(ContainerCreationFailure, match="HTTP 403"):
            StoragePathService(store).ensure_container("B1", "Term", "T1")

        # aborted at the first failing segment, no retry
        assert store.get_or_create_container.call_count == 1


class TestExistingContainer:
    """Test resolving a folder link stored on a resource."""

    def test_returns_the_linked_container(self, blob_service):
        paths = StoragePathService(blob_service)
        folder = paths.ensure_container("B1", "Subject", "T1", "D1", "S1")
        before = len(blob_service.containers)

        assert paths.existing_container(folder.url) == folder
        assert len(blob_service.containers) == before

    @pytest.mark.parametrize("link", ["https://elsewhere.example/x", "memory://drive/folders/missing"])
    def test_unknown_link_fails(self, blob_service, link):
        with pytest.raises(ContainerCreationFailure):
            StoragePathService(blob_service).existing_container(link)
