"""
Tests for the ResourceService envelope boundary.
"""

from unittest.mock import MagicMock

from portal_resources.core.errors import UpstreamTransportFailure
from portal_resources.core.models.resource_models import (
    ResourceCreateRequest,
    ResourceFilters,
    ResourceUpdateRequest,
    ServiceResult,
)
from portal_resources.core.shared.resource_service import ResourceService


def create_request(**overrides):
    fields = {"batch": "B1", "title": "Deck", "level": "Term", "resource_type": "Lecture Slides", "term": "T1"}
    fields.update(overrides)
    return ResourceCreateRequest(**fields)


class TestEnvelope:

    def test_create_and_list(self, resource_service):
        created = resource_service.create_resource(create_request())
        assert created.success
        assert created.error is None
        assert created.data.message == "Resource created successfully"

        listed = resource_service.list_resources(ResourceFilters(term="T1"))
        assert listed.success
        assert [r.id for r in listed.data] == [created.data.id]

    def test_update_and_soft_delete(self, resource_service):
        resource_id = resource_service.create_resource(create_request()).data.id

        updated = resource_service.update_resource(resource_id, ResourceUpdateRequest(title="Deck v2"))
        assert updated.success
        assert updated.data.resource.title == "Deck v2"

        deleted = resource_service.soft_delete_resource(resource_id)
        assert deleted.success
        assert resource_service.list_resources(ResourceFilters(status="Archived")).data[0].id == resource_id

    def test_not_found_is_reported(self, resource_service):
        for result in (
            resource_service.update_resource("RES_missing", ResourceUpdateRequest(title="x")),
            resource_service.soft_delete_resource("RES_missing"),
        ):
            assert result == ServiceResult(success=False, error="Resource not found", error_kind="NotFound")

    def test_validation_is_reported(self, resource_service):
        files = [{"name": f"{i}.pdf", "url": f"https://x/{i}"} for i in range(6)]
        result = resource_service.create_resource(create_request(files=files))
        assert not result.success
        assert result.error_kind == "Validation"

    def test_taxonomy(self, resource_service, tabular_store):
        tabular_store.append_row("Term", ["B1", "T1", "D1", "S1"])
        result = resource_service.get_taxonomy_index()
        assert result.success
        assert result.data.hierarchy.batches == {"B1": ["T1", "Other"]}

    def test_core_errors_keep_their_kind(self):
        record_store = MagicMock()
        record_store.list.side_effect = UpstreamTransportFailure("HTTP 503")
        result = ResourceService(record_store, MagicMock()).list_resources()

        assert result.success is False
        assert result.error == "HTTP 503"
        assert result.error_kind == "UpstreamTransportFailure"

    def test_unexpected_errors_never_escape(self):
        taxonomy = MagicMock()
        taxonomy.build.side_effect = KeyError("private_key")
        result = ResourceService(MagicMock(), taxonomy).get_taxonomy_index()

        assert result.success is False
        assert result.error_kind == "Error"
        assert "private_key" in result.error
