"""
Tests for the direct / resumable upload decision and execution.
"""

from unittest.mock import MagicMock

import pytest

from portal_resources.core.errors import UpstreamTransportFailure
from portal_resources.core.storage.container_store import StoredFile
from portal_resources.core.storage.upload_transport import (
    DIRECT,
    RESUMABLE,
    UploadTransport,
    content_range,
    iter_chunks,
)

MIB = 1024 * 1024


@pytest.fixture
def container(blob_service):
    return blob_service.get_or_create_container(blob_service.get_root(), "B1")


class TestProtocolChoice:

    def test_default_limit_is_fifty_mib(self, blob_service):
        assert UploadTransport(blob_service).normal_upload_limit == 50 * MIB

    def test_49_mib_is_direct(self, blob_service):
        assert UploadTransport(blob_service).choose_protocol(49 * MIB) == DIRECT

    def test_51_mib_is_resumable(self, blob_service):
        assert UploadTransport(blob_service).choose_protocol(51 * MIB) == RESUMABLE

    def test_exact_boundary_is_direct(self, blob_service):
        transport = UploadTransport(blob_service)
        assert transport.choose_protocol(50 * MIB) == DIRECT
        assert transport.choose_protocol(50 * MIB + 1) == RESUMABLE


class TestChunks:

    def test_whole_file_by_default(self):
        assert list(iter_chunks(10, None)) == [(0, 9)]

    def test_split_into_ranges(self):
        assert list(iter_chunks(10, 4)) == [(0, 3), (4, 7), (8, 9)]

    def test_content_range_header(self):
        assert content_range(0, 9, 10) == "bytes 0-9/10"


class TestUpload:

    def test_direct_upload_is_shared(self, blob_service, container):
        transport = UploadTransport(blob_service, normal_upload_limit=1024)
        uploaded = transport.upload(container, "notes.pdf", b"%PDF-1.4 small", "application/pdf")

        assert uploaded.protocol == DIRECT
        assert uploaded.name == "notes.pdf"
        file_id = next(iter(blob_service.files))
        assert uploaded.url == blob_service.files[file_id].url
        assert file_id in blob_service.public_files
        assert blob_service.file_parents[file_id] == container.id
        assert blob_service.chunk_log == []

    def test_resumable_upload_sends_one_range(self, blob_service, container):
        payload = b"x" * 2048
        transport = UploadTransport(blob_service, normal_upload_limit=1024)

        uploaded = transport.upload(container, "lecture.mp4", payload, "video/mp4")

        assert uploaded.protocol == RESUMABLE
        assert len(blob_service.chunk_log) == 1
        _, header, length = blob_service.chunk_log[0]
        assert header == "bytes 0-2047/2048"
        assert length == 2048
        file_id = next(iter(blob_service.files))
        assert blob_service.contents[file_id] == payload
        assert file_id in blob_service.public_files

    def test_resumable_upload_with_chunk_size(self, blob_service, container):
        payload = bytes(range(256)) * 10
        transport = UploadTransport(blob_service, normal_upload_limit=100, chunk_size=1000)

        transport.upload(container, "big.bin", payload, "application/octet-stream")

        assert [entry[1] for entry in blob_service.chunk_log] == [
            "bytes 0-999/2560",
            "bytes 1000-1999/2560",
            "bytes 2000-2559/2560",
        ]
        assert blob_service.contents[next(iter(blob_service.files))] == payload

    def test_declared_size_does_not_decide(self, blob_service, container):
        transport = UploadTransport(blob_service, normal_upload_limit=1024)
        uploaded = transport.upload(container, "a.txt", b"tiny", "text/plain", declared_size=10 * MIB)
        assert uploaded.protocol == DIRECT

    def test_initiate_failure_propagates_without_transfer(self, container):
        blob = MagicMock()
        blob.initiate_resumable_session.side_effect = UpstreamTransportFailure("Failed to initiate upload: denied")
        transport = UploadTransport(blob, normal_upload_limit=1)

        with pytest.raises(UpstreamTransportFailure):
            transport.upload(container, "a.bin", b"abc", "application/octet-stream")

        blob.put_chunk.assert_not_called()
        blob.set_public_view_sharing.assert_not_called()

    def test_incomplete_transfer_is_an_error(self, container):
        blob = MagicMock()
        blob.initiate_resumable_session.return_value = "https://upload/session"
        blob.put_chunk.return_value = None
        transport = UploadTransport(blob, normal_upload_limit=1)

        with pytest.raises(UpstreamTransportFailure, match="did not complete"):
            transport.upload(container, "a.bin", b"abc", "application/octet-stream")

    def test_stored_name_is_returned(self, container):
        blob = MagicMock()
        blob.create_file.return_value = StoredFile(id="f1", name="renamed.pdf", url="https://drive/f1")
        uploaded = UploadTransport(blob).upload(container, "a.pdf", b"x", "application/pdf")

        assert uploaded.name == "renamed.pdf"
        assert uploaded.url == "https://drive/f1"
        blob.set_public_view_sharing.assert_called_once()
