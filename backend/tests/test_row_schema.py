import pytest

from portal_resources.core.errors import ResourceValidationError
from portal_resources.core.models.resource_models import FileRef, FileUpload, ResourceUpdateRequest
from portal_resources.core.records.row_schema import (
    COLUMN_COUNT,
    COLUMNS,
    DRIVE_FOLDER_COL,
    FILE_COUNT_COL,
    NOTES_COL,
    STATUS_COL,
    URLS_COL,
    build_row,
    normalize_row,
    row_to_resource,
)


class TestLayout:

    def test_column_positions_match_header(self):
        assert COLUMN_COUNT == 37
        assert COLUMNS[URLS_COL] == "URLs_RES"
        assert COLUMNS[DRIVE_FOLDER_COL] == "Drive Folder Link_RES"
        assert COLUMNS[FILE_COUNT_COL] == "File Count_RES"
        assert COLUMNS[STATUS_COL] == "Status_RES"
        assert COLUMNS[NOTES_COL] == "Notes_RES"

    def test_normalize_pads_and_cuts(self):
        assert normalize_row(["a", None, 3]) == ["a", "", "3"] + [""] * 34
        assert len(normalize_row(["x"] * 40)) == COLUMN_COUNT

    def test_build_and_read_back(self):
        files = [FileRef(name="a.pdf", url="https://d/a"), FileRef(name="b.pdf", url="https://d/b")]
        row = build_row({"id": "RES_1_AAAAA", "title": "T"}, files, "L|https://l", "https://d/folder", "Published", "n")

        assert len(row) == COLUMN_COUNT
        resource = row_to_resource(row)
        assert resource.id == "RES_1_AAAAA"
        assert resource.title == "T"
        assert resource.files == files
        assert resource.file_count == 2
        assert resource.urls[0].name == "L"
        assert resource.drive_folder_link == "https://d/folder"
        assert resource.notes == "n"

    def test_file_count_tolerates_sheet_formatting(self):
        row = [""] * COLUMN_COUNT
        row[FILE_COUNT_COL] = "3.0"
        assert row_to_resource(row).file_count == 3
        row[FILE_COUNT_COL] = "n/a"
        assert row_to_resource(row).file_count == 0


class TestRequestModels:

    def test_upload_decode(self):
        assert FileUpload(name="a", data="aGVsbG8=").decode() == b"hello"

    def test_upload_decode_rejects_garbage(self):
        with pytest.raises(ResourceValidationError):
            FileUpload(name="a", data="@@@").decode()

    def test_provided_fields(self):
        request = ResourceUpdateRequest(title="x", description="", notes=None, level="Term")
        assert request.provided_fields() == {"title": "x", "description": "", "level": "Term"}
