"""
Fixed 37-column layout of the resources tab.

Column order is the storage contract: existing spreadsheets are read by
position, so new columns may only ever be appended after ``Notes_RES``.
"""

from typing import Any, List, Sequence

from ..models.resource_models import MAX_FILE_SLOTS, FileRef, Resource
from .field_codec import decode_links

COLUMNS: List[str] = [
    "ID_RES",
    "Publish_RES",
    "Posted By_RES",
    "Created at_RES",
    "Edited at_RES",
    "Edited by_RES",
    "StartDateTime_RES",
    "EndDateTime_RES",
    "Target Batch_RES",
    "Show Other Batches_RES",
    "Title_RES",
    "Description_RES",
    "Term_RES",
    "Domain_RES",
    "Subject_RES",
    "Session Name_RES",
    "Level_RES",
    "Resource Type_RES",
    "Resource Type Custom_RES",
    "Priority_RES",
    "Learning Objectives_RES",
    "Prerequisites_RES",
    "File 1 Name_RES",
    "File 1 URL_RES",
    "File 2 Name_RES",
    "File 2 URL_RES",
    "File 3 Name_RES",
    "File 3 URL_RES",
    "File 4 Name_RES",
    "File 4 URL_RES",
    "File 5 Name_RES",
    "File 5 URL_RES",
    "URLs_RES",
    "Drive Folder Link_RES",
    "File Count_RES",
    "Status_RES",
    "Notes_RES",
]

COLUMN_COUNT = len(COLUMNS)

# Scalar columns in row order; the file slots sit between PREREQUISITES and URLS.
SCALAR_FIELDS_HEAD = [
    "id",
    "publish",
    "posted_by",
    "created_at",
    "edited_at",
    "edited_by",
    "start_date_time",
    "end_date_time",
    "target_batch",
    "show_other_batches",
    "title",
    "description",
    "term",
    "domain",
    "subject",
    "session_name",
    "level",
    "resource_type",
    "resource_type_custom",
    "priority",
    "learning_objectives",
    "prerequisites",
]

ID_COL = 0
TARGET_BATCH_COL = 8
TERM_COL = 12
DOMAIN_COL = 13
SUBJECT_COL = 14
LEVEL_COL = 16
RESOURCE_TYPE_COL = 17
FIRST_FILE_COL = 22
URLS_COL = 32
DRIVE_FOLDER_COL = 33
FILE_COUNT_COL = 34
STATUS_COL = 35
NOTES_COL = 36

# Filter name -> column it is matched against.
FILTER_COLUMNS = {
    "batch": TARGET_BATCH_COL,
    "term": TERM_COL,
    "domain": DOMAIN_COL,
    "subject": SUBJECT_COL,
    "level": LEVEL_COL,
    "resource_type": RESOURCE_TYPE_COL,
    "status": STATUS_COL,
}


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def normalize_row(row: Sequence[Any]) -> List[str]:
    """Pad (or cut) a row read from the tab to exactly ``COLUMN_COUNT`` string cells."""
    cells = [cell_text(value) for value in list(row)[:COLUMN_COUNT]]
    cells.extend([""] * (COLUMN_COUNT - len(cells)))
    return cells


def file_slots_from_row(row: Sequence[str]) -> List[FileRef]:
    files = []
    for slot in range(MAX_FILE_SLOTS):
        name = row[FIRST_FILE_COL + slot * 2]
        url = row[FIRST_FILE_COL + slot * 2 + 1]
        if name or url:
            files.append(FileRef(name=name, url=url))
    return files


def file_slot_cells(files: Sequence[FileRef]) -> List[str]:
    """Flatten up to five files into the ten name/url cells, blank-padded."""
    cells: List[str] = []
    for slot in range(MAX_FILE_SLOTS):
        if slot < len(files):
            cells.extend([files[slot].name or "", files[slot].url or ""])
        else:
            cells.extend(["", ""])
    return cells


def count_files(files: Sequence[FileRef]) -> int:
    return sum(1 for f in files[:MAX_FILE_SLOTS] if f.name or f.url)


def row_to_resource(row: Sequence[Any]) -> Resource:
    cells = normalize_row(row)
    values = {field: cells[index] for index, field in enumerate(SCALAR_FIELDS_HEAD)}
    try:
        file_count = int(float(cells[FILE_COUNT_COL])) if cells[FILE_COUNT_COL] else 0
    except ValueError:
        file_count = 0
    return Resource(
        **values,
        files=file_slots_from_row(cells),
        urls=decode_links(cells[URLS_COL]),
        drive_folder_link=cells[DRIVE_FOLDER_COL],
        file_count=file_count,
        status=cells[STATUS_COL],
        notes=cells[NOTES_COL],
    )


def build_row(
    scalars: dict,
    files: Sequence[FileRef],
    urls_cell: str,
    drive_folder_link: str,
    status: str,
    notes: str,
) -> List[Any]:
    """Assemble a full row from the scalar head fields and the tail columns."""
    row: List[Any] = [cell_text(scalars.get(field)) for field in SCALAR_FIELDS_HEAD]
    row.extend(file_slot_cells(files))
    row.extend([
        urls_cell,
        drive_folder_link,
        count_files(files),
        status,
        notes,
    ])
    return row
