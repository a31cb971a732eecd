"""
Spreadsheet export: one worksheet per dataset, zipped for download.
"""
import logging
import zipfile
from datetime import datetime
from io import BytesIO
from typing import Any, Callable, Iterable

import pandas as pd
from pydantic import BaseModel

from errors import ExportError
from models import FilteredData


logger = logging.getLogger(__name__)

ZIP_MIME_TYPE = "application/zip"

# Sheet order follows this mapping
DATASET_LABELS = {
    "accounts": "Accounts",
    "centers": "Centers",
    "services": "Services",
    "prospects": "Prospects",
}

ProgressHandler = Callable[[int, str], None]
RowRecord = dict[str, Any]


def _as_record(row: BaseModel | RowRecord) -> RowRecord:
    return row.model_dump() if isinstance(row, BaseModel) else dict(row)


def get_column_keys(rows: Iterable[RowRecord]) -> list[str]:
    """Union of row keys in first-seen order."""
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def default_filename_base(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"dashboard-export-{now.strftime('%Y-%m-%dT%H-%M-%S')}"


def selection_from_filtered(filtered: FilteredData, datasets: Iterable[str]) -> dict[str, list]:
    """Pick the requested datasets out of a filtered view."""
    available = {
        "accounts": filtered.filtered_accounts,
        "centers": filtered.filtered_centers,
        "services": filtered.filtered_services,
        "prospects": filtered.filtered_prospects,
    }
    return {name: available[name] for name in datasets if name in available}


def build_workbook(selection: dict[str, list], on_sheet: Callable[[int, str], None] | None = None) -> bytes:
    """Write the selected datasets as sheets of one xlsx workbook."""
    entries = [(key, selection[key]) for key in DATASET_LABELS if selection.get(key) is not None]
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for index, (key, rows) in enumerate(entries):
            records = [_as_record(row) for row in rows]
            df = pd.DataFrame.from_records(records, columns=get_column_keys(records))
            df.to_excel(writer, index=False, sheet_name=DATASET_LABELS[key])
            if on_sheet:
                on_sheet(index, DATASET_LABELS[key])
    return buffer.getvalue()


def build_export_archive(
    selection: dict[str, list],
    filename_base: str | None = None,
    on_progress: ProgressHandler | None = None,
) -> tuple[str, bytes]:
    """
    Build `<base>.zip` holding `<base>.xlsx`.

    Args:
        selection: Dataset key -> rows (models or dicts). Unknown keys are ignored.
        filename_base: Archive/workbook name without extension.
        on_progress: Called with (percent 0..100, stage label).

    Returns:
        (zip file name, zip bytes)

    Raises:
        ExportError: No known dataset was selected.
    """
    entries = [key for key in DATASET_LABELS if selection.get(key) is not None]
    if not entries:
        raise ExportError("No datasets selected for export")

    def update_progress(value: float, stage: str) -> None:
        if on_progress:
            on_progress(max(0, min(100, round(value))), stage)

    update_progress(5, "Preparing workbook")

    def on_sheet(index: int, label: str) -> None:
        update_progress(10 + (index + 1) / len(entries) * 40, f"Adding {label} sheet")

    base = filename_base or default_filename_base()
    workbook = build_workbook(selection, on_sheet)
    update_progress(60, "Generating spreadsheet")

    update_progress(70, "Building export archive")
    archive = BytesIO()
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(f"{base}.xlsx", workbook)
    update_progress(95, "Compressing export")

    logger.info(
        "Built export %s.zip (%s, %d bytes)",
        base,
        ", ".join(f"{len(selection[key])} {key}" for key in entries),
        archive.getbuffer().nbytes,
    )
    update_progress(100, "Export ready")
    return f"{base}.zip", archive.getvalue()
