import io
import zipfile
from datetime import datetime

import pandas as pd
import pytest
from errors import ExportError
from export import (
    build_export_archive,
    default_filename_base,
    get_column_keys,
    selection_from_filtered,
)
from defaults import calculate_base_ranges, create_default_filters
from filtering import get_filtered_data


def read_archive(content: bytes, base: str) -> dict[str, pd.DataFrame]:
    with zipfile.ZipFile(io.BytesIO(content)) as zf:
        assert zf.namelist() == [f"{base}.xlsx"]
        workbook = zf.read(f"{base}.xlsx")
    return pd.read_excel(io.BytesIO(workbook), sheet_name=None, engine="openpyxl")


def test_get_column_keys_first_seen_order():
    rows = [{"b": 1, "a": 2}, {"a": 3, "c": 4}]
    assert get_column_keys(rows) == ["b", "a", "c"]


def test_default_filename_base():
    assert default_filename_base(datetime(2024, 3, 5, 14, 7, 9)) == "dashboard-export-2024-03-05T14-07-09"


def test_archive_has_one_sheet_per_dataset_in_fixed_order():
    selection = {
        "prospects": [{"name": "Asha", "title": "VP"}],
        "accounts": [{"name": "Acme", "country": "India"}, {"name": "Beta", "revenue": 5}],
    }
    filename, content = build_export_archive(selection, filename_base="report")

    assert filename == "report.zip"
    sheets = read_archive(content, "report")
    assert list(sheets) == ["Accounts", "Prospects"]
    assert list(sheets["Accounts"].columns) == ["name", "country", "revenue"]
    assert sheets["Accounts"]["name"].tolist() == ["Acme", "Beta"]


def test_empty_dataset_still_gets_a_sheet():
    _, content = build_export_archive({"centers": []}, filename_base="empty")
    sheets = read_archive(content, "empty")
    assert list(sheets) == ["Centers"]
    assert sheets["Centers"].empty


def test_progress_is_clamped_and_ends_at_100():
    events = []
    build_export_archive(
        {"accounts": [{"a": 1}], "centers": [{"b": 2}]},
        filename_base="p",
        on_progress=lambda pct, stage: events.append((pct, stage)),
    )

    percents = [p for p, _ in events]
    assert all(isinstance(p, int) and 0 <= p <= 100 for p in percents)
    assert percents == sorted(percents)
    assert events[-1] == (100, "Export ready")
    assert ("Adding Centers sheet" in [s for _, s in events])


def test_empty_selection_raises():
    with pytest.raises(ExportError):
        build_export_archive({})
    with pytest.raises(ExportError):
        build_export_archive({"unknown": [{"a": 1}]})


def test_export_filtered_models(dashboard_data):
    base = calculate_base_ranges(dashboard_data.accounts, dashboard_data.centers)
    filtered = get_filtered_data(dashboard_data, create_default_filters(base))
    selection = selection_from_filtered(filtered, ["accounts", "centers"])

    filename, content = build_export_archive(selection)
    base_name = filename[: -len(".zip")]
    assert base_name.startswith("dashboard-export-")

    sheets = read_archive(content, base_name)
    assert len(sheets["Accounts"]) == 4
    assert "account_global_legal_name" in sheets["Accounts"].columns
    assert sheets["Centers"]["cn_unique_key"].tolist() == ["C1", "C2", "C3", "C4", "C5"]
