"""Tests for the crm_cust_info cleanser."""

from datetime import date

import pandas as pd
import pytest

from silver_core.cleansers import CustomerCleanser
from silver_core.exceptions import StructuralDefectError
from tests.sample_data import raw_customers


@pytest.fixture
def cleansed() -> pd.DataFrame:
    return CustomerCleanser().clean(raw_customers())


def test_one_row_per_customer_id(cleansed: pd.DataFrame) -> None:
    assert cleansed["cst_id"].tolist() == [29466, 11000, 11001]
    assert not cleansed["cst_id"].duplicated().any()


def test_null_ids_are_dropped(cleansed: pd.DataFrame) -> None:
    assert cleansed["cst_id"].notna().all()
    assert "SF1566" not in cleansed["cst_key"].tolist()


def test_latest_created_row_wins(cleansed: pd.DataFrame) -> None:
    row = cleansed.set_index("cst_id").loc[29466]
    assert row["cst_create_date"] == date(2026, 1, 27)
    # the 2026-01-27 row has no marital status and gender "M"
    assert row["cst_marital_status"] == "n/a"
    assert row["cst_gndr"] == "Male"


def test_names_are_trimmed(cleansed: pd.DataFrame) -> None:
    row = cleansed.set_index("cst_id").loc[11000]
    assert row["cst_firstname"] == "Jon"
    assert row["cst_lastname"] == "Yang"


def test_codes_are_mapped_to_labels(cleansed: pd.DataFrame) -> None:
    by_id = cleansed.set_index("cst_id")
    assert by_id.loc[11000, "cst_marital_status"] == "Married"
    assert by_id.loc[11000, "cst_gndr"] == "Female"
    assert by_id.loc[11001, "cst_marital_status"] == "n/a"
    assert by_id.loc[11001, "cst_gndr"] == "n/a"


def test_output_columns_in_table_order(cleansed: pd.DataFrame) -> None:
    assert list(cleansed.columns) == [
        "cst_id",
        "cst_key",
        "cst_firstname",
        "cst_lastname",
        "cst_marital_status",
        "cst_gndr",
        "cst_create_date",
    ]


def test_ids_read_as_text_are_accepted() -> None:
    # "29466.0" and "nan", as a text reader would hand them over
    raw = raw_customers().astype({"cst_id": str})
    out = CustomerCleanser().clean(raw)
    assert out["cst_id"].tolist() == [29466, 11000, 11001]


def test_unparseable_create_date_ranks_lowest() -> None:
    raw = pd.DataFrame(
        {
            "cst_id": [5, 5],
            "cst_key": ["A", "B"],
            "cst_firstname": ["x", "y"],
            "cst_lastname": ["x", "y"],
            "cst_marital_status": ["S", "S"],
            "cst_gndr": ["M", "M"],
            "cst_create_date": ["2024-01-01", "not a date"],
        }
    )
    out = CustomerCleanser().clean(raw)
    assert out["cst_key"].tolist() == ["A"]


def test_extra_columns_are_ignored() -> None:
    raw = raw_customers()
    raw["loaded_at"] = "2025-06-06"
    out = CustomerCleanser().clean(raw)
    assert "loaded_at" not in out.columns


def test_missing_column_is_a_structural_defect() -> None:
    raw = raw_customers().drop(columns=["cst_create_date"])
    with pytest.raises(StructuralDefectError) as exc_info:
        CustomerCleanser().clean(raw)
    assert exc_info.value.missing_columns == ["cst_create_date"]
    assert "cst_create_date" in str(exc_info.value)


def test_raw_batch_is_not_modified() -> None:
    raw = raw_customers()
    before = raw.copy()
    CustomerCleanser().clean(raw)
    pd.testing.assert_frame_equal(raw, before)


def test_empty_batch_gives_empty_table() -> None:
    raw = raw_customers().iloc[0:0]
    out = CustomerCleanser().clean(raw)
    assert out.empty
    assert list(out.columns) == list(raw.columns)
