"""Tests for the crm_sales_details cleanser."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from silver_core.cleansers import SalesCleanser
from silver_core.cleansers.sales import derive_price, recompute_sales
from tests.sample_data import raw_sales


@pytest.fixture
def cleansed() -> pd.DataFrame:
    return SalesCleanser().clean(raw_sales()).set_index("sls_ord_num")


def _f(values: list) -> pd.Series:
    return pd.Series(values, dtype=float)


class TestDateRepair:
    def test_valid_dates_are_decoded(self, cleansed: pd.DataFrame) -> None:
        row = cleansed.loc["SO43697"]
        assert row["sls_order_dt"] == date(2010, 12, 29)
        assert row["sls_ship_dt"] == date(2011, 1, 5)
        assert row["sls_due_dt"] == date(2011, 1, 10)

    def test_zero_date_becomes_null(self, cleansed: pd.DataFrame) -> None:
        assert cleansed.loc["SO43698", "sls_order_dt"] is None

    def test_short_date_becomes_null(self, cleansed: pd.DataFrame) -> None:
        assert cleansed.loc["SO43700", "sls_order_dt"] is None


class TestAmountRepair:
    def test_missing_sales_recomputed(self, cleansed: pd.DataFrame) -> None:
        assert cleansed.loc["SO43697", "sls_sales"] == 250.0
        assert cleansed.loc["SO43697", "sls_price"] == 25.0

    def test_consistent_row_unchanged(self, cleansed: pd.DataFrame) -> None:
        assert cleansed.loc["SO43698", "sls_sales"] == 3400.0
        assert cleansed.loc["SO43698", "sls_price"] == 3400.0

    def test_negative_sales_recomputed(self, cleansed: pd.DataFrame) -> None:
        assert cleansed.loc["SO43699", "sls_sales"] == 50.0

    def test_zero_quantity_gives_null_price(self, cleansed: pd.DataFrame) -> None:
        # no price to recompute from: the positive stored amount is kept
        assert cleansed.loc["SO43700", "sls_sales"] == 100.0
        assert pd.isna(cleansed.loc["SO43700", "sls_price"])

    def test_negative_price_derived_from_sales(self, cleansed: pd.DataFrame) -> None:
        assert cleansed.loc["SO43701", "sls_sales"] == 699.0
        assert cleansed.loc["SO43701", "sls_price"] == 699.0

    def test_customer_ids_are_integers(self, cleansed: pd.DataFrame) -> None:
        assert str(cleansed["sls_cust_id"].dtype) == "Int64"

    def test_sales_equal_quantity_times_price_when_all_present(
        self, cleansed: pd.DataFrame
    ) -> None:
        complete = cleansed.dropna(subset=["sls_sales", "sls_quantity", "sls_price"])
        complete = complete[complete["sls_quantity"] > 0]
        expected = complete["sls_quantity"].astype(float) * complete["sls_price"]
        assert np.allclose(complete["sls_sales"].astype(float), expected.astype(float))

    def test_quantity_stays_integral(self, cleansed: pd.DataFrame) -> None:
        assert str(cleansed["sls_quantity"].dtype) == "Int64"
        assert cleansed["sls_quantity"].tolist() == [10, 1, 2, 0, 1]

    def test_fractional_quantity_kept_as_float(self) -> None:
        raw = raw_sales()
        raw["sls_quantity"] = [10, 1.5, 2, None, 1]
        out = SalesCleanser().clean(raw)
        assert out["sls_quantity"].dtype == float
        assert out.loc[1, "sls_quantity"] == 1.5


class TestRecomputeSales:
    def test_mismatch_uses_absolute_price(self) -> None:
        out = recompute_sales(_f([10]), _f([3]), _f([-4]))
        assert out.tolist() == [12.0]

    def test_matching_value_kept(self) -> None:
        out = recompute_sales(_f([12]), _f([3]), _f([4]))
        assert out.tolist() == [12.0]

    def test_null_when_nothing_to_recompute_from(self) -> None:
        out = recompute_sales(_f([None]), _f([3]), _f([None]))
        assert pd.isna(out.iloc[0])

    def test_non_positive_sales_without_price_becomes_null(self) -> None:
        out = recompute_sales(_f([-5]), _f([None]), _f([2]))
        assert pd.isna(out.iloc[0])


class TestDerivePrice:
    def test_price_kept_when_positive(self) -> None:
        assert derive_price(_f([7]), _f([100]), _f([2])).tolist() == [7.0]

    def test_price_derived_when_zero(self) -> None:
        assert derive_price(_f([0]), _f([100]), _f([4])).tolist() == [25.0]

    def test_non_integral_quotient(self) -> None:
        assert derive_price(_f([None]), _f([10]), _f([4])).tolist() == [2.5]

    def test_zero_quantity(self) -> None:
        assert pd.isna(derive_price(_f([None]), _f([10]), _f([0])).iloc[0])
