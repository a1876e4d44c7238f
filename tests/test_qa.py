"""Tests for the bronze profiling and silver invariant checks."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from silver_core import EntityType
from silver_core.config import CleansingConfig
from silver_core.pipeline import run_pipeline
from silver_core.qa import QAReport, run_bronze_qa, run_silver_qa
from silver_core.qa.checks import (
    distinct_values,
    find_broken_version_chains,
    find_duplicate_keys,
    find_future_dates,
    find_invalid_date_ranges,
    find_untrimmed,
)
from silver_core.sinks import InMemorySink
from silver_core.sources import InMemorySource
from tests.sample_data import RUN_TIME, raw_batches, raw_customers


@pytest.fixture
def config() -> CleansingConfig:
    return CleansingConfig(now=RUN_TIME)


@pytest.fixture
def bronze_report(config: CleansingConfig) -> QAReport:
    return run_bronze_qa(raw_batches(), config)


def _count(report: QAReport, entity: EntityType, check: str) -> int:
    for finding in report.for_entity(entity):
        if finding.check == check:
            return finding.count
    return 0


class TestChecks:
    def test_find_duplicate_keys(self) -> None:
        dupes = find_duplicate_keys(raw_customers(), "cst_id")
        assert len(dupes) == 2
        assert dupes.loc[dupes["cst_id"] == 29466, "count"].item() == 3

    def test_find_untrimmed(self) -> None:
        flagged = find_untrimmed(raw_customers(), ["cst_firstname", "cst_lastname"])
        assert flagged.index.tolist() == [1, 2, 3]

    def test_distinct_values(self) -> None:
        counts = distinct_values(raw_customers(), "cst_gndr")
        assert dict(zip(counts["cst_gndr"].fillna("<null>"), counts["count"])) == {
            "M": 2,
            "F": 1,
            "f": 1,
            "<null>": 2,
        }

    def test_find_invalid_date_ranges(self) -> None:
        df = pd.DataFrame(
            {"start": ["2011-01-01", "2011-01-01", None], "end": ["2010-01-01", None, "2010-01-01"]}
        )
        assert find_invalid_date_ranges(df, "start", "end").index.tolist() == [0]

    def test_find_future_dates(self) -> None:
        df = pd.DataFrame({"d": ["2025-06-06", "2025-06-07", None, "garbage"]})
        assert find_future_dates(df, "d", RUN_TIME).index.tolist() == [1]

    def test_find_broken_version_chains(self) -> None:
        df = pd.DataFrame(
            {
                "prd_key": ["P", "P", "P", "Q"],
                "prd_start_dt": [
                    date(2011, 1, 1),
                    date(2012, 1, 1),
                    date(2013, 1, 1),
                    date(2011, 1, 1),
                ],
                "prd_end_dt": [date(2011, 12, 31), date(2012, 6, 30), None, None],
            }
        )
        assert find_broken_version_chains(df).index.tolist() == [1]


class TestBronzeQA:
    def test_customer_findings(self, bronze_report: QAReport) -> None:
        entity = EntityType.CRM_CUSTOMER
        assert _count(bronze_report, entity, "duplicate_keys") == 2
        assert _count(bronze_report, entity, "untrimmed") == 3
        assert _count(bronze_report, entity, "unmapped_marital_status") == 2
        assert _count(bronze_report, entity, "unmapped_gender") == 2

    def test_product_findings(self, bronze_report: QAReport) -> None:
        entity = EntityType.CRM_PRODUCT
        assert _count(bronze_report, entity, "invalid_date_ranges") == 2
        assert _count(bronze_report, entity, "invalid_cost") == 2
        assert "unmapped_product_line" not in bronze_report.checks_for(entity)

    def test_sales_findings(self, bronze_report: QAReport) -> None:
        entity = EntityType.CRM_SALES
        assert _count(bronze_report, entity, "invalid_sls_order_dt") == 2
        assert _count(bronze_report, entity, "invalid_sls_ship_dt") == 0
        assert _count(bronze_report, entity, "sales_inconsistencies") == 4

    def test_erp_findings(self, bronze_report: QAReport) -> None:
        assert _count(bronze_report, EntityType.ERP_CUSTOMER, "prefixed_ids") == 3
        assert _count(bronze_report, EntityType.ERP_CUSTOMER, "future_dates") == 1
        assert _count(bronze_report, EntityType.ERP_LOCATION, "separators_in_ids") == 4
        assert _count(bronze_report, EntityType.ERP_LOCATION, "non_canonical_country") == 4
        assert bronze_report.for_entity(EntityType.ERP_CATEGORY) == []

    def test_repairable_defects_are_warnings(self, bronze_report: QAReport) -> None:
        assert not bronze_report.has_errors
        assert bronze_report.rows[EntityType.CRM_CUSTOMER] == 6

    def test_missing_columns_is_an_error(self, config: CleansingConfig) -> None:
        raw = raw_customers().drop(columns=["cst_gndr"])
        report = run_bronze_qa({EntityType.CRM_CUSTOMER: raw}, config)
        assert report.has_errors
        assert report.errors[0].check == "missing_columns"

    @pytest.mark.parametrize("dtype", [object, "string"])
    def test_missing_and_blank_countries(self, config: CleansingConfig, dtype: object) -> None:
        raw = pd.DataFrame(
            {
                "cid": ["AW1", "AW2", "AW3", "AW4", "AW5", "AW6"],
                "cntry": pd.Series([None, np.nan, "", "DE", " us ", "France"], dtype=dtype),
            }
        )
        report = run_bronze_qa({EntityType.ERP_LOCATION: raw}, config)
        flagged = next(f for f in report.findings if f.check == "non_canonical_country")
        assert flagged.count == 5
        assert flagged.sample.index.tolist() == [0, 1, 2, 3, 4]

    def test_categorical_profiles(self, bronze_report: QAReport) -> None:
        genders = bronze_report.profiles[(EntityType.CRM_CUSTOMER, "cst_gndr")]
        counts = dict(zip(genders["cst_gndr"].fillna("<null>"), genders["count"]))
        assert counts == {"M": 2, "F": 1, "f": 1, "<null>": 2}

        lines = bronze_report.profiles[(EntityType.CRM_PRODUCT, "prd_line")]
        assert set(lines["prd_line"]) == {"S ", "s", "S", "R"}
        assert "ERP_LOCATION.cntry" in bronze_report.summary["profiled_columns"]

    def test_sample_rows(self, bronze_report: QAReport) -> None:
        finding = next(
            f
            for f in bronze_report.for_entity(EntityType.ERP_CUSTOMER)
            if f.check == "future_dates"
        )
        assert finding.sample["bdate"].tolist() == ["2099-01-01"]

    def test_summary(self, bronze_report: QAReport) -> None:
        summary = bronze_report.summary
        assert summary["layer"] == "bronze"
        assert summary["error_count"] == 0
        assert summary["checks"]["CRM_CUSTOMER.duplicate_keys"] == 2


class TestSilverQA:
    def test_cleansed_tables_pass(self, config: CleansingConfig) -> None:
        sink = InMemorySink()
        run_pipeline(InMemorySource(raw_batches()), sink, config=config)
        report = run_silver_qa(sink.tables, config)
        assert not report.has_errors, [f.message for f in report.errors]
        assert report.profiles == {}

    def test_raw_tables_fail(self, config: CleansingConfig) -> None:
        raw = raw_batches()
        report = run_silver_qa(
            {
                EntityType.CRM_CUSTOMER: raw[EntityType.CRM_CUSTOMER],
                EntityType.ERP_CUSTOMER: raw[EntityType.ERP_CUSTOMER],
            },
            config,
        )
        assert {"duplicate_keys", "untrimmed"} <= report.checks_for(EntityType.CRM_CUSTOMER)
        assert {"prefixed_ids", "future_dates", "invalid_gender"} <= report.checks_for(
            EntityType.ERP_CUSTOMER
        )

    def test_raw_product_table_misses_category_column(self, config: CleansingConfig) -> None:
        raw = raw_batches()[EntityType.CRM_PRODUCT]
        report = run_silver_qa({EntityType.CRM_PRODUCT: raw}, config)
        assert [f.check for f in report.errors] == ["missing_columns"]
