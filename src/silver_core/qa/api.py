"""Public API for the Silver QA checks.

Profiles raw (bronze) batches before cleansing and re-checks the documented
invariants on cleansed (silver) snapshots, in memory:

- does NOT read or write any files,
- does NOT print (logging only).

Levels:
    WARN: a defect the cleansers repair (bronze) or a soft anomaly.
    ERROR: a structural problem (missing columns) or a broken silver
        invariant.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pandas as pd

from silver_core import rules
from silver_core.config import CleansingConfig
from silver_core.entities import EntityType
from silver_core.normalizers import canonical_country, to_float, trim
from silver_core.qa import checks

logger = logging.getLogger(__name__)

SAMPLE_ROWS = 20

# Categorical raw columns whose distinct codes are profiled before cleansing
PROFILED_COLUMNS: dict[EntityType, tuple[str, ...]] = {
    EntityType.CRM_CUSTOMER: ("cst_marital_status", "cst_gndr"),
    EntityType.CRM_PRODUCT: ("prd_line",),
    EntityType.ERP_CUSTOMER: ("gen",),
    EntityType.ERP_LOCATION: ("cntry",),
    EntityType.ERP_CATEGORY: ("maintenance",),
}


@dataclass
class QAFinding:
    """A single QA check result.

    Attributes:
        entity: Entity the check ran on.
        check: Check name (e.g. "duplicate_keys").
        level: "ERROR" or "WARN".
        count: Number of offending rows or keys.
        message: Human-readable description.
        sample: First offending rows, for inspection.
    """

    entity: EntityType
    check: str
    level: str
    count: int
    message: str
    sample: Optional[pd.DataFrame] = None


@dataclass
class QAReport:
    """Result of a QA run.

    Attributes:
        layer: "bronze" or "silver".
        findings: Every check that flagged at least one row.
        rows: Row count per entity checked.
        profiles: Distinct values with counts per (entity, column), for
            the categorical columns of the bronze tables.
    """

    layer: str
    findings: list[QAFinding] = field(default_factory=list)
    rows: dict[EntityType, int] = field(default_factory=dict)
    profiles: dict[tuple[EntityType, str], pd.DataFrame] = field(default_factory=dict)

    @property
    def errors(self) -> list[QAFinding]:
        return [f for f in self.findings if f.level == "ERROR"]

    @property
    def warnings(self) -> list[QAFinding]:
        return [f for f in self.findings if f.level == "WARN"]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def for_entity(self, entity: EntityType) -> list[QAFinding]:
        return [f for f in self.findings if f.entity is entity]

    def checks_for(self, entity: EntityType) -> set[str]:
        return {f.check for f in self.for_entity(entity)}

    @property
    def summary(self) -> dict:
        return {
            "layer": self.layer,
            "entities": len(self.rows),
            "total_rows": sum(self.rows.values()),
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "checks": {f"{f.entity.value}.{f.check}": f.count for f in self.findings},
            "profiled_columns": [f"{e.value}.{c}" for e, c in self.profiles],
        }


class _Collector:
    def __init__(self, report: QAReport, entity: EntityType) -> None:
        self.report = report
        self.entity = entity

    def add(self, check: str, level: str, flagged: pd.DataFrame, message: str) -> None:
        if flagged.empty:
            return
        self.report.findings.append(
            QAFinding(
                entity=self.entity,
                check=check,
                level=level,
                count=len(flagged),
                message=f"{self.entity.table}: {len(flagged)} {message}",
                sample=flagged.head(SAMPLE_ROWS),
            )
        )


def _has_columns(collector: _Collector, df: pd.DataFrame, columns: tuple[str, ...]) -> bool:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        collector.report.findings.append(
            QAFinding(
                entity=collector.entity,
                check="missing_columns",
                level="ERROR",
                count=len(missing),
                message=f"{collector.entity.table}: missing columns {missing}",
            )
        )
        return False
    return True


def _bronze_checks(
    c: _Collector, df: pd.DataFrame, cfg: CleansingConfig, now: datetime
) -> None:
    entity = c.entity
    if entity is EntityType.CRM_CUSTOMER:
        c.add(
            "duplicate_keys",
            "WARN",
            checks.find_duplicate_keys(df, "cst_id"),
            "cst_id values duplicated or null",
        )
        c.add(
            "untrimmed",
            "WARN",
            checks.find_untrimmed(df, ["cst_firstname", "cst_lastname"]),
            "names with surrounding spaces",
        )
        c.add(
            "unmapped_marital_status",
            "WARN",
            checks.find_unmapped_codes(df, "cst_marital_status", cfg.marital_status_codes),
            "marital status codes mapped to n/a",
        )
        c.add(
            "unmapped_gender",
            "WARN",
            checks.find_unmapped_codes(df, "cst_gndr", cfg.gender_codes),
            "gender codes mapped to n/a",
        )

    elif entity is EntityType.CRM_PRODUCT:
        costs = df["prd_cost"].map(to_float).astype(float)
        c.add(
            "duplicate_keys",
            "WARN",
            checks.find_duplicate_keys(df, "prd_id"),
            "prd_id values duplicated or null",
        )
        c.add(
            "untrimmed",
            "WARN",
            checks.find_untrimmed(df, ["prd_nm"]),
            "product names with surrounding spaces",
        )
        c.add(
            "invalid_cost",
            "WARN",
            df[costs.isna() | (costs < 0)],
            "costs missing or negative",
        )
        c.add(
            "unmapped_product_line",
            "WARN",
            checks.find_unmapped_codes(df, "prd_line", cfg.product_line_codes),
            "product line codes mapped to n/a",
        )
        c.add(
            "invalid_date_ranges",
            "WARN",
            checks.find_invalid_date_ranges(df, "prd_start_dt", "prd_end_dt"),
            "versions ending before they start",
        )

    elif entity is EntityType.CRM_SALES:
        for col in ("sls_order_dt", "sls_ship_dt", "sls_due_dt"):
            c.add(
                f"invalid_{col}",
                "WARN",
                checks.find_invalid_numeric_dates(df, col),
                f"{col} values that are not YYYYMMDD dates",
            )
        c.add(
            "sales_inconsistencies",
            "WARN",
            checks.find_sales_inconsistencies(df),
            "lines with inconsistent sales, quantity and price",
        )

    elif entity is EntityType.ERP_CUSTOMER:
        c.add(
            "duplicate_keys",
            "WARN",
            checks.find_duplicate_keys(df, "cid"),
            "cid values duplicated or null",
        )
        c.add(
            "prefixed_ids",
            "WARN",
            checks.find_prefixed(df, "cid", cfg.erp_customer_id_prefix),
            f"cid values carrying the {cfg.erp_customer_id_prefix} prefix",
        )
        c.add(
            "future_dates",
            "WARN",
            checks.find_future_dates(df, "bdate", now),
            "birth dates in the future",
        )
        c.add(
            "unmapped_gender",
            "WARN",
            checks.find_unmapped_codes(df, "gen", cfg.erp_gender_codes),
            "gender values mapped to n/a",
        )

    elif entity is EntityType.ERP_LOCATION:
        canonical = df["cntry"].astype(object).map(
            lambda v: canonical_country(v, cfg.country_codes, cfg.default_label) != trim(v)
        )
        c.add(
            "separators_in_ids",
            "WARN",
            checks.find_containing(df, "cid", cfg.location_id_separators),
            "cid values containing separators",
        )
        c.add(
            "non_canonical_country",
            "WARN",
            df[canonical.astype(bool)],
            "country values that are blank or coded",
        )

    elif entity is EntityType.ERP_CATEGORY:
        c.add(
            "duplicate_keys",
            "WARN",
            checks.find_duplicate_keys(df, "id"),
            "id values duplicated or null",
        )


def _silver_checks(
    c: _Collector, df: pd.DataFrame, cfg: CleansingConfig, now: datetime
) -> None:
    entity = c.entity
    if entity is EntityType.CRM_CUSTOMER:
        c.add(
            "duplicate_keys",
            "ERROR",
            checks.find_duplicate_keys(df, "cst_id"),
            "cst_id values duplicated or null",
        )
        c.add(
            "untrimmed",
            "ERROR",
            checks.find_untrimmed(df, ["cst_firstname", "cst_lastname"]),
            "names with surrounding spaces",
        )
        c.add(
            "invalid_marital_status",
            "ERROR",
            checks.find_values_outside(df, "cst_marital_status", rules.MARITAL_STATUS_LABELS),
            "marital status values outside the label set",
        )
        c.add(
            "invalid_gender",
            "ERROR",
            checks.find_values_outside(df, "cst_gndr", rules.GENDER_LABELS),
            "gender values outside the label set",
        )

    elif entity is EntityType.CRM_PRODUCT:
        c.add(
            "broken_version_chains",
            "ERROR",
            checks.find_broken_version_chains(df),
            "versions not ending the day before the next one starts",
        )
        c.add(
            "invalid_product_line",
            "ERROR",
            checks.find_values_outside(df, "prd_line", rules.PRODUCT_LINE_LABELS),
            "product lines outside the label set",
        )
        c.add("missing_cost", "ERROR", df[df["prd_cost"].isna()], "missing costs")
        # last versions keep their raw end date, which may precede the start
        c.add(
            "invalid_date_ranges",
            "WARN",
            checks.find_invalid_date_ranges(df, "prd_start_dt", "prd_end_dt"),
            "versions ending before they start",
        )

    elif entity is EntityType.CRM_SALES:
        c.add(
            "sales_mismatches",
            "ERROR",
            checks.find_sales_mismatches(df),
            "lines where sales != quantity * |price|",
        )

    elif entity is EntityType.ERP_CUSTOMER:
        c.add(
            "prefixed_ids",
            "ERROR",
            checks.find_prefixed(df, "cid", cfg.erp_customer_id_prefix),
            f"cid values still carrying the {cfg.erp_customer_id_prefix} prefix",
        )
        c.add(
            "future_dates",
            "ERROR",
            checks.find_future_dates(df, "bdate", now),
            "birth dates in the future",
        )
        c.add(
            "invalid_gender",
            "ERROR",
            checks.find_values_outside(df, "gen", rules.GENDER_LABELS),
            "gender values outside the label set",
        )

    elif entity is EntityType.ERP_LOCATION:
        c.add(
            "separators_in_ids",
            "ERROR",
            checks.find_containing(df, "cid", cfg.location_id_separators),
            "cid values still containing separators",
        )


def _run(
    layer: str,
    batches: Mapping[EntityType, pd.DataFrame],
    config: Optional[CleansingConfig],
) -> QAReport:
    cfg = config or CleansingConfig()
    now = cfg.processing_time()
    report = QAReport(layer=layer)
    for entity, df in batches.items():
        report.rows[entity] = len(df)
        collector = _Collector(report, entity)
        columns = entity.layout.raw_columns if layer == "bronze" else entity.layout.clean_columns
        if not _has_columns(collector, df, columns):
            continue
        if layer == "bronze":
            for column in PROFILED_COLUMNS.get(entity, ()):
                report.profiles[(entity, column)] = checks.distinct_values(df, column)
            _bronze_checks(collector, df, cfg, now)
        else:
            _silver_checks(collector, df, cfg, now)

    logger.info(
        "QA (%s) complete: %d entities, %d errors, %d warnings",
        layer,
        len(report.rows),
        len(report.errors),
        len(report.warnings),
    )
    for finding in report.findings:
        if finding.level == "ERROR":
            logger.error("%s", finding.message)
        else:
            logger.debug("%s", finding.message)
    return report


def run_bronze_qa(
    batches: Mapping[EntityType, pd.DataFrame],
    config: Optional[CleansingConfig] = None,
) -> QAReport:
    """Profile raw batches before cleansing.

    Args:
        batches: Raw DataFrame per entity (any subset of entities).
        config: Rule tables and processing time; defaults to
            :class:`CleansingConfig`.

    Returns:
        QAReport with WARN findings for defects the cleansers repair and
        ERROR findings for missing columns.
    """
    return _run("bronze", batches, config)


def run_silver_qa(
    batches: Mapping[EntityType, pd.DataFrame],
    config: Optional[CleansingConfig] = None,
) -> QAReport:
    """Check cleansed snapshots against the silver invariants.

    Args:
        batches: Cleansed DataFrame per entity (any subset of entities).
        config: Rule tables and processing time; defaults to
            :class:`CleansingConfig`.

    Returns:
        QAReport whose ERROR findings are invariant violations.
    """
    return _run("silver", batches, config)
