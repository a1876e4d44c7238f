"""Silver layer: crm_cust_info cleanser.

The CRM re-exports customers, so one ``cst_id`` can appear several times.
The cleanser keeps the most recently created row per id, drops rows
without an id, trims names and maps marital status and gender codes to
labels.
"""

from __future__ import annotations

import pandas as pd

from silver_core.cleansers.base import EntityCleanser
from silver_core.dedup import keep_latest
from silver_core.entities import EntityType
from silver_core.normalizers import (
    map_code,
    to_date_objects,
    to_datetime_series,
    to_int_or_none,
    trim,
)


class CustomerCleanser(EntityCleanser):
    entity = EntityType.CRM_CUSTOMER

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        cfg = self.config

        df["cst_id"] = df["cst_id"].map(to_int_or_none).astype("Int64")
        df["cst_create_date"] = to_datetime_series(df["cst_create_date"])

        self._log_repairs("rows dropped for missing cst_id", int(df["cst_id"].isna().sum()))
        out = keep_latest(df, key="cst_id", order_by="cst_create_date")
        self._log_repairs(
            "historical duplicates collapsed to the latest row",
            int(df["cst_id"].notna().sum()) - len(out),
        )

        out["cst_firstname"] = out["cst_firstname"].map(trim)
        out["cst_lastname"] = out["cst_lastname"].map(trim)
        out["cst_marital_status"] = out["cst_marital_status"].map(
            lambda c: map_code(c, cfg.marital_status_codes, cfg.default_label)
        )
        out["cst_gndr"] = out["cst_gndr"].map(
            lambda c: map_code(c, cfg.gender_codes, cfg.default_label)
        )
        out["cst_create_date"] = to_date_objects(out["cst_create_date"])
        return out
