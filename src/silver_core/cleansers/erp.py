"""Silver layer: ERP table cleansers.

- erp_cust_az12: strip the ``NAS`` prefix from ``cid`` so it joins with
  crm_cust_info.cst_key, null out birth dates in the future and map gender
  spellings to labels.
- erp_loc_a101: remove ``-`` from ``cid`` and canonicalize country names.
- erp_px_cat_g1v2: already clean; projected as is.
"""

from __future__ import annotations

import pandas as pd

from silver_core.cleansers.base import EntityCleanser
from silver_core.entities import EntityType
from silver_core.normalizers import (
    canonical_country,
    map_code,
    naive_timestamp,
    strip_known_prefix,
    strip_separators,
    to_date_objects,
    to_datetime_series,
)


class ErpCustomerCleanser(EntityCleanser):
    entity = EntityType.ERP_CUSTOMER

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        cfg = self.config
        now = naive_timestamp(cfg.processing_time())

        df["cid"] = df["cid"].map(lambda v: strip_known_prefix(v, cfg.erp_customer_id_prefix))

        bdate = to_datetime_series(df["bdate"])
        future = bdate > now
        self._log_repairs(f"birth dates after {now:%Y-%m-%d} set to null", int(future.sum()))
        df["bdate"] = to_date_objects(bdate.mask(future))

        df["gen"] = df["gen"].map(lambda c: map_code(c, cfg.erp_gender_codes, cfg.default_label))
        return df


class ErpLocationCleanser(EntityCleanser):
    entity = EntityType.ERP_LOCATION

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        cfg = self.config
        df["cid"] = df["cid"].map(lambda v: strip_separators(v, cfg.location_id_separators))
        df["cntry"] = df["cntry"].map(
            lambda v: canonical_country(v, cfg.country_codes, cfg.default_label)
        )
        return df


class ErpCategoryCleanser(EntityCleanser):
    entity = EntityType.ERP_CATEGORY

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return df
