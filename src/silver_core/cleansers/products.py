"""Silver layer: crm_prd_info cleanser.

``prd_key`` in the CRM export is a composite of the ERP category id and the
product key used by sales lines, e.g. ``CO-RF-FR-R92B-58``:

- ``cat_id``: first five characters with ``-`` replaced by ``_``
  (``CO_RF``), joinable with erp_px_cat_g1v2.id
- ``prd_key``: characters from position 7 on (``FR-R92B-58``), joinable
  with crm_sales_details.sls_prd_key

A product can have several historical versions. Within one product key,
ordered by start date, each version ends the day before the next one
starts. The last version keeps its raw end date (``last_end_date_policy =
"preserve"``) or is left open (``"open"``). A last version whose raw end
date precedes its own start date is not repaired.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import pandas as pd

from silver_core.cleansers.base import EntityCleanser
from silver_core.entities import EntityType
from silver_core.exceptions import DataQualityError
from silver_core.normalizers import (
    is_missing,
    map_code,
    non_negative_or_zero,
    to_date_objects,
    to_datetime_series,
    to_int_or_none,
    trim,
)

logger = logging.getLogger(__name__)

CATEGORY_ID_LENGTH = 5
PRODUCT_KEY_OFFSET = 6


def category_id_from_key(key: Any) -> Optional[str]:
    """Category id encoded in a composite product key.

    Examples:
        >>> category_id_from_key("AC-HE-HL-U509-R")
        'AC_HE'
    """
    if is_missing(key):
        return None
    return str(key)[:CATEGORY_ID_LENGTH].replace("-", "_")


def product_key_from_key(key: Any) -> Optional[str]:
    """Product key encoded in a composite product key.

    Examples:
        >>> product_key_from_key("AC-HE-HL-U509-R")
        'HL-U509-R'
    """
    if is_missing(key):
        return None
    return str(key)[PRODUCT_KEY_OFFSET:]


def repair_end_dates(
    keys: pd.Series,
    start: pd.Series,
    end: pd.Series,
    open_last: bool = False,
) -> pd.Series:
    """Chain product versions so each one ends the day before the next starts.

    Args:
        keys: Product key per row (versions of one product share a key).
        start: Start dates (datetime64).
        end: Raw end dates (datetime64).
        open_last: Set the end date of the last version of each product to
            NaT instead of keeping the raw value.

    Returns:
        Repaired end dates (datetime64), aligned with the inputs.

    Rows are ordered by start date within a key; missing start dates sort
    first and ties keep input order.
    """
    work = pd.DataFrame(
        {"key": keys, "start": start, "pos": range(len(keys))},
        index=keys.index,
    )
    ordered = work.sort_values(
        ["key", "start", "pos"], na_position="first", kind="mergesort"
    )
    grouped = ordered.groupby("key", dropna=False, sort=False)
    next_start = grouped["start"].shift(-1)
    has_next = grouped["pos"].shift(-1).notna()

    repaired = end.copy()
    chained = has_next[has_next].index
    repaired.loc[chained] = (next_start - pd.Timedelta(days=1)).loc[chained]
    if open_last:
        repaired.loc[has_next[~has_next].index] = pd.NaT
    return repaired


class ProductCleanser(EntityCleanser):
    entity = EntityType.CRM_PRODUCT

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        cfg = self.config

        df["prd_id"] = df["prd_id"].map(to_int_or_none).astype("Int64")
        self._check_ids(df["prd_id"])

        composite = df["prd_key"]
        df["cat_id"] = composite.map(category_id_from_key)
        df["prd_key"] = composite.map(product_key_from_key)
        df["prd_nm"] = df["prd_nm"].map(trim)

        self._log_repairs("missing costs set to 0", int(df["prd_cost"].map(is_missing).sum()))
        df["prd_cost"] = df["prd_cost"].map(non_negative_or_zero)
        df["prd_line"] = df["prd_line"].map(
            lambda c: map_code(c, cfg.product_line_codes, cfg.default_label)
        )

        start = to_datetime_series(df["prd_start_dt"])
        end = to_datetime_series(df["prd_end_dt"])
        repaired = repair_end_dates(
            df["prd_key"],
            start,
            end,
            open_last=cfg.last_end_date_policy == "open",
        )
        changed = ~((repaired == end) | (repaired.isna() & end.isna()))
        self._log_repairs("end dates rewritten", int(changed.sum()))

        df["prd_start_dt"] = to_date_objects(start)
        df["prd_end_dt"] = to_date_objects(repaired)
        return df

    def _check_ids(self, ids: pd.Series) -> None:
        null_ids = int(ids.isna().sum())
        duplicate_ids = int(ids[ids.notna()].duplicated().sum())
        if not null_ids and not duplicate_ids:
            return
        message = (
            f"{self.entity.value}: prd_id should be unique and not null "
            f"({duplicate_ids} duplicates, {null_ids} nulls)"
        )
        if self.config.strict_product_ids:
            raise DataQualityError(message)
        logger.warning(message)
