"""Silver layer: crm_sales_details cleanser.

Date repair:
    ``sls_order_dt``, ``sls_ship_dt`` and ``sls_due_dt`` arrive as YYYYMMDD
    integers; 0 and values that are not eight digits long become null.

Amount repair (in this order):
    1. ``sls_sales`` is replaced by ``quantity * |price|`` when it is null,
       not positive, or differs from that product. When the product cannot
       be computed (price or quantity missing) a positive stored value is
       kept.
    2. ``sls_price`` is replaced by ``sales / quantity`` when it is null or
       not positive, using the sales value from step 1. A zero quantity
       yields a null price.

``sls_quantity`` is passed through; it stays integral when the raw
quantities are whole numbers.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from silver_core.cleansers.base import EntityCleanser
from silver_core.entities import EntityType
from silver_core.normalizers import is_missing, repair_numeric_date, to_float, to_int_or_none

DATE_COLUMNS = ("sls_order_dt", "sls_ship_dt", "sls_due_dt")


def _numeric(values: pd.Series) -> pd.Series:
    return values.map(to_float).astype(float)


def _integral(values: pd.Series) -> pd.Series:
    """Nullable integers when every present value is whole, else the floats."""
    present = values.dropna()
    if (present == present.round()).all():
        return values.round().astype("Int64")
    return values


def recompute_sales(sales: pd.Series, quantity: pd.Series, price: pd.Series) -> pd.Series:
    """Sales amount after consistency repair (step 1)."""
    expected = quantity * price.abs()
    mismatch = expected.notna() & ~np.isclose(
        sales.fillna(0.0), expected.fillna(0.0), rtol=0.0, atol=1e-9
    )
    invalid = sales.isna() | (sales <= 0) | mismatch
    return sales.where(~invalid, expected)


def derive_price(price: pd.Series, sales: pd.Series, quantity: pd.Series) -> pd.Series:
    """Unit price after repair (step 2)."""
    invalid = price.isna() | (price <= 0)
    derived = sales / quantity.where(quantity != 0)
    return price.where(~invalid, derived)


class SalesCleanser(EntityCleanser):
    entity = EntityType.CRM_SALES

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        for col in DATE_COLUMNS:
            repaired = df[col].map(repair_numeric_date)
            nulled = int((repaired.isna() & ~df[col].map(is_missing)).sum())
            self._log_repairs(f"invalid {col} values set to null", nulled)
            df[col] = repaired.astype(object)

        df["sls_cust_id"] = df["sls_cust_id"].map(to_int_or_none).astype("Int64")

        sales = _numeric(df["sls_sales"])
        quantity = _numeric(df["sls_quantity"])
        price = _numeric(df["sls_price"])

        new_sales = recompute_sales(sales, quantity, price)
        new_price = derive_price(price, new_sales, quantity)

        self._log_repairs(
            "sales amounts recomputed",
            int((~np.isclose(new_sales.fillna(-1.0), sales.fillna(-1.0))).sum()),
        )
        self._log_repairs(
            "prices derived from sales",
            int((price.isna() | (price <= 0)).sum()),
        )

        df["sls_sales"] = new_sales
        df["sls_quantity"] = _integral(quantity)
        df["sls_price"] = new_price
        return df
