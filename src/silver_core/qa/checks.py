"""Data quality checks for bronze and silver tables.

Each check takes a DataFrame and returns the offending rows (or groups) as
a DataFrame, empty when the table passes. Raw values are parsed with the
same normalizers the cleansers use, so a check flags exactly what the
cleanser would repair.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime

import numpy as np
import pandas as pd

from silver_core.normalizers import (
    is_missing,
    naive_timestamp,
    repair_numeric_date,
    to_datetime_series,
    to_float,
    trim,
)


def find_duplicate_keys(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """Keys that occur more than once, plus the null key if present.

    Returns:
        DataFrame with columns ``[key, "count"]``.
    """
    if df.empty:
        return pd.DataFrame({key: [], "count": []})
    counts = df.groupby(key, dropna=False).size().reset_index(name="count")
    return counts[(counts["count"] > 1) | counts[key].isna()].reset_index(drop=True)


def find_untrimmed(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Rows where any of ``columns`` has leading or trailing whitespace."""
    mask = pd.Series(False, index=df.index)
    for col in columns:
        values = df[col]
        mask |= values.map(lambda v: not is_missing(v) and str(v) != trim(v)).astype(bool)
    return df[mask]


def distinct_values(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Distinct raw values of a categorical column with their counts."""
    counts = df[column].value_counts(dropna=False)
    return counts.rename_axis(column).reset_index(name="count")


def find_unmapped_codes(
    df: pd.DataFrame,
    column: str,
    table: Mapping[str, str],
) -> pd.DataFrame:
    """Rows whose code is missing or unknown to ``table`` (they map to "n/a")."""
    known = {k.upper() for k in table}
    mask = df[column].map(lambda v: (trim(v) or "").upper() not in known).astype(bool)
    return df[mask]


def find_invalid_date_ranges(df: pd.DataFrame, start: str, end: str) -> pd.DataFrame:
    """Rows whose end date precedes their start date."""
    start_ts = to_datetime_series(df[start])
    end_ts = to_datetime_series(df[end])
    return df[end_ts < start_ts]


def find_future_dates(df: pd.DataFrame, column: str, now: datetime) -> pd.DataFrame:
    """Rows whose date lies after ``now``."""
    ts = to_datetime_series(df[column])
    return df[ts > naive_timestamp(now)]


def find_invalid_numeric_dates(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Rows whose YYYYMMDD value is present but cannot be decoded."""
    mask = df[column].map(
        lambda v: not is_missing(v) and repair_numeric_date(v) is None
    ).astype(bool)
    return df[mask]


def find_sales_inconsistencies(df: pd.DataFrame) -> pd.DataFrame:
    """Sales lines whose amount or price needs repair.

    A line is inconsistent when ``sls_sales`` is missing, not positive or
    differs from ``sls_quantity * |sls_price|``, or when ``sls_price`` is
    missing or not positive.
    """
    sales = df["sls_sales"].map(to_float).astype(float)
    quantity = df["sls_quantity"].map(to_float).astype(float)
    price = df["sls_price"].map(to_float).astype(float)
    expected = quantity * price.abs()

    bad_sales = sales.isna() | (sales <= 0)
    mismatch = expected.notna() & ~np.isclose(
        sales.fillna(0.0), expected.fillna(0.0), rtol=0.0, atol=1e-9
    )
    bad_price = price.isna() | (price <= 0)
    return df[bad_sales | mismatch | bad_price]


def find_broken_version_chains(
    df: pd.DataFrame,
    key: str = "prd_key",
    start: str = "prd_start_dt",
    end: str = "prd_end_dt",
) -> pd.DataFrame:
    """Versions that do not end the day before the next version starts.

    Rows are grouped by ``key`` and ordered by ``start``; the last version
    of each key is not checked.
    """
    work = pd.DataFrame(
        {
            "key": df[key],
            "start": to_datetime_series(df[start]),
            "end": to_datetime_series(df[end]),
        },
        index=df.index,
    )
    ordered = work.sort_values(["key", "start"], na_position="first", kind="mergesort")
    next_start = ordered.groupby("key", dropna=False, sort=False)["start"].shift(-1)
    expected_end = next_start - pd.Timedelta(days=1)
    broken = expected_end.notna() & (ordered["end"] != expected_end)
    return df.loc[broken[broken].index]


def find_values_outside(
    df: pd.DataFrame,
    column: str,
    allowed: Sequence[str] | frozenset[str],
) -> pd.DataFrame:
    """Rows whose value is not one of ``allowed``."""
    return df[~df[column].isin(list(allowed))]


def find_containing(df: pd.DataFrame, column: str, chars: str) -> pd.DataFrame:
    """Rows whose value contains any of ``chars``."""
    mask = df[column].map(
        lambda v: not is_missing(v) and any(c in str(v) for c in chars)
    ).astype(bool)
    return df[mask]


def find_prefixed(df: pd.DataFrame, column: str, prefix: str) -> pd.DataFrame:
    """Rows whose trimmed value starts with ``prefix``."""
    mask = df[column].map(
        lambda v: not is_missing(v) and str(v).strip().startswith(prefix)
    ).astype(bool)
    return df[mask]


def find_sales_mismatches(df: pd.DataFrame) -> pd.DataFrame:
    """Sales lines where amount, quantity and price are all present but
    ``sls_sales != sls_quantity * |sls_price|``."""
    sales = df["sls_sales"].map(to_float).astype(float)
    quantity = df["sls_quantity"].map(to_float).astype(float)
    price = df["sls_price"].map(to_float).astype(float)
    expected = quantity * price.abs()
    present = sales.notna() & expected.notna()
    mismatch = ~np.isclose(sales.fillna(0.0), expected.fillna(0.0), rtol=1e-9, atol=1e-9)
    return df[present & mismatch]
