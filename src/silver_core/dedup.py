"""Pick one canonical record per natural key.

Some sources re-ingest the same business entity several times (historical
rows). :func:`keep_latest` keeps, per natural key, the row with the latest
value of a timestamp column.

Rules:
- Rows whose key is null are dropped; they are never selected.
- Rows with a null timestamp rank below any dated row of the same key.
- Ties on the latest timestamp go to the row encountered first in the
  input, so the result is stable for a given input order.
- Output rows keep their input order.

The selection is a single sort plus ``drop_duplicates`` (O(n log n)).
"""

from __future__ import annotations

import logging

import pandas as pd

logger = logging.getLogger(__name__)

_POSITION = "__row_position"


def keep_latest(df: pd.DataFrame, key: str, order_by: str) -> pd.DataFrame:
    """Return one row per non-null ``key``: the one with the maximum ``order_by``.

    Args:
        df: Raw batch, fully materialized.
        key: Natural key column.
        order_by: Comparable column (typically datetime64) ranking the
            candidates of one key.

    Returns:
        A new DataFrame with the surviving rows, in input order.

    Examples:
        >>> df = pd.DataFrame({"id": [1, 1, None], "ts": [1, 2, 3]})
        >>> keep_latest(df, "id", "ts")["ts"].tolist()
        [2]
    """
    candidates = df[df[key].notna()].copy()
    dropped_null = len(df) - len(candidates)
    candidates[_POSITION] = range(len(candidates))

    ordered = candidates.sort_values(
        [order_by, _POSITION],
        ascending=[False, True],
        na_position="last",
        kind="mergesort",
    )
    latest = ordered.drop_duplicates(subset=[key], keep="first")
    latest = latest.sort_values(_POSITION, kind="mergesort").drop(columns=[_POSITION])

    logger.debug(
        "keep_latest(%s by %s): %d rows in, %d null keys dropped, %d duplicates dropped",
        key,
        order_by,
        len(df),
        dropped_null,
        len(candidates) - len(latest),
    )
    return latest
