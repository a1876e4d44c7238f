"""Field normalizers shared by the entity cleansers.

Small, pure, total functions: each one maps any raw value of its domain to a
cleansed value, degrading malformed input to ``None`` (or to a default
label) instead of raising. The cleansers apply them column-wise with
``Series.map``.

Key utilities:
- Text: trim, code-to-label lookup, prefix and separator stripping
- Numbers: tolerant float/int parsing, null cost repair
- Dates: YYYYMMDD integer repair, tolerant date parsing

Examples:
    >>> map_code(" m ", {"M": "Married", "S": "Single"})
    'Married'
    >>> repair_numeric_date(20101229)
    datetime.date(2010, 12, 29)
    >>> repair_numeric_date(0) is None
    True
    >>> canonical_country(" us ")
    'United States'
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional

import numpy as np
import pandas as pd

from silver_core.rules import COUNTRY_CODES, DEFAULT_LABEL


def is_missing(x: Any) -> bool:
    """True for None, NaN, NaT and pd.NA."""
    if x is None:
        return True
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False


def trim(x: Any) -> Optional[str]:
    """Remove leading and trailing whitespace; missing values stay None.

    Examples:
        >>> trim("  Jon ")
        'Jon'
        >>> trim(None) is None
        True
    """
    if is_missing(x):
        return None
    return str(x).strip()


def map_code(
    code: Any,
    table: Mapping[str, str],
    default: str = DEFAULT_LABEL,
) -> str:
    """Look up an upper-cased, trimmed code in a label table.

    Args:
        code: Raw code (e.g. " s", "Male", None).
        table: Mapping from upper-case code to label.
        default: Label returned for missing or unknown codes.

    Returns:
        The mapped label, or ``default``.

    Examples:
        >>> map_code("f", {"F": "Female"})
        'Female'
        >>> map_code("x", {"F": "Female"})
        'n/a'
    """
    s = trim(code)
    if s is None:
        return default
    return table.get(s.upper(), default)


def to_float(x: Any) -> Optional[float]:
    """Parse a plain number, returning None when it is missing or malformed.

    Examples:
        >>> to_float(" 12.5 ")
        12.5
        >>> to_float("abc") is None
        True
    """
    if is_missing(x) or isinstance(x, bool):
        return None
    if isinstance(x, (int, float, np.integer, np.floating)):
        v = float(x)
    else:
        s = str(x).strip()
        if not s:
            return None
        try:
            v = float(s)
        except ValueError:
            return None
    if math.isnan(v) or math.isinf(v):
        return None
    return v


def to_int_or_none(x: Any) -> Optional[int]:
    """Parse an integral value (``"29466"``, ``29466.0``), else None.

    Used for natural keys so that ids read as text and as numbers compare
    equal.
    """
    v = to_float(x)
    if v is None or not v.is_integer():
        return None
    return int(v)


def non_negative_or_zero(cost: Any) -> float:
    """Replace a missing cost with 0; any other value passes through.

    Negative costs are not clamped.

    Examples:
        >>> non_negative_or_zero(None)
        0.0
        >>> non_negative_or_zero(-5)
        -5.0
    """
    v = to_float(cost)
    return 0.0 if v is None else v


def repair_numeric_date(raw: Any) -> Optional[date]:
    """Decode a YYYYMMDD integer date.

    Returns None when the value is missing, 0, not an integer, not exactly
    eight digits long, or not a real calendar date.

    Examples:
        >>> repair_numeric_date("20130105")
        datetime.date(2013, 1, 5)
        >>> repair_numeric_date(5489) is None
        True
        >>> repair_numeric_date(20131345) is None
        True
    """
    value = to_int_or_none(raw)
    if value is None or value <= 0:
        return None
    text = str(value)
    if len(text) != 8:
        return None
    try:
        return datetime.strptime(text, "%Y%m%d").date()
    except ValueError:
        return None


def to_timestamp(val: Any) -> pd.Timestamp:
    """Parse a date or datetime value, returning NaT when it is malformed.

    Accepts date/datetime objects, Timestamps and strings (ISO format first,
    then pandas auto-detection).
    """
    if is_missing(val):
        return pd.NaT
    if isinstance(val, (pd.Timestamp, datetime, date, np.datetime64)):
        return pd.to_datetime(val, errors="coerce")
    s = str(val).strip()
    if not s:
        return pd.NaT
    for fmt in ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S"):
        try:
            return pd.to_datetime(s, format=fmt, errors="raise")
        except (ValueError, TypeError):
            pass
    return pd.to_datetime(s, errors="coerce")


def to_datetime_series(values: pd.Series) -> pd.Series:
    """Parse a column with :func:`to_timestamp` into a datetime64 Series."""
    return pd.to_datetime(values.map(to_timestamp), errors="coerce")


def to_date_objects(values: pd.Series) -> pd.Series:
    """Convert a datetime64 Series to ``datetime.date`` objects (None for NaT)."""
    return pd.Series(
        [None if pd.isna(ts) else ts.date() for ts in values],
        index=values.index,
        dtype=object,
    )


def strip_known_prefix(value: Any, prefix: str) -> Optional[str]:
    """Drop ``prefix`` from the trimmed value when present.

    Values that do not start with the prefix are returned unchanged.

    Examples:
        >>> strip_known_prefix("NASAW00011000", "NAS")
        'AW00011000'
        >>> strip_known_prefix("AW00011001", "NAS")
        'AW00011001'
    """
    if is_missing(value):
        return None
    s = str(value)
    trimmed = s.strip()
    if prefix and trimmed.startswith(prefix):
        return trimmed[len(prefix):]
    return s


def strip_separators(value: Any, chars: str) -> Optional[str]:
    """Remove every occurrence of the given separator characters.

    Examples:
        >>> strip_separators("AW-00011000", "-")
        'AW00011000'
    """
    if is_missing(value):
        return None
    return str(value).translate({ord(c): None for c in chars})


def canonical_country(
    raw: Any,
    codes: Mapping[str, str] = COUNTRY_CODES,
    default: str = DEFAULT_LABEL,
) -> str:
    """Canonicalize a country value.

    Known codes (matched on the upper-cased, trimmed value) become country
    names, empty or missing values become ``default``, anything else is
    returned trimmed.

    Examples:
        >>> canonical_country("DE")
        'Germany'
        >>> canonical_country("  ")
        'n/a'
        >>> canonical_country(" France ")
        'France'
    """
    s = trim(raw)
    if not s:
        return default
    return codes.get(s.upper(), s)


def naive_timestamp(ts: Any) -> pd.Timestamp:
    """Timestamp without timezone (wall-clock time kept)."""
    stamp = pd.Timestamp(ts)
    if stamp.tzinfo is not None:
        stamp = stamp.tz_localize(None)
    return stamp
