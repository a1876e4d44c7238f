"""Unified configuration for Silver Core ETL.

This module provides the two configuration classes used across the package:

- :class:`DataPaths`: filesystem layout of the bronze drops and the
  published silver tables.
- :class:`CleansingConfig`: rule tables and policies the entity cleansers
  apply.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from silver_core import rules
from silver_core.exceptions import ConfigError

LAST_END_DATE_POLICIES = ("preserve", "open")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class DataPaths:
    """All filesystem paths used by the file-based source and sink.

    Attributes:
        data_root: Root directory for all ETL data layers.

    Directory Structure:
        data_root/
        ├── bronze/              # Raw loader drops (one CSV per entity)
        │   ├── source_crm/      # cust_info.csv, prd_info.csv, sales_details.csv
        │   └── source_erp/      # CUST_AZ12.csv, LOC_A101.csv, PX_CAT_G1V2.csv
        └── silver/              # Cleansed tables (<table>.csv)
            └── _meta/           # Run record per table (<table>.json)
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths from a root directory.

        Examples:
            >>> paths = DataPaths.from_root("data")
            >>> paths.bronze
            PosixPath('data/bronze')
        """
        if isinstance(data_root, str):
            data_root = Path(data_root)
        return cls(data_root=data_root)

    @property
    def bronze(self) -> Path:
        """Bronze layer: raw CSV drops."""
        return self.data_root / "bronze"

    @property
    def silver(self) -> Path:
        """Silver layer: cleansed tables."""
        return self.data_root / "silver"

    @property
    def silver_meta(self) -> Path:
        """Run records for the silver tables."""
        return self.silver / "_meta"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [
            self.bronze / "source_crm",
            self.bronze / "source_erp",
            self.silver,
            self.silver_meta,
        ]:
            path.mkdir(parents=True, exist_ok=True)


@dataclass
class CleansingConfig:
    """Rule tables and policies applied by the entity cleansers.

    Attributes:
        marital_status_codes: crm_cust_info marital status code → label.
        gender_codes: crm_cust_info gender code → label.
        erp_gender_codes: erp_cust_az12 gender code → label.
        product_line_codes: crm_prd_info product line code → label.
        country_codes: erp_loc_a101 country code → country name.
        default_label: Label for unknown or missing codes.
        erp_customer_id_prefix: Prefix stripped from erp_cust_az12.cid.
        location_id_separators: Characters removed from erp_loc_a101.cid.
        last_end_date_policy: What the last version of a product keeps as
            end date: "preserve" keeps the raw value, "open" sets it to null.
        strict_product_ids: Fail the product entity on duplicate or null
            prd_id instead of logging a warning.
        now: Fixed processing time. None means "capture at run start".
    """

    marital_status_codes: dict[str, str] = field(
        default_factory=lambda: dict(rules.MARITAL_STATUS_CODES)
    )
    gender_codes: dict[str, str] = field(default_factory=lambda: dict(rules.GENDER_CODES))
    erp_gender_codes: dict[str, str] = field(
        default_factory=lambda: dict(rules.ERP_GENDER_CODES)
    )
    product_line_codes: dict[str, str] = field(
        default_factory=lambda: dict(rules.PRODUCT_LINE_CODES)
    )
    country_codes: dict[str, str] = field(default_factory=lambda: dict(rules.COUNTRY_CODES))
    default_label: str = rules.DEFAULT_LABEL
    erp_customer_id_prefix: str = rules.ERP_CUSTOMER_ID_PREFIX
    location_id_separators: str = rules.LOCATION_ID_SEPARATORS
    last_end_date_policy: str = "preserve"
    strict_product_ids: bool = False
    now: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.last_end_date_policy not in LAST_END_DATE_POLICIES:
            raise ConfigError(
                f"Invalid last_end_date_policy '{self.last_end_date_policy}'. "
                f"Must be one of {LAST_END_DATE_POLICIES}."
            )

    def at(self, now: datetime) -> CleansingConfig:
        """Return a copy pinned to the given processing time."""
        return replace(self, now=now)

    def processing_time(self) -> datetime:
        """Processing time used for "future date" checks."""
        return self.now if self.now is not None else datetime.now()

    @classmethod
    def from_env(cls) -> CleansingConfig:
        """Build a config from environment variables.

        Reads:
            SILVER_LAST_END_DATE_POLICY: "preserve" (default) or "open".
            SILVER_STRICT_PRODUCT_IDS: boolean flag ("1"/"true"/"yes"/"on").

        Raises:
            ConfigError: If a variable holds an invalid value.
        """
        policy = os.environ.get("SILVER_LAST_END_DATE_POLICY", "preserve").strip().lower()
        strict_raw = os.environ.get("SILVER_STRICT_PRODUCT_IDS", "").strip().lower()
        if strict_raw in _TRUE_VALUES:
            strict = True
        elif strict_raw in _FALSE_VALUES:
            strict = False
        else:
            raise ConfigError(
                f"Invalid SILVER_STRICT_PRODUCT_IDS value '{strict_raw}'. Use true or false."
            )
        return cls(last_end_date_policy=policy, strict_product_ids=strict)
