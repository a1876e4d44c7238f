"""Silver Core ETL - CRM and ERP cleansing for the warehouse Silver layer.

This package turns the raw extracts of two source systems into cleansed,
join-ready tables:

- **Bronze (raw)**: loader drops, one table per source extract
- **Silver (cleansed)**: deduplicated, trimmed, decoded and repaired tables
- **Gold (views)**: star-schema views built downstream (not in this package)

Module Structure:
    silver_core.entities: Entity registry and table layouts
    silver_core.normalizers: Field-level repair functions
    silver_core.dedup: Latest-row-per-key resolver
    silver_core.cleansers: One cleanser per entity
    silver_core.sources / silver_core.sinks: Raw input and cleansed output
    silver_core.pipeline: Full refresh orchestration and CLI
    silver_core.qa: Bronze profiling and Silver invariant checks

Quick Start:
    >>> from silver_core import DataPaths
    >>> from silver_core.pipeline import run_pipeline
    >>> from silver_core.sinks import CsvCleansedSink
    >>> from silver_core.sources import CsvRawSource
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> report = run_pipeline(CsvRawSource(paths), CsvCleansedSink(paths))
    >>> report.ok
    True

Tables:
    CRM:
        - crm_cust_info: one row per customer (latest version)
        - crm_prd_info: one row per product version
        - crm_sales_details: one row per order line
    ERP:
        - erp_cust_az12: customer birth date and gender
        - erp_loc_a101: customer country
        - erp_px_cat_g1v2: product category hierarchy
"""

__version__ = "0.1.0"

from silver_core.config import CleansingConfig, DataPaths
from silver_core.entities import EntityType
from silver_core.exceptions import (
    ConfigError,
    DataQualityError,
    ETLError,
    SilverCoreError,
    SinkUnavailableError,
    SourceUnavailableError,
    StructuralDefectError,
)

__all__ = [
    "CleansingConfig",
    "ConfigError",
    "DataPaths",
    "DataQualityError",
    "ETLError",
    "EntityType",
    "SilverCoreError",
    "SinkUnavailableError",
    "SourceUnavailableError",
    "StructuralDefectError",
    "__version__",
]
