"""Silver layer refresh: raw source → entity cleansers → cleansed sink.

Each entity is refreshed independently and in full: fetch the whole raw
batch, cleanse it, publish the whole snapshot. Entities share no state, so
they run concurrently, one thread per entity. A failing entity is reported
and publishes nothing; the others carry on.

Usage (from repo root):

    python -m silver_core.pipeline --data-root data

    # Only customers and products, one worker, open-ended last product versions
    python -m silver_core.pipeline --entity crm_cust_info --entity CRM_PRODUCT \\
        --workers 1 --last-end-date-policy open

Reads ``<data-root>/bronze/source_crm/*.csv`` and ``<data-root>/bronze/source_erp/*.csv``
and writes ``<data-root>/silver/<table>.csv`` plus ``<data-root>/silver/_meta/<table>.json``.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pandas as pd

from silver_core.cleansers import get_cleanser
from silver_core.config import LAST_END_DATE_POLICIES, CleansingConfig, DataPaths
from silver_core.entities import EntityType
from silver_core.exceptions import (
    ETLError,
    SilverCoreError,
    SinkUnavailableError,
    SourceUnavailableError,
)
from silver_core.sinks import CleansedSink, CsvCleansedSink
from silver_core.sources import CsvRawSource, RawRecordSource
from silver_core.utils import format_duration

logger = logging.getLogger(__name__)


@dataclass
class EntityResult:
    """Outcome of one entity refresh.

    Attributes:
        entity: The entity refreshed.
        status: "ok" or "failed".
        rows_in: Raw rows fetched (0 if the fetch failed).
        rows_out: Cleansed rows published (0 if failed).
        error: Failure description, None on success.
        error_type: Exception class name of the failure.
        duration_seconds: Wall time of the refresh.
    """

    entity: EntityType
    status: str
    rows_in: int = 0
    rows_out: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class PipelineReport:
    """Outcome of a full Silver refresh."""

    run_time: datetime
    results: list[EntityResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[EntityType]:
        return [r.entity for r in self.results if r.ok]

    @property
    def failed(self) -> list[EntityType]:
        return [r.entity for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def result_for(self, entity: EntityType) -> EntityResult:
        for result in self.results:
            if result.entity is entity:
                return result
        raise KeyError(entity)

    def summary(self) -> dict:
        return {
            "run_time": self.run_time.isoformat(),
            "entities": len(self.results),
            "succeeded": [e.value for e in self.succeeded],
            "failed": {r.entity.value: r.error for r in self.results if not r.ok},
            "rows_in": sum(r.rows_in for r in self.results),
            "rows_out": sum(r.rows_out for r in self.results),
        }


def _fetch(source: RawRecordSource, entity: EntityType) -> pd.DataFrame:
    try:
        return source.fetch(entity)
    except SilverCoreError:
        raise
    except Exception as e:
        raise SourceUnavailableError(entity.value, "fetch failed", cause=e) from e


def _cleanse(entity: EntityType, raw: pd.DataFrame, config: CleansingConfig) -> pd.DataFrame:
    try:
        return get_cleanser(entity, config).clean(raw)
    except SilverCoreError:
        raise
    except Exception as e:
        raise ETLError(
            entity.value, "cleansing failed", rows_processed=len(raw), cause=e
        ) from e


def _publish(
    sink: CleansedSink, entity: EntityType, cleansed: pd.DataFrame, rows_in: int
) -> None:
    try:
        sink.publish(entity, cleansed, rows_in=rows_in)
    except SilverCoreError:
        raise
    except Exception as e:
        raise SinkUnavailableError(
            entity.value, "publish failed", rows_processed=len(cleansed), cause=e
        ) from e


def run_entity(
    entity: EntityType,
    source: RawRecordSource,
    sink: CleansedSink,
    config: Optional[CleansingConfig] = None,
) -> EntityResult:
    """Refresh one entity: fetch, cleanse, publish.

    Failures are caught and returned in the result; they never propagate.

    Args:
        entity: Entity to refresh.
        source: Raw record source.
        sink: Cleansed sink.
        config: Cleansing rules; defaults to :class:`CleansingConfig`.

    Returns:
        EntityResult describing the outcome.
    """
    config = config or CleansingConfig()
    started = time.perf_counter()
    rows_in = 0

    try:
        raw = _fetch(source, entity)
        rows_in = len(raw)
        cleansed = _cleanse(entity, raw, config)
        _publish(sink, entity, cleansed, rows_in)
    except SilverCoreError as e:
        elapsed = time.perf_counter() - started
        logger.error("Refresh of %s failed after %s: %s", entity.value, format_duration(elapsed), e)
        try:
            sink.report_failure(entity, rows_in, str(e))
        except Exception as report_error:
            logger.warning(
                "Could not record the failure of %s in the sink: %s", entity.value, report_error
            )
        return EntityResult(
            entity=entity,
            status="failed",
            rows_in=rows_in,
            error=str(e),
            error_type=type(e).__name__,
            duration_seconds=elapsed,
        )

    elapsed = time.perf_counter() - started
    logger.info(
        "Refreshed %s: %d raw rows -> %d cleansed rows in %s",
        entity.value,
        rows_in,
        len(cleansed),
        format_duration(elapsed),
    )
    return EntityResult(
        entity=entity,
        status="ok",
        rows_in=rows_in,
        rows_out=len(cleansed),
        duration_seconds=elapsed,
    )


def run_pipeline(
    source: RawRecordSource,
    sink: CleansedSink,
    entities: Optional[Iterable[EntityType]] = None,
    config: Optional[CleansingConfig] = None,
    max_workers: Optional[int] = None,
) -> PipelineReport:
    """Refresh the Silver layer for the given entities (all by default).

    The processing time is captured once and shared by every entity, so
    "future date" rules agree across the run.

    Args:
        source: Raw record source.
        sink: Cleansed sink.
        entities: Entities to refresh; all six when None.
        config: Cleansing rules; defaults to :class:`CleansingConfig`.
        max_workers: Thread count; one per entity when None.

    Returns:
        PipelineReport with one result per entity, in request order.
    """
    config = config or CleansingConfig()
    run_time = config.processing_time()
    pinned = config.at(run_time)
    targets = list(entities) if entities is not None else list(EntityType)
    workers = max(1, max_workers or len(targets))

    logger.info(
        "Starting Silver refresh of %d entities at %s (%d workers)",
        len(targets),
        run_time.isoformat(),
        workers,
    )

    results: dict[EntityType, EntityResult] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(run_entity, entity, source, sink, pinned): entity
            for entity in targets
        }
        for future in as_completed(futures):
            results[futures[future]] = future.result()

    report = PipelineReport(run_time=run_time, results=[results[e] for e in targets])
    if report.ok:
        logger.info("Silver refresh complete: %d entities published", len(report.succeeded))
    else:
        logger.error(
            "Silver refresh finished with failures: %s",
            ", ".join(e.value for e in report.failed),
        )
    return report


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Refresh the Silver layer from the bronze CSV drops."
    )
    p.add_argument(
        "--data-root",
        default=os.environ.get("SILVER_DATA_ROOT", "data"),
        help="Root folder holding bronze/ and silver/ (default: $SILVER_DATA_ROOT or ./data)",
    )
    p.add_argument(
        "--entity",
        action="append",
        default=None,
        help="Entity or table name to refresh (repeatable; default: all)",
    )
    p.add_argument(
        "--workers", type=int, default=None, help="Worker threads (default: one per entity)"
    )
    p.add_argument(
        "--last-end-date-policy",
        choices=LAST_END_DATE_POLICIES,
        default=None,
        help="End date of the last product version: keep raw value or leave open",
    )
    p.add_argument(
        "--strict-product-ids",
        action="store_true",
        help="Fail the product refresh on duplicate or null prd_id",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CleansingConfig.from_env()
        if args.last_end_date_policy:
            config.last_end_date_policy = args.last_end_date_policy
        if args.strict_product_ids:
            config.strict_product_ids = True
        entities = [EntityType.from_name(n) for n in args.entity] if args.entity else None
    except SilverCoreError as e:
        logger.error("%s", e)
        return 2

    paths = DataPaths.from_root(args.data_root)
    paths.ensure_dirs()
    report = run_pipeline(
        CsvRawSource(paths),
        CsvCleansedSink(paths),
        entities=entities,
        config=config,
        max_workers=args.workers,
    )
    for result in report.results:
        logger.info(
            "%-14s %-6s in=%d out=%d%s",
            result.entity.value,
            result.status,
            result.rows_in,
            result.rows_out,
            f" error={result.error}" if result.error else "",
        )
    return 0 if report.ok else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
