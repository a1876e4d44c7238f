"""Cleansed sinks (Silver side).

A sink receives one complete cleansed snapshot per entity. Publishing is a
full replace: after a successful publish the new snapshot is the only one
visible for that entity. A failed publish leaves the previous snapshot in
place.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from silver_core.config import DataPaths
from silver_core.entities import EntityType
from silver_core.exceptions import SinkUnavailableError
from silver_core.metadata import TRANSFORM_VERSION, StageMetadata, write_metadata

logger = logging.getLogger(__name__)


class CleansedSink(ABC):
    """Abstract receiver of cleansed snapshots."""

    @abstractmethod
    def publish(
        self,
        entity: EntityType,
        records: pd.DataFrame,
        *,
        rows_in: Optional[int] = None,
    ) -> None:
        """Replace the cleansed snapshot of ``entity`` with ``records``.

        Raises:
            SinkUnavailableError: If the snapshot cannot be published.
        """
        pass

    def report_failure(self, entity: EntityType, rows_in: int, error: str) -> None:
        """Record that the refresh of ``entity`` failed (nothing was published)."""
        pass


class InMemorySink(CleansedSink):
    """Sink keeping the latest snapshot per entity in memory."""

    def __init__(self) -> None:
        self.tables: dict[EntityType, pd.DataFrame] = {}
        self.failures: dict[EntityType, str] = {}

    def publish(
        self,
        entity: EntityType,
        records: pd.DataFrame,
        *,
        rows_in: Optional[int] = None,
    ) -> None:
        self.tables[entity] = records.copy()
        self.failures.pop(entity, None)

    def report_failure(self, entity: EntityType, rows_in: int, error: str) -> None:
        self.failures[entity] = error


class CsvCleansedSink(CleansedSink):
    """Sink writing ``DataPaths.silver/<table>.csv`` plus a run record.

    The table is written to a temporary file in the same directory and then
    moved over the previous file, so readers never see a half-written
    snapshot.
    """

    def __init__(self, paths: DataPaths, encoding: str = "utf-8") -> None:
        self.paths = paths
        self.encoding = encoding

    def path_for(self, entity: EntityType) -> Path:
        return self.paths.silver / f"{entity.table}.csv"

    def publish(
        self,
        entity: EntityType,
        records: pd.DataFrame,
        *,
        rows_in: Optional[int] = None,
    ) -> None:
        target = self.path_for(entity)
        tmp = target.with_name(f".{target.name}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            records.to_csv(tmp, index=False, encoding=self.encoding)
            os.replace(tmp, target)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise SinkUnavailableError(
                entity.value, f"cannot write {target}", rows_processed=len(records), cause=e
            ) from e

        logger.info("Published %s: %d rows to %s", entity.value, len(records), target)
        self._write_run_record(
            entity,
            status="ok",
            rows_in=len(records) if rows_in is None else rows_in,
            rows_out=len(records),
        )

    def report_failure(self, entity: EntityType, rows_in: int, error: str) -> None:
        self._write_run_record(entity, status="failed", rows_in=rows_in, rows_out=0, error=error)

    def _write_run_record(
        self,
        entity: EntityType,
        status: str,
        rows_in: int,
        rows_out: int,
        error: Optional[str] = None,
    ) -> None:
        metadata = StageMetadata(
            entity=entity.value,
            table=entity.table,
            version=TRANSFORM_VERSION,
            last_run=datetime.now().isoformat(),
            status=status,
            rows_in=rows_in,
            rows_out=rows_out,
            error=error,
        )
        try:
            write_metadata(self.paths.silver_meta, metadata)
        except OSError as e:
            logger.warning("Could not write run record for %s: %s", entity.value, e)
