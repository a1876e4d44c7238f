"""Raw record sources (Bronze side).

A source hands the pipeline one complete raw batch per entity. The loader
that fills the bronze layer is outside this package; these classes only
read what it produced.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

import pandas as pd

from silver_core.config import DataPaths
from silver_core.entities import EntityType
from silver_core.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


class RawRecordSource(ABC):
    """Abstract provider of raw batches."""

    @abstractmethod
    def fetch(self, entity: EntityType) -> pd.DataFrame:
        """Return the full raw batch for ``entity``.

        Raises:
            SourceUnavailableError: If the batch cannot be delivered.
        """
        pass


class InMemorySource(RawRecordSource):
    """Source backed by a mapping of entity → DataFrame.

    Each fetch returns a copy, so cleansers never share the caller's frame.
    """

    def __init__(self, batches: Mapping[EntityType, pd.DataFrame]) -> None:
        self._batches = dict(batches)

    def fetch(self, entity: EntityType) -> pd.DataFrame:
        if entity not in self._batches:
            raise SourceUnavailableError(entity.value, "no raw batch registered")
        return self._batches[entity].copy()


class CsvRawSource(RawRecordSource):
    """Source reading the loader's CSV drops under ``DataPaths.bronze``.

    All columns are read as text and empty cells as null; typing is left to
    the cleansers so that a malformed cell only affects its own field.
    """

    def __init__(self, paths: DataPaths, encoding: str = "utf-8") -> None:
        self.paths = paths
        self.encoding = encoding

    def path_for(self, entity: EntityType) -> Path:
        return self.paths.bronze / entity.layout.source_file

    def fetch(self, entity: EntityType) -> pd.DataFrame:
        path = self.path_for(entity)
        if not path.exists():
            raise SourceUnavailableError(entity.value, f"raw file not found: {path}")
        try:
            df = pd.read_csv(
                path,
                dtype=str,
                keep_default_na=False,
                na_values=[""],
                encoding=self.encoding,
            )
        except (OSError, ValueError, pd.errors.ParserError) as e:
            raise SourceUnavailableError(entity.value, f"cannot read {path}", cause=e) from e
        df.columns = [str(c).strip() for c in df.columns]
        logger.info("Read %s: %d rows from %s", entity.value, len(df), path)
        return df
