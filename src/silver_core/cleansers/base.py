"""Base interface for entity cleansers.

Every cleanser takes one full raw batch (a DataFrame with the bronze
columns of its entity) and returns the full cleansed snapshot. The base
class checks the raw schema, projects the declared columns, delegates the
entity rules to :meth:`EntityCleanser.transform` and returns the cleansed
columns in table order.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import pandas as pd

from silver_core.config import CleansingConfig
from silver_core.entities import EntityType
from silver_core.exceptions import StructuralDefectError

logger = logging.getLogger(__name__)


class EntityCleanser(ABC):
    """Abstract base class for the per-entity cleansing rules.

    Subclasses set ``entity`` and implement :meth:`transform`.
    """

    entity: EntityType

    def __init__(self, config: Optional[CleansingConfig] = None) -> None:
        self.config = config or CleansingConfig()

    def validate(self, raw: pd.DataFrame) -> None:
        """Check that the raw batch carries every declared column.

        Raises:
            StructuralDefectError: If any declared column is absent.
        """
        missing = [c for c in self.entity.layout.raw_columns if c not in raw.columns]
        if missing:
            raise StructuralDefectError(self.entity.value, missing, len(raw))

    def clean(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Cleanse a full raw batch.

        The input frame is not modified.

        Args:
            raw: Raw batch for this entity.

        Returns:
            Cleansed snapshot with the entity's silver columns, index reset.

        Raises:
            StructuralDefectError: If the batch misses a declared column.
        """
        self.validate(raw)
        projected = raw.loc[:, list(self.entity.layout.raw_columns)].reset_index(drop=True)
        logger.info("Cleansing %s: %d raw rows", self.entity.value, len(projected))

        cleansed = self.transform(projected)
        cleansed = cleansed.loc[:, list(self.entity.layout.clean_columns)].reset_index(drop=True)

        logger.info("Cleansed %s: %d rows", self.entity.value, len(cleansed))
        return cleansed

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply the entity rules to a projected copy of the raw batch.

        Args:
            df: Raw batch restricted to the declared raw columns. The
                cleanser owns this copy and may modify it in place.

        Returns:
            DataFrame holding at least the entity's silver columns.
        """
        pass

    def _log_repairs(self, what: str, count: int) -> None:
        if count:
            logging.getLogger(type(self).__module__).warning(
                "%s: %d %s", self.entity.value, count, what
            )
