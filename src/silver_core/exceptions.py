"""Domain-specific exceptions for Silver Core ETL.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from SilverCoreError for easy catching.

Field-level defects (a bad date, a missing cost) are never raised: the
cleansers degrade the field to null or to its default label. Only the
entity-level failures below escape a cleanser or the pipeline.
"""

from __future__ import annotations

from typing import Optional, Sequence


class SilverCoreError(Exception):
    """Base exception for all Silver Core ETL errors.

    Users can catch this exception to handle any Silver Core ETL error.
    """

    pass


class ConfigError(SilverCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - An unknown entity name is requested
    """

    pass


class DataQualityError(SilverCoreError):
    """Raised when data quality checks fail.

    This exception is raised when:
    - Required columns are missing from a raw batch
    - A strict validation (e.g. unique product ids) fails
    """

    pass


class StructuralDefectError(DataQualityError):
    """Raised when a raw batch lacks one or more declared columns.

    Fatal to the cleansing run of that entity: nothing is published for it.

    Attributes:
        entity: Name of the entity whose batch is malformed.
        missing_columns: Declared columns absent from the batch.
        rows: Number of rows in the malformed batch.
    """

    def __init__(self, entity: str, missing_columns: Sequence[str], rows: int) -> None:
        self.entity = entity
        self.missing_columns = list(missing_columns)
        self.rows = rows
        super().__init__(
            f"{entity}: raw batch is missing required columns {self.missing_columns} "
            f"({rows} rows received)"
        )


class ETLError(SilverCoreError):
    """Raised when a pipeline stage fails for one entity.

    Attributes:
        entity: Name of the entity being processed.
        rows_processed: Rows handled before the failure (0 when unknown).
        cause: Underlying exception, if any.
    """

    def __init__(
        self,
        entity: str,
        message: str,
        rows_processed: int = 0,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.entity = entity
        self.rows_processed = rows_processed
        self.cause = cause
        detail = f"{entity}: {message} (rows processed: {rows_processed})"
        if cause is not None:
            detail += f": {type(cause).__name__}: {cause}"
        super().__init__(detail)


class SourceUnavailableError(ETLError):
    """Raised when the raw record source cannot deliver a batch.

    This exception is raised when:
    - The raw file for an entity does not exist
    - The raw file cannot be read or parsed
    """

    pass


class SinkUnavailableError(ETLError):
    """Raised when a cleansed snapshot cannot be published.

    The cleansed data of that entity is discarded and the entity is
    reported as failed.
    """

    pass
