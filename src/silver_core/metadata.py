"""Run records for published silver tables.

Every publish attempt through the file sink leaves a small JSON record next
to the table, so operators can see when a table was last refreshed, with
how many rows, and why a failed refresh failed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TRANSFORM_VERSION = "silver_v1"


@dataclass
class StageMetadata:
    """Metadata for one entity refresh.

    Attributes:
        entity: Entity name (e.g. "CRM_CUSTOMER").
        table: Silver table name.
        version: Version string of the cleansing rules.
        last_run: ISO timestamp of the run.
        status: "ok" or "failed".
        rows_in: Raw rows received.
        rows_out: Cleansed rows published (0 when failed).
        error: Failure description, if any.
    """

    entity: str
    table: str
    version: str
    last_run: str
    status: str
    rows_in: int = 0
    rows_out: int = 0
    error: Optional[str] = None


def _meta_path(meta_dir: Path, table: str) -> Path:
    return meta_dir / f"{table}.json"


def write_metadata(meta_dir: Path, metadata: StageMetadata) -> None:
    """Write the run record of one table."""
    meta_dir.mkdir(parents=True, exist_ok=True)
    path = _meta_path(meta_dir, metadata.table)
    path.write_text(json.dumps(asdict(metadata), indent=2))
    logger.debug("Wrote metadata: %s", path)


def read_metadata(meta_dir: Path, table: str) -> Optional[StageMetadata]:
    """Read the run record of one table, if it exists and is readable."""
    path = _meta_path(meta_dir, table)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
        return StageMetadata(**data)
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Error reading metadata %s: %s", path, e)
        return None
