"""
Shared utilities for the ingestion stages: console setup and local snapshots.

Snapshots are the audit trail of a run and the input of later stages
(normalize reads what diputados/votaciones wrote). Each file is overwritten
wholesale on every run.

Usage in stages:
    from utils import configure_utf8, save_json, load_json, save_parquet
"""

import json
import sys
from pathlib import Path
from typing import Any

import polars as pl


def configure_utf8() -> None:
    """Force UTF-8 stdout on Windows to avoid cp1252 encoding errors.

    Deputy names and vote labels are full of accents (Sí, Abstención...).
    Safe to call multiple times.
    """
    if sys.stdout.encoding and sys.stdout.encoding.lower() != "utf-8":
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")


def save_json(path: Path, data: Any) -> Path:
    """Write ``data`` as indented UTF-8 JSON, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return path


def load_json(path: Path) -> Any:
    """Read a snapshot written by ``save_json``."""
    return json.loads(path.read_text(encoding="utf-8"))


def save_parquet(
    records: list[dict],
    path: Path,
    *,
    sort_by: list[str] | None = None,
    safe_schema: bool = False,
) -> int:
    """Build a Polars DataFrame, optionally sort, then write Parquet.

    Rows are expected to be deduplicated already (see transforms.dedup).

    Parameters
    ----------
    records : list[dict]
        Flat records to save.
    path : Path
        Output .parquet path. Parent directory is created if it doesn't exist.
    sort_by : list[str] | None
        If given, sort by these columns.
    safe_schema : bool
        Pass ``infer_schema_length=len(records)`` to Polars. Use True when
        optional string fields may be None for the first N records (birth
        dates, constituencies, vote summaries), which would otherwise make
        Polars infer a Null column and fail when a real string arrives.

    Returns
    -------
    int
        Number of rows written.
    """
    if not records:
        print(f"  WARNING: no records to write to {path}")
        return 0

    kwargs: dict[str, Any] = {}
    if safe_schema:
        kwargs["infer_schema_length"] = len(records)

    df = pl.DataFrame(records, **kwargs)
    # All-None columns (e.g. parties.abbreviation) come back as Null dtype
    df = df.with_columns(pl.col(pl.Null).cast(pl.Utf8))

    if sort_by:
        df = df.sort(sort_by, nulls_last=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    df.write_parquet(path)
    return len(df)
