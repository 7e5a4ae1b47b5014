"""
Tabular target report of a snapshot using Polars.

The report has one row per namespace target, sorted the way clients would be
referred: by namespace, folder and descending ordering score.
"""

import logging
from pathlib import Path
from typing import Literal, Optional, Union

import polars as pl

from ..models.results import Snapshot

logger = logging.getLogger(__name__)

ReportFormat = Literal["csv", "parquet"]
SUPPORTED_FORMATS = ("csv", "parquet")

REPORT_SCHEMA = {
    "namespace": pl.Utf8,
    "folder": pl.Utf8,
    "target": pl.Utf8,
    "server": pl.Utf8,
    "share": pl.Utf8,
    "reachable": pl.Boolean,
    "latencyMs": pl.Int64,
    "priorityClass": pl.Utf8,
    "priorityRank": pl.Int64,
    "orderingScore": pl.Int64,
    "state": pl.Utf8,
    "health": pl.Utf8,
}


def snapshot_to_dataframe(snapshot: Optional[Snapshot]) -> pl.DataFrame:
    """Flatten a snapshot into one row per namespace target."""
    rows = []
    if snapshot is not None:
        for namespace in snapshot.namespaces:
            for folder in namespace.folders:
                for target in folder.targets:
                    rows.append(
                        {
                            "namespace": namespace.path,
                            "folder": folder.folder_path,
                            "target": target.unc_path,
                            "server": target.server,
                            "share": target.share,
                            "reachable": target.reachable,
                            "latencyMs": target.latency_ms,
                            "priorityClass": target.priority_class,
                            "priorityRank": target.priority_rank,
                            "orderingScore": target.ordering_score,
                            "state": target.raw_state,
                            "health": namespace.health.value,
                        }
                    )

    df = pl.DataFrame(rows, schema=REPORT_SCHEMA)
    if df.height:
        df = df.sort(
            ["namespace", "folder", "orderingScore"], descending=[False, False, True]
        )
    return df


def export_report(
    snapshot: Optional[Snapshot],
    path: Union[str, Path],
    format_type: ReportFormat = "csv",
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy",
) -> int:
    """
    Write the target report of a snapshot.

    Args:
        snapshot: Snapshot to report on; None writes an empty report
        path: Destination file
        format_type: ``csv`` or ``parquet``
        compression: Parquet compression algorithm

    Returns:
        Number of rows written

    Raises:
        ValueError: If the format is not supported
    """
    fmt = format_type.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported report format: {format_type}")

    df = snapshot_to_dataframe(snapshot)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if fmt == "csv":
            df.write_csv(path)
        else:
            df.write_parquet(path, compression=compression)
    except Exception as e:
        logger.error(f"Failed to write report to {path}: {e}")
        raise

    logger.info(f"Exported {df.height} target row(s) to {path}")
    return df.height
