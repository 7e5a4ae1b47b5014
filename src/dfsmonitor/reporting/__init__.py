"""
Reporting helpers that read snapshots produced by the collection service.
"""

from .export import REPORT_SCHEMA, SUPPORTED_FORMATS, export_report, snapshot_to_dataframe

__all__ = ["REPORT_SCHEMA", "SUPPORTED_FORMATS", "export_report", "snapshot_to_dataframe"]
