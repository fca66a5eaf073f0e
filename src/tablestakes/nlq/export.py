"""Serialize result rows for download."""

import json
from typing import Any, Literal

import pandas as pd

ExportFormat = Literal["json", "csv"]

MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
}


def export_rows(rows: list[dict[str, Any]], export_format: ExportFormat = "json") -> str:
    """Serialize rows verbatim.

    JSON output is the row list indented by two spaces. CSV output has one
    header row with the union of keys in first-seen order.

    Args:
        rows: Table rows or chart ``rawData``
        export_format: "json" or "csv"

    Returns:
        Serialized document
    """
    if export_format == "csv":
        if not rows:
            return ""
        return pd.DataFrame.from_records(rows).to_csv(index=False)
    return json.dumps(rows, indent=2, default=str, ensure_ascii=False)


def export_filename(stem: str, export_format: ExportFormat) -> str:
    return f"{stem}.{export_format}"
