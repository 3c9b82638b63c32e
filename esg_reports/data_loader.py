import os
from pathlib import Path
from typing import IO, List, Union

import pandas as pd

from .config import DEFAULT_DATA_FILENAME, ENV_DATA_PATH
from .context import Metric
from .normalize import normalize_metric

# Lower-cased column aliases accepted in uploaded metric tables.
COLUMN_ALIASES = {
    "name": ("name", "metric", "metric_name", "metricname"),
    "value": ("value", "current_value", "currentvalue", "current value"),
    "unit": ("unit", "units", "metric_type", "metrictype"),
    "target": ("target", "target_value", "targetvalue"),
    "previousValue": ("previous_value", "previousvalue", "previous", "prior_value"),
    "trend": ("trend",),
    "category": ("category",),
}


def _default_candidates(default_filename: str) -> List[Path]:
    here = Path(__file__).resolve().parent
    return [
        here / "data" / default_filename,
        here.parent / "data" / default_filename,
        here.parent / default_filename,
    ]


def resolve_data_path(default_filename: str = DEFAULT_DATA_FILENAME) -> str:
    """
    Resolve a metrics table path from env or common locations.
    Returns an empty string if nothing is found so callers can handle gracefully.
    """
    env_path = os.getenv(ENV_DATA_PATH, "").strip()
    if env_path:
        return env_path

    for candidate in _default_candidates(default_filename):
        if candidate.exists():
            return str(candidate)
    return ""


def read_metrics_table(source: Union[str, Path, IO], filename: str = "") -> pd.DataFrame:
    """Read CSV, Parquet or Excel into a DataFrame, choosing the reader by extension."""
    name = (filename or str(getattr(source, "name", source))).lower()
    if name.endswith(".parquet"):
        return pd.read_parquet(source)
    if name.endswith((".xlsx", ".xls")):
        return pd.read_excel(source)
    return pd.read_csv(source)


def metrics_from_frame(frame: pd.DataFrame) -> List[Metric]:
    """
    Map a loosely named metrics table onto Metric records. Columns are
    matched case-insensitively; rows without a metric name are skipped.
    """
    if frame.empty:
        return []

    cols = {str(c).strip().lower(): c for c in frame.columns}
    mapping = {}
    for field_name, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in cols:
                mapping[field_name] = cols[alias]
                break
    if "name" not in mapping:
        raise ValueError(
            "Metrics table needs a metric name column; available columns: "
            + ", ".join(map(str, frame.columns))
        )

    subset = frame[list(mapping.values())].rename(columns={v: k for k, v in mapping.items()})
    subset = subset.astype(object).where(pd.notna(subset), None)
    subset = subset[subset["name"].notna()]
    return [normalize_metric(row) for row in subset.to_dict(orient="records")]


def load_metrics(source: Union[str, Path, IO], filename: str = "") -> List[Metric]:
    return metrics_from_frame(read_metrics_table(source, filename))
