"""
Boundary normalization for upstream report payloads.

Dashboard and API payloads name the same field several ways (camelCase vs
snake_case, `metricName` vs `name`, `nextDeadline` vs `deadline`). They are
mapped once here into the canonical records in context.py so the engine
never repeats fallback chains.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Tuple

from .context import ComplianceRecord, Metric, ReportData, ReportType, Scores
from .narrative import as_number

logger = logging.getLogger(__name__)


def _missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return isinstance(value, float) and math.isnan(value)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if not _missing(value):
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if _missing(value):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _scalar(value: Any) -> Any:
    """Keep numbers as numbers; strip strings; drop missing values."""
    if _missing(value):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def normalize_metric(raw: Mapping[str, Any]) -> Metric:
    return Metric(
        name=_text(_first(raw, "name", "metricName", "metric_name")) or "Unnamed Metric",
        value=_scalar(_first(raw, "value", "currentValue", "current_value")),
        unit=_text(_first(raw, "unit", "metricType", "metric_type")) or "",
        target=_scalar(_first(raw, "target", "targetValue", "target_value")),
        previous_value=_scalar(_first(raw, "previousValue", "previous_value")),
        trend=_text(_first(raw, "trend")),
        category=_text(_first(raw, "category")),
    )


def normalize_compliance(raw: Mapping[str, Any]) -> ComplianceRecord:
    pct = _first(raw, "completionPercentage", "completion_percentage", "completion")
    return ComplianceRecord(
        name=_text(_first(raw, "frameworkName", "framework_name", "name", "framework")) or "Unspecified",
        status=_text(_first(raw, "status")),
        completion_percentage=_scalar(as_number(pct) if pct is not None else None),
        deadline=_text(_first(raw, "deadline", "nextDeadline", "next_deadline")),
        description=_text(_first(raw, "description", "notes")),
    )


_SCORE_KEYS = (
    ("overall_score", "overallScore"),
    ("environmental_score", "environmentalScore"),
    ("social_score", "socialScore"),
    ("governance_score", "governanceScore"),
)


def normalize_scores(raw: Optional[Mapping[str, Any]]) -> Optional[Scores]:
    """
    Build Scores when all four sub-scores are present. Partial score objects
    are dropped; out-of-range values raise ValueError.
    """
    if not raw:
        return None
    values = {}
    for snake, camel in _SCORE_KEYS:
        number = as_number(_first(raw, snake, camel))
        if number is None:
            logger.debug("Scores payload missing %s; omitting scores", snake)
            return None
        values[snake] = int(number) if number.is_integer() else number
    return Scores(**values)


def normalize_report_type(value: Any) -> ReportType:
    try:
        return ReportType(str(value).strip().lower())
    except ValueError:
        logger.debug("Unknown report type %r; using comprehensive", value)
        return ReportType.COMPREHENSIVE


def _records(items: Optional[Iterable[Any]]) -> Tuple[Mapping[str, Any], ...]:
    return tuple(item for item in (items or ()) if isinstance(item, Mapping))


def normalize_report_data(payload: Mapping[str, Any]) -> ReportData:
    """Map an upstream report payload into ReportData."""
    if not isinstance(payload, Mapping):
        raise TypeError(f"Report payload must be a mapping, got {type(payload).__name__}")

    organization_id = _first(payload, "organizationId", "organization_id")
    return ReportData(
        organization_name=_text(_first(payload, "organizationName", "organization_name")) or "",
        report_type=normalize_report_type(_first(payload, "reportType", "report_type")),
        period=_text(_first(payload, "period", "reportingPeriod", "reporting_period")) or "",
        module=_text(_first(payload, "module")) or "",
        metrics=tuple(normalize_metric(m) for m in _records(payload.get("metrics"))),
        scores=normalize_scores(payload.get("scores")),
        compliance=tuple(normalize_compliance(c) for c in _records(payload.get("compliance"))),
        organization_id=int(organization_id) if organization_id is not None else None,
    )
