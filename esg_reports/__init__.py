"""
ESG report composition and pagination engine.

Lays out cover, summary, methodology, metrics, compliance and appendix
sections onto fixed-size pages through an abstract canvas, with an fpdf2
backend, a report store, a batch queue and two-tier download delivery.
"""

from .canvas import Canvas, FpdfCanvas, TableStyle, TextStyle
from .context import (
    ComplianceRecord,
    Framework,
    Metric,
    ReportConfig,
    ReportData,
    ReportType,
    Scores,
)
from .delivery import DeliveryResult, download_artifact
from .engine import ReportEngine, generate_report
from .errors import DeliveryFailure, RenderFailure, ReportError
from .normalize import normalize_report_data

__all__ = [
    "Canvas",
    "ComplianceRecord",
    "DeliveryFailure",
    "DeliveryResult",
    "FpdfCanvas",
    "Framework",
    "Metric",
    "RenderFailure",
    "ReportConfig",
    "ReportData",
    "ReportEngine",
    "ReportError",
    "ReportType",
    "Scores",
    "TableStyle",
    "TextStyle",
    "download_artifact",
    "generate_report",
    "normalize_report_data",
]
