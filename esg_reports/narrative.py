"""
Content derivers: framework wording, score labels, trend labels and table
rows computed from ReportData/ReportConfig. Everything here is free of
drawing concerns so sections can stay thin.
"""

import logging
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from .config import DEFAULT_TEMPLATE_DIR
from .context import ComplianceRecord, Metric, ReportData, Scores

logger = logging.getLogger(__name__)

COMPLIANCE_STATEMENTS: Dict[str, str] = {
    "GRI": "This report has been prepared in accordance with the GRI Standards: Core option.",
    "SASB": "This report follows the Sustainability Accounting Standards Board (SASB) materiality framework.",
    "TCFD": "This report aligns with the Task Force on Climate-related Financial Disclosures (TCFD) recommendations.",
    "EU-CSRD": "This report complies with the European Union Corporate Sustainability Reporting Directive (CSRD).",
    "SEC": "This report follows the U.S. Securities and Exchange Commission climate disclosure requirements.",
    "ISSB": "This report is prepared in accordance with International Sustainability Standards Board (ISSB) standards.",
}
DEFAULT_COMPLIANCE_STATEMENT = (
    "This report follows recognized international sustainability reporting standards."
)

METHODOLOGY_TEXT: Dict[str, str] = {
    "GRI": (
        "This report follows the Global Reporting Initiative (GRI) Standards, focusing on material "
        "topics that represent significant economic, environmental, and social impacts."
    ),
    "SASB": (
        "We apply the Sustainability Accounting Standards Board (SASB) framework to identify "
        "financially material sustainability topics for our industry."
    ),
    "TCFD": (
        "Our climate-related disclosures align with the Task Force on Climate-related Financial "
        "Disclosures (TCFD) framework across governance, strategy, risk management, and metrics."
    ),
    "EU-CSRD": (
        "This report complies with the EU Corporate Sustainability Reporting Directive, providing "
        "comprehensive sustainability information for stakeholder decision-making."
    ),
    "SEC": (
        "Climate-related disclosures follow the U.S. SEC requirements for material climate risks "
        "and their potential financial impacts."
    ),
    "ISSB": (
        "We apply the International Sustainability Standards Board standards for comprehensive "
        "sustainability-related financial disclosures."
    ),
}
DEFAULT_METHODOLOGY_TEXT = (
    "This report follows established international sustainability reporting methodologies "
    "and best practices."
)

# Only these frameworks carry a standards table; the rest are prose-only.
FRAMEWORK_STANDARDS: Dict[str, List[List[str]]] = {
    "GRI": [
        ["GRI 2: General Disclosures", "Organizational context and reporting practices", "Compliant"],
        ["GRI 3: Material Topics", "Process for determining material topics", "Compliant"],
        ["GRI 300: Environmental", "Environmental impact disclosures", "Partial"],
    ],
    "SASB": [
        ["Industry Standards", "Sector-specific sustainability metrics", "Compliant"],
        ["Materiality Assessment", "Financially material topic identification", "Compliant"],
    ],
    "TCFD": [
        ["Governance", "Climate-related governance oversight", "Compliant"],
        ["Strategy", "Climate-related risks and opportunities", "Partial"],
        ["Risk Management", "Climate risk identification and assessment", "Compliant"],
        ["Metrics & Targets", "Climate-related metrics and targets", "Compliant"],
    ],
}

SCORE_LABELS = (
    ("Overall ESG Score", "overall_score"),
    ("Environmental Score", "environmental_score"),
    ("Social Score", "social_score"),
    ("Governance Score", "governance_score"),
)

TREND_THRESHOLD = 0.05


def framework_key(framework: Any) -> str:
    if isinstance(framework, Enum):
        framework = framework.value
    return "" if framework is None else str(framework).strip()


def lookup_framework_text(framework: Any, table: Mapping[str, Any], default: Any) -> Any:
    """Total lookup over framework identifiers: unknown or missing keys yield `default`."""
    key = framework_key(framework)
    if key in table:
        return table[key]
    logger.debug("No entry for framework %r; using fallback", key)
    return default


def compliance_statement(framework: Any) -> str:
    return lookup_framework_text(framework, COMPLIANCE_STATEMENTS, DEFAULT_COMPLIANCE_STATEMENT)


def methodology_text(framework: Any) -> str:
    return lookup_framework_text(framework, METHODOLOGY_TEXT, DEFAULT_METHODOLOGY_TEXT)


def framework_standards(framework: Any) -> List[List[str]]:
    rows = lookup_framework_text(framework, FRAMEWORK_STANDARDS, [])
    return [list(row) for row in rows]


def get_score_status(score: float) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 60:
        return "Satisfactory"
    return "Needs Improvement"


def as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        return None


def format_value(value: Union[int, float, str, None]) -> str:
    """Display form of a metric value: integral floats drop the trailing `.0`."""
    if value is None:
        return ""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def format_generated_date(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def derive_trend(value: Any, previous_value: Any) -> str:
    """
    Directional label from the relative change against the previous value.
    A missing, zero or non-numeric previous value is treated as insufficient
    data and reads as "Stable".
    """
    current = as_number(value)
    prior = as_number(previous_value)
    if current is None or not prior:
        return "Stable"
    delta = (current - prior) / prior
    if delta > TREND_THRESHOLD:
        return "Improving"
    if delta < -TREND_THRESHOLD:
        return "Declining"
    return "Stable"


def metric_trend(metric: Metric) -> str:
    return metric.trend or derive_trend(metric.value, metric.previous_value)


def kpi_rows(scores: Scores) -> List[List[str]]:
    return [
        [label, f"{format_value(getattr(scores, attr))}/100", get_score_status(getattr(scores, attr))]
        for label, attr in SCORE_LABELS
    ]


def metric_rows(metrics: Sequence[Metric]) -> List[List[str]]:
    rows = []
    for metric in metrics:
        rows.append(
            [
                metric.name,
                format_value(metric.value) or "N/A",
                metric.unit or "",
                metric_trend(metric),
                format_value(metric.target) or "TBD",
            ]
        )
    return rows


def _completion_label(pct: Any) -> str:
    if pct is None or pct == "":
        return "N/A"
    return f"{format_value(pct)}%"


def compliance_rows(records: Sequence[ComplianceRecord]) -> List[List[str]]:
    return [
        [
            record.name,
            record.status or "Under Review",
            _completion_label(record.completion_percentage),
            record.deadline or "Ongoing",
            record.description or "Standard compliance monitoring",
        ]
        for record in records
    ]


def _is_compliant(record: ComplianceRecord) -> bool:
    return (record.status or "").strip().lower().replace(" ", "_") == "compliant"


def compliance_summary(records: Sequence[ComplianceRecord]) -> str:
    total = len(records)
    if not total:
        return "No compliance frameworks were supplied for this reporting period."
    compliant = sum(1 for r in records if _is_compliant(r))
    rate = int(compliant * 100 / total + 0.5)
    text = f"Overall Compliance Rate: {rate}% ({compliant}/{total} frameworks)"
    pending = [f"{r.name} ({r.status or 'Under Review'})" for r in records if not _is_compliant(r)]
    if pending:
        text += ". Areas requiring attention: " + ", ".join(pending) + "."
    return text


def _build_env(template_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(enabled_extensions=("html",)),
        trim_blocks=True,
        lstrip_blocks=True,
    )


DEFAULT_EXEC_SUMMARY = (
    "This {report_type} sustainability report presents {organization}'s environmental, social, "
    "and governance performance for the period {period}."
)
DEFAULT_PERFORMANCE_ANALYSIS = (
    "The {module} metrics presented summarize the organization's sustainability performance "
    "for the reporting period."
)


class NarrativeRenderer:
    """
    Thin wrapper around Jinja2 text templates for the narrative paragraphs.
    A missing template falls back to a one-sentence built-in string.
    """

    def __init__(self, template_dir: Path = DEFAULT_TEMPLATE_DIR):
        self.template_dir = template_dir
        self.env = _build_env(template_dir)

    def render(self, template_name: str, payload: Dict[str, Any], fallback: str) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            logger.warning("Missing narrative template %s; using built-in text", template_name)
            return fallback.format(**payload)
        return template.render(**payload).strip()

    def _payload(self, data: ReportData) -> Dict[str, str]:
        return {
            "report_type": data.report_type.value,
            "organization": data.organization_name or "the organization",
            "period": data.period or "the current reporting period",
            "module": data.module or "reported",
        }

    def exec_summary(self, data: ReportData) -> str:
        return self.render("exec_summary.txt", self._payload(data), DEFAULT_EXEC_SUMMARY)

    def performance_analysis(self, data: ReportData) -> str:
        return self.render("performance_analysis.txt", self._payload(data), DEFAULT_PERFORMANCE_ANALYSIS)
