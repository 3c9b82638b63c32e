import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List

from .canvas import Canvas, TableStyle, TextStyle
from .config import PALETTE
from .context import ReportConfig, ReportData
from .flow import FlowWriter, TableRenderer
from .narrative import (
    NarrativeRenderer,
    compliance_rows,
    compliance_statement,
    compliance_summary,
    format_generated_date,
    framework_key,
    framework_standards,
    kpi_rows,
    methodology_text,
    metric_rows,
)

logger = logging.getLogger(__name__)

KPI_HEADER = ["Metric", "Score", "Status"]
STANDARDS_HEADER = ["Standard", "Description", "Compliance Status"]
METRICS_HEADER = ["Metric", "Current Value", "Unit", "Trend", "Target"]
COMPLIANCE_HEADER = ["Framework", "Status", "Completion", "Deadline", "Notes"]

APPENDICES = (
    (
        "Appendix A: Data Sources & Verification",
        "All data presented in this report has been collected through verified internal systems "
        "and third-party assessments. Data collection methodologies follow industry best practices "
        "and regulatory requirements.",
    ),
    (
        "Appendix B: Calculation Methodologies",
        "ESG scores are calculated using industry-standard methodologies including GHG Protocol, "
        "SASB standards, and GRI guidelines. Detailed calculation formulas are available upon request.",
    ),
    (
        "Appendix C: External Assurance",
        "This report has been prepared in accordance with recognized ESG reporting standards. "
        "External verification is conducted annually by certified sustainability consultants.",
    ),
)


@dataclass
class SectionContext:
    """Everything a section may touch during one report run."""

    data: ReportData
    config: ReportConfig
    canvas: Canvas
    writer: FlowWriter
    tables: TableRenderer
    narrative: NarrativeRenderer
    generated_on: date


@dataclass(frozen=True)
class SectionSpec:
    id: str
    title: str
    renderer: Callable[[SectionContext], None]
    enabled: Callable[[ReportConfig], bool] = lambda config: True


def _render_cover(ctx: SectionContext) -> None:
    canvas = ctx.canvas
    width, height = canvas.page_width, canvas.page_height
    center = width / 2
    framework = framework_key(ctx.config.framework)

    canvas.draw_filled_rect(0, 0, width, 60, PALETTE["accent"])
    canvas.draw_text(
        "ESG SUSTAINABILITY REPORT",
        center,
        35,
        TextStyle(size=28, bold=True, color=PALETTE["white"], align="center"),
    )
    canvas.draw_text(ctx.data.organization_name, center, 90, TextStyle(size=20, bold=True, align="center"))
    canvas.draw_text(ctx.config.title, center, 110, TextStyle(size=16, align="center"))
    if ctx.config.subtitle:
        canvas.draw_text(ctx.config.subtitle, center, 118, TextStyle(size=12, italic=True, align="center"))

    canvas.draw_rounded_rect(center - 30, 125, 60, 20, 5, PALETTE["badge"])
    canvas.draw_text(f"Framework: {framework}", center, 137, TextStyle(size=12, bold=True, align="center"))

    canvas.draw_text(f"Reporting Period: {ctx.data.period}", center, 160, TextStyle(size=14, align="center"))
    canvas.draw_text(
        f"Generated: {format_generated_date(ctx.generated_on)}",
        center,
        180,
        TextStyle(size=12, align="center"),
    )

    statement_style = TextStyle(size=10, italic=True, align="center")
    y = height - 40
    for line in canvas.wrap_text(compliance_statement(framework), width - 40, statement_style):
        canvas.draw_text(line, center, y, statement_style)
        y += 5

    # The cover always owns its page.
    ctx.writer.start_page()


def _render_exec_summary(ctx: SectionContext) -> None:
    ctx.writer.write_heading("Executive Summary")
    ctx.writer.write_paragraph(ctx.narrative.exec_summary(ctx.data))
    if ctx.data.scores is None:
        return
    ctx.writer.write_subheading("Key Performance Indicators")
    ctx.tables.render(KPI_HEADER, kpi_rows(ctx.data.scores), TableStyle(theme="striped"))


def _render_methodology(ctx: SectionContext) -> None:
    ctx.writer.write_heading("Methodology & Framework")
    ctx.writer.write_paragraph(methodology_text(ctx.config.framework))
    standards = framework_standards(ctx.config.framework)
    if standards:
        ctx.tables.render(STANDARDS_HEADER, standards, TableStyle(theme="grid"))


def _render_metrics(ctx: SectionContext) -> None:
    module = ctx.data.module or "ESG"
    ctx.writer.write_heading(f"{module} Metrics & Performance")
    if ctx.data.metrics:
        ctx.tables.render(
            METRICS_HEADER,
            metric_rows(ctx.data.metrics),
            TableStyle(theme="striped", column_align={1: "right", 4: "right"}),
        )
    ctx.writer.write_subheading("Performance Analysis")
    ctx.writer.write_paragraph(ctx.narrative.performance_analysis(ctx.data))


def _render_compliance(ctx: SectionContext) -> None:
    ctx.writer.write_heading("Regulatory Compliance & Standards")
    records = ctx.data.compliance
    if not records:
        ctx.writer.write_paragraph(compliance_summary(records))
        return
    ctx.tables.render(COMPLIANCE_HEADER, compliance_rows(records), TableStyle(theme="grid"))
    ctx.writer.write_subheading("Compliance Summary")
    ctx.writer.write_paragraph(compliance_summary(records))


def _render_appendices(ctx: SectionContext) -> None:
    ctx.writer.start_page()
    ctx.writer.write_heading("Appendices")
    for title, text in APPENDICES:
        ctx.writer.write_subheading(title)
        ctx.writer.write_paragraph(text)


SECTION_REGISTRY: List[SectionSpec] = [
    SectionSpec("cover", "Cover", _render_cover),
    SectionSpec("executive_summary", "Executive Summary", _render_exec_summary),
    SectionSpec("methodology", "Methodology & Framework", _render_methodology),
    SectionSpec("metrics", "Metrics & Performance", _render_metrics, lambda c: c.include_metrics),
    SectionSpec("compliance", "Regulatory Compliance", _render_compliance, lambda c: c.include_compliance),
    SectionSpec("appendices", "Appendices", _render_appendices),
]


def active_sections(config: ReportConfig) -> List[SectionSpec]:
    """Sections that will run for `config`, in their fixed order."""
    return [spec for spec in SECTION_REGISTRY if spec.enabled(config)]
