"""End-to-end composition tests over the recording canvas."""

import logging

import pytest

from esg_reports.config import BOTTOM_SAFE_MARGIN
from esg_reports.context import Metric, ReportConfig, ReportData
from esg_reports.engine import ReportEngine, generate_report
from esg_reports.errors import RenderFailure
from esg_reports.sections import SECTION_REGISTRY, active_sections

from conftest import FIXED_DAY, RecordingCanvas

SECTION_HEADINGS = (
    "Executive Summary",
    "Methodology & Framework",
    "Carbon Metrics & Performance",
    "Regulatory Compliance & Standards",
    "Appendices",
)


def _headings(canvas):
    return [t.text for t in canvas.texts if t.style.size == 18 and t.text in SECTION_HEADINGS]


def test_acme_end_to_end(engine, acme_data, acme_config):
    canvas = engine.compose(acme_data, acme_config)

    assert canvas.table_with_header("Metric").rows[0] == ["Overall ESG Score", "74/100", "Good"]
    metrics_table = [t for t in canvas.tables if t.header[1] == "Current Value"][0]
    assert metrics_table.rows == [["GHG Emissions", "198070", "tCO2e", "Stable", "150000"]]
    assert "Regulatory Compliance & Standards" not in canvas.text_values()

    appendices = canvas.find("Appendices")
    assert appendices.page == canvas.page_count
    earlier = [t for t in canvas.texts if t.page == appendices.page and t.text in SECTION_HEADINGS]
    assert earlier == [appendices]

    assert canvas.footer == "Acme Corp ESG Report"


def test_cover_page(engine, acme_data, acme_config):
    canvas = engine.compose(acme_data, acme_config)
    cover = [t.text for t in canvas.texts if t.page == 1]
    assert "ESG SUSTAINABILITY REPORT" in cover
    assert "Acme Corp" in cover
    assert "Carbon Environmental Report" in cover
    assert "Framework: GRI" in cover
    assert "Reporting Period: FY2024" in cover
    assert "Generated: October 19, 2024" in cover
    # Body content always starts on a fresh page.
    assert canvas.find("Executive Summary").page == 2


def test_section_order(engine, acme_data, compliance_records):
    data = ReportData(
        organization_name=acme_data.organization_name,
        module="Carbon",
        metrics=acme_data.metrics,
        scores=acme_data.scores,
        compliance=compliance_records,
    )
    canvas = engine.compose(data, ReportConfig(title="Full"))
    assert _headings(canvas) == list(SECTION_HEADINGS)
    assert "Compliance Summary" in canvas.text_values()


def test_compose_is_idempotent(engine, acme_data, acme_config):
    first = engine.compose(acme_data, acme_config)
    second = engine.compose(acme_data, acme_config)
    assert first is not second
    assert first.page_count == second.page_count
    assert first.text_values() == second.text_values()
    assert first.serialize() == second.serialize()


def test_all_optional_fields_absent(engine):
    canvas = engine.compose(ReportData(organization_name=""), ReportConfig(title="", framework="XYZ"))
    values = canvas.text_values()
    assert "Framework: XYZ" in values
    assert "ESG Metrics & Performance" in values
    assert "Key Performance Indicators" not in values
    # No scores, no metrics, no standards and no compliance records: no tables at all.
    assert canvas.tables == []
    assert any("No compliance frameworks" in v for v in values)
    assert canvas.serialize()


def test_section_flags_gate_sections(engine, acme_data):
    config = ReportConfig(title="Slim", include_metrics=False, include_compliance=False)
    canvas = engine.compose(acme_data, config)
    assert _headings(canvas) == ["Executive Summary", "Methodology & Framework", "Appendices"]
    assert [s.id for s in active_sections(config)] == ["cover", "executive_summary", "methodology", "appendices"]
    assert len(SECTION_REGISTRY) == 6


def test_charts_and_custom_sections_are_ignored(engine, acme_data, acme_config):
    plain = engine.compose(acme_data, acme_config)
    extended = engine.compose(
        acme_data,
        ReportConfig(
            title=acme_config.title,
            subtitle=acme_config.subtitle,
            include_compliance=False,
            include_charts=False,
            custom_sections=("Water Stewardship",),
        ),
    )
    assert plain.text_values() == extended.text_values()


def test_nothing_drawn_below_printable_bottom(engine, acme_data):
    metrics = tuple(Metric(name=f"Metric {i}", value=i, previous_value=i + 10) for i in range(80))
    data = ReportData(organization_name="Acme Corp", module="Carbon", metrics=metrics, scores=acme_data.scores)
    canvas = engine.compose(data, ReportConfig(title="Long", framework="TCFD"))
    bottom = canvas.page_height - BOTTOM_SAFE_MARGIN
    body = [t for t in canvas.texts if t.page > 1]
    assert all(t.y <= bottom for t in body)
    assert all(t.end_y <= bottom for t in canvas.tables)


class _ExplodingCanvas(RecordingCanvas):
    def render_table(self, header, rows, start_y, style=None):
        raise RenderFailure("render_table", "out of memory")


def test_render_failure_propagates(acme_data, acme_config, caplog):
    engine = ReportEngine(canvas_factory=_ExplodingCanvas, clock=lambda: FIXED_DAY)
    with caplog.at_level(logging.ERROR, logger="esg_reports.engine"):
        with pytest.raises(RenderFailure) as excinfo:
            engine.generate_report(acme_data, acme_config)
    assert excinfo.value.operation == "render_table"
    assert "Report generation failed" in caplog.text


def test_generate_report_returns_serialized_bytes(acme_data, acme_config):
    artifact = generate_report(acme_data, acme_config, canvas_factory=RecordingCanvas, generated_on=FIXED_DAY)
    assert artifact.startswith(b"pages=")
    assert b"Generated: October 19, 2024" in artifact


def test_render_artifact_reports_page_count_and_logs_size(engine, acme_data, acme_config, caplog):
    with caplog.at_level(logging.INFO, logger="esg_reports.engine"):
        result = engine.render_artifact(acme_data, acme_config)
    assert result.page_count == engine.compose(acme_data, acme_config).page_count
    assert result.content == engine.generate_report(acme_data, acme_config)
    assert f"{result.page_count} pages, {len(result.content)} bytes" in caplog.text
