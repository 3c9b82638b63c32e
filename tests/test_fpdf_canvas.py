"""Smoke tests for the fpdf2-backed canvas and full PDF generation."""

import pytest

from esg_reports.canvas import FpdfCanvas, TableStyle, TextStyle, pdf_safe_text
from esg_reports.context import ComplianceRecord, ReportConfig
from esg_reports.engine import generate_report
from esg_reports.errors import RenderFailure
from esg_reports.sections import COMPLIANCE_HEADER

from conftest import FIXED_DAY


def test_new_canvas_has_one_a4_page():
    canvas = FpdfCanvas()
    assert canvas.page_count == 1
    assert round(canvas.page_width) == 210
    assert round(canvas.page_height) == 297


def test_measure_text_grows_with_size():
    canvas = FpdfCanvas()
    small = canvas.measure_text("Sustainability", TextStyle(size=10))
    large = canvas.measure_text("Sustainability", TextStyle(size=20))
    assert 0 < small < large


def test_table_paginates_and_reports_final_offset():
    canvas = FpdfCanvas()
    rows = [[f"Metric {i}", str(i * 100), "t", "Stable", "TBD"] for i in range(120)]
    final_y = canvas.render_table(["Metric", "Current Value", "Unit", "Trend", "Target"], rows, 40, TableStyle())
    assert canvas.page_count > 1
    assert final_y <= canvas.page_height - 30


def test_table_wraps_long_cells():
    canvas = FpdfCanvas()
    short = canvas.render_table(["A", "B"], [["x", "y"]], 40, TableStyle(theme="grid"))
    canvas.new_page()
    tall = canvas.render_table(["A", "B"], [["x", "word " * 80]], 40, TableStyle(theme="grid"))
    assert tall > short


def test_backend_errors_become_render_failures(monkeypatch):
    canvas = FpdfCanvas()

    def broken(*args, **kwargs):
        raise ValueError("bad coordinates")

    monkeypatch.setattr(canvas._pdf, "text", broken)
    with pytest.raises(RenderFailure) as excinfo:
        canvas.draw_text("Executive Summary", 20, 20, TextStyle())
    assert excinfo.value.operation == "draw_text"
    assert "bad coordinates" in str(excinfo.value)


def test_pdf_safe_text_replaces_unencodable_characters():
    assert pdf_safe_text("CO₂ emissions") == "CO? emissions"
    assert pdf_safe_text(None) == ""


def test_generate_pdf_bytes(acme_data, acme_config):
    artifact = generate_report(acme_data, acme_config, generated_on=FIXED_DAY)
    assert artifact.startswith(b"%PDF")
    assert len(artifact) > 1000


def test_generate_pdf_with_every_section(acme_data):
    data = acme_data.__class__(
        organization_name="Acme Corp",
        module="Carbon",
        metrics=acme_data.metrics,
        scores=acme_data.scores,
        compliance=(ComplianceRecord(name="TCFD", status="In Progress", completion_percentage=72),),
    )
    artifact = generate_report(data, ReportConfig(title="Full", framework="TCFD"), generated_on=FIXED_DAY)
    assert artifact.startswith(b"%PDF")


CSRD_NOTE = (
    "Double materiality assessment is underway with external advisors; value chain data "
    "collection for Scope 3 categories remains open ahead of the first reporting cycle."
)


def test_short_cells_stay_on_one_line_beside_long_notes():
    canvas = FpdfCanvas()
    style = TableStyle(theme="grid")
    rows = [["EU-CSRD", "In Progress", "72%", "2025-06-30", CSRD_NOTE]]
    widths = canvas._column_widths(COMPLIANCE_HEADER, rows, 170, style)

    assert sum(widths) == pytest.approx(170)
    body = TextStyle(size=style.font_size)
    for idx in range(4):
        assert len(canvas.wrap_text(rows[0][idx], widths[idx] - 2 * style.padding, body)) == 1
    assert widths[4] == max(widths)


def test_row_taller_than_page_is_split_across_pages():
    canvas = FpdfCanvas()
    drawn = []
    original_cell = canvas._pdf.cell

    def recording_cell(w, h, text="", **kwargs):
        drawn.append(text)
        return original_cell(w, h, text, **kwargs)

    canvas._pdf.cell = recording_cell
    note = " ".join(["materiality"] * 1500)
    final_y = canvas.render_table(
        COMPLIANCE_HEADER, [["EU-CSRD", "In Progress", "72%", "2025-06-30", note]], 40, TableStyle(theme="grid")
    )

    assert final_y <= canvas.page_height - 30
    assert canvas.page_count > 2
    # Header repeats on every page and no wrapped line is lost.
    assert drawn.count("Notes") == canvas.page_count
    assert sum(text.split().count("materiality") for text in drawn) == 1500


def test_header_height_is_measured_in_header_font():
    canvas = FpdfCanvas()
    style = TableStyle()
    header = ["Reporting Framework Identifier", "Completion Percentage"]
    widths = canvas._column_widths(header, [], 170, style)
    head_lines = canvas._wrap_cells(header, widths, style, TextStyle(size=style.font_size, bold=True))
    head_h = canvas._block_height(head_lines, style)

    start_y = canvas.page_height - 30 - head_h + 0.25
    final_y = canvas.render_table(header, [], start_y, style)
    assert canvas.page_count == 2
    assert final_y == pytest.approx(20 + head_h)
