"""Test configuration and fixtures for the ESG report engine."""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Tuple

import pytest

from esg_reports.canvas import Canvas, TableStyle, TextStyle
from esg_reports.context import ComplianceRecord, Metric, ReportConfig, ReportData, ReportType, Scores
from esg_reports.engine import ReportEngine

FIXED_DAY = date(2024, 10, 19)


@dataclass
class DrawnText:
    text: str
    x: float
    y: float
    page: int
    style: TextStyle


@dataclass
class DrawnTable:
    header: List[str]
    rows: List[List[str]]
    start_y: float
    end_y: float
    start_page: int
    end_page: int
    style: TableStyle


@dataclass
class RecordingCanvas(Canvas):
    """
    In-memory canvas with fixed-width text: every character is
    `0.2 * font size` wide. Tables take `row_height` per row, break the page
    when a row would cross the printable bottom and repeat the header.
    """

    width: float = 210.0
    height: float = 297.0
    row_height: float = 8.0
    texts: List[DrawnText] = field(default_factory=list)
    lines: List[Tuple[float, float, float, float, int]] = field(default_factory=list)
    rects: List[Tuple[float, float, float, float, int]] = field(default_factory=list)
    tables: List[DrawnTable] = field(default_factory=list)
    footer: str = ""
    pages: int = 1

    @property
    def page_width(self) -> float:
        return self.width

    @property
    def page_height(self) -> float:
        return self.height

    @property
    def page_count(self) -> int:
        return self.pages

    def measure_text(self, text: str, style: Optional[TextStyle] = None) -> float:
        return len(text or "") * (style or TextStyle()).size * 0.2

    def draw_text(self, text: str, x: float, y: float, style: TextStyle) -> None:
        self.texts.append(DrawnText(text, x, y, self.pages, style))

    def draw_line(self, x1, y1, x2, y2, color) -> None:
        self.lines.append((x1, y1, x2, y2, self.pages))

    def draw_filled_rect(self, x, y, w, h, color) -> None:
        self.rects.append((x, y, w, h, self.pages))

    def draw_rounded_rect(self, x, y, w, h, radius, color) -> None:
        self.rects.append((x, y, w, h, self.pages))

    def new_page(self) -> None:
        self.pages += 1

    def render_table(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        start_y: float,
        style: Optional[TableStyle] = None,
    ) -> float:
        style = style or TableStyle()
        bottom = self.height - style.bottom_margin
        start_page = self.pages
        y = start_y
        if y + self.row_height > bottom:
            self.new_page()
            y = style.top_margin
        y += self.row_height
        for _ in rows:
            if y + self.row_height > bottom:
                self.new_page()
                y = style.top_margin + self.row_height
            y += self.row_height
        self.tables.append(
            DrawnTable(list(header), [list(r) for r in rows], start_y, y, start_page, self.pages, style)
        )
        return y

    def set_footer(self, text: str) -> None:
        self.footer = text

    def serialize(self) -> bytes:
        body = "\n".join(f"{t.page}:{t.text}" for t in self.texts)
        return f"pages={self.pages}\n{body}".encode("utf-8")

    # helpers for assertions

    def text_values(self) -> List[str]:
        return [t.text for t in self.texts]

    def find(self, text: str) -> DrawnText:
        for drawn in self.texts:
            if drawn.text == text:
                return drawn
        raise AssertionError(f"{text!r} was never drawn")

    def table_with_header(self, first_column: str) -> DrawnTable:
        for table in self.tables:
            if table.header and table.header[0] == first_column:
                return table
        raise AssertionError(f"no table starting with {first_column!r}")


@pytest.fixture
def recording_canvas() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture
def engine() -> ReportEngine:
    """Engine over recording canvases with a pinned generation date."""
    return ReportEngine(canvas_factory=RecordingCanvas, clock=lambda: FIXED_DAY)


@pytest.fixture
def acme_data() -> ReportData:
    return ReportData(
        organization_name="Acme Corp",
        report_type=ReportType.ENVIRONMENTAL,
        period="FY2024",
        module="Carbon",
        metrics=(
            Metric(name="GHG Emissions", value=198070, unit="tCO2e", target=150000),
        ),
        scores=Scores(overall_score=74, environmental_score=82, social_score=65, governance_score=58),
    )


@pytest.fixture
def acme_config() -> ReportConfig:
    return ReportConfig(
        title="Carbon Environmental Report",
        framework="GRI",
        subtitle="FY2024",
        include_compliance=False,
    )


@pytest.fixture
def compliance_records() -> Tuple[ComplianceRecord, ...]:
    return (
        ComplianceRecord(name="GRI Standards", status="Compliant", completion_percentage=100, deadline="2025-03-31"),
        ComplianceRecord(name="TCFD", status="In Progress", completion_percentage=72),
        ComplianceRecord(name="EU-CSRD"),
    )
