import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from .canvas import Canvas, FpdfCanvas
from .context import ReportConfig, ReportData
from .errors import RenderFailure
from .flow import CursorState, FlowWriter, TableRenderer
from .narrative import NarrativeRenderer
from .sections import SectionContext, SectionSpec, active_sections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportArtifact:
    content: bytes
    page_count: int


class ReportEngine:
    """
    Composes a report by running the section registry in order against a
    canvas built fresh for every call. An engine keeps no per-report state,
    so one instance can serve sequential calls and separate instances can
    run in parallel threads.
    """

    def __init__(
        self,
        canvas_factory: Callable[[], Canvas] = FpdfCanvas,
        narrative: Optional[NarrativeRenderer] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.canvas_factory = canvas_factory
        self.narrative = narrative or NarrativeRenderer()
        self.clock = clock

    def compose(self, data: ReportData, config: ReportConfig) -> Canvas:
        """Lay out every active section and return the filled canvas."""
        if config.include_charts:
            logger.debug("include_charts is set; chart rendering is not supported and is skipped")
        if config.custom_sections:
            logger.debug("Ignoring custom sections %s", ", ".join(config.custom_sections))

        canvas = self.canvas_factory()
        canvas.set_footer(f"{data.organization_name} ESG Report".strip())
        cursor = CursorState.for_canvas(canvas)
        ctx = SectionContext(
            data=data,
            config=config,
            canvas=canvas,
            writer=FlowWriter(canvas, cursor),
            tables=TableRenderer(canvas, cursor),
            narrative=self.narrative,
            generated_on=self.clock(),
        )
        sections: List[SectionSpec] = active_sections(config)
        for spec in sections:
            logger.debug("Rendering section %s at page %d, y=%.1f", spec.id, canvas.page_count, cursor.y)
            spec.renderer(ctx)
        return canvas

    def render_artifact(self, data: ReportData, config: ReportConfig) -> ReportArtifact:
        """Compose and serialize one report; failures are logged once and re-raised."""
        try:
            canvas = self.compose(data, config)
            content = canvas.serialize()
        except RenderFailure:
            logger.exception("Report generation failed for %s", data.organization_name)
            raise
        logger.info(
            "Generated %s report for %s: %d pages, %d bytes",
            config.framework,
            data.organization_name,
            canvas.page_count,
            len(content),
        )
        return ReportArtifact(content=content, page_count=canvas.page_count)

    def generate_report(self, data: ReportData, config: ReportConfig) -> bytes:
        return self.render_artifact(data, config).content


def generate_report(
    data: ReportData,
    config: ReportConfig,
    *,
    canvas_factory: Callable[[], Canvas] = FpdfCanvas,
    generated_on: Optional[date] = None,
) -> bytes:
    """Convenience wrapper: build a one-off engine and return the serialized artifact."""
    clock = (lambda: generated_on) if generated_on else date.today
    return ReportEngine(canvas_factory=canvas_factory, clock=clock).generate_report(data, config)
