from dataclasses import dataclass
from typing import Optional, Sequence

from .canvas import Canvas, TableStyle, TextStyle
from .config import (
    BOTTOM_SAFE_MARGIN,
    HEADING_ADVANCE,
    HEADING_RESERVE,
    LEFT_MARGIN,
    LINE_ADVANCE,
    LINE_RESERVE,
    PALETTE,
    PARAGRAPH_GAP,
    PARAGRAPH_RESERVE,
    RIGHT_MARGIN,
    SUBHEADING_ADVANCE,
    SUBHEADING_RESERVE,
    TABLE_GAP,
    TOP_MARGIN,
)

HEADING_STYLE = TextStyle(size=18, bold=True, color=PALETTE["accent"])
SUBHEADING_STYLE = TextStyle(size=14, bold=True)
PARAGRAPH_STYLE = TextStyle(size=11)


@dataclass
class CursorState:
    """Vertical write position on the current page plus its printable bounds."""

    y: float
    page_width: float
    page_height: float
    left_margin: float = LEFT_MARGIN
    right_margin: float = RIGHT_MARGIN
    top_margin: float = TOP_MARGIN
    bottom_safe_margin: float = BOTTOM_SAFE_MARGIN

    @classmethod
    def for_canvas(cls, canvas: Canvas) -> "CursorState":
        return cls(y=TOP_MARGIN, page_width=canvas.page_width, page_height=canvas.page_height)

    @property
    def printable_bottom(self) -> float:
        return self.page_height - self.bottom_safe_margin

    @property
    def printable_width(self) -> float:
        return self.page_width - self.left_margin - self.right_margin

    def fits(self, required_height: float) -> bool:
        return self.y + required_height <= self.printable_bottom

    def advance(self, dy: float) -> None:
        # Clamp so y never passes the printable bottom; the next write breaks the page.
        self.y = min(self.y + dy, self.printable_bottom)

    def move_to(self, y: float) -> None:
        self.y = min(y, self.printable_bottom)

    def reset(self) -> None:
        self.y = self.top_margin


class FlowWriter:
    """
    Appends headings and wrapped prose at the cursor. Every atomic write
    checks for room first and breaks the page before drawing, never after.
    """

    def __init__(self, canvas: Canvas, cursor: Optional[CursorState] = None):
        self.canvas = canvas
        self.cursor = cursor or CursorState.for_canvas(canvas)

    def ensure_space(self, required_height: float) -> bool:
        """Break the page if `required_height` does not fit. Returns True on a break."""
        if self.cursor.fits(required_height):
            return False
        self.start_page()
        return True

    def start_page(self) -> None:
        self.canvas.new_page()
        self.cursor.reset()

    def write_heading(self, text: str) -> None:
        self.ensure_space(HEADING_RESERVE)
        cur = self.cursor
        self.canvas.draw_text(text, cur.left_margin, cur.y, HEADING_STYLE)
        self.canvas.draw_line(
            cur.left_margin, cur.y + 2, cur.page_width - cur.right_margin, cur.y + 2, PALETTE["accent"]
        )
        cur.advance(HEADING_ADVANCE)

    def write_subheading(self, text: str) -> None:
        self.ensure_space(SUBHEADING_RESERVE)
        self.canvas.draw_text(text, self.cursor.left_margin, self.cursor.y, SUBHEADING_STYLE)
        self.cursor.advance(SUBHEADING_ADVANCE)

    def write_paragraph(self, text: str) -> None:
        self.ensure_space(PARAGRAPH_RESERVE)
        lines = self.canvas.wrap_text(text, self.cursor.printable_width, PARAGRAPH_STYLE)
        for line in lines:
            self.ensure_space(LINE_RESERVE)
            self.canvas.draw_text(line, self.cursor.left_margin, self.cursor.y, PARAGRAPH_STYLE)
            self.cursor.advance(LINE_ADVANCE)
        self.cursor.advance(PARAGRAPH_GAP)


class TableRenderer:
    """Cursor bookkeeping around `Canvas.render_table`; all cell layout is the canvas's."""

    def __init__(self, canvas: Canvas, cursor: CursorState):
        self.canvas = canvas
        self.cursor = cursor

    def render(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        style: Optional[TableStyle] = None,
    ) -> float:
        cur = self.cursor
        style = style or TableStyle()
        final_y = self.canvas.render_table(header, rows, cur.y, style)
        cur.move_to(final_y + TABLE_GAP)
        return final_y
