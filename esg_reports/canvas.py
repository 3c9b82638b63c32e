"""
Drawing surfaces for the report engine.

`Canvas` is the capability the flow writer and section renderers draw on.
`FpdfCanvas` implements it with fpdf2 on A4 pages measured in millimetres;
tests substitute a recording canvas with fixed-width text measurement.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from fpdf import FPDF

from .config import (
    BOTTOM_SAFE_MARGIN,
    FONT_FAMILY,
    LEFT_MARGIN,
    PAGE_FORMAT,
    PALETTE,
    RIGHT_MARGIN,
    TOP_MARGIN,
)
from .errors import RenderFailure

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class TextStyle:
    size: float = 11
    bold: bool = False
    italic: bool = False
    color: Color = PALETTE["ink"]
    align: str = "left"

    @property
    def font_style(self) -> str:
        return ("B" if self.bold else "") + ("I" if self.italic else "")


@dataclass(frozen=True)
class TableStyle:
    """Table appearance. `column_align` maps a column index to left/right/center."""

    theme: str = "striped"
    head_fill: Color = PALETTE["accent"]
    font_size: float = 10
    column_align: Dict[int, str] = field(default_factory=dict)
    left_margin: float = LEFT_MARGIN
    right_margin: float = RIGHT_MARGIN
    top_margin: float = TOP_MARGIN
    bottom_margin: float = BOTTOM_SAFE_MARGIN
    line_height: float = 5
    padding: float = 1.5


def pdf_safe_text(text: Optional[str]) -> str:
    if text is None:
        return ""
    return str(text).encode("latin-1", "replace").decode("latin-1")


class Canvas(ABC):
    """Abstract page surface. Coordinates are in page units, y grows downward."""

    @property
    @abstractmethod
    def page_width(self) -> float: ...

    @property
    @abstractmethod
    def page_height(self) -> float: ...

    @property
    @abstractmethod
    def page_count(self) -> int: ...

    @abstractmethod
    def measure_text(self, text: str, style: Optional[TextStyle] = None) -> float:
        """Width of `text` rendered in `style`."""

    @abstractmethod
    def draw_text(self, text: str, x: float, y: float, style: TextStyle) -> None: ...

    @abstractmethod
    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: Color) -> None: ...

    @abstractmethod
    def draw_filled_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None: ...

    @abstractmethod
    def draw_rounded_rect(
        self, x: float, y: float, w: float, h: float, radius: float, color: Color
    ) -> None: ...

    @abstractmethod
    def new_page(self) -> None: ...

    @abstractmethod
    def render_table(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        start_y: float,
        style: Optional[TableStyle] = None,
    ) -> float:
        """Draw a table from `start_y` and return the offset below its last row."""

    @abstractmethod
    def set_footer(self, text: str) -> None: ...

    @abstractmethod
    def serialize(self) -> bytes: ...

    def wrap_text(
        self, text: Optional[str], max_width: float, style: Optional[TextStyle] = None
    ) -> List[str]:
        """
        Greedy word wrap against `measure_text`. Explicit newlines start a new
        line and blank lines survive as empty strings; words wider than
        `max_width` are split by character.
        """
        if text is None:
            return [""]
        lines: List[str] = []
        for paragraph in str(text).split("\n"):
            lines.extend(self._wrap_line(paragraph, max_width, style))
        return lines

    def _wrap_line(self, text: str, max_w: float, style: Optional[TextStyle]) -> List[str]:
        if max_w <= 0:
            return [text]
        lines = []
        current = ""
        for word in text.split(" "):
            if word == "":
                continue
            candidate = word if not current else f"{current} {word}"
            if self.measure_text(candidate, style) <= max_w:
                current = candidate
                continue

            if current:
                lines.append(current)
                current = ""

            if self.measure_text(word, style) <= max_w:
                current = word
                continue

            chunk = ""
            for ch in word:
                if not chunk or self.measure_text(chunk + ch, style) <= max_w:
                    chunk += ch
                else:
                    lines.append(chunk)
                    chunk = ch
            current = chunk

        if current:
            lines.append(current)
        return lines if lines else [text.strip()]


class _ReportPDF(FPDF):
    """FPDF with a page-number footer stamped on every page."""

    def __init__(self):
        super().__init__(orientation="P", unit="mm", format=PAGE_FORMAT)
        self.footer_text = ""

    def footer(self):
        if not self.footer_text:
            return
        y = self.h - 10
        self.set_font(FONT_FAMILY, "", 10)
        self.set_text_color(*PALETTE["muted"])
        self.text(LEFT_MARGIN, y, pdf_safe_text(self.footer_text))
        label = f"Page {self.page_no()} of {self.str_alias_nb_pages}"
        # Measure with a two-digit total since the alias is substituted on output.
        width = self.get_string_width(f"Page {self.page_no()} of 99")
        self.text(self.w - RIGHT_MARGIN - width, y, label)
        self.set_text_color(*PALETTE["ink"])


_ALIGN = {"left": "L", "right": "R", "center": "C"}


class FpdfCanvas(Canvas):
    """Canvas backed by fpdf2. Page breaks are driven by the caller, never by FPDF."""

    def __init__(self):
        with self._guard("init"):
            self._pdf = _ReportPDF()
            self._pdf.set_auto_page_break(auto=False)
            self._pdf.set_margins(LEFT_MARGIN, TOP_MARGIN, RIGHT_MARGIN)
            self._pdf.add_page()

    @staticmethod
    @contextmanager
    def _guard(operation: str) -> Iterator[None]:
        try:
            yield
        except RenderFailure:
            raise
        except Exception as exc:
            raise RenderFailure(operation, str(exc)) from exc

    @property
    def page_width(self) -> float:
        return self._pdf.w

    @property
    def page_height(self) -> float:
        return self._pdf.h

    @property
    def page_count(self) -> int:
        return self._pdf.page_no()

    def _apply_font(self, style: TextStyle) -> None:
        self._pdf.set_font(FONT_FAMILY, style.font_style, style.size)

    def measure_text(self, text: str, style: Optional[TextStyle] = None) -> float:
        with self._guard("measure_text"):
            self._apply_font(style or TextStyle())
            return self._pdf.get_string_width(pdf_safe_text(text))

    def draw_text(self, text: str, x: float, y: float, style: TextStyle) -> None:
        with self._guard("draw_text"):
            safe = pdf_safe_text(text)
            self._apply_font(style)
            self._pdf.set_text_color(*style.color)
            if style.align == "center":
                x -= self._pdf.get_string_width(safe) / 2
            elif style.align == "right":
                x -= self._pdf.get_string_width(safe)
            self._pdf.text(x, y, safe)
            self._pdf.set_text_color(*PALETTE["ink"])

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: Color) -> None:
        with self._guard("draw_line"):
            self._pdf.set_draw_color(*color)
            self._pdf.set_line_width(0.5)
            self._pdf.line(x1, y1, x2, y2)
            self._pdf.set_line_width(0.2)

    def draw_filled_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        with self._guard("draw_filled_rect"):
            self._pdf.set_fill_color(*color)
            self._pdf.rect(x, y, w, h, style="F")

    def draw_rounded_rect(
        self, x: float, y: float, w: float, h: float, radius: float, color: Color
    ) -> None:
        with self._guard("draw_rounded_rect"):
            self._pdf.set_fill_color(*color)
            self._pdf.rect(x, y, w, h, style="F", round_corners=True, corner_radius=radius)

    def new_page(self) -> None:
        with self._guard("new_page"):
            self._pdf.add_page()

    def set_footer(self, text: str) -> None:
        self._pdf.footer_text = text or ""

    def _column_widths(
        self, header: Sequence[str], rows: Sequence[Sequence[str]], total: float, style: TableStyle
    ) -> List[float]:
        """
        Columns whose unwrapped text fits a fair share of the width keep it;
        the remaining width is split among the wide columns in proportion to
        their content, never below their widest single word.
        """
        body_style = TextStyle(size=style.font_size)
        head_style = TextStyle(size=style.font_size, bold=True)
        # Slack keeps a measured cell on one line after the padding is removed.
        pad = 2 * style.padding + 0.5
        natural: List[float] = []
        minimum: List[float] = []
        for idx, label in enumerate(header):
            cells = [(label, head_style)] + [(row[idx], body_style) for row in rows if idx < len(row)]
            widest = max(self.measure_text(text, ts) for text, ts in cells)
            word = max(
                (self.measure_text(w, ts) for text, ts in cells for w in str(text).split()),
                default=0.0,
            )
            natural.append(max(widest + pad, 10))
            minimum.append(max(word + pad, 10))

        if sum(natural) <= total:
            scale = total / sum(natural)
            return [w * scale for w in natural]

        fixed = set()
        while True:
            flexible = [i for i in range(len(natural)) if i not in fixed]
            available = total - sum(natural[i] for i in fixed)
            share = available / len(flexible)
            narrow = [i for i in flexible if natural[i] <= share]
            if not narrow or len(narrow) == len(flexible):
                break
            fixed.update(narrow)

        flexible_total = sum(natural[i] for i in flexible)
        widths = list(natural)
        for i in flexible:
            widths[i] = max(minimum[i], available * natural[i] / flexible_total)
        if sum(widths) > total:
            scale = total / sum(widths)
            widths = [w * scale for w in widths]
        return widths

    def _wrap_cells(
        self, cells: Sequence[str], widths: Sequence[float], style: TableStyle, text_style: TextStyle
    ) -> List[List[str]]:
        return [
            self.wrap_text(cells[i] if i < len(cells) else "", w - 2 * style.padding, text_style)
            for i, w in enumerate(widths)
        ]

    @staticmethod
    def _block_height(wrapped: Sequence[Sequence[str]], style: TableStyle) -> float:
        return max(len(lines) for lines in wrapped) * style.line_height + style.padding

    def _draw_cells(
        self,
        wrapped: Sequence[Sequence[str]],
        widths: Sequence[float],
        y: float,
        style: TableStyle,
        text_style: TextStyle,
        fill: Optional[Color],
    ) -> float:
        pdf = self._pdf
        row_h = self._block_height(wrapped, style)
        x = style.left_margin
        border = style.theme == "grid"
        pdf.set_draw_color(*PALETTE["grid"])
        for idx, (width, lines) in enumerate(zip(widths, wrapped)):
            if fill is not None:
                pdf.set_fill_color(*fill)
                pdf.rect(x, y, width, row_h, style="DF" if border else "F")
            elif border:
                pdf.rect(x, y, width, row_h, style="D")
            self._apply_font(text_style)
            pdf.set_text_color(*text_style.color)
            align = _ALIGN.get(style.column_align.get(idx, "left"), "L")
            for line_no, line in enumerate(lines):
                pdf.set_xy(x + style.padding, y + style.padding / 2 + line_no * style.line_height)
                pdf.cell(width - 2 * style.padding, style.line_height, pdf_safe_text(line), align=align)
            x += width
        pdf.set_text_color(*PALETTE["ink"])
        return y + row_h

    def render_table(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        start_y: float,
        style: Optional[TableStyle] = None,
    ) -> float:
        """
        Draw `header` and `rows` from `start_y`. A row that does not fit moves
        to the next page; a row taller than a whole page is split by line.
        Every continuation page repeats the header.
        """
        style = style or TableStyle()
        with self._guard("render_table"):
            total = self.page_width - style.left_margin - style.right_margin
            widths = self._column_widths(header, rows, total, style)
            bottom = self.page_height - style.bottom_margin
            head_text = TextStyle(size=style.font_size, bold=True, color=PALETTE["white"])
            body_text = TextStyle(size=style.font_size)
            head_lines = self._wrap_cells(header, widths, style, head_text)
            head_h = self._block_height(head_lines, style)
            page_room = bottom - style.top_margin - head_h

            def continue_on_new_page() -> float:
                self.new_page()
                return self._draw_cells(head_lines, widths, style.top_margin, style, head_text, style.head_fill)

            y = start_y
            fresh = False
            if y + head_h > bottom:
                self.new_page()
                y = style.top_margin
                fresh = True
            y = self._draw_cells(head_lines, widths, y, style, head_text, style.head_fill)
            for idx, row in enumerate(rows):
                fill = PALETTE["stripe"] if style.theme == "striped" and idx % 2 == 1 else None
                pending = self._wrap_cells(row, widths, style, body_text)
                while True:
                    needed = self._block_height(pending, style)
                    if y + needed <= bottom:
                        y = self._draw_cells(pending, widths, y, style, body_text, fill)
                        fresh = False
                        break
                    fit = int((bottom - y - style.padding) // style.line_height)
                    if fresh:
                        fit = max(fit, 1)
                    elif needed <= page_room or fit < 1:
                        y = continue_on_new_page()
                        fresh = True
                        continue
                    chunk = [lines[:fit] for lines in pending]
                    pending = [lines[fit:] for lines in pending]
                    self._draw_cells(chunk, widths, y, style, body_text, fill)
                    y = continue_on_new_page()
                    fresh = True
            return y

    def serialize(self) -> bytes:
        with self._guard("serialize"):
            return bytes(self._pdf.output())
