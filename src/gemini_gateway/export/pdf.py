"""Plain text to paginated PDF."""
from __future__ import annotations
import io

from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

PAGE_SIZE = (595, 842)
FONT_NAME = "Helvetica"
FONT_SIZE = 12
MAX_WIDTH = 500
MARGIN_X = 50
TOP_Y = 800
BOTTOM_Y = 40
LINE_HEIGHT = FONT_SIZE + 5


def lines_per_page() -> int:
    return (TOP_Y - BOTTOM_Y) // LINE_HEIGHT + 1


def _width(text: str) -> float:
    return stringWidth(text, FONT_NAME, FONT_SIZE)


def _break_word(word: str, max_width: float) -> list[str]:
    """Cut a word that is wider than ``max_width`` into pieces that fit."""
    pieces: list[str] = []
    current = ""
    for ch in word:
        if current and _width(current + ch) > max_width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    pieces.append(current)
    return pieces


def wrap_text(text: str, max_width: float = MAX_WIDTH) -> list[str]:
    """
    Split text into lines no wider than ``max_width`` at FONT_SIZE.

    Explicit newlines always break. Runs of spaces are kept, tabs become four
    spaces. A word wider than the limit is cut across lines.
    """
    lines: list[str] = []
    for paragraph in text.replace("\r\n", "\n").split("\n"):
        current: str | None = None
        for word in paragraph.expandtabs(4).split(" "):
            if _width(word) > max_width:
                if current is not None:
                    lines.append(current)
                *full, current = _break_word(word, max_width)
                lines.extend(full)
                continue
            candidate = word if current is None else f"{current} {word}"
            if current is None or _width(candidate) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current or "")
    return lines


def layout_pages(text: str) -> list[list[str]]:
    """Distribute wrapped lines over pages, top to bottom."""
    pages: list[list[str]] = [[]]
    y = TOP_Y
    for line in wrap_text(text):
        if y < BOTTOM_Y:
            pages.append([])
            y = TOP_Y
        pages[-1].append(line)
        y -= LINE_HEIGHT
    return pages


def render_pdf(text: str) -> bytes:
    """Render ``text`` into PDF bytes."""
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=PAGE_SIZE)
    pdf.setTitle("export")
    for page in layout_pages(text):
        pdf.setFont(FONT_NAME, FONT_SIZE)
        pdf.setFillColorRGB(0, 0, 0)
        y = TOP_Y
        for line in page:
            pdf.drawString(MARGIN_X, y, line)
            y -= LINE_HEIGHT
        pdf.showPage()
    pdf.save()
    return buf.getvalue()
