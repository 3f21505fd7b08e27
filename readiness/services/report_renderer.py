"""
PDF report renderer.
Lays report sections out on fixed A4 pages, then paints the pages with
reportlab's canvas. Layout is a pure function of the document so it can be
tested without producing a PDF, and it runs to completion before anything is
drawn.
"""
import io
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..config import get_settings
from ..errors import RenderError, ValidationError
from ..logging import get_logger

logger = get_logger("report")

PAGE_WIDTH = 595
PAGE_HEIGHT = 842
TOP_Y = 780
BOTTOM_MARGIN = 60          # nothing is drawn at or below this line
TITLE_X = 50
BODY_X = 70
TITLE_SIZE = 18
BODY_SIZE = 12
LINE_HEIGHT = 18
TITLE_GAP = 28
SECTION_GAP = 18
BODY_WIDTH = PAGE_WIDTH - BODY_X - TITLE_X
BULLET = "・"
TITLE_GRAY = (0.2, 0.2, 0.2)

_BULLET_PREFIX = re.compile(r"^(?:[・•\-*●◦‣–]\s*)+")

# (request key, section title) in report order
REPORT_SECTIONS: Tuple[Tuple[str, str], ...] = (
    ("seo", "SEO Analysis"),
    ("ux", "UX/UI Analysis"),
    ("conversion", "Conversion Improvements"),
    ("strengths", "Strengths"),
    ("weaknesses", "Weaknesses"),
    ("improvement", "Improvement Proposals"),
)

Measure = Callable[[str, float], float]


# ─── Document model ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Lines:
    items: Tuple[str, ...]


SectionContent = Union[Text, Lines]


@dataclass(frozen=True)
class Section:
    title: str
    content: SectionContent


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    size: int
    kind: str   # "title" | "body"


@dataclass
class Page:
    number: int
    runs: List[TextRun] = field(default_factory=list)

    @property
    def body_runs(self) -> List[TextRun]:
        return [run for run in self.runs if run.kind == "body"]


@dataclass(frozen=True)
class Cursor:
    page: int   # index of the open page
    y: float


def content_from_raw(raw: Any, field_name: str = "content") -> SectionContent:
    """Accept a string or a list of strings; anything else is a caller error."""
    if isinstance(raw, str):
        return Text(raw)
    if isinstance(raw, (list, tuple)) and all(isinstance(item, str) for item in raw):
        return Lines(tuple(raw))
    raise ValidationError(f"'{field_name}' must be a string or a list of strings")


def document_from_result(result: Any) -> List[Section]:
    """Build the report document from a /pdf request's `result` object."""
    if not isinstance(result, dict):
        raise ValidationError("'result' must be an object")
    sections = [
        Section(title=title, content=content_from_raw(result[key], key))
        for key, title in REPORT_SECTIONS
        if result.get(key) is not None
    ]
    if not sections:
        keys = ", ".join(key for key, _ in REPORT_SECTIONS)
        raise ValidationError(f"'result' has none of the report sections ({keys})")
    return sections


# ─── Layout ────────────────────────────────────────────────────────────────────

def _content_text(section: Section) -> str:
    content = section.content
    if isinstance(content, Text) and isinstance(content.value, str):
        return content.value
    if isinstance(content, Lines) and all(isinstance(item, str) for item in content.items):
        return "\n".join(content.items)
    raise RenderError(
        f"Section '{section.title}' has unsupported content ({type(content).__name__})"
    )


def _wrap(line: str, measure: Optional[Measure]) -> List[str]:
    """Greedy wrap to the body width, breaking at spaces when there are any."""
    if measure is None or measure(line, BODY_SIZE) <= BODY_WIDTH:
        return [line]
    wrapped: List[str] = []
    current = ""
    for ch in line:
        if current and measure(current + ch, BODY_SIZE) > BODY_WIDTH:
            cut = current.rfind(" ")
            if cut > 0:
                wrapped.append(current[:cut])
                current = current[cut + 1:] + ch
            else:
                wrapped.append(current)
                current = ch
        else:
            current += ch
    if current:
        wrapped.append(current)
    return wrapped


def section_lines(section: Section, measure: Optional[Measure] = None) -> List[str]:
    """Split content into bulleted body lines, dropping any bullets the text already had."""
    lines: List[str] = []
    for raw in _content_text(section).split("\n"):
        text = _BULLET_PREFIX.sub("", raw.strip()).strip()
        if not text:
            continue
        lines.extend(_wrap(BULLET + text, measure))
    return lines


def _open_page(pages: List[Page]) -> Cursor:
    pages.append(Page(number=len(pages) + 1))
    return Cursor(page=len(pages) - 1, y=TOP_Y)


def _place(pages: List[Page], cursor: Cursor, run: TextRun, advance: float) -> Cursor:
    pages[cursor.page].runs.append(run)
    return Cursor(page=cursor.page, y=cursor.y - advance)


def layout(document: Sequence[Section], measure: Optional[Measure] = None) -> List[Page]:
    """
    Place every section title and body line on pages.

    A new page is opened before a body line that would land at or below the
    bottom margin, and before a title that would leave no room for a body
    line under it. The trailing section gap never opens a page by itself.
    """
    # Normalize everything up front so a bad section fails before any page exists.
    prepared = [(section.title, section_lines(section, measure)) for section in document]

    pages: List[Page] = []
    cursor: Optional[Cursor] = None
    for title, lines in prepared:
        if cursor is None or cursor.y - TITLE_GAP <= BOTTOM_MARGIN:
            cursor = _open_page(pages)
        cursor = _place(pages, cursor, TextRun(TITLE_X, cursor.y, title, TITLE_SIZE, "title"), TITLE_GAP)

        for line in lines:
            if cursor.y <= BOTTOM_MARGIN:
                cursor = _open_page(pages)
            cursor = _place(pages, cursor, TextRun(BODY_X, cursor.y, line, BODY_SIZE, "body"), LINE_HEIGHT)

        cursor = Cursor(page=cursor.page, y=cursor.y - SECTION_GAP)
    return pages


# ─── PDF ───────────────────────────────────────────────────────────────────────

def _register_font(name: str) -> str:
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.cidfonts import UnicodeCIDFont

    if name in pdfmetrics.standardFonts or name in pdfmetrics.getRegisteredFontNames():
        return name
    try:
        pdfmetrics.registerFont(UnicodeCIDFont(name))
    except Exception as e:
        raise RenderError(f"Font '{name}' is not available") from e
    return name


def render_pdf(document: Sequence[Section], font_name: Optional[str] = None) -> bytes:
    """Lay out the document and return the finished multi-page PDF bytes."""
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfgen import canvas

    font = _register_font(font_name or get_settings().pdf_font)
    pages = layout(document, lambda text, size: pdfmetrics.stringWidth(text, font, size))

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
    pdf.setTitle("Website Report")
    try:
        for page in pages:
            for run in page.runs:
                pdf.setFont(font, run.size)
                if run.kind == "title":
                    pdf.setFillColorRGB(*TITLE_GRAY)
                else:
                    pdf.setFillColorRGB(0, 0, 0)
                pdf.drawString(run.x, run.y, run.text)
            pdf.showPage()
        pdf.save()
    except Exception as e:
        raise RenderError(f"PDF drawing failed: {e}") from e

    logger.info("rendered report: %d section(s), %d page(s)", len(document), len(pages))
    logger.debug("body lines per page: %s", page_summary(pages))
    return buffer.getvalue()


def page_summary(pages: Sequence[Page]) -> Dict[int, int]:
    """Page number -> number of body lines drawn on it."""
    return {page.number: len(page.body_runs) for page in pages}
