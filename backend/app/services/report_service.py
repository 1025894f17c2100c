"""
Monthly PDF report layout.

Pages are laid out into in-memory page buffers (ordered lists of drawing
operations). Footers are stamped in a separate pass once the final page
count is known, and only then is the document rendered to PDF bytes with
reportlab.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, NamedTuple, Optional, Sequence, Tuple
import io
import logging
from babel.numbers import format_currency as babel_format_currency, validate_currency, UnknownCurrencyError
from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as pdf_canvas
from app.core.utils import month_name, slugify
from app.models.transaction import TransactionType
from app.schemas.budget import UsageLevel
from app.services.budget_service import summarize_budgets, transaction_value

logger = logging.getLogger(__name__)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
ELLIPSIS = "..."
CURRENCY_PATTERN = "¤#,##0.##"  # 0 minimum, 2 maximum fraction digits
TOTALS_CURRENCY = "USD"

GREEN = Color(0.133, 0.545, 0.133)
DARK_GREEN = Color(0.067, 0.333, 0.067)
BLACK = Color(0, 0, 0)
GRAY = Color(0.45, 0.45, 0.45)
LIGHT_GRAY = Color(0.93, 0.93, 0.93)
RED = Color(0.75, 0.22, 0.17)
AMBER = Color(0.75, 0.55, 0)
WHITE = Color(1, 1, 1)
ROW_SHADE = Color(0.97, 0.97, 0.97)
PALE_GREEN = Color(0.82, 0.94, 0.82)

LEVEL_COLORS = {
    UsageLevel.CRITICAL: RED,
    UsageLevel.WARNING: AMBER,
    UsageLevel.NOMINAL: GREEN,
}


@dataclass(frozen=True)
class PageGeometry:
    """Page size, margin and the footer zone content must stay above."""
    width: float = A4[0]
    height: float = A4[1]
    margin: float = 50
    footer_zone: float = 48
    footer_rule_y: float = 38
    footer_text_y: float = 27

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def top(self) -> float:
        return self.height - self.margin


@dataclass(frozen=True)
class ReportPeriod:
    """Group and month a report covers."""
    group_id: int
    group_name: str
    month: int
    year: int

    @property
    def label(self) -> str:
        return f"{month_name(self.month)} {self.year}"


# Drawing operations

@dataclass
class TextOp:
    text: str
    x: float
    y: float
    font: str
    size: float
    color: Color

    def draw(self, c) -> None:
        c.setFillColor(self.color)
        c.setFont(self.font, self.size)
        c.drawString(self.x, self.y, self.text)


@dataclass
class RectOp:
    x: float
    y: float
    width: float
    height: float
    color: Color

    def draw(self, c) -> None:
        c.setFillColor(self.color)
        c.rect(self.x, self.y, self.width, self.height, stroke=0, fill=1)


@dataclass
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    thickness: float
    color: Color

    def draw(self, c) -> None:
        c.setStrokeColor(self.color)
        c.setLineWidth(self.thickness)
        c.line(self.x1, self.y1, self.x2, self.y2)


@dataclass
class PageBuffer:
    """Drawing operations of one page, in paint order."""
    ops: list = field(default_factory=list)

    def texts(self) -> List[str]:
        return [op.text for op in self.ops if isinstance(op, TextOp)]


def text_width(text: str, font: str = FONT, size: float = 9) -> float:
    """Rendered width of text in points."""
    return stringWidth(text, font, size)


def truncate_to_width(text: str, max_width: float, font: str = FONT, size: float = 9) -> str:
    """
    Shorten text to fit max_width, marking the cut with an ellipsis.
    Characters are dropped from the end one at a time until text plus the
    ellipsis fits; text that already fits is returned unchanged.
    """
    if text_width(text, font, size) <= max_width:
        return text
    while text_width(text + ELLIPSIS, font, size) > max_width and len(text) > 1:
        text = text[:-1]
    return text + ELLIPSIS


def format_currency(amount, currency: str) -> str:
    """
    en_US currency formatting with 0-2 fraction digits.
    Unknown currency codes fall back to "<CODE> <amount with 2 decimals>".
    """
    amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    code = (currency or "").upper()
    try:
        validate_currency(code)
    except UnknownCurrencyError:
        return f"{code} {amount:.2f}"
    return babel_format_currency(
        amount, code, format=CURRENCY_PATTERN, locale="en_US", currency_digits=False
    )


def short_date(value: date) -> str:
    """Short month and day, e.g. 'Oct 5'."""
    return f"{month_name(value.month)[:3]} {value.day}"


def report_filename(product: str, group_name: str, month: int, year: int) -> str:
    """Suggested download name, e.g. 'supaspend-home-budget-october-2026.pdf'."""
    return f"{slugify(product)}-{slugify(group_name)}-{month_name(month).lower()}-{year}.pdf"


class ReportCanvas:
    """
    Layout accumulator for one report build.

    Tracks the page buffers produced so far and a vertical cursor y that
    decreases as content is drawn. Not shared between builds.
    """

    def __init__(self, geometry: Optional[PageGeometry] = None):
        self.geometry = geometry or PageGeometry()
        self.pages: List[PageBuffer] = []
        self.page: Optional[PageBuffer] = None
        self.y = 0.0
        self.new_page()

    @property
    def left(self) -> float:
        return self.geometry.margin

    @property
    def content_width(self) -> float:
        return self.geometry.content_width

    def new_page(self) -> None:
        self.page = PageBuffer()
        self.pages.append(self.page)
        self.y = self.geometry.top

    def ensure_space(self, needed: float) -> bool:
        """Start a new page when drawing needed points would enter the footer zone."""
        if self.y - needed < self.geometry.footer_zone:
            self.new_page()
            return True
        return False

    def text(self, value: str, x: float, y: Optional[float] = None,
             font: str = FONT, size: float = 10, color: Color = BLACK) -> None:
        self.page.ops.append(TextOp(value, x, self.y if y is None else y, font, size, color))

    def rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        self.page.ops.append(RectOp(x, y, width, height, color))

    def line(self, x1: float, y1: float, x2: float, y2: float,
             thickness: float = 0.5, color: Color = GRAY) -> None:
        self.page.ops.append(LineOp(x1, y1, x2, y2, thickness, color))

    def stamp_footers(self, label: str) -> None:
        """Divider, label and 'Page i of N' on every page; run after layout is complete."""
        g = self.geometry
        total = len(self.pages)
        for index, page in enumerate(self.pages, start=1):
            page_number = f"Page {index} of {total}"
            page.ops.append(LineOp(g.margin, g.footer_rule_y, g.width - g.margin, g.footer_rule_y, 0.5, LIGHT_GRAY))
            page.ops.append(TextOp(label, g.margin, g.footer_text_y, FONT, 7, GRAY))
            page.ops.append(TextOp(
                page_number,
                g.width - g.margin - text_width(page_number, FONT, 7),
                g.footer_text_y, FONT, 7, GRAY
            ))

    def render(self) -> bytes:
        """Serialize every page buffer, in order, into one PDF document."""
        buffer = io.BytesIO()
        c = pdf_canvas.Canvas(buffer, pagesize=(self.geometry.width, self.geometry.height))
        for page in self.pages:
            for op in page.ops:
                op.draw(c)
            c.showPage()
        c.save()
        return buffer.getvalue()


class TableColumn(NamedTuple):
    label: str
    offset: float  # x offset from the left margin


class Cell(NamedTuple):
    text: str
    color: Color = BLACK
    font: str = FONT


class ReportTable:
    """Table with a shaded header band that repeats after every page break."""

    HEADER_HEIGHT = 18
    HEADER_STEP = 20
    ROW_HEIGHT = 16
    ROW_STEP = 18
    PADDING = 5
    FONT_SIZE = 9

    def __init__(self, canvas: ReportCanvas, columns: Sequence[TableColumn]):
        self.canvas = canvas
        self.columns = list(columns)
        self.row_count = 0

    def column_x(self, index: int) -> float:
        return self.canvas.left + self.columns[index].offset + self.PADDING

    def column_width(self, index: int) -> float:
        """Usable text width of a column, up to the next column's start."""
        if index + 1 < len(self.columns):
            end = self.columns[index + 1].offset
        else:
            end = self.canvas.content_width
        return end - self.columns[index].offset - 3 * self.PADDING

    def draw_header(self) -> None:
        c = self.canvas
        c.rect(c.left, c.y - 4, c.content_width, self.HEADER_HEIGHT, LIGHT_GRAY)
        for index, column in enumerate(self.columns):
            c.text(column.label, self.column_x(index), font=FONT_BOLD, size=self.FONT_SIZE, color=GRAY)
        c.y -= self.HEADER_STEP

    def add_row(self, cells: Sequence[Cell]) -> None:
        c = self.canvas
        if c.ensure_space(self.ROW_STEP):
            self.draw_header()
        if self.row_count % 2 == 0:
            c.rect(c.left, c.y - 4, c.content_width, self.ROW_HEIGHT, ROW_SHADE)
        for index, cell in enumerate(cells):
            c.text(cell.text, self.column_x(index), font=cell.font, size=self.FONT_SIZE, color=cell.color)
        self.row_count += 1
        c.y -= self.ROW_STEP

    def add_summary(self, cells: Sequence[Tuple[float, Cell]], reserve: float = 30) -> None:
        """Divider rule and one bold line of cells placed at x offsets."""
        c = self.canvas
        c.ensure_space(reserve)
        c.line(c.left, c.y + 4, c.left + c.content_width, c.y + 4, 0.5, GRAY)
        c.y -= 14
        for offset, cell in cells:
            c.text(cell.text, c.left + offset, font=cell.font, size=self.FONT_SIZE, color=cell.color)
        c.y -= 25


BUDGET_COLUMNS = [
    TableColumn("Budget", 0),
    TableColumn("Limit", 160),
    TableColumn("Spent", 265),
    TableColumn("Remaining", 365),
    TableColumn("Used", 460),
]

TRANSACTION_COLUMNS = [
    TableColumn("Date", 0),
    TableColumn("Merchant", 75),
    TableColumn("Budget", 230),
    TableColumn("Type", 345),
    TableColumn("Amount", 415),
]


def _draw_banner(c: ReportCanvas, product: str, period: ReportPeriod, generated_on: date) -> None:
    left, width = c.left, c.content_width
    right = left + width - 14
    c.rect(left, c.y - 55, width, 55, GREEN)
    c.text(product, left + 14, c.y - 22, font=FONT_BOLD, size=18, color=WHITE)
    c.text("Monthly Report", left + 14, c.y - 40, size=10, color=PALE_GREEN)
    c.text(period.label, right - text_width(period.label, FONT_BOLD, 15), c.y - 22,
           font=FONT_BOLD, size=15, color=WHITE)
    c.text(period.group_name, right - text_width(period.group_name, FONT, 10), c.y - 40,
           size=10, color=PALE_GREEN)
    c.y -= 70

    generated = f"Generated {month_name(generated_on.month)} {generated_on.day}, {generated_on.year}"
    c.text(generated, left, size=8, color=GRAY)
    c.y -= 28


def _draw_section_title(c: ReportCanvas, title: str) -> None:
    c.text(title, c.left, font=FONT_BOLD, size=13, color=DARK_GREEN)
    c.y -= 5
    c.line(c.left, c.y, c.left + c.content_width, c.y, 1.5, GREEN)
    c.y -= 18


def _draw_budget_section(c: ReportCanvas, budgets: Sequence, transactions: Sequence) -> None:
    _draw_section_title(c, "Budget Overview")

    if not budgets:
        c.text("No budgets set for this month.", c.left, size=10, color=GRAY)
        c.y -= 25
        return

    overview = summarize_budgets(budgets, transactions, use_converted=True)
    table = ReportTable(c, BUDGET_COLUMNS)
    table.draw_header()

    for b in overview.budgets:
        table.add_row([
            Cell(b.category),
            Cell(format_currency(b.effective_limit, b.currency)),
            Cell(format_currency(b.spent, b.currency), RED if b.spent > 0 else BLACK),
            Cell(format_currency(b.remaining, b.currency), GREEN if b.remaining > 0 else RED),
            Cell(f"{b.percent_used:.0f}%", LEVEL_COLORS[b.level], FONT_BOLD),
        ])

    table.add_summary([
        (BUDGET_COLUMNS[0].offset + 5, Cell("TOTAL", font=FONT_BOLD)),
        (BUDGET_COLUMNS[1].offset + 5, Cell(format_currency(overview.total_limit, TOTALS_CURRENCY), font=FONT_BOLD)),
        (BUDGET_COLUMNS[2].offset + 5, Cell(format_currency(overview.total_spent, TOTALS_CURRENCY), RED, FONT_BOLD)),
        (BUDGET_COLUMNS[3].offset + 5, Cell(
            format_currency(overview.total_remaining, TOTALS_CURRENCY),
            GREEN if overview.total_remaining > 0 else RED,
            FONT_BOLD
        )),
        (BUDGET_COLUMNS[4].offset + 5, Cell(f"{overview.total_percent_used:.0f}%", font=FONT_BOLD)),
    ], reserve=30)


def _draw_transaction_section(c: ReportCanvas, transactions: Sequence) -> None:
    c.ensure_space(40)
    _draw_section_title(c, "Transaction Details")

    if not transactions:
        c.text("No transactions for this month.", c.left, size=10, color=GRAY)
        return

    table = ReportTable(c, TRANSACTION_COLUMNS)
    merchant_width = table.column_width(1)
    table.draw_header()

    total_income = Decimal(0)
    total_expenses = Decimal(0)

    for t in transactions:
        is_expense = t.type == TransactionType.EXPENSE
        if is_expense:
            total_expenses += transaction_value(t, use_converted=True)
        else:
            total_income += transaction_value(t, use_converted=True)

        type_color = RED if is_expense else GREEN
        table.add_row([
            Cell(short_date(t.date)),
            Cell(truncate_to_width(t.merchant or "", merchant_width, FONT, ReportTable.FONT_SIZE)),
            Cell(t.category or "No budget", BLACK if t.category else GRAY),
            Cell("Expense" if is_expense else "Income", type_color),
            Cell(format_currency(t.amount, t.currency), type_color, FONT_BOLD),
        ])

    table.add_summary([
        (5, Cell(f"{len(transactions)} transactions", font=FONT_BOLD)),
        (180, Cell(f"Income: {format_currency(total_income, TOTALS_CURRENCY)}", GREEN, FONT_BOLD)),
        (330, Cell(f"Expenses: {format_currency(total_expenses, TOTALS_CURRENCY)}", RED, FONT_BOLD)),
    ], reserve=35)


def layout_monthly_report(
    period: ReportPeriod,
    budgets: Sequence,
    transactions: Sequence,
    product: str = "SupaSpend",
    generated_on: Optional[date] = None,
    geometry: Optional[PageGeometry] = None
) -> ReportCanvas:
    """
    Lay out the whole report and stamp footers.

    Args:
        period: Group and month covered
        budgets: Budgets of the period, in display order
        transactions: Transactions of the period, in display order
        product: Name shown in the banner and footer
        generated_on: Date printed under the banner (defaults to today)
        geometry: Page geometry (defaults to A4)

    Returns:
        ReportCanvas holding finished page buffers
    """
    c = ReportCanvas(geometry)
    _draw_banner(c, product, period, generated_on or date.today())
    _draw_budget_section(c, budgets, transactions)
    _draw_transaction_section(c, transactions)
    c.stamp_footers(f"{product}  -  {period.group_name}  -  {period.label}")
    return c


def build_monthly_report(
    period: ReportPeriod,
    budgets: Sequence,
    transactions: Sequence,
    product: str = "SupaSpend",
    generated_on: Optional[date] = None
) -> bytes:
    """Monthly report as PDF bytes."""
    report = layout_monthly_report(period, budgets, transactions, product, generated_on)
    logger.info(f"Rendering report for group {period.group_id} ({period.label}): {len(report.pages)} pages")
    return report.render()
