"""
Fpdf2 implementation of invoice PDF rendering.

Lays out a single-page gym invoice: branded header band, From / Bill To
blocks, the training package row, payment summary, a balance banner
and a footer with the support contact and page numbers.
"""

import os

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from fitbill.config import get_logger
from fitbill.config.settings import PdfSettings, get_settings
from fitbill.core.entities import InvoiceDocument
from fitbill.core.exceptions import RenderError
from fitbill.core.interfaces import IInvoicePdfRenderer
from fitbill.core.services.formatting import (
    CURRENCY_SYMBOL,
    format_currency,
    format_date,
    format_months,
)

logger = get_logger(__name__)

# Brand palette (RGB)
_BRAND = (220, 38, 38)
_DARK = (31, 41, 55)
_MUTED = (107, 114, 128)
_LIGHT_FILL = (249, 250, 251)
_WARN_FILL = (254, 243, 199)
_WARN_TEXT = (146, 64, 14)
_OK_FILL = (220, 252, 231)
_OK_TEXT = (22, 101, 52)

_UNICODE_FAMILY = "InvoiceUnicode"
_ASCII_CURRENCY = "Rs."

# Searched when PDF_UNICODE_FONT_PATH is "auto"
SYSTEM_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "C:\\Windows\\Fonts\\arial.ttf",
)

PACKAGE_TITLE = "Personal Training Package"
PACKAGE_SUBTITLE = "Professional fitness training sessions"


def resolve_unicode_font(configured: str) -> str | None:
    """Return a TTF path covering the rupee sign, or None to fall back to Helvetica.

    ``auto`` searches the usual system font locations; any other non-empty
    value must name an existing file.
    """
    if not configured:
        return None
    if configured == "auto":
        return next((p for p in SYSTEM_FONT_CANDIDATES if os.path.isfile(p)), None)
    if os.path.isfile(configured):
        return configured
    logger.warning("pdf_unicode_font_missing", path=configured)
    return None


class _InvoicePdf(FPDF):
    """FPDF subclass carrying this render's font choice; stamps page numbers."""

    def __init__(self, unicode_font_path: str | None) -> None:
        super().__init__(format="A4")
        self.unicode_font_active = unicode_font_path is not None
        if unicode_font_path is not None:
            self.add_font(_UNICODE_FAMILY, "", unicode_font_path)

    def use_font(self, style: str = "", size: int = 10) -> None:
        if self.unicode_font_active:
            # Single-face TTF: bold and italic are not registered
            self.set_font(_UNICODE_FAMILY, "", size)
        else:
            self.set_font("Helvetica", style, size)

    def safe_text(self, text: str) -> str:
        """Make *text* encodable by the active font."""
        if self.unicode_font_active:
            return text
        text = text.replace(CURRENCY_SYMBOL, _ASCII_CURRENCY)
        return text.encode("latin-1", "replace").decode("latin-1")

    def footer(self) -> None:
        self.set_y(-12)
        self.use_font("", 7)
        self.set_text_color(*_MUTED)
        self.cell(0, 5, f"Page {self.page_no()} of {{nb}}", align="C")


class Fpdf2InvoiceRenderer(IInvoicePdfRenderer):
    """Renders invoice PDFs in-process with fpdf2.

    Holds only settings; each render builds its own FPDF document, so one
    instance can serve concurrent worker threads.
    """

    def __init__(self, pdf_settings: PdfSettings | None = None) -> None:
        if pdf_settings is None:
            pdf_settings = get_settings().pdf
        self._settings = pdf_settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, document: InvoiceDocument) -> bytes:
        """Render the invoice into PDF bytes, wrapping any failure in RenderError."""
        try:
            return self._render(document)
        except RenderError:
            raise
        except Exception as e:
            logger.error(
                "pdf_render_failed",
                invoice_number=document.invoice_number,
                error=str(e),
            )
            raise RenderError(str(e), invoice_number=document.invoice_number) from e

    def _render(self, document: InvoiceDocument) -> bytes:
        pdf = _InvoicePdf(resolve_unicode_font(self._settings.unicode_font_path))
        pdf.alias_nb_pages()
        pdf.set_auto_page_break(auto=True, margin=20)
        pdf.add_page()

        self._render_header(pdf, document)
        self._render_parties(pdf, document)
        self._render_line_items(pdf, document)
        self._render_summary(pdf, document)
        self._render_payment_banner(pdf, document)
        self._render_footer_note(pdf)

        return bytes(pdf.output())

    @staticmethod
    def _money(pdf: _InvoicePdf, amount) -> str:
        return pdf.safe_text(format_currency(amount))

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _render_header(self, pdf: _InvoicePdf, document: InvoiceDocument) -> None:
        """Coloured band with branding on the left and invoice meta on the right."""
        band_height = 36
        pdf.set_fill_color(*_BRAND)
        pdf.rect(0, 0, pdf.w, band_height, style="F")
        pdf.set_text_color(255, 255, 255)

        text_x = 12
        logo_path = self._settings.logo_path
        if logo_path and os.path.isfile(logo_path):
            pdf.image(logo_path, x=10, y=8, h=20)
            text_x = 36

        pdf.set_xy(text_x, 10)
        pdf.use_font("B", 18)
        pdf.cell(90, 9, pdf.safe_text(self._settings.company_name.upper()))
        pdf.set_xy(text_x, 20)
        pdf.use_font("", 9)
        pdf.cell(90, 5, pdf.safe_text(self._settings.tagline))

        pdf.set_xy(120, 8)
        pdf.use_font("B", 22)
        pdf.cell(78, 10, "INVOICE", align="R")
        pdf.set_xy(120, 19)
        pdf.use_font("", 10)
        pdf.cell(78, 5, pdf.safe_text(f"#{document.invoice_number}"), align="R")
        pdf.set_xy(120, 25)
        pdf.cell(78, 5, f"Date: {format_date(document.payment_date)}", align="R")

        pdf.set_text_color(*_DARK)
        pdf.set_y(band_height + 8)

    def _render_parties(self, pdf: _InvoicePdf, document: InvoiceDocument) -> None:
        top = pdf.get_y()
        left_x, right_x, col_w = 12, 110, 88

        pdf.set_xy(left_x, top)
        self._label(pdf, "From", col_w)
        pdf.set_x(left_x)
        pdf.use_font("B", 10)
        pdf.cell(col_w, 5, pdf.safe_text(self._settings.company_name),
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.use_font("", 9)
        for line in self._settings.address_lines:
            pdf.set_x(left_x)
            pdf.cell(col_w, 5, pdf.safe_text(line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        left_bottom = pdf.get_y()

        pdf.set_xy(right_x, top)
        self._label(pdf, "Bill To", col_w)
        pdf.set_x(right_x)
        pdf.use_font("B", 10)
        pdf.cell(col_w, 5, pdf.safe_text(document.client_name),
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(right_x)
        pdf.use_font("", 9)
        pdf.cell(col_w, 5, pdf.safe_text(document.client_email),
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        pdf.set_y(max(left_bottom, pdf.get_y()) + 8)

    def _label(self, pdf: _InvoicePdf, text: str, width: float) -> None:
        pdf.use_font("B", 8)
        pdf.set_text_color(*_MUTED)
        pdf.cell(width, 5, text.upper(), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*_DARK)

    def _render_line_items(self, pdf: _InvoicePdf, document: InvoiceDocument) -> None:
        """One-row table: the training package, its duration and the total."""
        col_widths = [100, 40, 46]
        headers = ["Description", "Duration", "Amount"]
        aligns = ["L", "C", "R"]

        pdf.set_x(12)
        pdf.use_font("B", 9)
        pdf.set_fill_color(*_DARK)
        pdf.set_text_color(255, 255, 255)
        for width, header, align in zip(col_widths, headers, aligns):
            pdf.cell(width, 8, header, fill=True, align=align)
        pdf.ln()
        pdf.set_text_color(*_DARK)

        row_top = pdf.get_y()
        pdf.set_fill_color(*_LIGHT_FILL)
        pdf.rect(12, row_top, sum(col_widths), 14, style="F")

        pdf.set_xy(12, row_top + 1.5)
        pdf.use_font("B", 10)
        pdf.cell(col_widths[0], 5, PACKAGE_TITLE)
        pdf.use_font("", 10)
        pdf.cell(col_widths[1], 5, format_months(document.subscription_months), align="C")
        pdf.cell(col_widths[2], 5, self._money(pdf, document.total_amount), align="R")

        pdf.set_xy(12, row_top + 7.5)
        pdf.use_font("", 8)
        pdf.set_text_color(*_MUTED)
        pdf.cell(col_widths[0], 5, PACKAGE_SUBTITLE)
        pdf.set_text_color(*_DARK)

        pdf.set_y(row_top + 20)

    def _render_summary(self, pdf: _InvoicePdf, document: InvoiceDocument) -> None:
        label_x, label_w, value_w = 110, 50, 38

        rows = [
            ("Subtotal", document.total_amount),
            ("Amount Paid", document.amount_paid),
            ("Amount Remaining", document.amount_remaining),
        ]
        pdf.use_font("", 10)
        for label, amount in rows:
            pdf.set_x(label_x)
            pdf.cell(label_w, 6, label)
            pdf.cell(value_w, 6, self._money(pdf, amount), align="R",
                     new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        y = pdf.get_y() + 1
        pdf.set_draw_color(*_MUTED)
        pdf.line(label_x, y, label_x + label_w + value_w, y)
        pdf.set_draw_color(0, 0, 0)
        pdf.set_y(y + 2)

        pdf.set_x(label_x)
        pdf.use_font("B", 12)
        pdf.set_text_color(*_BRAND)
        pdf.cell(label_w, 8, "Total Amount")
        pdf.cell(value_w, 8, self._money(pdf, document.total_amount), align="R",
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*_DARK)
        pdf.ln(8)

    def _render_payment_banner(self, pdf: _InvoicePdf, document: InvoiceDocument) -> None:
        if document.is_paid_in_full:
            fill, colour = _OK_FILL, _OK_TEXT
            title = "Payment Complete"
            body = "Thank you! Your payment has been received in full."
        else:
            fill, colour = _WARN_FILL, _WARN_TEXT
            title = "Payment Status - Balance Due"
            body = (
                f"A balance of {format_currency(document.amount_remaining)} is pending. "
                "Please clear the remaining amount at your earliest convenience."
            )

        top = pdf.get_y()
        pdf.set_fill_color(*fill)
        pdf.rect(12, top, 186, 20, style="F")
        pdf.set_text_color(*colour)
        pdf.set_xy(16, top + 3)
        pdf.use_font("B", 10)
        pdf.cell(178, 6, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(16)
        pdf.use_font("", 9)
        pdf.cell(178, 6, pdf.safe_text(body))
        pdf.set_text_color(*_DARK)
        pdf.set_y(top + 30)

    def _render_footer_note(self, pdf: _InvoicePdf) -> None:
        pdf.use_font("B", 11)
        pdf.cell(0, 7, pdf.safe_text(self._settings.footer_text), align="C",
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.use_font("", 9)
        pdf.set_text_color(*_MUTED)
        pdf.cell(
            0, 5,
            pdf.safe_text(
                f"For any queries, please contact us at {self._settings.support_email}"
            ),
            align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        pdf.set_text_color(*_DARK)
