"""Invoice email composition: subject, HTML body and attachment."""

from html import escape

from fitbill.core.entities import EmailAttachment, EmailMessage, InvoiceDocument
from fitbill.core.services.formatting import format_currency, format_date

NO_PDF_NOTICE = (
    "We were unable to generate a PDF copy of this invoice. "
    "Please contact support for a copy."
)


def attachment_filename(invoice_number: str) -> str:
    return f"Invoice-{invoice_number}.pdf"


class InvoiceEmailComposer:
    """Builds the email that carries an invoice to its client."""

    def __init__(
        self,
        company_name: str = "Witness The Fitness",
        support_email: str = "",
        base_url: str = "",
    ):
        self._company_name = company_name
        self._support_email = support_email
        self._base_url = base_url.rstrip("/")

    def subject(self, document: InvoiceDocument) -> str:
        return f"Invoice {document.invoice_number} - {format_date(document.payment_date)}"

    def html_body(self, document: InvoiceDocument, has_pdf: bool) -> str:
        """Render the HTML body. All interpolated values are escaped."""
        company = escape(self._company_name)
        number = escape(document.invoice_number)

        if has_pdf:
            intro = "Thank you for your payment! Please find your invoice attached to this email."
        else:
            intro = f"Thank you for your payment! {NO_PDF_NOTICE}"
            if self._support_email:
                support = escape(self._support_email)
                intro += f' Support: <a href="mailto:{support}">{support}</a>'

        link = ""
        if self._base_url:
            link = (
                f'<p><a href="{escape(self._base_url)}/dashboard/invoices">'
                "View your invoices online</a></p>"
            )

        return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #14b8a6;">Invoice from {company}</h2>
  <p>Dear {escape(document.client_name)},</p>
  <p>{intro}</p>
  <div style="background-color: #f0fdfa; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <p style="margin: 5px 0;"><strong>Invoice Number:</strong> {number}</p>
    <p style="margin: 5px 0;"><strong>Payment Date:</strong> {format_date(document.payment_date)}</p>
    <p style="margin: 5px 0;"><strong>Amount Paid:</strong> {format_currency(document.amount_paid)}</p>
    <p style="margin: 5px 0;"><strong>Amount Remaining:</strong> {format_currency(document.amount_remaining)}</p>
    <p style="margin: 5px 0;"><strong>Total Amount:</strong> {format_currency(document.total_amount)}</p>
  </div>
  {link}
  <p>If you have any questions about this invoice, please don't hesitate to contact us.</p>
  <p style="margin-top: 30px;">Best regards,<br><strong>{company} Team</strong></p>
</div>
"""

    def compose(self, document: InvoiceDocument, pdf_bytes: bytes | None) -> EmailMessage:
        attachments = []
        if pdf_bytes:
            attachments.append(
                EmailAttachment(
                    filename=attachment_filename(document.invoice_number),
                    content=pdf_bytes,
                    content_type="application/pdf",
                )
            )
        return EmailMessage(
            to=document.client_email,
            subject=self.subject(document),
            html=self.html_body(document, has_pdf=bool(pdf_bytes)),
            attachments=attachments,
        )
