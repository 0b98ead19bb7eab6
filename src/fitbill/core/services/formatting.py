"""Display formatting shared by the PDF and the email body."""

from datetime import date, datetime
from decimal import Decimal

CURRENCY_SYMBOL = "₹"


def format_currency(amount: Decimal | float | int) -> str:
    """Format as rupees with two decimals and thousands separators: ₹1,234.56."""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(value):,.2f}"


def format_date(value: date | datetime | str) -> str:
    """Format as DD/MM/YYYY. Accepts ISO strings."""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return value.strftime("%d/%m/%Y")


def format_months(months: int) -> str:
    return f"{months} {'Month' if months == 1 else 'Months'}"
