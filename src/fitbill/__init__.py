"""FitBill - invoice numbering, PDF rendering and email delivery for gyms."""

__version__ = "1.0.0"
