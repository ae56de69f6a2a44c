"""Quotation builder: charge categories, line items and financial summaries."""

__version__ = "0.4.0"
