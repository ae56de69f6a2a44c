"""Quotation domain value types."""
