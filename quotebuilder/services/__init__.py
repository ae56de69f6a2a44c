"""Calculation and supporting services for quotations."""
