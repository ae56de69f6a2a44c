"""View-model helpers for quotation editing."""

from .quotation_draft_view_model import QuotationDraftViewModel

__all__ = [
    "QuotationDraftViewModel",
]
