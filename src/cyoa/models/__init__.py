"""Data models for story pages."""

from cyoa.models.page import Choice, Page, PageType, assign_page_type

__all__ = [
    "Choice",
    "Page",
    "PageType",
    "assign_page_type",
]
