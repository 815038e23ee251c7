"""Attach PDFs linked from Linkding bookmarks as bookmark assets."""

__version__ = "0.1.0"