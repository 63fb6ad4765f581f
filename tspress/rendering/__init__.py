"""Markdown rendering of collected documentation."""

from .builder import DocsBuilder

__all__ = ["DocsBuilder"]
