"""
Parsing layer exports.
"""

from app.inventory.parsing.excerpt import PageExcerptExtractor, extract_page_excerpt

__all__ = ["PageExcerptExtractor", "extract_page_excerpt"]
