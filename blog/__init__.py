"""
Content helpers for the site: page loading, metadata checks and inline
values recomputed by the tutorial code.
"""

from .pages import (
    CONTENT_DIR,
    fill_values,
    load_page,
    load_pages,
    pages_by_category,
    parse_front_matter,
    placeholders,
    validate_meta,
)
