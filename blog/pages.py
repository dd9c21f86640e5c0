"""
Site pages: Markdown files with a YAML front-matter header.

    ---
    title: Generating inverse probability weights
    date: 2021-12-18
    categories: [r, causal inference]
    ---
    Body text with {{ ate_binary:.1f }} style inline values.

Pages are plain dicts with keys `path`, `slug`, `meta` and `body`. The
HTML rendering happens elsewhere; this module only reads pages, checks
the metadata the site generator relies on, and fills in numbers that the
tutorial code recomputes.
"""

import datetime
import logging
import re
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).resolve().parents[1] / "content"
REQUIRED_META = ("title", "date", "categories")

_FRONT_MATTER = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)
_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z_]\w*)\s*(?::([^}]*))?\}\}")


def parse_front_matter(text):
    """
    Split a page into its metadata and body.

    Returns
    -------
    (dict, str)
        Parsed YAML header and the remaining body. A page without a
        header yields an empty dict and the whole text.
    """
    m = _FRONT_MATTER.match(text)
    if not m:
        return {}, text
    meta = yaml.safe_load(m.group(1)) or {}
    if not isinstance(meta, dict):
        raise ValueError("front matter must be a YAML mapping")
    return meta, text[m.end():]


def validate_meta(meta, path="<page>"):
    """
    Check and normalize the metadata of one page.

    `title` must be a non-empty string, `date` an ISO date (YAML already
    turns unquoted dates into `datetime.date`) and `categories` a list
    of strings.

    Returns
    -------
    dict
        Copy of `meta` with `date` as a `datetime.date`.
    """
    missing = [key for key in REQUIRED_META if key not in meta]
    if missing:
        raise ValueError(f"{path}: missing front matter field(s): {', '.join(missing)}")

    if not isinstance(meta["title"], str) or not meta["title"].strip():
        raise ValueError(f"{path}: title must be a non-empty string")

    date = meta["date"]
    if isinstance(date, datetime.datetime):
        date = date.date()
    elif isinstance(date, str):
        try:
            date = datetime.date.fromisoformat(date)
        except ValueError:
            raise ValueError(f"{path}: date {meta['date']!r} is not an ISO date") from None
    elif not isinstance(date, datetime.date):
        raise ValueError(f"{path}: date {meta['date']!r} is not an ISO date")

    categories = meta["categories"]
    if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
        raise ValueError(f"{path}: categories must be a list of strings")

    out = dict(meta)
    out["date"] = date
    return out


def load_page(path):
    """Read and validate a single page."""
    path = Path(path)
    meta, body = parse_front_matter(path.read_text(encoding="utf-8"))
    return dict(path=path, slug=path.stem, meta=validate_meta(meta, path), body=body)


def load_pages(content_dir=CONTENT_DIR):
    """
    Load every `*.md` page under `content_dir`, newest first.

    Raises
    ------
    FileNotFoundError
        If `content_dir` does not exist.
    """
    content_dir = Path(content_dir)
    if not content_dir.is_dir():
        raise FileNotFoundError(f"content directory not found: {content_dir}")

    pages = [load_page(p) for p in sorted(content_dir.rglob("*.md"))]
    logger.info("loaded %d pages from %s", len(pages), content_dir)
    return sorted(pages, key=lambda page: page["meta"]["date"], reverse=True)


def pages_by_category(pages):
    """Category tag -> list of pages carrying it (input order kept)."""
    index = {}
    for page in pages:
        for category in page["meta"]["categories"]:
            index.setdefault(category, []).append(page)
    return index


def placeholders(body):
    """Names of all `{{ name }}` inline values used in `body`."""
    return {m.group(1) for m in _PLACEHOLDER.finditer(body)}


def fill_values(body, values):
    """
    Replace `{{ name }}` and `{{ name:spec }}` with formatted values.

    Parameters
    ----------
    body : str
    values : dict
        Name -> value; `spec` is any `format()` spec, e.g. `.1f`.

    Raises
    ------
    KeyError
        If the body uses a name that `values` does not provide.
    """
    unknown = placeholders(body) - set(values)
    if unknown:
        raise KeyError(f"no value for inline placeholder(s): {', '.join(sorted(unknown))}")

    def _sub(m):
        spec = (m.group(2) or "").strip()
        return format(values[m.group(1)], spec)

    return _PLACEHOLDER.sub(_sub, body)
