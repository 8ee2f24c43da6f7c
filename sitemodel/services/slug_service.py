"""Slug generation for post file names and archive URLs."""

from __future__ import annotations

import re
import unicodedata
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

MAX_SLUG_LENGTH = 80

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")


def slugify(text: str) -> str:
    """Generate a URL-safe slug from a title, category or tag.

    - Normalize unicode to ASCII (NFKD)
    - Lowercase, strip
    - Replace non-alphanumeric chars with hyphens
    - Collapse multiple hyphens
    - Strip leading/trailing hyphens
    - Truncate to 80 chars (don't cut mid-word if possible)
    - Return "untitled" for empty/whitespace-only input
    """
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")

    if not text:
        return "untitled"

    if len(text) > MAX_SLUG_LENGTH:
        truncated = text[:MAX_SLUG_LENGTH]
        last_hyphen = truncated.rfind("-")
        if last_hyphen > 0:
            truncated = truncated[:last_hyphen]
        text = truncated.rstrip("-")

    return text


def post_slug_from_filename(file_name: str) -> str:
    """Return the slug part of a ``YYYY-MM-DD-slug.md`` post file name."""
    name = file_name.rsplit("/", maxsplit=1)[-1]
    name = re.sub(r"\.(md|markdown)$", "", name)
    return _DATE_PREFIX_RE.sub("", name)


def generate_post_path(title: str, posts_dir: Path, day: date | None = None) -> Path:
    """Generate a unique post file path.

    Creates a path of the form: posts_dir / YYYY-MM-DD-{slug}.md
    If the file already exists, appends -2, -3, etc. to the slug.
    """
    slug = slugify(title)
    base_name = f"{(day or date.today()).isoformat()}-{slug}"

    candidate = posts_dir / f"{base_name}.md"
    if not candidate.exists():
        return candidate

    counter = 2
    while True:
        candidate = posts_dir / f"{base_name}-{counter}.md"
        if not candidate.exists():
            return candidate
        counter += 1
