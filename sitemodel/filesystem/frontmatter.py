"""YAML front matter parser/serializer for site pages and posts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import frontmatter
import yaml

from sitemodel.exceptions import FrontmatterError
from sitemodel.services.datetime_service import date_from_filename, format_datetime, parse_datetime

REQUIRED_FIELDS: tuple[str, ...] = ("layout", "title")

RECOGNIZED_FIELDS: frozenset[str] = frozenset(
    {
        "layout",
        "title",
        "date",
        "categories",
        "category",
        "tags",
        "author_profile",
        "permalink",
        "published",
    }
)

# Opening fence: up to three spaces of indent, then 3+ backticks or tildes.
_FENCE_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")


@dataclass
class CodeFence:
    """A fenced code block found in a Markdown body.

    Line numbers are 1-based and relative to the body. ``end_line`` is None
    when the block is never closed.
    """

    language: str
    start_line: int
    end_line: int | None = None

    @property
    def is_closed(self) -> bool:
        return self.end_line is not None


@dataclass
class ContentPage:
    """Parsed content document."""

    layout: str
    title: str
    content: str
    raw_content: str
    date: datetime | None = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    author_profile: bool = False
    permalink: str | None = None
    published: bool = True
    file_path: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    has_front_matter: bool = True

    @property
    def is_post(self) -> bool:
        return self.file_path.startswith("_posts/")

    @property
    def display_title(self) -> str:
        """Title as a reader would see it, even when front matter has none."""
        return self.title or extract_title(self.content, self.file_path)


def extract_title(content: str, file_path: str = "") -> str:
    """Extract title from first # heading in markdown body.

    Falls back to deriving title from filename.
    """
    code_lines = _code_block_lines(content)
    for lineno, line in enumerate(content.split("\n"), start=1):
        if lineno in code_lines:
            continue
        stripped = line.strip()
        if stripped.startswith("# ") and not stripped.startswith("## "):
            return stripped.removeprefix("# ").strip()
    if file_path:
        name = file_path.rsplit("/", maxsplit=1)[-1]
        name = re.sub(r"^\d{4}-\d{2}-\d{2}-?", "", name)  # strip date prefix
        name = re.sub(r"\.(md|markdown)$", "", name)
        return name.replace("-", " ").replace("_", " ").title()
    return "Untitled"


def parse_terms(raw_terms: object | None) -> list[str]:
    """Parse a categories/tags value.

    Jekyll accepts either a YAML list or a single whitespace-separated
    string. Duplicates are dropped, first occurrence wins.
    """
    if raw_terms is None:
        return []
    if isinstance(raw_terms, str):
        items: list[object] = list(raw_terms.split())
    elif isinstance(raw_terms, list):
        items = raw_terms
    else:
        items = [raw_terms]
    result: list[str] = []
    for item in items:
        if item is None:
            continue
        term = str(item).strip()
        if term and term not in result:
            result.append(term)
    return result


def find_code_fences(body: str) -> list[CodeFence]:
    """Locate fenced code blocks in a Markdown body.

    A closing fence must use the same character as the opening fence, be at
    least as long, and carry nothing but whitespace after it.
    """
    fences: list[CodeFence] = []
    current: CodeFence | None = None
    marker = ""
    for lineno, line in enumerate(body.split("\n"), start=1):
        match = _FENCE_RE.match(line)
        if current is None:
            if match is None:
                continue
            fence, info = match.group(2), match.group(3).strip()
            if fence[0] == "`" and "`" in info:
                continue  # inline code, not a fence
            marker = fence
            current = CodeFence(language=info.split()[0] if info else "", start_line=lineno)
            fences.append(current)
        elif match is not None:
            fence, rest = match.group(2), match.group(3)
            if fence[0] == marker[0] and len(fence) >= len(marker) and not rest.strip():
                current.end_line = lineno
                current = None
    return fences


def _code_block_lines(body: str) -> set[int]:
    """Line numbers covered by fenced code blocks, fence lines included.

    An unclosed block runs to the end of the body.
    """
    last_line = body.count("\n") + 1
    covered: set[int] = set()
    for fence in find_code_fences(body):
        end = fence.end_line if fence.end_line is not None else last_line
        covered.update(range(fence.start_line, end + 1))
    return covered


def _parse_date(raw: object, file_path: str, default_tz: str) -> datetime | None:
    if raw is None:
        return date_from_filename(file_path, default_tz) if file_path else None
    value = raw if isinstance(raw, date) else str(raw)
    try:
        return parse_datetime(value, default_tz)
    except ValueError as exc:
        raise FrontmatterError(f"Invalid date {raw!r}: {exc}", file_path) from exc


def parse_page(raw_content: str, file_path: str = "", default_tz: str = "UTC") -> ContentPage:
    """Parse a markdown file with YAML front matter into a ContentPage.

    Raises FrontmatterError if the front matter is not valid YAML or the date
    cannot be parsed.
    """
    try:
        post = frontmatter.loads(raw_content)
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"Invalid front matter: {exc}", file_path) from exc
    meta = post.metadata
    raw_title = meta.get("title")
    title = "" if raw_title is None else str(raw_title).strip()
    raw_layout = meta.get("layout")
    layout = "" if raw_layout is None else str(raw_layout).strip()

    categories = parse_terms(meta.get("categories"))
    for term in parse_terms(meta.get("category")):
        if term not in categories:
            categories.append(term)

    raw_permalink = meta.get("permalink")

    return ContentPage(
        layout=layout,
        title=title,
        content=post.content,
        raw_content=raw_content,
        date=_parse_date(meta.get("date"), file_path, default_tz),
        categories=categories,
        tags=parse_terms(meta.get("tags")),
        author_profile=bool(meta.get("author_profile", False)),
        permalink=str(raw_permalink) if raw_permalink else None,
        published=bool(meta.get("published", True)),
        file_path=file_path,
        metadata=dict(meta),
        has_front_matter=frontmatter.checks(raw_content),
    )


def serialize_page(page: ContentPage) -> str:
    """Serialize a ContentPage back to markdown with YAML front matter.

    Unrecognized front matter keys from ``page.metadata`` are preserved.
    """
    metadata: dict[str, Any] = {}
    if page.layout:
        metadata["layout"] = page.layout
    if page.title:
        metadata["title"] = page.title
    if page.date is not None:
        metadata["date"] = format_datetime(page.date)
    if page.categories:
        metadata["categories"] = list(page.categories)
    if page.tags:
        metadata["tags"] = list(page.tags)
    if page.author_profile:
        metadata["author_profile"] = True
    if page.permalink:
        metadata["permalink"] = page.permalink
    if not page.published:
        metadata["published"] = False
    for key, value in page.metadata.items():
        if key not in RECOGNIZED_FIELDS:
            metadata[key] = value

    post = frontmatter.Post(page.content, **metadata)
    return str(frontmatter.dumps(post, sort_keys=False)) + "\n"


def generate_excerpt(content: str, max_length: int = 300) -> str:
    """Generate a plain excerpt for listing pages.

    Strips headings, code blocks, and images; keeps inline formatting.
    """
    lines: list[str] = []
    code_lines = _code_block_lines(content)
    for lineno, line in enumerate(content.split("\n"), start=1):
        if lineno in code_lines:
            continue
        if line.strip().startswith("#"):
            continue
        if line.strip().startswith("!["):
            continue
        stripped = line.strip()
        if stripped:
            lines.append(stripped)

    text = " ".join(lines)
    if len(text) > max_length:
        text = text[:max_length].rsplit(" ", maxsplit=1)[0] + "..."
    return text
