"""Site directory scanner and content file manager."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sitemodel.exceptions import FrontmatterError
from sitemodel.filesystem.config_manager import CONFIG_FILE, SiteConfig, load_site_config
from sitemodel.filesystem.frontmatter import ContentPage, parse_page, serialize_page
from sitemodel.services.listing_service import sort_posts

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES: frozenset[str] = frozenset({".md", ".markdown"})
POSTS_DIR = "_posts"

# Jekyll's built-in excludes, applied in addition to the site's own list.
DEFAULT_EXCLUDES: tuple[str, ...] = (
    ".sass-cache/",
    ".jekyll-cache/",
    "gemfiles/",
    "Gemfile",
    "Gemfile.lock",
    "node_modules/",
    "vendor/",
)


@dataclass
class ContentIndex:
    """Complete index of the site's documents."""

    site_config: SiteConfig
    pages: dict[str, ContentPage]  # rel_path -> non-post document
    posts: list[ContentPage]  # newest first
    skipped: dict[str, str] = field(default_factory=dict)  # rel_path -> error
    # Markdown files without front matter; the renderer copies them verbatim.
    static_files: list[str] = field(default_factory=list)

    @property
    def documents(self) -> dict[str, ContentPage]:
        """All parsed documents (pages and posts) keyed by relative path."""
        result = dict(self.pages)
        for post in self.posts:
            result[post.file_path] = post
        return result

    def get_document(self, rel_path: str) -> ContentPage | None:
        """Look up a rendered document by site-relative path."""
        return self.documents.get(rel_path.strip().lstrip("/"))

    def has_document(self, rel_path: str) -> bool:
        return self.get_document(rel_path) is not None


def _matches_any(rel_path: str, patterns: tuple[str, ...]) -> bool:
    """Match a relative path against Jekyll include/exclude entries.

    An entry ending in ``/`` (or naming a directory) matches everything below
    it; other entries are glob patterns matched against the path and each of
    its leading directories.
    """
    parts = rel_path.split("/")
    prefixes = ["/".join(parts[: i + 1]) for i in range(len(parts))]
    for raw in patterns:
        pattern = raw.strip().strip("/")
        if not pattern:
            continue
        for prefix in prefixes:
            if fnmatch.fnmatchcase(prefix, pattern):
                return True
    return False


def _is_hidden(rel_path: str) -> bool:
    return any(part.startswith(("_", ".")) for part in rel_path.split("/"))


def discover_documents(
    site_dir: Path,
    include: tuple[str, ...] = (),
    exclude: tuple[str, ...] = (),
) -> list[Path]:
    """Discover Markdown documents the renderer would process.

    Paths with a leading ``_`` or ``.`` component are skipped unless listed in
    ``include``; ``_posts`` is always scanned. ``exclude`` entries and the
    built-in excludes are honoured, ``include`` wins over both.
    """
    if not site_dir.exists():
        return []
    excludes = DEFAULT_EXCLUDES + tuple(exclude)
    found: list[Path] = []
    for path in sorted(site_dir.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in MARKDOWN_SUFFIXES:
            continue
        rel_path = path.relative_to(site_dir).as_posix()
        included = _matches_any(rel_path, include)
        if rel_path.startswith(POSTS_DIR + "/"):
            if _is_hidden(rel_path.removeprefix(POSTS_DIR + "/")) and not included:
                continue
        elif _is_hidden(rel_path) and not included:
            continue
        if _matches_any(rel_path, excludes) and not included:
            continue
        found.append(path)
    return found


@dataclass
class ContentManager:
    """Manages reading and writing content files."""

    site_dir: Path
    config_file: str = CONFIG_FILE
    default_tz: str = "UTC"
    _site_config: SiteConfig | None = field(default=None, repr=False)

    @property
    def site_config(self) -> SiteConfig:
        """Get site configuration, loading if needed."""
        if self._site_config is None:
            self._site_config = load_site_config(self.site_dir, self.config_file)
        return self._site_config

    def reload_config(self) -> None:
        """Reload site configuration from disk."""
        self._site_config = load_site_config(self.site_dir, self.config_file)

    def _validate_path(self, rel_path: str) -> Path:
        """Validate that a relative path stays within the site directory.

        Raises ValueError if the resolved path escapes site_dir.
        """
        full_path = (self.site_dir / rel_path).resolve()
        if not full_path.is_relative_to(self.site_dir.resolve()):
            raise ValueError(f"Path traversal detected: {rel_path}")
        return full_path

    def scan_documents(self) -> tuple[list[ContentPage], dict[str, str]]:
        """Parse every discovered document.

        Returns the parsed pages and a mapping of skipped paths to the error
        that prevented parsing.
        """
        cfg = self.site_config
        pages: list[ContentPage] = []
        skipped: dict[str, str] = {}
        for path in discover_documents(self.site_dir, cfg.include, cfg.exclude):
            rel_path = path.relative_to(self.site_dir).as_posix()
            try:
                raw_content = path.read_text(encoding="utf-8")
                page = parse_page(raw_content, file_path=rel_path, default_tz=self.default_tz)
            except (FrontmatterError, UnicodeDecodeError, OSError) as exc:
                logger.exception("Skipping document %s due to parse error", rel_path)
                skipped[rel_path] = str(exc)
                continue
            pages.append(page)
        return pages, skipped

    def read_page(self, rel_path: str) -> ContentPage | None:
        """Read a single document by relative path."""
        full_path = self._validate_path(rel_path)
        if not full_path.exists() or not full_path.is_file():
            return None
        raw_content = full_path.read_text(encoding="utf-8")
        return parse_page(raw_content, file_path=rel_path, default_tz=self.default_tz)

    def write_page(self, rel_path: str, page: ContentPage) -> None:
        """Write a document to disk."""
        full_path = self._validate_path(rel_path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(serialize_page(page), encoding="utf-8")

    def delete_page(self, rel_path: str) -> bool:
        """Delete a document from disk. Returns True if file existed."""
        full_path = self._validate_path(rel_path)
        if full_path.exists():
            full_path.unlink()
            return True
        return False

    def build_index(self) -> ContentIndex:
        """Build a complete content index from the filesystem."""
        documents, skipped = self.scan_documents()
        pages: dict[str, ContentPage] = {}
        posts: list[ContentPage] = []
        static_files: list[str] = []
        for page in documents:
            if not page.has_front_matter:
                logger.debug("Treating %s as a static file (no front matter)", page.file_path)
                static_files.append(page.file_path)
            elif page.is_post:
                if page.published:
                    posts.append(page)
                else:
                    logger.debug("Leaving unpublished post %s out of listings", page.file_path)
            else:
                pages[page.file_path] = page
        return ContentIndex(
            site_config=self.site_config,
            pages=pages,
            posts=sort_posts(posts),
            skipped=skipped,
            static_files=static_files,
        )
