"""Listing service: post ordering, URLs, pagination, archives, navigation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sitemodel.filesystem.config_manager import NavigationEntry
from sitemodel.services.slug_service import post_slug_from_filename, slugify

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sitemodel.filesystem.config_manager import SiteConfig
    from sitemodel.filesystem.content_manager import ContentIndex
    from sitemodel.filesystem.frontmatter import ContentPage

logger = logging.getLogger(__name__)

ARCHIVES_PLUGIN = "jekyll-archives"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class Paginator:
    """One page of the paginated post listing."""

    page: int
    per_page: int
    posts: list[ContentPage]
    total_posts: int
    total_pages: int
    previous_page: int | None
    next_page: int | None
    previous_page_path: str | None
    next_page_path: str | None


@dataclass
class SiteNavigation:
    """Header, footer and sidebar links as the theme would render them."""

    header: list[NavigationEntry] = field(default_factory=list)
    footer: list[NavigationEntry] = field(default_factory=list)
    author_links: list[NavigationEntry] = field(default_factory=list)
    social: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


def sort_posts(posts: Iterable[ContentPage]) -> list[ContentPage]:
    """Order posts newest first.

    Undated posts sort last; ties are broken by file path, descending, which
    matches the date-prefixed file naming of posts.
    """
    by_path = sorted(posts, key=lambda p: p.file_path, reverse=True)
    return sorted(by_path, key=lambda p: p.date or _OLDEST, reverse=True)


def page_url(page: ContentPage) -> str:
    """URL of a non-post document.

    ``index.md`` maps to ``/``; other documents become pretty directory
    URLs with any leading ``_collection`` directory dropped.
    """
    if page.permalink:
        return page.permalink
    path = page.file_path
    for suffix in (".md", ".markdown"):
        path = path.removesuffix(suffix)
    parts = path.split("/")
    if parts and parts[0].startswith("_"):
        parts = parts[1:]
    if parts and parts[-1] == "index":
        parts = parts[:-1]
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"


def post_url(page: ContentPage) -> str:
    """URL of a post following the shape of Jekyll's ``date`` permalink style.

    ``/:categories/:year/:month/:day/:title.html``

    Categories are slugified. Jekyll only lowercases them, so a category
    with spaces or punctuation (``Digital Design``) yields a different
    segment here than in the rendered site; set ``permalink`` to pin one.
    """
    if page.permalink:
        return page.permalink
    segments = [slugify(c) for c in page.categories]
    if page.date is not None:
        segments += [f"{page.date.year:04d}", f"{page.date.month:02d}", f"{page.date.day:02d}"]
    slug = post_slug_from_filename(page.file_path) or slugify(page.display_title)
    segments.append(f"{slug}.html")
    return "/" + "/".join(segments)


def document_url(page: ContentPage) -> str:
    return post_url(page) if page.is_post else page_url(page)


def pager_path(page_number: int, paginate_path: str) -> str:
    """Listing URL for a 1-based page number. Page 1 is always the site root."""
    if page_number <= 1:
        return "/"
    path = paginate_path.replace(":num", str(page_number))
    if not path.startswith("/"):
        path = "/" + path
    return path


def paginate(
    posts: list[ContentPage],
    per_page: int | None,
    paginate_path: str = "/page:num/",
) -> list[Paginator]:
    """Split posts into listing pages.

    ``per_page`` of None or less than one disables pagination: everything
    goes on a single page. An empty post list still yields one empty page.
    """
    total = len(posts)
    if per_page is None or per_page < 1:
        per_page = max(total, 1)
    total_pages = max(math.ceil(total / per_page), 1)

    pages: list[Paginator] = []
    for number in range(1, total_pages + 1):
        start = (number - 1) * per_page
        previous_page = number - 1 if number > 1 else None
        next_page = number + 1 if number < total_pages else None
        pages.append(
            Paginator(
                page=number,
                per_page=per_page,
                posts=posts[start : start + per_page],
                total_posts=total,
                total_pages=total_pages,
                previous_page=previous_page,
                next_page=next_page,
                previous_page_path=(
                    pager_path(previous_page, paginate_path) if previous_page else None
                ),
                next_page_path=pager_path(next_page, paginate_path) if next_page else None,
            )
        )
    return pages


def _group(posts: list[ContentPage], attr: str) -> dict[str, list[ContentPage]]:
    groups: dict[str, list[ContentPage]] = {}
    for post in sort_posts(posts):
        for term in getattr(post, attr):
            groups.setdefault(term, []).append(post)
    return {term: groups[term] for term in sorted(groups, key=lambda t: (t.lower(), t))}


def group_by_category(posts: list[ContentPage]) -> dict[str, list[ContentPage]]:
    """Map each category to its posts, newest first; categories sorted by name."""
    return _group(posts, "categories")


def group_by_tag(posts: list[ContentPage]) -> dict[str, list[ContentPage]]:
    """Map each tag to its posts, newest first; tags sorted by name."""
    return _group(posts, "tags")


def archive_url(kind: str, term: str) -> str:
    """Archive page URL generated by jekyll-archives (``/categories/x/``)."""
    if kind not in ("categories", "tags"):
        raise ValueError(f"Unknown archive kind: {kind}")
    return f"/{kind}/{slugify(term)}/"


def resolve_header_page(ref: str, index: ContentIndex) -> ContentPage | None:
    """Find the document a ``header_pages`` entry points at."""
    return index.get_document(ref)


def build_navigation(site_config: SiteConfig, index: ContentIndex) -> SiteNavigation:
    """Resolve the configured navigation into concrete links.

    Header entries that do not resolve to a document are left out and
    reported in ``unresolved``.
    """
    nav = SiteNavigation(
        footer=list(site_config.footer_links),
        author_links=list(site_config.author.links) if site_config.author else [],
        social=list(site_config.social_links),
    )
    for ref in site_config.header_pages:
        page = resolve_header_page(ref, index)
        if page is None:
            logger.warning("Header page %s not found in site content", ref)
            nav.unresolved.append(ref)
            continue
        nav.header.append(NavigationEntry(label=page.display_title, url=document_url(page)))
    return nav
