"""Site service: summaries, listings, archives and validation for output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sitemodel.filesystem.frontmatter import generate_excerpt
from sitemodel.schemas.site import (
    ArchiveGroup,
    AuthorResponse,
    ListingPage,
    NavigationLink,
    NavigationResponse,
    PageSummary,
    SiteSummary,
    ValidationIssueResponse,
    ValidationReportResponse,
)
from sitemodel.services.listing_service import (
    ARCHIVES_PLUGIN,
    archive_url,
    build_navigation,
    document_url,
    group_by_category,
    group_by_tag,
    paginate,
)
from sitemodel.services.validation_service import validate_site

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sitemodel.filesystem.config_manager import NavigationEntry
    from sitemodel.filesystem.content_manager import ContentIndex
    from sitemodel.filesystem.frontmatter import ContentPage


def _links(entries: Iterable[NavigationEntry]) -> list[NavigationLink]:
    return [NavigationLink(label=e.label, url=e.url, icon=e.icon) for e in entries]


def summarize_page(page: ContentPage) -> PageSummary:
    return PageSummary(
        file_path=page.file_path,
        url=document_url(page),
        title=page.display_title,
        layout=page.layout,
        date=page.date,
        categories=list(page.categories),
        tags=list(page.tags),
        excerpt=generate_excerpt(page.content, max_length=200),
    )


def get_site_summary(index: ContentIndex) -> SiteSummary:
    """Get the site configuration together with its resolved navigation."""
    cfg = index.site_config
    nav = build_navigation(cfg, index)
    author = None
    if cfg.author is not None:
        author = AuthorResponse(
            name=cfg.author.name,
            avatar=cfg.author.avatar,
            bio=cfg.author.bio,
            links=_links(cfg.author.links),
        )
    return SiteSummary(
        title=cfg.title,
        description=cfg.description,
        url=cfg.url,
        baseurl=cfg.baseurl,
        theme=cfg.theme,
        plugins=list(cfg.plugins),
        paginate=cfg.per_page,
        author=author,
        navigation=NavigationResponse(
            header=_links(nav.header),
            footer=_links(nav.footer),
            author_links=_links(nav.author_links),
            social=nav.social,
            unresolved=nav.unresolved,
        ),
        page_count=len(index.pages),
        post_count=len(index.posts),
    )


def get_listing(index: ContentIndex, page_number: int = 1) -> ListingPage:
    """Get one page of the post listing.

    Raises ValueError if the page number is out of range.
    """
    cfg = index.site_config
    pages = paginate(index.posts, cfg.per_page, cfg.paginate_path)
    if page_number < 1 or page_number > len(pages):
        msg = f"Page {page_number} out of range (1-{len(pages)})"
        raise ValueError(msg)
    pager = pages[page_number - 1]
    return ListingPage(
        page=pager.page,
        per_page=pager.per_page,
        total_posts=pager.total_posts,
        total_pages=pager.total_pages,
        previous_page_path=pager.previous_page_path,
        next_page_path=pager.next_page_path,
        posts=[summarize_page(p) for p in pager.posts],
    )


def get_archives(index: ContentIndex, kind: str) -> list[ArchiveGroup]:
    """Get category or tag archives.

    URLs are only produced when the archives plugin is enabled; without it
    the groups are still returned with an empty URL.
    """
    if kind == "categories":
        groups = group_by_category(index.posts)
    elif kind == "tags":
        groups = group_by_tag(index.posts)
    else:
        raise ValueError(f"Unknown archive kind: {kind}")
    with_urls = index.site_config.has_plugin(ARCHIVES_PLUGIN)
    return [
        ArchiveGroup(
            term=term,
            url=archive_url(kind, term) if with_urls else "",
            posts=[summarize_page(p) for p in posts],
        )
        for term, posts in groups.items()
    ]


def get_validation_report(
    index: ContentIndex,
    known_layouts: Iterable[str] | None = None,
) -> ValidationReportResponse:
    report = validate_site(index, known_layouts)
    return ValidationReportResponse(
        ok=report.ok,
        error_count=len(report.errors),
        warning_count=len(report.warnings),
        issues=[
            ValidationIssueResponse(
                severity=str(i.severity), code=i.code, path=i.path, message=i.message
            )
            for i in report.issues
        ],
    )
