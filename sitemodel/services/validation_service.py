"""Data-integrity checks over a site's configuration and content."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from sitemodel.filesystem.config_manager import CONFIG_FILE
from sitemodel.filesystem.frontmatter import REQUIRED_FIELDS, find_code_fences

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sitemodel.filesystem.config_manager import NavigationEntry, SiteConfig
    from sitemodel.filesystem.content_manager import ContentIndex
    from sitemodel.filesystem.frontmatter import ContentPage

logger = logging.getLogger(__name__)


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    severity: Severity
    code: str
    path: str
    message: str


@dataclass
class ValidationReport:
    """Outcome of validating one site."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, severity: Severity, code: str, path: str, message: str) -> None:
        self.issues.append(ValidationIssue(severity, code, path, message))


def is_valid_url(value: str, *, allow_relative: bool = False) -> bool:
    """Check that a link is an absolute http(s) URL with a host.

    With ``allow_relative``, site-relative paths such as ``/about/`` are
    accepted too.
    """
    value = value.strip()
    if not value or any(ch.isspace() for ch in value):
        return False
    if allow_relative and value.startswith("/") and not value.startswith("//"):
        return True
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def check_navigation(config: SiteConfig, index: ContentIndex, report: ValidationReport) -> None:
    for ref in config.header_pages:
        if not index.has_document(ref):
            report.add(
                Severity.ERROR,
                "nav-missing-page",
                CONFIG_FILE,
                f"header_pages entry '{ref}' does not exist in the site content",
            )


def check_pagination(config: SiteConfig, report: ValidationReport) -> None:
    value = config.paginate
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        report.add(
            Severity.ERROR,
            "paginate-invalid",
            CONFIG_FILE,
            f"paginate must be a positive integer, got {value!r}",
        )
    elif ":num" not in config.paginate_path:
        report.add(
            Severity.ERROR,
            "paginate-invalid",
            CONFIG_FILE,
            f"paginate_path must contain ':num', got {config.paginate_path!r}",
        )


def _check_links(
    links: Iterable[NavigationEntry], key: str, report: ValidationReport
) -> None:
    for link in links:
        if not is_valid_url(link.url, allow_relative=True):
            report.add(
                Severity.ERROR,
                "link-malformed",
                CONFIG_FILE,
                f"{key} entry '{link.label}' has malformed URL {link.url!r}",
            )


def check_links(config: SiteConfig, report: ValidationReport) -> None:
    _check_links(config.footer_links, "footer.links", report)
    if config.author is not None:
        _check_links(config.author.links, "author.links", report)
    for url in config.social_links:
        if not is_valid_url(url):
            report.add(
                Severity.ERROR,
                "link-malformed",
                CONFIG_FILE,
                f"social.links entry has malformed URL {url!r}",
            )


def check_page(
    page: ContentPage,
    report: ValidationReport,
    known_layouts: frozenset[str] | None = None,
) -> None:
    """Check one document's front matter and body."""
    for name in REQUIRED_FIELDS:
        if not getattr(page, name):
            report.add(
                Severity.ERROR,
                "frontmatter-missing",
                page.file_path,
                f"required front matter field '{name}' is missing or empty",
            )
    if known_layouts is not None and page.layout and page.layout not in known_layouts:
        report.add(
            Severity.WARNING,
            "layout-unknown",
            page.file_path,
            f"layout '{page.layout}' is not a known theme layout",
        )
    if page.is_post and page.date is None:
        report.add(
            Severity.WARNING,
            "date-missing",
            page.file_path,
            "post has no date in front matter or file name",
        )
    for fence in find_code_fences(page.content):
        if not fence.is_closed:
            lang = f" ({fence.language})" if fence.language else ""
            report.add(
                Severity.ERROR,
                "code-fence-unclosed",
                page.file_path,
                f"code block{lang} opened on body line {fence.start_line} is never closed",
            )


def validate_site(
    index: ContentIndex,
    known_layouts: Iterable[str] | None = None,
) -> ValidationReport:
    """Run every integrity check over a built content index.

    Layout names are only checked when ``known_layouts`` is given; the
    renderer remains the authority on which layouts exist.
    """
    layouts = frozenset(known_layouts) if known_layouts is not None else None
    config = index.site_config
    report = ValidationReport()

    check_navigation(config, index, report)
    check_pagination(config, report)
    check_links(config, report)

    for rel_path, error in sorted(index.skipped.items()):
        report.add(Severity.ERROR, "parse-error", rel_path, error)
    documents = index.documents
    for rel_path in sorted(documents):
        check_page(documents[rel_path], report, layouts)

    logger.info(
        "Validated %d documents: %d errors, %d warnings",
        len(documents),
        len(report.errors),
        len(report.warnings),
    )
    return report
