"""Command-line entry point for inspecting and checking a site."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from sitemodel.config import Settings, configure_logging
from sitemodel.exceptions import SiteModelError
from sitemodel.filesystem.content_manager import POSTS_DIR, ContentManager
from sitemodel.filesystem.frontmatter import ContentPage
from sitemodel.services.datetime_service import parse_datetime
from sitemodel.services.site_service import (
    get_archives,
    get_listing,
    get_site_summary,
    get_validation_report,
)
from sitemodel.services.slug_service import generate_post_path

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sitemodel.schemas.site import ValidationReportResponse

logger = logging.getLogger(__name__)


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_report(report: ValidationReportResponse) -> None:
    for issue in report.issues:
        print(f"{issue.severity.upper():<8} {issue.code:<20} {issue.path}: {issue.message}")
    status = "passed" if report.ok else "failed"
    print(
        f"Validation {status}: {report.error_count} error(s), {report.warning_count} warning(s)"
    )


def cmd_check(args: argparse.Namespace, settings: Settings, manager: ContentManager) -> int:
    known_layouts = settings.known_layouts if settings.check_layouts else None
    report = get_validation_report(manager.build_index(), known_layouts)
    if args.json:
        _print_json(report.model_dump(mode="json"))
    else:
        _print_report(report)
    if not report.ok:
        return 1
    if (settings.strict or args.strict) and report.warning_count:
        return 1
    return 0


def cmd_summary(args: argparse.Namespace, settings: Settings, manager: ContentManager) -> int:
    _print_json(get_site_summary(manager.build_index()).model_dump(mode="json"))
    return 0


def cmd_nav(args: argparse.Namespace, settings: Settings, manager: ContentManager) -> int:
    nav = get_site_summary(manager.build_index()).navigation
    for section, links in (("header", nav.header), ("footer", nav.footer)):
        print(f"[{section}]")
        for link in links:
            print(f"  {link.label:<24} {link.url}")
    for ref in nav.unresolved:
        print(f"  (unresolved) {ref}")
    return 0


def cmd_posts(args: argparse.Namespace, settings: Settings, manager: ContentManager) -> int:
    listing = get_listing(manager.build_index(), args.page)
    if args.json:
        _print_json(listing.model_dump(mode="json"))
        return 0
    print(f"Page {listing.page} of {listing.total_pages} ({listing.total_posts} posts)")
    for post in listing.posts:
        day = post.date.date().isoformat() if post.date else "----------"
        print(f"  {day}  {post.title}  {post.url}")
    if listing.next_page_path:
        print(f"Next: {listing.next_page_path}")
    return 0


def cmd_archives(args: argparse.Namespace, settings: Settings, manager: ContentManager) -> int:
    groups = get_archives(manager.build_index(), args.kind)
    if args.json:
        _print_json([g.model_dump(mode="json") for g in groups])
        return 0
    for group in groups:
        suffix = f"  {group.url}" if group.url else ""
        print(f"{group.term} ({len(group.posts)}){suffix}")
        for post in group.posts:
            print(f"  {post.title}")
    return 0


def cmd_new_post(args: argparse.Namespace, settings: Settings, manager: ContentManager) -> int:
    day = date.fromisoformat(args.date) if args.date else date.today()
    path = generate_post_path(args.title, settings.site_dir / POSTS_DIR, day)
    rel_path = path.relative_to(settings.site_dir).as_posix()
    page = ContentPage(
        layout=args.layout,
        title=args.title,
        content=f"Write about {args.title} here.\n",
        raw_content="",
        date=parse_datetime(day, settings.timezone),
        categories=list(args.category),
        tags=list(args.tag),
        author_profile=True,
        file_path=rel_path,
    )
    manager.write_page(rel_path, page)
    logger.info("Created post %s", rel_path)
    print(rel_path)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and check a Jekyll-style site")
    parser.add_argument("--site-dir", type=Path, default=None, help="Site root directory")
    parser.add_argument("--config-file", default=None, help="Configuration file name")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate configuration and content")
    check.add_argument("--json", action="store_true", help="Print the report as JSON")
    check.add_argument("--strict", action="store_true", help="Fail on warnings too")
    check.set_defaults(func=cmd_check)

    summary = sub.add_parser("summary", help="Print the site summary as JSON")
    summary.set_defaults(func=cmd_summary)

    nav = sub.add_parser("nav", help="Show resolved header and footer navigation")
    nav.set_defaults(func=cmd_nav)

    posts = sub.add_parser("posts", help="Show one page of the post listing")
    posts.add_argument("--page", type=int, default=1, help="Listing page number")
    posts.add_argument("--json", action="store_true", help="Print the listing as JSON")
    posts.set_defaults(func=cmd_posts)

    archives = sub.add_parser("archives", help="Group posts by category or tag")
    archives.add_argument("kind", choices=("categories", "tags"))
    archives.add_argument("--json", action="store_true", help="Print the archives as JSON")
    archives.set_defaults(func=cmd_archives)

    new_post = sub.add_parser("new-post", help="Create a dated post with front matter")
    new_post.add_argument("title")
    new_post.add_argument("--layout", default="single")
    new_post.add_argument("--category", action="append", default=[])
    new_post.add_argument("--tag", action="append", default=[])
    new_post.add_argument("--date", default=None, help="Publish date (YYYY-MM-DD)")
    new_post.set_defaults(func=cmd_new_post)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    overrides: dict[str, object] = {}
    if args.site_dir is not None:
        overrides["site_dir"] = args.site_dir
    if args.config_file is not None:
        overrides["config_file"] = args.config_file
    if args.debug:
        overrides["debug"] = True
    settings = Settings(**overrides)  # type: ignore[arg-type]
    configure_logging(settings.debug)

    manager = ContentManager(
        site_dir=settings.site_dir,
        config_file=settings.config_file,
        default_tz=settings.timezone,
    )
    try:
        return int(args.func(args, settings, manager))
    except (SiteModelError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
