"""Site-related schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NavigationLink(BaseModel):
    """A resolved navigation link."""

    label: str
    url: str
    icon: str = ""


class AuthorResponse(BaseModel):
    name: str
    avatar: str = ""
    bio: str = ""
    links: list[NavigationLink] = Field(default_factory=list)


class PageSummary(BaseModel):
    """One document as it appears in listings."""

    file_path: str
    url: str
    title: str
    layout: str
    date: datetime | None = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    excerpt: str = ""


class NavigationResponse(BaseModel):
    header: list[NavigationLink]
    footer: list[NavigationLink]
    author_links: list[NavigationLink]
    social: list[str]
    unresolved: list[str] = Field(default_factory=list)


class SiteSummary(BaseModel):
    """Site configuration and content overview."""

    title: str
    description: str
    url: str
    baseurl: str
    theme: str
    plugins: list[str]
    paginate: int | None
    author: AuthorResponse | None = None
    navigation: NavigationResponse
    page_count: int
    post_count: int


class ListingPage(BaseModel):
    """One page of the paginated post listing."""

    page: int
    per_page: int
    total_posts: int
    total_pages: int
    previous_page_path: str | None = None
    next_page_path: str | None = None
    posts: list[PageSummary]


class ArchiveGroup(BaseModel):
    term: str
    url: str
    posts: list[PageSummary]


class ValidationIssueResponse(BaseModel):
    severity: str
    code: str
    path: str
    message: str


class ValidationReportResponse(BaseModel):
    ok: bool
    error_count: int
    warning_count: int
    issues: list[ValidationIssueResponse]
