"""Application-level exception types.

Convention:
- ``SiteModelError`` is the base for every error raised while loading a site.
- ``SiteConfigError`` and ``FrontmatterError`` also derive from ``ValueError``
  so callers that only care about "bad input" can catch ``ValueError``.
- Plain ``ValueError`` is used for argument validation (bad page numbers,
  path traversal, etc.).
"""

from __future__ import annotations


class SiteModelError(Exception):
    """Base class for errors raised while loading site content."""


class SiteConfigError(SiteModelError, ValueError):
    """Raised when ``_config.yml`` cannot be read as a mapping."""


class FrontmatterError(SiteModelError, ValueError):
    """Raised when a document's YAML front matter cannot be parsed.

    ``file_path`` carries the site-relative path so the content scanner can
    record which document was skipped.
    """

    def __init__(self, message: str, file_path: str = "") -> None:
        super().__init__(message)
        self.file_path = file_path
