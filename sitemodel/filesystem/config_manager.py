"""YAML configuration reader/writer for the site's _config.yml."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from sitemodel.exceptions import SiteConfigError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILE = "_config.yml"
DEFAULT_TITLE = "My Blog"
DEFAULT_PAGINATE_PATH = "/page:num/"

# Top-level keys mapped onto SiteConfig fields. Anything else (including the
# kramdown section, which is only read) lands in ``extra``.
RECOGNIZED_KEYS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "baseurl",
        "url",
        "theme",
        "remote_theme",
        "minimal_mistakes_skin",
        "plugins",
        "paginate",
        "paginate_path",
        "header_pages",
        "footer",
        "social",
        "author",
        "sidebar",
        "include",
        "exclude",
        "search",
    }
)

# Subkeys mapped onto fields for each nested section. Other subkeys are kept
# in ``SiteConfig.section_extra`` so a write does not lose them.
SECTION_KEYS: dict[str, frozenset[str]] = {
    "footer": frozenset({"links"}),
    "social": frozenset({"links"}),
    "author": frozenset({"name", "avatar", "bio", "links"}),
    "sidebar": frozenset({"nav"}),
}


@dataclass(frozen=True)
class NavigationEntry:
    """A labelled link with an optional icon identifier."""

    label: str
    url: str
    icon: str = ""


@dataclass(frozen=True)
class AuthorProfile:
    """The site author shown in the sidebar profile."""

    name: str = ""
    avatar: str = ""
    bio: str = ""
    links: tuple[NavigationEntry, ...] = ()


@dataclass(frozen=True)
class SiteConfig:
    """Parsed site configuration from _config.yml."""

    title: str = DEFAULT_TITLE
    description: str = ""
    baseurl: str = ""
    url: str = ""
    theme: str = ""
    remote_theme: bool = False
    skin: str = ""
    plugins: tuple[str, ...] = ()
    # Raw value from the file; validation decides whether it is usable.
    paginate: Any = None
    paginate_path: str = DEFAULT_PAGINATE_PATH
    header_pages: tuple[str, ...] = ()
    footer_links: tuple[NavigationEntry, ...] = ()
    social_links: tuple[str, ...] = ()
    author: AuthorProfile | None = None
    sidebar_nav: str | None = None
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    markdown_input: str = ""
    search: bool = False
    extra: dict[str, Any] = field(default_factory=dict)
    # section name -> unrecognised subkeys, e.g. {"author": {"location": ...}}
    section_extra: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def per_page(self) -> int | None:
        """Return the pagination size, or None when pagination is off or invalid."""
        if isinstance(self.paginate, bool) or not isinstance(self.paginate, int):
            return None
        return self.paginate if self.paginate > 0 else None

    def has_plugin(self, name: str) -> bool:
        return name in self.plugins


def _as_str(value: object, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _as_str_list(value: object, key: str) -> tuple[str, ...]:
    """Coerce a YAML scalar-or-list value to a tuple of strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        msg = f"'{key}' must be a list, got {type(value).__name__}"
        raise SiteConfigError(msg)
    return tuple(str(item) for item in value if item is not None)


def _parse_links(value: object, key: str) -> tuple[NavigationEntry, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        msg = f"'{key}' must be a list of links, got {type(value).__name__}"
        raise SiteConfigError(msg)
    links: list[NavigationEntry] = []
    for item in value:
        if not isinstance(item, dict):
            msg = f"Entry in '{key}' must be a mapping: {item!r}"
            raise SiteConfigError(msg)
        links.append(
            NavigationEntry(
                label=_as_str(item.get("label")),
                url=_as_str(item.get("url")),
                icon=_as_str(item.get("icon")),
            )
        )
    return tuple(links)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping, got {type(value).__name__}"
        raise SiteConfigError(msg)
    return value


def parse_site_config(data: dict[str, Any]) -> SiteConfig:
    """Build a SiteConfig from an already-decoded _config.yml mapping."""
    footer = _section(data, "footer")
    social = _section(data, "social")
    sidebar = _section(data, "sidebar")
    kramdown = _section(data, "kramdown")

    author: AuthorProfile | None = None
    if "author" in data and data["author"] is not None:
        author_data = data["author"]
        if isinstance(author_data, str):
            # Jekyll allows a bare author name.
            author = AuthorProfile(name=author_data)
        else:
            author_data = _section(data, "author")
            author = AuthorProfile(
                name=_as_str(author_data.get("name")),
                avatar=_as_str(author_data.get("avatar")),
                bio=_as_str(author_data.get("bio")),
                links=_parse_links(author_data.get("links"), "author.links"),
            )

    theme = data.get("remote_theme")
    remote_theme = theme is not None
    if theme is None:
        theme = data.get("theme")

    sidebar_nav = sidebar.get("nav")

    section_extra: dict[str, dict[str, Any]] = {}
    for name, known in SECTION_KEYS.items():
        section = data.get(name)
        if not isinstance(section, dict):
            continue
        unknown = {k: v for k, v in section.items() if k not in known}
        if unknown:
            section_extra[name] = unknown

    return SiteConfig(
        title=_as_str(data.get("title"), DEFAULT_TITLE) or DEFAULT_TITLE,
        description=_as_str(data.get("description")),
        baseurl=_as_str(data.get("baseurl")),
        url=_as_str(data.get("url")),
        theme=_as_str(theme),
        remote_theme=remote_theme,
        skin=_as_str(data.get("minimal_mistakes_skin")),
        plugins=_as_str_list(data.get("plugins"), "plugins"),
        paginate=data.get("paginate"),
        paginate_path=_as_str(data.get("paginate_path"), DEFAULT_PAGINATE_PATH)
        or DEFAULT_PAGINATE_PATH,
        header_pages=_as_str_list(data.get("header_pages"), "header_pages"),
        footer_links=_parse_links(footer.get("links"), "footer.links"),
        social_links=_as_str_list(social.get("links"), "social.links"),
        author=author,
        sidebar_nav=None if sidebar_nav is None else str(sidebar_nav),
        include=_as_str_list(data.get("include"), "include"),
        exclude=_as_str_list(data.get("exclude"), "exclude"),
        markdown_input=_as_str(kramdown.get("input")),
        search=bool(data.get("search", False)),
        extra={k: v for k, v in data.items() if k not in RECOGNIZED_KEYS},
        section_extra=section_extra,
    )


def load_site_config(site_dir: Path, filename: str = CONFIG_FILE) -> SiteConfig:
    """Parse _config.yml from the site directory.

    A missing file yields the default configuration. Unreadable YAML or a
    document that is not a mapping raises SiteConfigError.
    """
    config_path = site_dir / filename
    if not config_path.exists():
        logger.info("No %s in %s, using default site configuration", filename, site_dir)
        return SiteConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {filename}: {exc}"
        raise SiteConfigError(msg) from exc

    if data is None:
        return SiteConfig()
    if not isinstance(data, dict):
        msg = f"{filename} must contain a mapping, got {type(data).__name__}"
        raise SiteConfigError(msg)
    return parse_site_config(data)


def _dump_links(links: tuple[NavigationEntry, ...]) -> list[dict[str, str]]:
    result: list[dict[str, str]] = []
    for link in links:
        entry = {"label": link.label}
        if link.icon:
            entry["icon"] = link.icon
        entry["url"] = link.url
        result.append(entry)
    return result


def dump_site_config(config: SiteConfig) -> dict[str, Any]:
    """Convert a SiteConfig back to the key layout the renderer expects."""
    data: dict[str, Any] = {
        "title": config.title,
        "description": config.description,
        "baseurl": config.baseurl,
        "url": config.url,
    }
    if config.theme:
        data["remote_theme" if config.remote_theme else "theme"] = config.theme
    if config.plugins:
        data["plugins"] = list(config.plugins)
    if config.skin:
        data["minimal_mistakes_skin"] = config.skin
    if config.paginate is not None:
        data["paginate"] = config.paginate
    if config.paginate is not None or config.paginate_path != DEFAULT_PAGINATE_PATH:
        data["paginate_path"] = config.paginate_path
    if config.header_pages:
        data["header_pages"] = list(config.header_pages)

    sections: dict[str, dict[str, Any]] = {}
    if config.footer_links:
        sections["footer"] = {"links": _dump_links(config.footer_links)}
    if config.social_links:
        sections["social"] = {"links": list(config.social_links)}
    if config.author is not None:
        author: dict[str, Any] = {"name": config.author.name}
        if config.author.avatar:
            author["avatar"] = config.author.avatar
        if config.author.bio:
            author["bio"] = config.author.bio
        if config.author.links:
            author["links"] = _dump_links(config.author.links)
        sections["author"] = author
    if config.sidebar_nav is not None:
        sections["sidebar"] = {"nav": config.sidebar_nav}
    for name in SECTION_KEYS:
        unknown = config.section_extra.get(name)
        if unknown:
            sections.setdefault(name, {}).update(unknown)
        if name in sections:
            data[name] = sections[name]

    if config.include:
        data["include"] = list(config.include)
    if config.exclude:
        data["exclude"] = list(config.exclude)
    if config.search:
        data["search"] = True
    data.update(config.extra)
    return data


def write_site_config(site_dir: Path, config: SiteConfig, filename: str = CONFIG_FILE) -> None:
    """Write site configuration back to _config.yml."""
    config_path = site_dir / filename
    text = yaml.safe_dump(
        dump_site_config(config),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    config_path.write_text(text, encoding="utf-8")
