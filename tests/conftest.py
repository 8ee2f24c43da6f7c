"""Shared test fixtures for the site model."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sitemodel.config import Settings
from sitemodel.filesystem.content_manager import ContentManager

if TYPE_CHECKING:
    from pathlib import Path

SITE_CONFIG = """\
title: "Slug Silicon"
description: "A Jekyll site using the Minimal Mistakes theme."
baseurl: ""
url: "https://anbellumToo.github.io"

remote_theme: "mmistakes/minimal-mistakes@4.26.2"

plugins:
  - jekyll-include-cache
  - jekyll-feed
  - jekyll-sitemap
  - jekyll-seo-tag
  - jekyll-paginate
  - jekyll-archives

minimal_mistakes_skin: "aqua"

paginate: 5
paginate_path: "/page:num/"

header_pages:
  - index.md
  - _pages/about.md
  - _pages/concepts.md
  - _pages/projects.md

footer:
  links:
    - label: "GitHub"
      icon: "fab fa-github"
      url: "https://github.com/anbellumToo"
    - label: "LinkedIn"
      icon: "fab fa-linkedin"
      url: "https://www.linkedin.com/in/annabella-newton/"

social:
  links:
    - "https://github.com/anbellumToo"
    - "https://linkedin.com/in/annabella-newton"

author:
  name: "Annabella"
  avatar: "/assets/images/avatar.png"
  bio: "Computer Engineering @ UCSC"
  links:
    - label: "GitHub"
      icon: "fab fa-github"
      url: "https://github.com/anbellumToo"

sidebar:
  nav: "main"

include: ["_pages"]

exclude:
  - README.md
  - Gemfile
  - Gemfile.lock
  - node_modules/
  - vendor/

kramdown:
    input: GFM
    syntax_highlighter: rouge
    syntax_highlighter_opts:
        css_class: 'highlight'

search: true
"""

HOME_PAGE = """\
---
layout: home
title: "Home"
author_profile: true
---

Notes on digital design.
"""

CDC_POST = """\
---
layout: single
title: "Clock Domain Crossing: Two-Flop Synchronizers"
date: 2024-03-10
categories: [cdc, fpga]
tags: [synchronizer, metastability]
author_profile: true
---

A single-bit signal crossing clock domains needs a synchronizer.

```verilog
always @(posedge clk_b) begin
  sync_ff1 <= async_in;
  sync_ff2 <= sync_ff1;
end
```
"""

GRAY_POST = """\
---
layout: single
title: "Gray Coding for Multi-Bit Crossings"
date: 2024-04-02 09:30:00 -0700
categories: cdc
tags: [gray-code]
---

Only one bit changes per increment.

~~~python
def to_gray(n):
    return n ^ (n >> 1)
~~~
"""


def simple_page(title: str, layout: str = "single") -> str:
    return f"---\nlayout: {layout}\ntitle: \"{title}\"\n---\n\n{title} body.\n"


def write_site(root: Path, files: dict[str, str]) -> Path:
    """Write a mapping of relative path -> text under root."""
    for rel_path, text in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A complete, valid site modelled on the Slug Silicon blog."""
    return write_site(
        tmp_path / "site",
        {
            "_config.yml": SITE_CONFIG,
            "index.md": HOME_PAGE,
            "_pages/about.md": simple_page("About"),
            "_pages/concepts.md": simple_page("Concepts"),
            "_pages/projects.md": simple_page("Projects"),
            "_posts/2024-03-10-two-flop-synchronizers.md": CDC_POST,
            "_posts/2024-04-02-gray-coding.md": GRAY_POST,
            "README.md": "# Readme\n",
            "vendor/bundle/notes.md": "# vendored\n",
        },
    )


@pytest.fixture
def manager(site_dir: Path) -> ContentManager:
    return ContentManager(site_dir=site_dir)


@pytest.fixture
def test_settings(site_dir: Path) -> Settings:
    return Settings(_env_file=None, site_dir=site_dir, debug=True)  # type: ignore[call-arg]
