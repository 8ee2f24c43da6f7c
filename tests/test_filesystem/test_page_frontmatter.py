"""Tests for YAML front matter parsing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import frontmatter
import pytest
from hypothesis import given
from hypothesis import strategies as st

from sitemodel.exceptions import FrontmatterError
from sitemodel.filesystem.frontmatter import (
    RECOGNIZED_FIELDS,
    REQUIRED_FIELDS,
    ContentPage,
    extract_title,
    find_code_fences,
    generate_excerpt,
    parse_page,
    parse_terms,
    serialize_page,
)
from tests.conftest import CDC_POST, GRAY_POST, HOME_PAGE


class TestRecognizedFields:
    def test_required_fields(self) -> None:
        assert REQUIRED_FIELDS == ("layout", "title")

    def test_recognized_fields_contains_expected(self) -> None:
        for name in ("layout", "title", "date", "categories", "tags", "author_profile"):
            assert name in RECOGNIZED_FIELDS


class TestParsePage:
    def test_home_page(self) -> None:
        page = parse_page(HOME_PAGE, file_path="index.md")
        assert page.layout == "home"
        assert page.title == "Home"
        assert page.author_profile is True
        assert page.date is None
        assert page.categories == []
        assert page.has_front_matter is True
        assert page.is_post is False
        assert page.content.startswith("Notes on digital design.")

    def test_post_with_lists(self) -> None:
        page = parse_page(CDC_POST, file_path="_posts/2024-03-10-two-flop-synchronizers.md")
        assert page.layout == "single"
        assert page.title == "Clock Domain Crossing: Two-Flop Synchronizers"
        assert page.categories == ["cdc", "fpga"]
        assert page.tags == ["synchronizer", "metastability"]
        assert page.date is not None
        assert (page.date.year, page.date.month, page.date.day) == (2024, 3, 10)
        assert page.is_post is True

    def test_post_with_scalar_category_and_offset_date(self) -> None:
        page = parse_page(GRAY_POST, file_path="_posts/2024-04-02-gray-coding.md")
        assert page.categories == ["cdc"]
        assert page.date is not None
        assert page.date.utcoffset() == timedelta(hours=-7)
        assert page.date.hour == 9

    def test_date_falls_back_to_filename(self) -> None:
        raw = "---\nlayout: single\ntitle: FIFOs\n---\nBody\n"
        page = parse_page(raw, file_path="_posts/2024-05-01-async-fifos.md")
        assert page.date is not None
        assert (page.date.year, page.date.month, page.date.day) == (2024, 5, 1)

    def test_invalid_date_raises(self) -> None:
        raw = "---\nlayout: single\ntitle: X\ndate: someday\n---\n"
        with pytest.raises(FrontmatterError, match="Invalid date") as info:
            parse_page(raw, file_path="_posts/x.md")
        assert info.value.file_path == "_posts/x.md"

    def test_invalid_yaml_raises(self) -> None:
        raw = "---\nlayout: single\ntitle: [unclosed\n---\nBody\n"
        with pytest.raises(FrontmatterError, match="Invalid front matter"):
            parse_page(raw, file_path="bad.md")

    def test_no_front_matter(self) -> None:
        page = parse_page("# Just a heading\n\nText.\n", file_path="notes.md")
        assert page.has_front_matter is False
        assert page.layout == ""
        assert page.title == ""
        assert page.display_title == "Just a heading"

    def test_blank_title_is_empty(self) -> None:
        page = parse_page("---\nlayout: single\ntitle: '   '\n---\nBody\n")
        assert page.title == ""

    def test_non_string_title_coerced(self) -> None:
        page = parse_page("---\nlayout: single\ntitle: 42\n---\nBody\n")
        assert page.title == "42"

    def test_singular_category_merged(self) -> None:
        raw = "---\nlayout: single\ntitle: X\ncategories: [cdc]\ncategory: fpga\n---\n"
        assert parse_page(raw).categories == ["cdc", "fpga"]

    def test_published_false(self) -> None:
        page = parse_page("---\nlayout: single\ntitle: X\npublished: false\n---\n")
        assert page.published is False

    def test_permalink(self) -> None:
        page = parse_page("---\nlayout: single\ntitle: About\npermalink: /about/\n---\n")
        assert page.permalink == "/about/"

    def test_metadata_keeps_unknown_keys(self) -> None:
        page = parse_page("---\nlayout: single\ntitle: X\ntoc: true\n---\n")
        assert page.metadata["toc"] is True


class TestParseTerms:
    def test_none(self) -> None:
        assert parse_terms(None) == []

    def test_space_separated_string(self) -> None:
        assert parse_terms("cdc  fpga") == ["cdc", "fpga"]

    def test_list_with_duplicates_and_blanks(self) -> None:
        assert parse_terms(["cdc", "", None, "cdc", 7]) == ["cdc", "7"]

    def test_scalar_number(self) -> None:
        assert parse_terms(2024) == ["2024"]


class TestExtractTitle:
    def test_heading(self) -> None:
        assert extract_title("# My Title\n\nContent") == "My Title"

    def test_heading_inside_code_block_ignored(self) -> None:
        body = "```bash\n# not a title\n```\n\n# Real Title\n"
        assert extract_title(body) == "Real Title"

    def test_backtick_line_inside_tilde_block(self) -> None:
        body = "~~~\n```\n~~~\n\n# Real Title\n\nText.\n"
        assert extract_title(body) == "Real Title"

    def test_shorter_fence_inside_longer_block(self) -> None:
        body = "````markdown\n```\n# Inner\n```\n````\n\n# Real Title\n"
        assert extract_title(body) == "Real Title"

    def test_heading_after_unclosed_block_ignored(self) -> None:
        assert extract_title("```\n# Inside\n", "notes.md") == "Notes"

    def test_filename_fallback_strips_date(self) -> None:
        assert extract_title("No heading", "_posts/2024-03-10-gray-coding.md") == "Gray Coding"

    def test_untitled(self) -> None:
        assert extract_title("No heading") == "Untitled"


class TestFindCodeFences:
    def test_closed_fences(self) -> None:
        fences = find_code_fences(parse_page(CDC_POST).content)
        assert len(fences) == 1
        assert fences[0].language == "verilog"
        assert fences[0].is_closed

    def test_tilde_fence(self) -> None:
        fences = find_code_fences(parse_page(GRAY_POST).content)
        assert [f.language for f in fences] == ["python"]
        assert fences[0].is_closed

    def test_unclosed_fence(self) -> None:
        fences = find_code_fences("Intro\n\n```systemverilog\nlogic a;\n")
        assert len(fences) == 1
        assert fences[0].language == "systemverilog"
        assert fences[0].start_line == 3
        assert fences[0].end_line is None

    def test_closing_fence_must_match_character(self) -> None:
        fences = find_code_fences("```\ncode\n~~~\n")
        assert not fences[0].is_closed

    def test_closing_fence_must_be_long_enough(self) -> None:
        body = "````markdown\n```verilog\nx\n```\n````\n"
        fences = find_code_fences(body)
        assert len(fences) == 1
        assert fences[0].language == "markdown"
        assert fences[0].end_line == 5

    def test_closing_fence_with_info_string_does_not_close(self) -> None:
        fences = find_code_fences("```c\nint x;\n```c\n")
        assert not fences[0].is_closed

    def test_inline_code_is_not_a_fence(self) -> None:
        assert find_code_fences("```a` b```\nmore text\n") == []

    def test_indented_four_spaces_is_not_a_fence(self) -> None:
        assert find_code_fences("    ```\n    code\n") == []

    def test_multiple_blocks(self) -> None:
        body = "```verilog\na\n```\ntext\n```python\nb\n```\n"
        fences = find_code_fences(body)
        assert [(f.start_line, f.end_line) for f in fences] == [(1, 3), (5, 7)]

    @given(st.lists(st.text(alphabet="abc \n", max_size=20), max_size=6))
    def test_balanced_blocks_are_all_closed(self, chunks: list[str]) -> None:
        body = "\n".join(f"```\n{chunk.replace('`', '')}\n```" for chunk in chunks)
        fences = find_code_fences(body)
        assert len(fences) == len(chunks)
        assert all(f.is_closed for f in fences)


class TestSerializePage:
    def test_roundtrip(self) -> None:
        page = parse_page(CDC_POST, file_path="_posts/2024-03-10-two-flop-synchronizers.md")
        text = serialize_page(page)
        reparsed = parse_page(text, file_path=page.file_path)
        assert reparsed.title == page.title
        assert reparsed.layout == page.layout
        assert reparsed.categories == page.categories
        assert reparsed.tags == page.tags
        assert reparsed.date == page.date
        assert reparsed.content == page.content

    def test_key_order_and_unknown_keys(self) -> None:
        page = ContentPage(
            layout="single",
            title="Async FIFOs",
            content="Body",
            raw_content="",
            date=datetime(2024, 5, 1, tzinfo=timezone.utc),
            metadata={"toc": True, "title": "ignored"},
        )
        post = frontmatter.loads(serialize_page(page))
        assert list(post.metadata)[:3] == ["layout", "title", "date"]
        assert post["title"] == "Async FIFOs"
        assert post["toc"] is True
        assert post["date"] == "2024-05-01 00:00:00 +0000"

    def test_unpublished_flag_written(self) -> None:
        page = ContentPage(layout="single", title="X", content="", raw_content="", published=False)
        assert frontmatter.loads(serialize_page(page))["published"] is False


class TestGenerateExcerpt:
    def test_strips_code_and_headings(self) -> None:
        excerpt = generate_excerpt(parse_page(CDC_POST).content)
        assert excerpt == "A single-bit signal crossing clock domains needs a synchronizer."

    def test_backtick_line_inside_tilde_block(self) -> None:
        assert generate_excerpt("~~~\n```\n~~~\n\nText after.\n") == "Text after."

    def test_shorter_fence_inside_longer_block(self) -> None:
        body = "Before.\n\n````\n```\ncode\n```\n````\n\nAfter.\n"
        assert generate_excerpt(body) == "Before. After."

    def test_truncates_on_word_boundary(self) -> None:
        excerpt = generate_excerpt("word " * 100, max_length=20)
        assert excerpt.endswith("...")
        assert len(excerpt) <= 23
