"""
Tests for markup module (pause annotation and tag stripping).
"""

import pytest

from epub_narrator.markup import add_pause, heading_pause, strip_tags, xhtml_to_text


FW = "　"  # full-width space


class TestAddPause:
    """Tests for add_pause function."""

    def test_mixed_fragment(self) -> None:
        """Test heading, paragraph, line break and span together."""
        # Arrange
        markup = "<h1>見出し</h1><p>本文と<br>改行</p><p>本文と<span>目立つ文字</span></p>"
        expected = (
            "<h1>見出し" + FW * 18 + "</h1>\n"
            "<p>本文と<br>\n改行</p>\n"
            "<p>本文と<span>目立つ文字" + FW * 2 + "</span></p>\n"
        )

        # Act
        result = add_pause(markup)

        # Assert
        assert result == expected

    @pytest.mark.parametrize("level,count", [(1, 18), (2, 16), (3, 14), (4, 12), (5, 10), (6, 8)])
    def test_heading_padding_by_level(self, level: int, count: int) -> None:
        """Test that padding shrinks by two per heading level."""
        # Act
        result = add_pause(f"<h{level}>T</h{level}>")

        # Assert
        assert result == f"<h{level}>T{FW * count}</h{level}>\n"
        assert heading_pause(level) == FW * count

    @pytest.mark.parametrize("level", [7, 8])
    def test_h7_h8_get_newline_without_padding(self, level: int) -> None:
        """Test that h7/h8 only receive the forced newline."""
        # Act
        result = add_pause(f"<h{level}>T</h{level}>")

        # Assert
        assert result == f"<h{level}>T</h{level}>\n"

    def test_empty_heading_still_padded(self) -> None:
        """Test that empty heading content receives full padding."""
        assert add_pause("<h1></h1>") == "<h1>" + FW * 18 + "</h1>\n"

    def test_multiple_tags_on_one_line(self) -> None:
        """Test that each heading and span is padded independently."""
        # Act
        result = add_pause("<h2>A</h2><h2>B</h2><span>x</span><span>y</span>")

        # Assert
        assert result == (
            "<h2>A" + FW * 16 + "</h2>\n"
            "<h2>B" + FW * 16 + "</h2>\n"
            "<span>x" + FW * 2 + "</span><span>y" + FW * 2 + "</span>"
        )

    def test_span_with_attributes_not_padded(self) -> None:
        """Test that only bare <span> tags are matched."""
        assert add_pause('<span class="x">a</span>') == '<span class="x">a</span>'

    def test_heading_does_not_match_across_lines(self) -> None:
        """Test that heading content matching stops at line ends."""
        assert add_pause("<h1>a\nb</h1>") == "<h1>a\nb</h1>\n"

    def test_plain_text_unchanged(self) -> None:
        """Test that text without tags passes through."""
        assert add_pause("ただの文章。") == "ただの文章。"


class TestStripTags:
    """Tests for strip_tags function."""

    def test_removes_tags_with_attributes(self) -> None:
        """Test that any tag including attributes is removed."""
        assert strip_tags('<p class="a">本文<img src="x.png"/></p>') == "本文"

    def test_removes_blank_and_whitespace_lines(self) -> None:
        """Test that empty and whitespace-only lines are collapsed."""
        # Arrange
        annotated = "<p>一</p>\n\n   \n<h2>二</h2>\n\t\n三"

        # Act
        result = strip_tags(annotated)

        # Assert
        assert result == "一\n二\n三"

    def test_removes_leading_blank_lines(self) -> None:
        """Test that leading blank lines are dropped."""
        assert strip_tags("\n\n<div></div>\n本文") == "本文"

    def test_trims_trailing_newlines(self) -> None:
        """Test that trailing newlines are removed but internal ones kept."""
        assert strip_tags("a\nb\n\n") == "a\nb"

    def test_removes_whitespace_only_last_line(self) -> None:
        """Test that a final line of spaces without a newline is removed."""
        assert strip_tags("本文\n   ") == "本文"
        assert strip_tags("本文\n\t ") == "本文"

    def test_keeps_pause_only_last_line(self) -> None:
        """Test that a final line of full-width spaces is kept."""
        assert strip_tags("本文\n" + FW * 2) == "本文\n" + FW * 2

    def test_keeps_pause_only_lines(self) -> None:
        """Test that lines with only full-width spaces are kept."""
        assert strip_tags(FW * 4 + "\n本文\n") == FW * 4 + "\n本文"

    def test_empty_input(self) -> None:
        """Test that empty input gives empty output."""
        assert strip_tags("") == ""


class TestXhtmlToText:
    """Tests for xhtml_to_text function."""

    def test_mixed_fragment(self) -> None:
        """Test the full annotate and strip conversion."""
        # Arrange
        markup = "<h1>見出し</h1><p>本文と<br>改行</p><p>本文と<span>目立つ文字</span></p>"

        # Act
        result = xhtml_to_text(markup)

        # Assert
        assert result == "見出し" + FW * 18 + "\n本文と\n改行\n本文と目立つ文字" + FW * 2

    def test_paragraph_followed_by_heading(self) -> None:
        """Test that consecutive forced newlines do not leave blank lines."""
        # Act
        result = xhtml_to_text("<p>前</p>\n<h3>章</h3>\n<p>後</p>")

        # Assert
        assert result == "前\n章" + FW * 14 + "\n後"

    def test_full_document(self) -> None:
        """Test a complete XHTML document with head and body."""
        # Arrange
        markup = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<html xmlns="http://www.w3.org/1999/xhtml">\n'
            "<head>\n<title></title>\n</head>\n"
            "<body>\n<h2>第一章</h2>\n<p>吾輩は猫である。</p>\n</body>\n</html>\n"
        )

        # Act
        result = xhtml_to_text(markup)

        # Assert
        assert result == "第一章" + FW * 16 + "\n吾輩は猫である。"

    def test_trailing_whitespace_after_body(self) -> None:
        """Test that indentation after the last block leaves no trailing line."""
        assert xhtml_to_text("<body>\n<p>本文</p>\n  </body>  ") == "本文"

    def test_malformed_markup_does_not_raise(self) -> None:
        """Test that unbalanced tags are handled best-effort."""
        result = xhtml_to_text("<h1>未完<p>本文</span><br")
        assert isinstance(result, str)
