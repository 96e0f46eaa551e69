"""
Markup to narration text.

Pattern-based conversion of XHTML fragments: headings and emphasis get
full-width space padding so the speech engine pauses, block boundaries get
line breaks, then every tag is removed.
"""

import re
from typing import Callable


# Converts one markup fragment to plain narration text
MarkupConverter = Callable[[str], str]

PAUSE_CHAR = "　"  # full-width space
HEADING_PAUSE_BASE = 18
HEADING_PAUSE_STEP = 2
SPAN_PAUSE = PAUSE_CHAR * 2

HEADING_PATTERNS = {
    level: re.compile(rf"<h{level}>(.*?)</h{level}>")
    for level in range(1, 7)
}
SPAN_PATTERN = re.compile(r"<span>(.*?)</span>")
HEADING_CLOSE_PATTERN = re.compile(r"</h[1-8]>")
TAG_PATTERN = re.compile(r"<[^>]*>")
# ASCII whitespace only, so lines holding nothing but pause characters survive.
# \Z also catches a blank last line with no trailing newline.
BLANK_LINE_PATTERN = re.compile(r"^[ \t\r\f\v]*(?:\n|\Z)", re.MULTILINE)


def heading_pause(level: int) -> str:
    """Pause string for a heading level (h1 = 18 full-width spaces, -2 per level)."""
    return PAUSE_CHAR * (HEADING_PAUSE_BASE - HEADING_PAUSE_STEP * (level - 1))


def add_pause(markup: str) -> str:
    """Insert narration pauses and forced line breaks into markup.

    - ``<hN>text</hN>`` (N = 1..6) becomes ``<hN>text + pause</hN>``
    - ``<span>text</span>`` becomes ``<span>text + 2 full-width spaces</span>``
    - a newline follows every ``</p>``, ``</h1>``..``</h8>`` and ``<br>``

    Args:
        markup: Raw XHTML fragment.

    Returns:
        Annotated markup, tags preserved.

    Examples:
        >>> add_pause("<h6>t</h6>")
        '<h6>t　　　　　　　　</h6>\\n'
    """
    for level, pattern in HEADING_PATTERNS.items():
        pause = heading_pause(level)
        markup = pattern.sub(
            lambda m, level=level, pause=pause: f"<h{level}>{m.group(1)}{pause}</h{level}>",
            markup,
        )

    markup = SPAN_PATTERN.sub(lambda m: f"<span>{m.group(1)}{SPAN_PAUSE}</span>", markup)

    markup = markup.replace("</p>", "</p>\n")
    markup = HEADING_CLOSE_PATTERN.sub(lambda m: m.group(0) + "\n", markup)
    markup = markup.replace("<br>", "<br>\n")

    return markup


def strip_tags(annotated: str) -> str:
    """Remove all tags and blank lines, and trim trailing newlines."""
    text = TAG_PATTERN.sub("", annotated)
    text = BLANK_LINE_PATTERN.sub("", text)
    return text.rstrip("\n")


def xhtml_to_text(markup: str) -> str:
    """Convert an XHTML fragment to plain text with narration pauses.

    Examples:
        >>> xhtml_to_text("<p>one</p><p>two</p>")
        'one\\ntwo'
    """
    return strip_tags(add_pause(markup))
