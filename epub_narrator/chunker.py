"""
Chunk splitter for speech synthesis requests.

Splits narration text into pieces no longer than a maximum number of
characters, cutting after the last sentence or clause delimiter that fits.
Lengths are Python string lengths, i.e. codepoints.
"""

import re
from typing import List

from epub_narrator.utils.validation import validate_max_chars


DELIMITERS = ",.、。，．\n"
DELIMITER_PATTERN = re.compile("[" + re.escape(DELIMITERS) + "]")


def find_last_delimiter(window: str) -> int:
    """Find the split position after the rightmost delimiter.

    Args:
        window: Text to search.

    Returns:
        Index just past the last delimiter, or -1 if there is none.

    Examples:
        >>> find_last_delimiter("あ、いうえお。かき")
        7
        >>> find_last_delimiter("あいう")
        -1
    """
    split_index = -1
    for match in DELIMITER_PATTERN.finditer(window):
        split_index = match.end()
    return split_index


def split_text(text: str, max_chars: int) -> List[str]:
    """
    Split text into chunks of at most max_chars characters.

    Each cut is placed right after the rightmost delimiter inside the
    current window. A window without any delimiter is cut at exactly
    max_chars. Joining the chunks gives back the input unchanged.

    Args:
        text: Plain narration text
        max_chars: Maximum characters per chunk

    Returns:
        List of chunks in reading order. Text that already fits is returned
        as a single chunk, even when empty.

    Raises:
        ConfigError: If max_chars is not a positive integer
    """
    validate_max_chars(max_chars)

    total = len(text)
    if total <= max_chars:
        return [text]

    chunks = []
    start = 0
    while start < total:
        end = start + max_chars
        if end >= total:
            chunks.append(text[start:])
            break

        split_index = find_last_delimiter(text[start:end])
        if split_index != -1:
            end = start + split_index

        chunks.append(text[start:end])
        start = end

    return chunks
