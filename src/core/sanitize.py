"""Model response sanitization - Pure functions.

Language models tend to answer in markdown even when asked not to.
This module strips the markup down to plain text with a consistent
bullet style. sanitize() is idempotent.
"""

import re


BULLET = "•"

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_ITALIC = re.compile(r"\*(.*?)\*")
_CODE = re.compile(r"`(.*?)`")
# Runs like "## ##" are removed in one pass
_HEADER = re.compile(r"^(?:[ \t]*#+)+[ \t]*", re.MULTILINE)
_DASH_BULLET = re.compile(r"^([ \t]*)-[ \t]+", re.MULTILINE)
# "6.1" is a number, not a list marker
_LIST_MARKER = re.compile(rf"^([ \t]*)({BULLET}|\d+\.(?!\d))[ \t]*", re.MULTILINE)
_BLANK_RUN = re.compile(r"\n(?:[ \t]*\n){2,}")


def strip_emphasis(text: str) -> str:
    """Remove bold, italic and inline code markers, keeping inner text.

    After this, each line holds at most one stray '*' or '`'.
    """
    text = _BOLD.sub(r"\1", text)
    text = _ITALIC.sub(r"\1", text)
    return _CODE.sub(r"\1", text)


def sanitize(text: str) -> str:
    """Convert model output into plain, consistently formatted text.

    Pure function.

    Args:
        text: Raw model output

    Returns:
        Sanitized text
    """
    cleaned = strip_emphasis(text)
    cleaned = _HEADER.sub("", cleaned)
    cleaned = _DASH_BULLET.sub(rf"\1{BULLET} ", cleaned)
    cleaned = _LIST_MARKER.sub(r"\1\2 ", cleaned)
    cleaned = _BLANK_RUN.sub("\n\n", cleaned)
    return cleaned.strip()
