"""Tag diff lines by kind, and style them for the terminal."""

from typing import Optional

from click import style

from .color import STYLES, Tag
from .diff import split_lines

# Checked in order; first match wins (so `+++`/`---` file lines count as
# additions/deletions).
PREFIXES = (
    ('+', Tag.ADDITION),
    ('-', Tag.DELETION),
    ('@@', Tag.HUNK),
    ('diff --git', Tag.FILE_HEADER),
    ('index', Tag.INDEX),
)


def tag_line(line: str) -> Optional[Tag]:
    for prefix, tag in PREFIXES:
        if line.startswith(prefix):
            return tag
    return None


def tag_lines(text: str) -> list[tuple[str, Optional[Tag]]]:
    """Pair each line of `text` (terminator included) with its tag."""
    return [(line, tag_line(line)) for line in split_lines(text)]


def style_line(line: str, tag: Optional[Tag]) -> str:
    if tag is None:
        return line
    body = line.rstrip('\r\n')
    return style(body, **STYLES[tag]) + line[len(body):]


def render(text: str, colorize: bool) -> str:
    """Color `text` by line kind; returned unchanged if `colorize` is false."""
    if not colorize:
        return text
    return ''.join(style_line(line, tag) for line, tag in tag_lines(text))
