import sys
from enum import Enum


class Tag(Enum):
    """Presentation tag for a line of diff output."""
    ADDITION = 'addition'
    DELETION = 'deletion'
    HUNK = 'hunk'
    FILE_HEADER = 'file-header'
    INDEX = 'index'


# `click.style` keyword arguments for each tag
STYLES = {
    Tag.ADDITION: dict(fg='green'),
    Tag.DELETION: dict(fg='red'),
    Tag.HUNK: dict(fg='blue'),
    Tag.FILE_HEADER: dict(fg='yellow'),
    Tag.INDEX: dict(fg='bright_black'),
}


def should_use_color(no_color: bool = False) -> bool:
    """Determine if color should be used based on `--no-color` and TTY status."""
    if no_color:
        return False
    return sys.stdout.isatty()
