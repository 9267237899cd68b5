"""Split unified diffs into per-file sections, and drop sections for ignored paths.

`git diff` doesn't consistently honor ignore rules (e.g. for files that were
committed before being added to `.gitignore`), so sections whose path git
considers ignored are removed after the fact.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

DIFF_HEADER = 'diff --git '
HUNK_HEADER = '@@'
DEV_NULL = '/dev/null'

# Each side is either `a/<path>`, or `"a/<path>"` with C-style escapes when
# the path has unusual characters
QUOTED = r'"{side}/((?:[^"\\]|\\.)*)"'
HEADER_RE = re.compile(
    r'^diff --git '
    rf'(?:{QUOTED.format(side="a")}|a/(.+?)) '
    rf'(?:{QUOTED.format(side="b")}|b/(.+?))$'
)

ESCAPES = {
    'a': 7, 'b': 8, 't': 9, 'n': 10, 'v': 11, 'f': 12, 'r': 13,
    '"': ord('"'), '\\': ord('\\'),
}
ESCAPE_RE = re.compile(rb'\\([0-7]{3}|.)')


def unquote(path: str) -> str:
    """Decode a path git quoted, e.g. `"caf\\303\\251.log"` → `café.log`.

    Unquoted paths are returned as-is.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    return unescape(path[1:-1])


def unescape(body: str) -> str:
    """Decode the C-style escapes (octal bytes included) in a quoted path's body."""
    def replace(m):
        esc = m.group(1).decode('latin-1')
        if len(esc) == 3:
            return bytes([int(esc, 8)])
        return bytes([ESCAPES.get(esc, ord(esc))])

    return ESCAPE_RE.sub(replace, body.encode('utf-8')).decode('utf-8', errors='replace')


def split_lines(text: str) -> list[str]:
    """Split on newlines only, keeping terminators; `''.join` restores `text`."""
    lines = text.split('\n')
    tail = lines.pop()
    lines = [f'{line}\n' for line in lines]
    if tail:
        lines.append(tail)
    return lines


def parse_header(line: str) -> tuple[Optional[str], Optional[str]]:
    """Extract (old, new) paths from a `diff --git a/<old> b/<new>` line.

    Returns (None, None) if the header can't be parsed.
    """
    m = HEADER_RE.match(line.rstrip('\r\n'))
    if not m:
        return None, None
    quoted_old, old_path, quoted_new, new_path = m.groups()
    if quoted_old is not None:
        old_path = unescape(quoted_old)
    if quoted_new is not None:
        new_path = unescape(quoted_new)
    return old_path, new_path


@dataclass
class DiffSection:
    """All lines of one file's diff, starting with its `diff --git` header."""
    source_path: Optional[str]
    dest_path: Optional[str]
    lines: list[str] = field(default_factory=list)
    # Extended header lines (`index`, `---`, `+++`, ...) end at the first hunk
    in_header: bool = True

    @classmethod
    def from_header(cls, line: str) -> 'DiffSection':
        source_path, dest_path = parse_header(line)
        return cls(source_path, dest_path, [line])

    @property
    def path(self) -> Optional[str]:
        """Destination path, or the source path for deletions."""
        return self.dest_path if self.dest_path is not None else self.source_path

    def add(self, line: str):
        if self.in_header:
            stripped = line.rstrip('\r\n')
            if stripped.startswith(HUNK_HEADER):
                self.in_header = False
            elif stripped == f'--- {DEV_NULL}':
                self.source_path = None
            elif stripped == f'+++ {DEV_NULL}':
                self.dest_path = None
        self.lines.append(line)


class State(Enum):
    OUTSIDE = 'outside'
    INSIDE = 'inside'


class SectionFilter:
    """Line-at-a-time state machine that emits sections whose path isn't ignored.

    Lines before the first header pass through untouched. A section is
    decided when it closes: at the next header, or at `finish()`.
    """

    def __init__(self, is_ignored: Callable[[str], bool]):
        self.is_ignored = is_ignored
        self.state = State.OUTSIDE
        self.section: Optional[DiffSection] = None
        self.output: list[str] = []
        self.kept: list[DiffSection] = []
        self.dropped: list[DiffSection] = []

    def feed(self, line: str):
        if line.startswith(DIFF_HEADER):
            self._close()
            self.section = DiffSection.from_header(line)
            self.state = State.INSIDE
        elif self.state is State.OUTSIDE:
            self.output.append(line)
        else:
            self.section.add(line)

    def _close(self):
        if self.state is not State.INSIDE:
            return
        section = self.section
        path = section.path
        if path is not None and self.is_ignored(path):
            self.dropped.append(section)
        else:
            self.kept.append(section)
            self.output.extend(section.lines)
        self.section = None
        self.state = State.OUTSIDE

    def finish(self) -> str:
        self._close()
        return ''.join(self.output)


def filter_ignored(raw_diff: str, is_ignored: Callable[[str], bool]) -> str:
    """Remove every file section of `raw_diff` whose path satisfies `is_ignored`."""
    section_filter = SectionFilter(is_ignored)
    for line in split_lines(raw_diff):
        section_filter.feed(line)
    return section_filter.finish()


def parse_sections(raw_diff: str) -> list[DiffSection]:
    """Split `raw_diff` into its per-file sections."""
    section_filter = SectionFilter(lambda path: False)
    for line in split_lines(raw_diff):
        section_filter.feed(line)
    section_filter.finish()
    return section_filter.kept
