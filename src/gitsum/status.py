"""Classify `git status --porcelain` lines, and tally them for the summary."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .diff import unquote


class StatusState(Enum):
    UNMODIFIED = ' '
    MODIFIED = 'M'
    ADDED = 'A'
    DELETED = 'D'
    RENAMED = 'R'
    COPIED = 'C'
    UNMERGED = 'U'
    UNTRACKED = '?'

    @classmethod
    def parse(cls, char: str) -> 'StatusState':
        # Type changes (`T`) are reported as modifications
        if char == 'T':
            return cls.MODIFIED
        try:
            return cls(char)
        except ValueError:
            return cls.UNMODIFIED


UNTRACKED_CODE = '??'

# Summary categories, in display order, with the status character that
# places an entry in each. Membership is by presence anywhere in the
# two-character code, so one entry can count under several categories.
CATEGORIES = (
    ('Modified', 'M'),
    ('Added', 'A'),
    ('Deleted', 'D'),
    ('Renamed', 'R'),
    ('Unmerged', 'U'),
)
UNTRACKED = 'Untracked'


@dataclass(frozen=True)
class StatusEntry:
    code: str
    index_state: StatusState
    worktree_state: StatusState
    path: str

    @classmethod
    def parse(cls, line: str) -> 'StatusEntry':
        code = line[:2].ljust(2)
        return cls(
            code=code,
            index_state=StatusState.parse(code[0]),
            worktree_state=StatusState.parse(code[1]),
            path=line[3:],
        )

    @property
    def untracked(self) -> bool:
        return self.code == UNTRACKED_CODE

    @property
    def kinds(self) -> list[str]:
        """Summary categories this entry is counted under."""
        if self.untracked:
            return [UNTRACKED]
        return [name for name, char in CATEGORIES if char in self.code]

    @property
    def target_path(self) -> str:
        """Path after any rename (`old -> new` in porcelain output), unquoted."""
        return unquote(self.path.split(' -> ')[-1])


@dataclass(frozen=True)
class ChangeCounts:
    modified: int = 0
    added: int = 0
    deleted: int = 0
    renamed: int = 0
    unmerged: int = 0
    untracked: int = 0

    def summary(self) -> str:
        """E.g. "Modified: 2, Added: 0, Deleted: 1, Untracked: 3"."""
        parts = [
            f'Modified: {self.modified}',
            f'Added: {self.added}',
            f'Deleted: {self.deleted}',
        ]
        if self.renamed:
            parts.append(f'Renamed: {self.renamed}')
        if self.unmerged:
            parts.append(f'Unmerged: {self.unmerged}')
        if self.untracked:
            parts.append(f'Untracked: {self.untracked}')
        return ', '.join(parts)


def classify(lines: Iterable[str]) -> list[StatusEntry]:
    """Parse short-status lines into entries, skipping empty lines."""
    return [StatusEntry.parse(line) for line in lines if line]


def tally(entries: Iterable[StatusEntry]) -> ChangeCounts:
    counts = {name.lower(): 0 for name, _ in CATEGORIES}
    counts[UNTRACKED.lower()] = 0
    for entry in entries:
        for kind in entry.kinds:
            counts[kind.lower()] += 1
    return ChangeCounts(**counts)
