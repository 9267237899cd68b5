"""gitsum: show a git repository's pending changes as a filtered, colorized diff."""

__version__ = "0.1.0"

from .cli import cli
from .color import Tag, should_use_color
from .diff import (
    DiffSection,
    SectionFilter,
    filter_ignored,
    parse_sections,
    split_lines,
)
from .git import GitError, NotARepositoryError, Repo
from .query import (
    DiffMode,
    DiffOptions,
    DiffRequest,
    build_diff_cmd,
    build_shortstat_cmd,
    parse_context,
    resolve,
    synthesize,
)
from .render import render, tag_lines
from .status import ChangeCounts, StatusEntry, StatusState, classify, tally

__all__ = [
    "cli",
    "Tag",
    "should_use_color",
    "DiffSection",
    "SectionFilter",
    "filter_ignored",
    "parse_sections",
    "split_lines",
    "GitError",
    "NotARepositoryError",
    "Repo",
    "DiffMode",
    "DiffOptions",
    "DiffRequest",
    "build_diff_cmd",
    "build_shortstat_cmd",
    "parse_context",
    "resolve",
    "synthesize",
    "render",
    "tag_lines",
    "ChangeCounts",
    "StatusEntry",
    "StatusState",
    "classify",
    "tally",
]
