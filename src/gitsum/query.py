"""Turn a bag of `diff` options into a single git query.

Mode flags may contradict each other (e.g. `--staged --all`); the first match
in this order wins: staged, unstaged, all, branch, commit, working tree.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

DEFAULT_CONTEXT = 3


class DiffMode(Enum):
    WORKING_TREE = 'working-tree'
    STAGED = 'staged'
    ALL = 'all'
    BRANCH = 'branch'
    COMMIT = 'commit'


@dataclass
class DiffOptions:
    """Options as supplied on the command line; every field is optional."""
    staged: bool = False
    unstaged: bool = False
    all: bool = False
    branch: Optional[str] = None
    commit: Optional[str] = None
    file: Optional[str] = None
    context: Union[str, int, None] = None
    word_diff: bool = False
    color: bool = True


@dataclass(frozen=True)
class DiffRequest:
    """The resolved intent of one `diff` invocation."""
    mode: DiffMode
    description: str
    target: Optional[str] = None
    path_filter: Optional[str] = None
    context_lines: int = DEFAULT_CONTEXT
    word_level: bool = False
    colorize: bool = True

    def __post_init__(self):
        compare = self.mode in (DiffMode.BRANCH, DiffMode.COMMIT)
        if compare != bool(self.target):
            raise ValueError(f"{self.mode.value} mode {'requires' if compare else 'takes no'} target")

    @property
    def mode_args(self) -> list[str]:
        if self.mode is DiffMode.STAGED:
            return ['--cached']
        if self.mode is DiffMode.ALL:
            return ['HEAD']
        if self.target:
            return [self.target]
        return []


def parse_context(value: Union[str, int, None]) -> int:
    """Parse a context-line count, falling back to the default on bad input."""
    if value is None:
        return DEFAULT_CONTEXT
    try:
        lines = int(value)
    except (TypeError, ValueError):
        return DEFAULT_CONTEXT
    return lines if lines >= 0 else DEFAULT_CONTEXT


def resolve(options: DiffOptions) -> DiffRequest:
    """Pick exactly one diff mode from `options`."""
    if options.staged:
        mode, target, description = DiffMode.STAGED, None, 'Staged changes'
    elif options.unstaged:
        mode, target, description = DiffMode.WORKING_TREE, None, 'Unstaged changes'
    elif options.all:
        mode, target, description = DiffMode.ALL, None, 'All changes (staged + unstaged)'
    elif options.branch:
        mode, target, description = DiffMode.BRANCH, options.branch, f'Changes compared to {options.branch}'
    elif options.commit:
        mode, target, description = DiffMode.COMMIT, options.commit, f'Changes compared to {options.commit}'
    else:
        mode, target, description = DiffMode.WORKING_TREE, None, 'Working directory changes'

    return DiffRequest(
        mode=mode,
        description=description,
        target=target,
        path_filter=options.file or None,
        context_lines=parse_context(options.context),
        word_level=options.word_diff,
        colorize=options.color,
    )


def build_diff_cmd(request: DiffRequest) -> list[str]:
    """Build the `git diff` command for a resolved request."""
    cmd = ['git', 'diff', *request.mode_args]
    cmd.append(f'-U{request.context_lines}')
    if request.word_level:
        cmd.append('--word-diff=color' if request.colorize else '--word-diff=plain')
    # Submodule internals are never shown
    cmd.append('--ignore-submodules=all')
    if request.path_filter:
        cmd.extend(['--', request.path_filter])
    return cmd


def build_shortstat_cmd(request: DiffRequest) -> list[str]:
    """Build the `git diff --shortstat` command covering the same selection."""
    cmd = ['git', 'diff', *request.mode_args, '--shortstat', '--ignore-submodules=all']
    if request.path_filter:
        cmd.extend(['--', request.path_filter])
    return cmd


def synthesize(options: DiffOptions) -> tuple[list[str], str]:
    """Return the git diff command for `options`, and a description of what it shows."""
    request = resolve(options)
    return build_diff_cmd(request), request.description
