#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "click",
#     "utz",
# ]
# ///
"""Show a git repository's pending changes as a readable diff plus a status summary.

Examples:
    gitsum diff                 # working directory changes
    gitsum diff --staged        # what's about to be committed
    gitsum diff -a -f src/      # staged + unstaged changes under src/
    gitsum diff -b main -C 10   # compare against a branch, 10 context lines
    gitsum status               # repository info plus changed files

Diff sections for paths matched by the repository's ignore rules are removed
from the output, even for files git still tracks.
"""

import sys

from click import echo, group, pass_context, pass_obj, style, version_option
from utz import err
from utz.cli import flag, opt

from . import __version__
from .color import should_use_color
from .diff import SectionFilter, parse_sections, split_lines
from .git import GitError, NotARepositoryError, Repo
from .query import DEFAULT_CONTEXT, DiffOptions, resolve
from .render import render
from .status import StatusEntry, tally

# Colors for the per-file status listing, keyed by first summary category
KIND_COLORS = {
    'Modified': 'yellow',
    'Added': 'green',
    'Deleted': 'red',
    'Renamed': 'blue',
    'Unmerged': 'magenta',
    'Untracked': 'bright_black',
}

HELP_SUMMARY = """\
Available commands:
  gitsum diff     - Show git diff with various options
  gitsum status   - Show repository status
  gitsum info     - Show repository information

Use --help for more information on each command."""


def fail(msg: str):
    err(msg)
    sys.exit(1)


def heading(text: str, use_color: bool) -> str:
    return style(text, bold=True) if use_color else text


def echo_entries(entries: list[StatusEntry], use_color: bool):
    for entry in entries:
        kinds = entry.kinds
        if not kinds:
            continue
        line = f"  {'/'.join(kinds)}: {entry.path}"
        echo(style(line, fg=KIND_COLORS[kinds[0]]) if use_color else line)


def echo_repo_info(repo: Repo, entries: list[StatusEntry], use_color: bool):
    branch = repo.current_branch() or '(detached HEAD)'
    lines = [
        f"  Branch: {branch}",
        f"  Remote: {repo.remote_url()}",
        f"  Last commit: {repo.last_commit()}",
        f"  Modified files: {len(entries)}",
    ]
    echo(heading("\nRepository Information:", use_color))
    for line in lines:
        echo(style(line, fg='blue') if use_color else line)


@group(invoke_without_command=True)
@version_option(__version__, prog_name='gitsum')
@opt('-r', '--repo', envvar='GITSUM_REPO', help='Repository directory (default: current directory)')
@pass_context
def cli(ctx, repo: str) -> None:
    """A terminal interface for checking git diffs of repositories."""
    ctx.obj = Repo(repo)
    if ctx.invoked_subcommand is None:
        use_color = should_use_color()
        echo(style("GitSum - Git Diff Checker\n", fg='blue', bold=True) if use_color else "GitSum - Git Diff Checker\n")
        echo(HELP_SUMMARY)


@cli.command()
@flag('-s', '--staged', help='Show staged changes only')
@flag('-u', '--unstaged', help='Show unstaged changes only')
@flag('-a', '--all', 'all_', help='Show all changes (staged + unstaged)')
@opt('-b', '--branch', help='Compare with specific branch')
@opt('-c', '--commit', help='Compare with specific commit')
@opt('-f', '--file', help='Show diff for specific file')
@opt('-C', '--context', default=str(DEFAULT_CONTEXT), help=f'Number of context lines (default: {DEFAULT_CONTEXT})')
@flag('--no-color', help='Disable colored output')
@flag('-w', '--word-diff', help='Show word-level diff')
@pass_obj
def diff(
    repo: Repo,
    staged: bool,
    unstaged: bool,
    all_: bool,
    branch: str,
    commit: str,
    file: str,
    context: str,
    no_color: bool,
    word_diff: bool,
) -> None:
    """Show git diff, minus sections for ignored files."""
    use_color = should_use_color(no_color)
    request = resolve(DiffOptions(
        staged=staged,
        unstaged=unstaged,
        all=all_,
        branch=branch,
        commit=commit,
        file=file,
        context=context,
        word_diff=word_diff,
        color=use_color,
    ))
    try:
        repo.require()
        raw = repo.diff(request)

        ignored = repo.ignored_paths(section.path for section in parse_sections(raw))
        section_filter = SectionFilter(ignored.__contains__)
        for line in split_lines(raw):
            section_filter.feed(line)
        filtered = section_filter.finish()
        if section_filter.dropped:
            err(f"Filtered {len(section_filter.dropped)} ignored file(s) from diff")

        if not filtered.strip():
            msg = f"✓ No {request.description.lower()} found"
            echo(style(msg, fg='green') if use_color else msg)
            return

        echo(heading(f"\n{request.description}:\n", use_color))
        echo(render(filtered, use_color), nl=not filtered.endswith('\n'), color=use_color)

        entries = repo.status()
        if not entries:
            return

        echo(heading("\nFile Status Summary:", use_color))
        echo_entries(entries, use_color)

        echo(heading("\nSummary:", use_color))
        echo(f"  {tally(entries).summary()}")

        shortstat = repo.shortstat(request)
        if shortstat:
            echo(heading("\nChanges:", use_color))
            echo(f"  {shortstat}")
    except NotARepositoryError:
        fail("Error: Current directory is not a git repository")
    except GitError as e:
        fail(f"Error: {e}")


@cli.command()
@pass_obj
def status(repo: Repo) -> None:
    """Show repository status and information."""
    use_color = should_use_color()
    try:
        repo.require()
        entries = repo.status()
        echo_repo_info(repo, entries, use_color)
        if entries:
            echo(heading("\nFile Status Summary:", use_color))
            echo_entries(entries, use_color)
            echo(heading("\nSummary:", use_color))
            echo(f"  {tally(entries).summary()}")
    except NotARepositoryError:
        fail("Error: Current directory is not a git repository")
    except GitError as e:
        fail(f"Error: {e}")


@cli.command()
@pass_obj
def info(repo: Repo) -> None:
    """Show repository information."""
    use_color = should_use_color()
    try:
        repo.require()
        echo_repo_info(repo, repo.status(), use_color)
    except NotARepositoryError:
        fail("Error: Current directory is not a git repository")
    except GitError as e:
        fail(f"Error: {e}")


if __name__ == '__main__':
    cli()
