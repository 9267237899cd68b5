import os
import shlex
from functools import cached_property
from pathlib import Path
from subprocess import CompletedProcess, run
from typing import Iterable, Optional, Union

from .query import DiffRequest, build_diff_cmd, build_shortstat_cmd
from .status import StatusEntry, classify

# Larger outputs are treated as failures rather than truncated
MAX_OUTPUT_BYTES = 50 * 1024 * 1024

NO_REMOTE = 'No remote origin set'


class GitError(Exception):
    """A git command failed or couldn't be run."""


class NotARepositoryError(GitError):
    def __init__(self, cwd):
        super().__init__(f"Not a git repository: {cwd}")
        self.cwd = cwd


def decode(data: bytes) -> str:
    return data.decode('utf-8', errors='replace')


class Repo:
    """Runs git queries against the repository containing `cwd`.

    Paths in diff headers and porcelain status output are relative to the
    repository's top level, not `cwd`; ignore checks run from there.
    """

    def __init__(self, cwd: Union[str, Path, None] = None):
        self.cwd = Path(cwd) if cwd else Path.cwd()

    def exec(self, cmd: list[str], cwd: Optional[Path] = None, input: Optional[bytes] = None) -> CompletedProcess:
        """Run `cmd`, returning the raw (bytes) result whatever its exit code."""
        try:
            return run(
                cmd,
                cwd=cwd or self.cwd,
                input=input,
                capture_output=True,
                env={**os.environ, 'GIT_PAGER': 'cat'},
            )
        except OSError as e:
            raise GitError(f"Git command failed: {shlex.join(cmd)}\n{e}") from e

    def run(self, cmd: list[str], cwd: Optional[Path] = None, input: Optional[bytes] = None) -> str:
        """Run a git command and return its stdout, raising `GitError` on failure."""
        result = self.exec(cmd, cwd=cwd, input=input)
        if result.returncode != 0:
            output = decode(result.stderr or result.stdout)
            message = f"Git command failed: {shlex.join(cmd)}"
            if output:
                message += f"\n{output}"
            raise GitError(message)
        if len(result.stdout) > MAX_OUTPUT_BYTES:
            raise GitError(f"Git command failed: {shlex.join(cmd)}\nOutput exceeded {MAX_OUTPUT_BYTES} bytes")
        return decode(result.stdout)

    def is_repository(self) -> bool:
        try:
            result = self.exec(['git', 'rev-parse', '--is-inside-work-tree'])
        except GitError:
            return False
        return result.returncode == 0 and result.stdout.strip() == b'true'

    def require(self):
        if not self.is_repository():
            raise NotARepositoryError(self.cwd)

    @cached_property
    def toplevel(self) -> Path:
        return Path(self.run(['git', 'rev-parse', '--show-toplevel']).strip())

    def ignored_paths(self, paths: Iterable[str]) -> set[str]:
        """Subset of `paths` (relative to the top level) matched by ignore rules.

        Tracked files count too (`--no-index`). One `check-ignore` call covers
        every path.
        """
        paths = [path for path in paths if path]
        if not paths:
            return set()
        cmd = ['git', 'check-ignore', '--no-index', '--stdin', '-z']
        stdin = b''.join(path.encode('utf-8') + b'\0' for path in paths)
        result = self.exec(cmd, cwd=self.toplevel, input=stdin)
        # Exit code 1 means nothing matched
        if result.returncode == 1:
            return set()
        if result.returncode != 0:
            message = f"Git command failed: {shlex.join(cmd)}"
            if result.stderr:
                message += f"\n{decode(result.stderr)}"
            raise GitError(message)
        return {decode(path) for path in result.stdout.split(b'\0') if path}

    def is_ignored(self, path: str) -> bool:
        """Whether git's ignore rules match `path` (relative to the top level)."""
        return path in self.ignored_paths([path])

    def diff(self, request: DiffRequest) -> str:
        return self.run(build_diff_cmd(request))

    def shortstat(self, request: DiffRequest) -> str:
        return self.run(build_shortstat_cmd(request)).strip()

    def status_lines(self) -> list[str]:
        """`git status --porcelain` lines, minus those for ignored paths."""
        lines = [line for line in self.run(['git', 'status', '--porcelain']).splitlines() if line]
        ignored = self.ignored_paths(StatusEntry.parse(line).target_path for line in lines)
        return [line for line in lines if StatusEntry.parse(line).target_path not in ignored]

    def status(self) -> list[StatusEntry]:
        return classify(self.status_lines())

    def current_branch(self) -> str:
        return self.run(['git', 'branch', '--show-current']).strip()

    def remote_url(self, remote: str = 'origin') -> str:
        try:
            return self.run(['git', 'remote', 'get-url', remote]).strip()
        except GitError:
            return NO_REMOTE

    def last_commit(self) -> str:
        return self.run(['git', 'log', '-1', '--oneline']).strip()
