"""Async git subprocess wrapper — tracked check, add, porcelain status.

Every call runs exactly one git process in the repository root with one
path argument. Failures come back as a ``VcsResult``; nothing raises
across the await.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from autostage.git.models import ErrorKind, GitRun, VcsOutcome, VcsResult

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when git cannot be spawned or does not finish in time."""


class GitClient:
    """Runs git commands on the running event loop."""

    def __init__(self, executable: str = "git", timeout: float = 30.0) -> None:
        self.executable = executable
        self.timeout = timeout

    async def _run_git(self, args: list[str], cwd: str) -> GitRun:
        """Run a git command and collect its output. Raises GitError on spawn/timeout."""
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise GitError(f"{self.executable} could not be started: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            raise GitError(
                f"git command timed out after {self.timeout}s: git {' '.join(args)}"
            ) from None

        logger.debug("git %s (cwd=%s) exited %s", " ".join(args), cwd, process.returncode)
        return GitRun(
            args=tuple(args),
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def is_tracked(self, repo_root: str, relative_path: str) -> VcsResult:
        """``git ls-files --error-unmatch``: exit 0 means the path is in the index."""
        try:
            run = await self._run_git(["ls-files", "--error-unmatch", "--", relative_path], repo_root)
        except GitError as exc:
            return VcsResult(
                VcsOutcome.FAILED,
                f"Failed to spawn git process: {exc}",
                error=ErrorKind.SPAWN_FAILED,
            )
        if run.returncode == 0:
            return VcsResult(VcsOutcome.TRACKED, "tracked", exit_code=0)
        return VcsResult(VcsOutcome.UNTRACKED, "untracked", exit_code=run.returncode)

    async def add(self, repo_root: str, relative_path: str) -> VcsResult:
        """Stage one path. stderr is surfaced on a nonzero exit."""
        try:
            run = await self._run_git(["add", "--", relative_path], repo_root)
        except GitError as exc:
            logger.warning("git add %s: %s", relative_path, exc)
            return VcsResult(
                VcsOutcome.FAILED,
                f"Failed to spawn git process: {exc}",
                error=ErrorKind.SPAWN_FAILED,
            )
        if run.returncode == 0:
            return VcsResult(VcsOutcome.ADDED, "File added successfully", exit_code=0)
        return VcsResult(
            VcsOutcome.FAILED,
            f"Git add failed: {run.stderr.strip()}",
            error=ErrorKind.SUBPROCESS_NONZERO,
            exit_code=run.returncode,
        )

    async def status(self, repo_root: str, relative_path: str) -> VcsResult:
        """Short status for one path. Diagnostics only; never drives staging.

        Ignored files are listed as ``!!`` and count as untracked.
        """
        try:
            run = await self._run_git(
                ["status", "--porcelain", "--ignored", "--", relative_path], repo_root
            )
        except GitError as exc:
            return VcsResult(
                VcsOutcome.FAILED,
                f"Failed to spawn git process: {exc}",
                error=ErrorKind.SPAWN_FAILED,
            )
        if run.returncode != 0:
            return VcsResult(
                VcsOutcome.FAILED,
                "Git status failed",
                error=ErrorKind.SUBPROCESS_NONZERO,
                exit_code=run.returncode,
            )
        code = parse_status_code(run.stdout)
        # no output: tracked and unmodified
        outcome = VcsOutcome.UNTRACKED if code in ("??", "!!") else VcsOutcome.TRACKED
        return VcsResult(outcome, "Success", exit_code=0, status_code=code)


def parse_status_code(output: str) -> Optional[str]:
    """Return the two-character code from the first porcelain line, if any."""
    for line in output.splitlines():
        if len(line) >= 3 and line[2] == " ":
            return line[:2]
        break
    return None
