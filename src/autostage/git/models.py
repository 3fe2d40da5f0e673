"""Data models for git operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class VcsOutcome(str, Enum):
    TRACKED = "tracked"
    UNTRACKED = "untracked"
    ADDED = "added"
    FAILED = "failed"
    NOT_A_REPO = "not_a_repo"
    OUTSIDE_REPO = "outside_repo"


class ErrorKind(str, Enum):
    NOT_A_REPOSITORY = "not_a_repository"
    OUTSIDE_REPOSITORY = "outside_repository"
    POLICY_REJECTED = "policy_rejected"
    SPAWN_FAILED = "spawn_failed"
    SUBPROCESS_NONZERO = "subprocess_nonzero"
    ALREADY_TRACKED = "already_tracked"  # short-circuit, not a failure


@dataclass(frozen=True)
class GitRun:
    """Raw result of one finished git subprocess."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


@dataclass(frozen=True)
class VcsResult:
    """Exactly one of these is produced per git client call."""

    outcome: VcsOutcome
    message: str
    error: Optional[ErrorKind] = None
    exit_code: Optional[int] = None
    status_code: Optional[str] = None  # two-char porcelain code, status() only

    @property
    def ok(self) -> bool:
        return self.outcome in (VcsOutcome.TRACKED, VcsOutcome.UNTRACKED, VcsOutcome.ADDED)

    @property
    def tracked(self) -> bool:
        return self.outcome is VcsOutcome.TRACKED
