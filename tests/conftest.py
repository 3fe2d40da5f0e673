"""Shared test fixtures — temp repos, fake git client, configs."""

from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from autostage.config.schema import AutoStageConfig
from autostage.git.models import ErrorKind, VcsOutcome, VcsResult


class FakeGitClient:
    """Records every call instead of spawning git."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, str]] = []
        self.tracked: set[str] = set()
        self.add_ok = True
        self.add_stderr = "fatal: pathspec did not match any files"
        self.hold_add: Optional[asyncio.Event] = None

    @property
    def add_calls(self) -> List[Tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == "add"]

    async def is_tracked(self, repo_root: str, relative_path: str) -> VcsResult:
        self.calls.append(("ls-files", repo_root, relative_path))
        await asyncio.sleep(0)
        if relative_path in self.tracked:
            return VcsResult(VcsOutcome.TRACKED, "tracked", exit_code=0)
        return VcsResult(VcsOutcome.UNTRACKED, "untracked", exit_code=1)

    async def add(self, repo_root: str, relative_path: str) -> VcsResult:
        self.calls.append(("add", repo_root, relative_path))
        if self.hold_add is not None:
            await self.hold_add.wait()
        await asyncio.sleep(0)
        if self.add_ok:
            self.tracked.add(relative_path)
            return VcsResult(VcsOutcome.ADDED, "File added successfully", exit_code=0)
        return VcsResult(
            VcsOutcome.FAILED,
            f"Git add failed: {self.add_stderr}",
            error=ErrorKind.SUBPROCESS_NONZERO,
            exit_code=128,
        )

    async def status(self, repo_root: str, relative_path: str) -> VcsResult:
        self.calls.append(("status", repo_root, relative_path))
        code = None if relative_path in self.tracked else "??"
        return VcsResult(VcsOutcome.UNTRACKED, "Success", exit_code=0, status_code=code)


@pytest.fixture
def fake_git() -> FakeGitClient:
    return FakeGitClient()


@pytest.fixture
def fake_repo(tmp_path: Path) -> Path:
    """A directory with a .git marker and one new 10-byte file, a.txt."""
    root = tmp_path / "r"
    (root / ".git").mkdir(parents=True)
    (root / "a.txt").write_text("0123456789")
    return root


@pytest.fixture
def immediate_config() -> AutoStageConfig:
    """Default config with no debounce and no exclude patterns."""
    cfg = AutoStageConfig()
    cfg.stage.delay_ms = 0
    cfg.filter.exclude_patterns = []
    return cfg


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    # Initial commit
    readme = tmp_path / "README.md"
    readme.write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=tmp_path, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    return tmp_path
