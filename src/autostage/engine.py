"""Staging engine — wires root discovery, policy, scheduling and git together.

One ``Engine`` owns its repository-root cache, its scheduler table and
its configuration snapshot; nothing is process-global, so several
engines can coexist (tests do this).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from autostage.config.schema import AutoStageConfig
from autostage.git.client import GitClient
from autostage.git.locator import RepoLocator, relative_to
from autostage.git.models import ErrorKind, VcsOutcome, VcsResult
from autostage.policy.filter import PolicyDecision, PolicyFilter
from autostage.scheduler.debounce import PathState, Scheduler, StagingRequest

logger = logging.getLogger(__name__)

ResultCallback = Callable[[str, bool, str], None]


class VcsClient(Protocol):
    async def is_tracked(self, repo_root: str, relative_path: str) -> VcsResult: ...

    async def add(self, repo_root: str, relative_path: str) -> VcsResult: ...

    async def status(self, repo_root: str, relative_path: str) -> VcsResult: ...


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only diagnostic view of how the engine would treat a path."""

    path: str
    enabled: bool
    in_git_repo: bool
    git_root: Optional[str]
    relative_path: Optional[str]
    would_process: bool
    reason: str

    @property
    def decision(self) -> PolicyDecision:
        return PolicyDecision(self.would_process, self.reason)


class Engine:
    """Entry point for hosts: ``request_add``, ``setup``, ``cleanup``, ``get_status``."""

    def __init__(
        self,
        config: Optional[AutoStageConfig] = None,
        *,
        client: Optional[VcsClient] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        self.config = config or AutoStageConfig()
        self.locator = RepoLocator()
        self.client: VcsClient = client or GitClient(
            executable=self.config.git.executable,
            timeout=self.config.git.timeout,
        )
        self._on_result = on_result
        self.policy = PolicyFilter(self.config, self.locator)
        self.scheduler = Scheduler(self._stage, delay_ms=self.config.stage.delay_ms)

    # ---- lifecycle ----

    def setup(self, config: Optional[AutoStageConfig] = None) -> None:
        """Install a new configuration snapshot and forget cached repo roots."""
        if config is not None:
            self.config = config
        self.policy = PolicyFilter(self.config, self.locator)
        self.scheduler.delay_ms = self.config.stage.delay_ms
        if isinstance(self.client, GitClient):
            self.client.executable = self.config.git.executable
            self.client.timeout = self.config.git.timeout
        self.locator.clear()

    def cleanup(self) -> None:
        """Drop every pending timer and per-path state, and clear the cache."""
        self.scheduler.cleanup()
        self.locator.clear()

    async def wait_idle(self) -> None:
        await self.scheduler.wait_idle()

    # ---- host operations ----

    def request_add(self, path: str) -> PathState:
        if not path:
            logger.warning("Ignoring staging request with an empty path")
            return PathState.IDLE
        return self.scheduler.request(os.path.abspath(path))

    def get_status(self, path: str) -> StatusSnapshot:
        abs_path = os.path.abspath(path)
        root = self.locator.find_root(abs_path)
        rel = relative_to(abs_path, root) if root is not None else None
        decision = self.policy.decide(abs_path)
        return StatusSnapshot(
            path=abs_path,
            enabled=self.config.stage.enabled,
            in_git_repo=root is not None,
            git_root=root,
            relative_path=rel,
            would_process=decision.accepted,
            reason=decision.reason,
        )

    async def file_status(self, path: str) -> VcsResult:
        """Porcelain status for *path*, for display only."""
        abs_path = os.path.abspath(path)
        resolved = self._resolve(abs_path)
        if isinstance(resolved, VcsResult):
            return resolved
        root, rel = resolved
        return await self.client.status(root, rel)

    # ---- enable / disable ----

    def enable(self) -> None:
        self.config.stage.enabled = True
        self._announce("Auto git add enabled")

    def disable(self) -> None:
        self.config.stage.enabled = False
        self._announce("Auto git add disabled")

    def toggle(self) -> bool:
        if self.config.stage.enabled:
            self.disable()
        else:
            self.enable()
        return self.config.stage.enabled

    # ---- cache ----

    def clear_cache(self) -> None:
        self.locator.clear()

    def cache_snapshot(self) -> Dict[str, Optional[str]]:
        return self.locator.snapshot()

    # ---- internals ----

    def _resolve(self, abs_path: str) -> tuple[str, str] | VcsResult:
        root = self.locator.find_root(abs_path)
        if root is None:
            return VcsResult(
                VcsOutcome.NOT_A_REPO, "Not in git repo", error=ErrorKind.NOT_A_REPOSITORY
            )
        rel = relative_to(abs_path, root)
        if rel is None:
            return VcsResult(
                VcsOutcome.OUTSIDE_REPO, "File outside git repo", error=ErrorKind.OUTSIDE_REPOSITORY
            )
        return root, rel

    async def _stage(self, request: StagingRequest) -> None:
        path = request.path
        decision = self.policy.decide(path)
        if not decision.accepted:
            logger.debug("%s %s: %s", ErrorKind.POLICY_REJECTED.value, path, decision.reason)
            return

        resolved = self._resolve(path)
        if isinstance(resolved, VcsResult):
            logger.debug("Skipping %s: %s", path, resolved.message)
            return
        root, rel = resolved

        tracked = await self.client.is_tracked(root, rel)
        if request.cancelled:
            return
        if tracked.tracked:
            logger.debug("%s %s", ErrorKind.ALREADY_TRACKED.value, rel)
            return

        result = await self.client.add(root, rel)
        if request.cancelled:
            return
        self._report(path, rel, result)

    def _report(self, path: str, rel: str, result: VcsResult) -> None:
        success = result.outcome is VcsOutcome.ADDED
        if self._on_result is not None:
            logger.debug("Staging %s finished: %s", rel, result.message)
            self._on_result(path, success, result.message)
        elif success:
            self._announce(f"Added to git: {rel}")
        else:
            self._announce(f"Failed to add {path}: {result.message}", logging.ERROR)

    def _announce(self, message: str, level: Optional[int] = None) -> None:
        if self.config.notify.show_notifications:
            logger.log(level if level is not None else self.config.notify_level, message)
