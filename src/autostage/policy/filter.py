"""Policy filter — ordered accept/reject decision for a candidate path.

Checks run in a fixed order and stop at the first rejection, so the
reason always names the earliest failing check:

1. enabled flag
2. existing regular file
3. exclude patterns
4. include patterns (only when configured)
5. size ceiling (0 = unlimited)
6. directory allow-list (relative to the repository root)
7. repository root discoverable
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

from autostage.config.schema import AutoStageConfig
from autostage.git.locator import RepoLocator, relative_to
from autostage.policy.patterns import PathPattern, any_match, compile_patterns

REASON_OK = "OK"
REASON_DISABLED = "Plugin disabled"
REASON_NOT_FILE = "Not a regular file"
REASON_EXCLUDED = "File matches exclude pattern"
REASON_NOT_INCLUDED = "File does not match include pattern"
REASON_TOO_LARGE = "File too large"
REASON_NOT_ALLOWED_DIR = "File not in allowed directory"
REASON_NOT_IN_REPO = "Not in git repository"


@dataclass(frozen=True)
class PolicyDecision:
    accepted: bool
    reason: str


ACCEPTED = PolicyDecision(True, REASON_OK)


class PolicyFilter:
    """Pure predicate layer built from one configuration snapshot."""

    def __init__(self, config: AutoStageConfig, locator: RepoLocator) -> None:
        self.config = config
        self.locator = locator
        self.exclude: List[PathPattern] = compile_patterns(config.filter.exclude_patterns)
        self.include: List[PathPattern] = compile_patterns(config.filter.include_patterns)

    def _size_ok(self, path: str) -> bool:
        max_size = self.config.stage.max_file_size
        if max_size <= 0:
            return True
        try:
            return os.stat(path).st_size <= max_size
        except OSError:
            return False

    def _in_allowed_dirs(self, path: str) -> bool:
        allowed = self.config.filter.restrict_to_dirs
        if not allowed:
            return True
        root = self.locator.find_root(path)
        if root is None:
            return False
        rel = relative_to(path, root)
        if rel is None:
            return False
        return any(rel.startswith(prefix) for prefix in allowed)

    def decide(self, path: str) -> PolicyDecision:
        if not self.config.stage.enabled:
            return PolicyDecision(False, REASON_DISABLED)

        if not os.path.isfile(path):
            return PolicyDecision(False, REASON_NOT_FILE)

        if any_match(self.exclude, path):
            return PolicyDecision(False, REASON_EXCLUDED)

        if self.include and not any_match(self.include, path):
            return PolicyDecision(False, REASON_NOT_INCLUDED)

        if not self._size_ok(path):
            return PolicyDecision(False, REASON_TOO_LARGE)

        if not self._in_allowed_dirs(path):
            return PolicyDecision(False, REASON_NOT_ALLOWED_DIR)

        if not self.locator.is_git_repo(path):
            return PolicyDecision(False, REASON_NOT_IN_REPO)

        return ACCEPTED
