"""Repository root discovery with a per-query-path cache."""

from __future__ import annotations

import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)

GIT_MARKER = ".git"


def _normalise(path: str) -> str:
    """Absolute form without a trailing separator. Symlinks are left alone."""
    return os.path.abspath(path)


def relative_to(path: str, repo_root: str) -> Optional[str]:
    """Return *path* relative to *repo_root*, or None if it is not a descendant.

    The check is done on whole path components, so ``/repoAB/x`` is not
    inside ``/repo``.
    """
    abs_path = _normalise(path)
    abs_root = _normalise(repo_root)
    prefix = abs_root if abs_root.endswith(os.sep) else abs_root + os.sep
    if not abs_path.startswith(prefix):
        return None
    rel = abs_path[len(prefix):]
    return rel or None


class RepoLocator:
    """Find the git repository root for a path by walking parent directories.

    Results are cached under the path that was asked about, including
    negative results, so repeated lookups never touch the filesystem.
    """

    def __init__(self) -> None:
        self._cache: Dict[str, Optional[str]] = {}
        self.probe_count = 0

    def _has_marker(self, directory: str) -> bool:
        self.probe_count += 1
        return os.path.exists(os.path.join(directory, GIT_MARKER))

    def find_root(self, path: str) -> Optional[str]:
        if path in self._cache:
            return self._cache[path]

        current = _normalise(path)
        if not os.path.isdir(current):
            current = os.path.dirname(current)

        root: Optional[str] = None
        while True:
            if self._has_marker(current):
                root = current
                break
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

        self._cache[path] = root
        if root is None:
            logger.debug("No git repository above %s", path)
        return root

    def is_git_repo(self, path: str) -> bool:
        return self.find_root(path) is not None

    def clear(self) -> None:
        self._cache.clear()

    def snapshot(self) -> Dict[str, Optional[str]]:
        return dict(self._cache)

    def __len__(self) -> int:
        return len(self._cache)
