"""JSON reporter for scripts and editor integrations."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from autostage.engine import StatusSnapshot
from autostage.git.models import VcsResult


def to_dict(snapshot: StatusSnapshot, vcs: Optional[VcsResult] = None) -> Dict[str, Any]:
    """Convert a StatusSnapshot to a JSON-serialisable dict."""
    return {
        "version": "1.0",
        "path": snapshot.path,
        "enabled": snapshot.enabled,
        "in_git_repo": snapshot.in_git_repo,
        "git_root": snapshot.git_root,
        "relative_path": snapshot.relative_path,
        "would_process": snapshot.would_process,
        "reason": snapshot.reason,
        **({"git_status": vcs.status_code} if vcs is not None and vcs.status_code else {}),
    }


def render(snapshot: StatusSnapshot, vcs: Optional[VcsResult] = None) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(snapshot, vcs), indent=2)
