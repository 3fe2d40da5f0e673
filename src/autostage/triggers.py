"""Translate host editor events into staging requests.

The engine only understands ``request_add(path)``. Which events count as
"a new file was created" depends on the trigger mode:

``all``
    every saved file is a candidate.
``edit-command-only``
    only files opened with ``:e <file>`` / ``:edit <file>`` that did not
    exist at the time, staged on their first save.
``manual``
    only buffers the host reports as new files, staged on first save.
"""

from __future__ import annotations

import logging
import os
import re
import time
from typing import Callable, Dict, Optional

from autostage.config.schema import TRIGGER_MODES

logger = logging.getLogger(__name__)

_EDIT_COMMAND_RE = re.compile(r"^(?:e|edit)\s+(.+)$")


class TriggerTranslator:
    """Narrow a stream of host events down to ``request_add`` calls."""

    def __init__(
        self,
        mode: str,
        request_add: Callable[[str], object],
        *,
        cwd: Optional[str] = None,
    ) -> None:
        if mode not in TRIGGER_MODES:
            raise ValueError(f"Unknown trigger mode: {mode!r}")
        self.mode = mode
        self._request_add = request_add
        self._cwd = cwd
        # path -> monotonic time it was first seen
        self.edit_command_files: Dict[str, float] = {}
        self.new_files: Dict[str, float] = {}

    def _abspath(self, path: str) -> str:
        if self._cwd is not None and not os.path.isabs(path):
            path = os.path.join(self._cwd, path)
        return os.path.abspath(path)

    def on_command(self, cmdline: str) -> None:
        """Remember the target of an edit command if that file does not exist yet."""
        if self.mode != "edit-command-only":
            return
        m = _EDIT_COMMAND_RE.match(cmdline.strip())
        if not m:
            return
        path = self._abspath(os.path.expanduser(m.group(1).strip()))
        if not os.path.exists(path):
            self.edit_command_files[path] = time.monotonic()
            logger.debug("Tracking %s opened via %r", path, cmdline)

    def on_new_file(self, path: str) -> None:
        """Record a buffer the host reports as a brand-new file."""
        if self.mode != "manual" or not path:
            return
        abs_path = self._abspath(path)
        if abs_path == os.path.abspath(self._cwd or os.getcwd()):
            return
        self.new_files[abs_path] = time.monotonic()

    def on_write(self, path: str) -> bool:
        """Handle a save. Returns True when a staging request was issued."""
        if not path:
            return False
        abs_path = self._abspath(path)

        if self.mode == "all":
            self._request_add(abs_path)
            return True

        tracked = self.edit_command_files if self.mode == "edit-command-only" else self.new_files
        if abs_path not in tracked:
            return False
        del tracked[abs_path]
        self._request_add(abs_path)
        return True
