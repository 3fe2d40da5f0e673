"""Path pattern model — source string kept, regex compiled once at config time."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from fnmatch import translate
from typing import Iterable, List

from autostage.config.schema import ConfigError

GLOB_PREFIX = "glob:"


@dataclass
class PathPattern:
    """A single include/exclude pattern.

    Plain entries are Python regular expressions searched anywhere in the
    path. Entries starting with ``glob:`` are shell wildcards matched
    against the whole path or its basename.
    """

    source: str

    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _basename_only: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.source.startswith(GLOB_PREFIX):
            glob = self.source[len(GLOB_PREFIX):]
            self._basename_only = "/" not in glob
            if self._basename_only:
                self._compiled = re.compile(translate(glob))
            else:
                # "src/*.py" should also match below any leading directories
                self._compiled = re.compile(f"{translate(glob)}|{translate('*/' + glob)}")
            return
        try:
            self._compiled = re.compile(self.source)
        except re.error as exc:
            raise ConfigError(f"Invalid pattern {self.source!r}: {exc}") from exc

    @property
    def is_glob(self) -> bool:
        return self.source.startswith(GLOB_PREFIX)

    def matches(self, path: str) -> bool:
        if self.is_glob:
            target = path.rsplit("/", 1)[-1] if self._basename_only else path
            return self._compiled.match(target) is not None
        return self._compiled.search(path) is not None


def compile_patterns(sources: Iterable[str]) -> List[PathPattern]:
    return [PathPattern(s) for s in sources]


def any_match(patterns: List[PathPattern], path: str) -> bool:
    return any(p.matches(path) for p in patterns)
