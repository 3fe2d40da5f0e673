"""Git interface layer — root discovery, path resolution, async client, models."""

from autostage.git.client import GitClient, GitError, parse_status_code
from autostage.git.locator import RepoLocator, relative_to
from autostage.git.models import ErrorKind, GitRun, VcsOutcome, VcsResult

__all__ = [
    "ErrorKind",
    "GitClient",
    "GitError",
    "GitRun",
    "RepoLocator",
    "VcsOutcome",
    "VcsResult",
    "parse_status_code",
    "relative_to",
]
