"""
Change set resolution.

Asks git which files differ from the base reference and keeps the
source files the pipeline is allowed to touch.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from git import Repo
from git.exc import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError

logger = logging.getLogger(__name__)


DEFAULT_EXTENSIONS = (".js",)
DEFAULT_EXCLUDE_PATHS = ("scripts/", "securityagent/")


def filter_paths(
    paths: Iterable[str],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    exclude_paths: Sequence[str] = DEFAULT_EXCLUDE_PATHS,
) -> Tuple[str, ...]:
    """
    Keep source files outside the excluded directories, in order, without duplicates.
    """
    seen = set()
    kept: List[str] = []

    for raw in paths:
        path = raw.strip().replace("\\", "/")
        if not path or path in seen:
            continue
        if not path.endswith(tuple(extensions)):
            continue
        if any(path.startswith(prefix) for prefix in exclude_paths):
            continue
        seen.add(path)
        kept.append(path)

    return tuple(kept)


class ChangeSetResolver:
    """
    Resolves the ordered set of changed source files for a run.

    Any failure to compute the diff degrades to an empty change set.
    """

    def __init__(
        self,
        root: str = ".",
        base_ref: str = "main",
        remote: Optional[str] = "origin",
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        exclude_paths: Sequence[str] = DEFAULT_EXCLUDE_PATHS,
    ):
        self.root = root
        self.base_ref = base_ref
        self.remote = remote
        self.extensions = tuple(extensions)
        self.exclude_paths = tuple(exclude_paths)

    @property
    def diff_range(self) -> str:
        """The three-dot range compared against HEAD."""
        base = f"{self.remote}/{self.base_ref}" if self.remote else self.base_ref
        return f"{base}...HEAD"

    def resolve(self) -> Tuple[str, ...]:
        """
        Return changed source paths relative to the repository root.

        Returns an empty tuple if the diff cannot be computed.
        """
        try:
            repo = Repo(self.root)
            output = repo.git.diff("--name-only", "--diff-filter=d", self.diff_range)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            logger.warning("Not a git repository (%s); no changed files", e)
            return ()
        except GitCommandNotFound:
            logger.warning("git executable not found; no changed files")
            return ()
        except GitCommandError as e:
            logger.warning("git diff against %s failed (exit %s); no changed files", self.diff_range, e.status)
            return ()

        paths = filter_paths(output.splitlines(), self.extensions, self.exclude_paths)
        logger.info("Resolved %d changed file(s) against %s", len(paths), self.diff_range)
        return paths
