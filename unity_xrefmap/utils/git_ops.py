"""Git operations — clone the reference source, list release branches, check them out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from unity_xrefmap.errors import CheckoutError, SetupError

logger = logging.getLogger(__name__)


class VersionSource(Protocol):
    """Anything that can list branch names and put one of them on disk."""

    def branches(self) -> list[str]: ...

    def materialize(self, branch: str) -> None: ...


@dataclass
class GitVersionSource:
    """Release branches of a local clone, cloned from ``repository_url`` if missing.

    The clone is opened lazily on first use. Use as a context manager so the
    underlying ``Repo`` is closed::

        with GitVersionSource(url, path) as source:
            for branch in source.branches():
                source.materialize(branch)
    """

    repository_url: str
    local_path: Path
    fetch: bool = True
    _repo: Repo | None = field(default=None, init=False, repr=False)

    def __enter__(self) -> "GitVersionSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            self.open()
        return self._repo

    def open(self) -> Repo:
        """Open the local clone, cloning first when the directory does not exist.

        Raises:
            SetupError: If the clone, open or fetch fails.
        """
        if self._repo is not None:
            return self._repo

        path = Path(self.local_path)
        try:
            if not path.exists():
                logger.info("Cloning '%s' into '%s'", self.repository_url, path)
                repo = Repo.clone_from(self.repository_url, path)
            else:
                repo = Repo(path)
                if self.fetch and repo.remotes:
                    logger.info("Fetching '%s'", repo.remotes[0].name)
                    repo.remotes[0].fetch()
        except (GitCommandError, InvalidGitRepositoryError, NoSuchPathError) as e:
            raise SetupError(f"Cannot prepare repository at {path}: {e}") from e

        self._repo = repo
        return repo

    def close(self) -> None:
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    def branches(self) -> list[str]:
        """Return remote-tracking branch names, e.g. ``origin/2021.3``."""
        return [ref.name for remote in self.repo.remotes for ref in remote.refs]

    def materialize(self, branch: str) -> None:
        """Check out ``branch`` (detached) and hard-reset the working tree.

        Raises:
            CheckoutError: If git refuses the checkout or reset.
        """
        logger.info("Checking out '%s'", branch)
        try:
            self.repo.git.checkout(branch, force=True)
            self.repo.head.reset(index=True, working_tree=True)
        except GitCommandError as e:
            raise CheckoutError(branch, str(e)) from e
