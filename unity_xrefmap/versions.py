"""Release versions — recognize ``origin/<year>.<minor>`` branches and order them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

BRANCH_RE = re.compile(r"^origin/(\d{4})\.(\d+)$")


@dataclass(frozen=True)
class VersionInfo:
    """A release branch and the version string derived from it."""

    name: str
    """``<year>.<minor>``, used as output directory and in the docs URL."""

    major: int
    minor: int
    branch: str

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.major, self.minor)


def parse_branch(branch: str) -> VersionInfo | None:
    """Return the version for a release branch name, or None if it is not one."""
    match = BRANCH_RE.match(branch)
    if not match:
        return None
    major, minor = match.groups()
    return VersionInfo(
        name=f"{major}.{minor}",
        major=int(major),
        minor=int(minor),
        branch=branch,
    )


def discover_versions(branches: Iterable[str]) -> list[VersionInfo]:
    """Parse release branches, ignore the rest, and sort oldest first."""
    versions = [v for v in (parse_branch(b) for b in branches) if v is not None]
    return sorted(versions, key=lambda v: v.sort_key)
