"""Repository metadata captured alongside pipeline run manifests."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence


@dataclass(frozen=True)
class GitMetadata:
    """Commit, branch and dirty flag of the checkout that produced a run."""

    sha: str
    branch: Optional[str]
    dirty: Optional[bool]

    def as_dict(self) -> dict:
        return {"sha": self.sha, "branch": self.branch, "dirty": self.dirty}


def _git(args: Sequence[str], root: Path) -> str:
    completed = subprocess.run(  # noqa: S603,S607 - git invocation is intentional
        ["git", *args],
        cwd=root,
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
    )
    return completed.stdout.decode().strip()


def get_git_metadata(repo_root: Optional[Path | str] = None) -> GitMetadata:
    """Return commit metadata, or ``sha="unknown"`` when git cannot answer."""

    root = Path(repo_root) if repo_root is not None else Path(__file__).resolve().parents[3]
    try:
        sha = _git(("rev-parse", "HEAD"), root)
        if not sha:
            return GitMetadata(sha="unknown", branch=None, dirty=None)
        branch = _git(("rev-parse", "--abbrev-ref", "HEAD"), root) or None
        dirty = bool(_git(("status", "--porcelain"), root))
    except (OSError, subprocess.CalledProcessError):
        return GitMetadata(sha="unknown", branch=None, dirty=None)
    return GitMetadata(sha=sha, branch=branch, dirty=dirty)


__all__ = ["GitMetadata", "get_git_metadata"]
