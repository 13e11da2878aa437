"""Data model for version-control repository roots."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RepoRoot:
    """Repository that hosts an import path."""

    vcs: str  # "git" | "hg" | "bzr" | "fossil" | "svn" | "None"
    repo: str  # clone URL
    root: str  # import path prefix corresponding to the repository root


# Standard library packages are never looked up.
STANDARD_REPO = RepoRoot(vcs="None", repo="standard", root="standard")
