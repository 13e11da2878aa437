"""Data models shared by the provider, resolver and VCS classifier."""

from godeps.models.package import PackageDescriptor, PackageError, ResolutionRequest
from godeps.models.repo import STANDARD_REPO, RepoRoot

__all__ = [
    "STANDARD_REPO",
    "PackageDescriptor",
    "PackageError",
    "RepoRoot",
    "ResolutionRequest",
]
