"""godeps: list the transitive dependencies of Go packages."""

__version__ = "0.1.0"

from godeps.exceptions import (
    AmbiguousRootError,
    GoDepsError,
    MalformedResponse,
    ProviderUnavailable,
    RepoRootError,
    ResolutionError,
)
from godeps.models import PackageDescriptor, PackageError, RepoRoot, ResolutionRequest
from godeps.provider import GoListProvider, MetadataProvider
from godeps.resolver import DependencyResolver
from godeps.vcs import RepoRootClassifier, find_repos, first_per_repo

__all__ = [
    "AmbiguousRootError",
    "DependencyResolver",
    "GoDepsError",
    "GoListProvider",
    "MalformedResponse",
    "MetadataProvider",
    "PackageDescriptor",
    "PackageError",
    "ProviderUnavailable",
    "RepoRoot",
    "RepoRootClassifier",
    "RepoRootError",
    "ResolutionError",
    "ResolutionRequest",
    "find_repos",
    "first_per_repo",
]
