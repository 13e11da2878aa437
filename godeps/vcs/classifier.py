"""Map import paths to the version-control repositories that host them."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from godeps.exceptions import RepoRootError
from godeps.models import STANDARD_REPO, PackageDescriptor, RepoRoot
from godeps.vcs.go_import import GoImportClient, match_meta_import
from godeps.vcs.paths import find_host_pattern, match_generic

log = structlog.get_logger("godeps.vcs")


class RepoRootClassifier:
    """Classify import paths by repository.

    Resolution order: static host patterns, paths with an explicit VCS
    suffix, then go-import meta discovery. Results are memoized for the
    lifetime of the instance.
    """

    def __init__(self, client: GoImportClient | None = None) -> None:
        self._client = client
        self._cache: dict[str, RepoRoot] = {}

    def classify(self, import_path: str) -> RepoRoot:
        cached = self._cache.get(import_path)
        if cached is not None:
            return cached
        # Another path in the same repository may already have been resolved
        for root, repo in self._cache.items():
            if repo.root == root and import_path.startswith(root + "/"):
                return repo

        repo = self._classify(import_path)
        self._cache[import_path] = repo
        self._cache.setdefault(repo.root, repo)
        log.debug("vcs.classified", import_path=import_path, root=repo.root, vcs=repo.vcs)
        return repo

    def _classify(self, import_path: str) -> RepoRoot:
        _validate(import_path)

        pattern = find_host_pattern(import_path)
        if pattern is not None:
            repo = pattern.match(import_path)
            if repo is None:
                raise RepoRootError(import_path, f"invalid import path for {pattern.prefix}")
            return repo

        repo = match_generic(import_path)
        if repo is not None:
            return repo

        if self._client is None:
            raise RepoRootError(import_path, "unrecognized import path and discovery disabled")
        meta = match_meta_import(self._client.fetch(import_path), import_path)
        return RepoRoot(vcs=meta.vcs, repo=meta.repo, root=meta.prefix)


def _validate(import_path: str) -> None:
    if ".." in import_path.split("/"):
        raise RepoRootError(import_path, "'..' is not allowed in import paths")
    host = import_path.split("/", 1)[0]
    if "." not in host:
        raise RepoRootError(import_path, "import path does not begin with hostname")


def find_repos(
    packages: Sequence[PackageDescriptor],
    classifier: RepoRootClassifier,
) -> list[RepoRoot]:
    """Return the repository of each package, in the same order."""
    repos: list[RepoRoot] = []
    for pkg in packages:
        if pkg.standard:
            repos.append(STANDARD_REPO)
        else:
            repos.append(classifier.classify(pkg.import_path))
    return repos


def first_per_repo(
    packages: Sequence[PackageDescriptor],
    repos: Sequence[RepoRoot],
) -> list[tuple[PackageDescriptor, RepoRoot]]:
    """Keep only the first package of each repository root, preserving order."""
    seen: set[str] = set()
    kept: list[tuple[PackageDescriptor, RepoRoot]] = []
    for pkg, repo in zip(packages, repos):
        if repo.root in seen:
            continue
        seen.add(repo.root)
        kept.append((pkg, repo))
    return kept
