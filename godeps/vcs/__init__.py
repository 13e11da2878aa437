"""Version-control repository lookup for import paths."""

from godeps.vcs.classifier import RepoRootClassifier, find_repos, first_per_repo
from godeps.vcs.go_import import GoImportClient, MetaImport, parse_meta_imports

__all__ = [
    "GoImportClient",
    "MetaImport",
    "RepoRootClassifier",
    "find_repos",
    "first_per_repo",
    "parse_meta_imports",
]
