"""Test doubles for godeps - use in unit and CLI tests.

Usage::

    from godeps.testing import FakeProvider

    provider = FakeProvider(
        {"example.com/m": pkg("example.com/m", deps=["github.com/x/y"])},
        module_root="example.com/m",
    )
    DependencyResolver(provider).resolve(ResolutionRequest(roots=(".",)))
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from godeps.exceptions import RepoRootError
from godeps.models import PackageDescriptor, PackageError, RepoRoot
from godeps.provider.base import normalize_vendored


def pkg(
    import_path: str,
    *,
    deps: Sequence[str] = (),
    test_imports: Sequence[str] = (),
    xtest_imports: Sequence[str] = (),
    standard: bool = False,
    error: str | None = None,
) -> PackageDescriptor:
    """Shorthand for building a descriptor in tests."""
    return PackageDescriptor(
        import_path=import_path,
        name=import_path.rsplit("/", 1)[-1],
        standard=standard,
        dependencies=list(deps),
        test_imports=list(test_imports),
        xtest_imports=list(xtest_imports),
        error=PackageError(message=error) if error else None,
    )


class FakeProvider:
    """In-memory provider with ``go list`` pattern semantics.

    Lookups are exact: a vendored package is only found under its
    ``<module>/vendor/`` path, as go reports it outside module mode.

    Parameters
    ----------
    packages:
        Descriptors the provider knows about, keyed by their raw (possibly
        vendor-prefixed) import path.
    module_root:
        Import path returned for ``"."``.
    hidden:
        Paths the provider silently omits from responses.
    """

    def __init__(
        self,
        packages: dict[str, PackageDescriptor],
        *,
        module_root: str = "example.com/m",
        hidden: Iterable[str] = (),
    ) -> None:
        self.packages = packages
        self.module_root = module_root
        self.hidden = set(hidden)
        self._calls: list[list[str]] = []

    @property
    def calls(self) -> list[list[str]]:
        """Batches passed to describe(), in order."""
        return self._calls

    def list_packages(self, patterns: Sequence[str]) -> list[str]:
        result: list[str] = []
        for pattern in patterns:
            result.extend(self._expand(pattern))
        return list(dict.fromkeys(result))

    def describe(
        self,
        paths: Iterable[str],
        module_root: str | None = None,
    ) -> dict[str, PackageDescriptor]:
        batch = list(paths)
        self._calls.append(batch)
        found: dict[str, PackageDescriptor] = {}
        for pattern in batch:
            for path in self._expand(pattern):
                if path in self.hidden:
                    continue
                desc = self.packages.get(path)
                if desc is None:
                    desc = PackageDescriptor(
                        import_path=path,
                        error=PackageError(message=f"cannot find package {path!r}"),
                    )
                if module_root:
                    desc = normalize_vendored(desc, module_root)
                found.setdefault(desc.import_path, desc)
        return found

    def _expand(self, pattern: str) -> list[str]:
        if pattern == ".":
            return [self.module_root]
        if pattern.startswith("./"):
            pattern = f"{self.module_root}/{pattern[2:]}"
        if pattern.endswith("/..."):
            base = pattern[: -len("/...")]
            return sorted(
                p
                for p in self.packages
                if (p == base or p.startswith(base + "/")) and "/vendor/" not in p[len(base) :]
            )
        return [pattern]


class FakeClassifier:
    """Classifier that answers from a fixed {root: RepoRoot} table."""

    def __init__(self, repos: dict[str, RepoRoot]) -> None:
        self.repos = repos
        self.calls: list[str] = []

    def classify(self, import_path: str) -> RepoRoot:
        self.calls.append(import_path)
        for root, repo in self.repos.items():
            if import_path == root or import_path.startswith(root + "/"):
                return repo
        raise RepoRootError(import_path, "unknown in fake table")
