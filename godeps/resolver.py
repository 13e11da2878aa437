"""Dependency resolver - transitive closure over ``go list`` metadata.

Workflow:
    "."   -> provider.list_packages -> enclosing package (module root)
    roots -> provider.describe      -> known set + work-list
    [tests] root test imports       -> one batched describe -> work-list
    drain work-list: walk direct imports, batch unknown paths per pop
    -> deduplicated descriptors sorted by import path
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

import structlog

from godeps.exceptions import AmbiguousRootError
from godeps.models import PackageDescriptor, ResolutionRequest
from godeps.provider.base import MetadataProvider, strip_vendor_prefix

log = structlog.get_logger("godeps.resolver")

# cgo's pseudo-import; go list reports it in Imports but it is not a package.
_PSEUDO_PACKAGES = frozenset({"C"})


class DependencyResolver:
    """Compute the dependency closure of a set of root packages."""

    def __init__(self, provider: MetadataProvider) -> None:
        self._provider = provider

    def find_module_root(self) -> str:
        """Return the import path of the package in the working directory."""
        matches = self._provider.list_packages(["."])
        if len(matches) != 1:
            raise AmbiguousRootError(matches)
        return matches[0]

    def resolve(self, request: ResolutionRequest) -> list[PackageDescriptor]:
        """Return every dependency reachable from ``request.roots``.

        The result is sorted by import path and excludes the roots, the
        enclosing package and its subpackages, and (unless requested)
        standard library packages. Packages that failed to load are
        included with their ``error`` set.
        """
        module_root = self.find_module_root()
        log.info(
            "resolver.start",
            module_root=module_root,
            roots=list(request.roots),
            include_standard=request.include_standard,
            include_tests=request.include_tests,
        )
        run = _Resolution(self._provider, request, module_root)
        deps = run.execute()
        log.info(
            "resolver.done",
            dependencies=len(deps),
            known=len(run.packages),
            queries=run.queries,
        )
        return deps


class _Resolution:
    """State of a single resolve() call."""

    def __init__(
        self,
        provider: MetadataProvider,
        request: ResolutionRequest,
        module_root: str,
    ) -> None:
        self._provider = provider
        self._request = request
        self._module_root = module_root
        self._vendor_root = module_root if request.skip_vendored else None

        self.packages: dict[str, PackageDescriptor] = {}
        self.queries = 0
        self._worklist: deque[str] = deque()
        self._finished: set[str] = set()
        # Paths already considered for output, whether or not they were emitted
        self._included: set[str] = set()
        self._deps: list[PackageDescriptor] = []

    def execute(self) -> list[PackageDescriptor]:
        roots = self._describe(self._request.roots)
        for path in roots:
            self._included.add(path)
            self._worklist.append(path)

        if self._request.include_tests:
            self._add_test_imports(roots)

        self._drain()
        return sorted(self._deps, key=lambda p: p.import_path)

    # ── provider queries ─────────────────────────────────────────────────

    def _describe(self, paths: Iterable[str]) -> list[str]:
        """Query the provider and merge results; return the returned keys."""
        batch = list(dict.fromkeys(paths))
        self.queries += 1
        log.debug("resolver.query", paths=len(batch))
        found = self._provider.describe(batch, self._vendor_root)
        for path, pkg in found.items():
            self.packages.setdefault(path, pkg)
            if pkg.error is not None:
                log.warning("resolver.load_error", import_path=path, error=pkg.error.message)
        return list(found)

    def _key(self, path: str) -> str:
        """Known-set key for a dependency path as go reported it."""
        if self._vendor_root is None:
            return path
        return strip_vendor_prefix(path, self._vendor_root)[0]

    def _resolve_unknown(self, paths: Iterable[str]) -> list[str]:
        """Make every path in *paths* known, querying the unknown ones in one batch.

        Paths are queried as reported (vendor prefix included) and looked up
        by their key. Paths the provider does not return get a placeholder
        descriptor carrying an error. Returns the keys that were unknown before.
        """
        batch: dict[str, str] = {}  # key -> path to query
        for path in paths:
            key = self._key(path)
            if key not in self.packages:
                batch.setdefault(key, path)
        if not batch:
            return []
        self._describe(batch.values())
        for key in batch:
            if key not in self.packages:
                log.warning("resolver.path_missing", import_path=key)
                self.packages[key] = PackageDescriptor.missing(key)
        return list(batch)

    # ── closure ──────────────────────────────────────────────────────────

    def _add_test_imports(self, roots: list[str]) -> None:
        wanted: list[str] = []
        for path in roots:
            pkg = self.packages[path]
            wanted.extend(pkg.test_imports)
            wanted.extend(pkg.xtest_imports)
        wanted = [p for p in dict.fromkeys(wanted) if p not in _PSEUDO_PACKAGES]

        self._resolve_unknown(wanted)
        for key in dict.fromkeys(self._key(p) for p in wanted):
            self._add_dep(self.packages[key])
            self._enqueue(key)

    def _drain(self) -> None:
        while self._worklist:
            path = self._worklist.popleft()
            if path in self._finished:
                continue
            self._finished.add(path)

            pkg = self.packages[path]
            if pkg.error is not None:
                continue
            # Standard packages only import other standard packages.
            if pkg.standard and not self._request.include_standard:
                continue

            unknown: list[str] = []
            for dep in pkg.dependencies:
                if dep in _PSEUDO_PACKAGES:
                    continue
                key = self._key(dep)
                known = self.packages.get(key)
                if known is None:
                    unknown.append(dep)
                else:
                    self._add_dep(known)
                    self._enqueue(key)

            for dep in self._resolve_unknown(unknown):
                self._add_dep(self.packages[dep])
                self._enqueue(dep)

    def _enqueue(self, path: str) -> None:
        if path not in self._finished:
            self._worklist.append(path)

    def _add_dep(self, pkg: PackageDescriptor) -> None:
        path = pkg.import_path
        if path in self._included:
            return
        # Marked even when not emitted: the decision never changes.
        self._included.add(path)
        if pkg.standard and not self._request.include_standard:
            return
        if self._is_local(path):
            return
        self._deps.append(pkg)

    def _is_local(self, path: str) -> bool:
        root = self._module_root
        return path == root or path.startswith(root + "/")
