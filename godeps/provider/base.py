"""Metadata provider interface and vendoring normalization."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Protocol, runtime_checkable

from godeps.models import PackageDescriptor


@runtime_checkable
class MetadataProvider(Protocol):
    """Interface every package metadata provider must satisfy."""

    def list_packages(self, patterns: Sequence[str]) -> list[str]:
        """Return the import paths matching *patterns*."""
        ...

    def describe(
        self,
        paths: Iterable[str],
        module_root: str | None = None,
    ) -> dict[str, PackageDescriptor]:
        """Describe *paths* in one query, keyed by (normalized) import path."""
        ...


def strip_vendor_prefix(import_path: str, module_root: str) -> tuple[str, bool]:
    """Strip ``<module_root>/vendor/`` from *import_path*.

    Returns the resulting path and whether the prefix was present.
    """
    prefix = f"{module_root}/vendor/"
    if import_path.startswith(prefix) and len(import_path) > len(prefix):
        return import_path[len(prefix) :], True
    return import_path, False


def normalize_vendored(pkg: PackageDescriptor, module_root: str) -> PackageDescriptor:
    """Key a vendored descriptor by its upstream import path.

    Only the descriptor's own path is un-prefixed and flagged ``vendored``.
    Dependency lists keep the paths go reported: outside module mode go only
    finds a vendored package when it is asked for the prefixed path.
    """
    import_path, vendored = strip_vendor_prefix(pkg.import_path, module_root)
    if not vendored:
        return pkg
    return replace(pkg, import_path=import_path, vendored=True)
