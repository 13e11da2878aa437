"""Data models for Go packages and resolution requests."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PackageError:
    """Error reported by the provider while loading a single package."""

    message: str
    pos: str = ""
    import_stack: list[str] = field(default_factory=list)  # shortest path from a root to this package


@dataclass
class PackageDescriptor:
    """A single package as described by the metadata provider."""

    import_path: str
    name: str = ""
    dir: str = ""
    standard: bool = False
    vendored: bool = False
    dependencies: list[str] = field(default_factory=list)  # direct imports only
    test_imports: list[str] = field(default_factory=list)  # from in-package _test.go files
    xtest_imports: list[str] = field(default_factory=list)  # from package foo_test files
    error: PackageError | None = None

    @classmethod
    def missing(cls, import_path: str) -> PackageDescriptor:
        """Placeholder for a path the provider never returned."""
        return cls(
            import_path=import_path,
            error=PackageError(message=f"package {import_path} not returned by provider"),
        )


@dataclass(frozen=True)
class ResolutionRequest:
    """Configuration for one resolver invocation."""

    roots: tuple[str, ...]
    include_standard: bool = False
    include_tests: bool = False
    skip_vendored: bool = True

    def __post_init__(self) -> None:
        if not self.roots:
            raise ValueError("at least one root package pattern is required")
        # Ordered set: keep the first occurrence of each pattern
        object.__setattr__(self, "roots", tuple(dict.fromkeys(self.roots)))
