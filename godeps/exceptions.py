"""Custom exceptions for godeps."""


class GoDepsError(Exception):
    """Base exception for all godeps errors."""


class ConfigError(GoDepsError):
    """Raised when an environment setting cannot be parsed."""


class ProviderUnavailable(GoDepsError):
    """Raised when the metadata provider cannot be started or fails."""


class MalformedResponse(GoDepsError):
    """Raised when provider output cannot be decoded into package records."""


class ResolutionError(GoDepsError):
    """Raised when the dependency closure cannot be computed."""


class AmbiguousRootError(ResolutionError):
    """Raised when "." does not resolve to exactly one package."""

    def __init__(self, matches: list[str]):
        self.matches = matches
        super().__init__(
            f"ambiguous root: '.' resolved to {len(matches)} packages {matches}, expected exactly 1"
        )


class RepoRootError(GoDepsError):
    """Raised when an import path cannot be mapped to a repository root."""

    def __init__(self, import_path: str, reason: str):
        self.import_path = import_path
        self.reason = reason
        super().__init__(f"could not determine repo for {import_path}: {reason}")
