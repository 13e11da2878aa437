"""Package metadata providers."""

from godeps.provider.base import MetadataProvider, normalize_vendored, strip_vendor_prefix
from godeps.provider.go_list import GoListProvider

__all__ = [
    "GoListProvider",
    "MetadataProvider",
    "normalize_vendored",
    "strip_vendor_prefix",
]
