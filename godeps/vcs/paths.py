"""Static import-path patterns for well-known code hosts."""

from __future__ import annotations

import re
from dataclasses import dataclass

from godeps.models import RepoRoot

_ELEM = r"[A-Za-z0-9_.\-]+"


@dataclass(frozen=True)
class HostPattern:
    """Import path layout of one code hosting site."""

    prefix: str  # literal prefix that selects this pattern
    regex: re.Pattern[str]  # must define a "root" group
    vcs: str

    def match(self, import_path: str) -> RepoRoot | None:
        m = self.regex.match(import_path)
        if m is None:
            return None
        root = m.group("root")
        return RepoRoot(vcs=self.vcs, repo=f"https://{root}", root=root)


HOST_PATTERNS: list[HostPattern] = [
    HostPattern(
        prefix="github.com/",
        regex=re.compile(rf"^(?P<root>github\.com/{_ELEM}/{_ELEM})(/{_ELEM})*$"),
        vcs="git",
    ),
    HostPattern(
        prefix="bitbucket.org/",
        regex=re.compile(rf"^(?P<root>bitbucket\.org/{_ELEM}/{_ELEM})(/{_ELEM})*$"),
        vcs="git",
    ),
    HostPattern(
        prefix="hub.jazz.net/git/",
        regex=re.compile(rf"^(?P<root>hub\.jazz\.net/git/[a-z0-9]+/{_ELEM})(/{_ELEM})*$"),
        vcs="git",
    ),
    HostPattern(
        prefix="git.apache.org/",
        regex=re.compile(rf"^(?P<root>git\.apache\.org/[a-z0-9_.\-]+\.git)(/{_ELEM})*$"),
        vcs="git",
    ),
    HostPattern(
        prefix="git.openstack.org/",
        regex=re.compile(rf"^(?P<root>git\.openstack\.org/{_ELEM}/{_ELEM})(\.git)?(/{_ELEM})*$"),
        vcs="git",
    ),
    HostPattern(
        prefix="chiselapp.com/",
        regex=re.compile(r"^(?P<root>chiselapp\.com/user/[A-Za-z0-9]+/repository/[A-Za-z0-9_.\-]+)$"),
        vcs="fossil",
    ),
    HostPattern(
        prefix="launchpad.net/",
        regex=re.compile(
            rf"^(?P<root>launchpad\.net/(({_ELEM})(/{_ELEM})?|~{_ELEM}/(\+junk|{_ELEM})/{_ELEM}))"
            rf"(/{_ELEM})*$"
        ),
        vcs="bzr",
    ),
]

# A path element ending in a VCS suffix names the repository directly,
# e.g. example.org/repo.git/sub.
_GENERIC_RE = re.compile(
    r"^(?P<root>(?P<repo>([a-z0-9.\-]+\.)+[a-z0-9.\-]+(:[0-9]+)?(/~?[A-Za-z0-9_.\-]+)+?)"
    r"\.(?P<vcs>bzr|fossil|git|hg|svn))(/~?[A-Za-z0-9_.\-]+)*$"
)


def find_host_pattern(import_path: str) -> HostPattern | None:
    """Return the host pattern whose prefix selects *import_path*."""
    for pattern in HOST_PATTERNS:
        if import_path.startswith(pattern.prefix):
            return pattern
    return None


def match_generic(import_path: str) -> RepoRoot | None:
    """Match an import path that spells out its VCS suffix."""
    m = _GENERIC_RE.match(import_path)
    if m is None:
        return None
    root = m.group("root")
    return RepoRoot(vcs=m.group("vcs"), repo=f"https://{root}", root=root)
