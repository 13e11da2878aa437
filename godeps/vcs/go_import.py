"""go-import meta tag discovery (``https://<import path>?go-get=1``)."""

from __future__ import annotations

from dataclasses import dataclass
from html.parser import HTMLParser

import httpx
import structlog

from godeps.exceptions import RepoRootError

log = structlog.get_logger("godeps.vcs")


@dataclass(frozen=True)
class MetaImport:
    """One ``<meta name="go-import" content="prefix vcs repo">`` tag."""

    prefix: str
    vcs: str
    repo: str


class _MetaImportParser(HTMLParser):
    """Collect go-import meta tags until the document body starts."""

    def __init__(self) -> None:
        super().__init__()
        self.imports: list[MetaImport] = []
        self._done = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._done:
            return
        if tag == "body":
            self._done = True
            return
        if tag != "meta":
            return
        values = {k.lower(): v or "" for k, v in attrs}
        if values.get("name") != "go-import":
            return
        fields = values.get("content", "").split()
        if len(fields) == 3:
            self.imports.append(MetaImport(prefix=fields[0], vcs=fields[1], repo=fields[2]))

    handle_startendtag = handle_starttag


def parse_meta_imports(html: str) -> list[MetaImport]:
    """Return the go-import meta tags declared in the head of *html*."""
    parser = _MetaImportParser()
    parser.feed(html)
    parser.close()
    return parser.imports


def match_meta_import(imports: list[MetaImport], import_path: str) -> MetaImport:
    """Pick the single tag whose prefix covers *import_path*."""
    matches = [
        mi
        for mi in imports
        if mi.vcs != "mod"
        and (import_path == mi.prefix or import_path.startswith(mi.prefix + "/"))
    ]
    if not matches:
        raise RepoRootError(import_path, "no go-import meta tag matches the import path")
    if len(matches) > 1:
        raise RepoRootError(
            import_path,
            f"multiple go-import meta tags match: {[m.prefix for m in matches]}",
        )
    return matches[0]


class GoImportClient:
    """Thin sync wrapper around httpx for go-import discovery."""

    def __init__(self, *, timeout: float = 30.0, insecure: bool = False) -> None:
        self._insecure = insecure
        self._client = httpx.Client(timeout=timeout, follow_redirects=True)

    # ── lifecycle ──────────────────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GoImportClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── public ─────────────────────────────────────────────────────────────

    def fetch(self, import_path: str) -> list[MetaImport]:
        """Fetch and parse the go-import tags served for *import_path*.

        The page is parsed whatever its status code; servers commonly
        answer go-get requests for sub-paths with a 404 that still carries
        the tags.
        """
        schemes = ("https", "http") if self._insecure else ("https",)
        last_error: httpx.HTTPError | None = None
        for scheme in schemes:
            url = f"{scheme}://{import_path}"
            try:
                response = self._client.get(url, params={"go-get": "1"})
            except httpx.HTTPError as e:
                log.debug("vcs.meta_fetch_failed", url=url, error=str(e))
                last_error = e
                continue
            log.debug("vcs.meta_fetch", url=url, status=response.status_code)
            return parse_meta_imports(response.text)
        raise RepoRootError(import_path, f"go-get request failed: {last_error}")
