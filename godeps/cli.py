"""CLI entry point: godeps.

Usage:
    godeps                       # dependencies of the package in the current directory
    godeps ./...                 # dependencies of every package in the module
    godeps -s -t ./...           # include standard library and test imports
    godeps -r ./...              # annotate with VCS repository roots
    godeps -f ./...              # first package per repository only
    godeps --json -o deps.json   # JSON output written to a file
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence

import click

from godeps import __version__
from godeps.config import Settings
from godeps.exceptions import GoDepsError
from godeps.logging import setup_logging
from godeps.models import PackageDescriptor, RepoRoot, ResolutionRequest
from godeps.provider import GoListProvider
from godeps.resolver import DependencyResolver
from godeps.vcs import GoImportClient, RepoRootClassifier, find_repos, first_per_repo


def _row(pkg: PackageDescriptor, repo: RepoRoot | None) -> dict:
    row: dict = {
        "import_path": pkg.import_path,
        "standard": pkg.standard,
        "vendored": pkg.vendored,
        "error": pkg.error.message if pkg.error else None,
    }
    if repo is not None:
        row.update({"vcs": repo.vcs, "root": repo.root, "repo": repo.repo})
    return row


def _format_text(
    packages: Sequence[PackageDescriptor],
    repos: Sequence[RepoRoot] | None,
) -> list[str]:
    lines: list[str] = []
    width = max((len(p.import_path) for p in packages), default=0)
    for i, pkg in enumerate(packages):
        line = pkg.import_path
        if repos is not None:
            repo = repos[i]
            line = f"{pkg.import_path:<{width}}  {repo.vcs:<6}  {repo.root}  {repo.repo}"
        if pkg.error is not None:
            line += f"  [error: {pkg.error.message}]"
        lines.append(line.rstrip())
    return lines


@click.command()
@click.version_option(version=__version__)
@click.argument("patterns", nargs=-1)
@click.option("-s", "--std", "include_standard", is_flag=True,
              help="Include dependencies from the standard Go libraries.")
@click.option("-t", "--tests", "include_tests", is_flag=True,
              help="Include dependencies from the tests.")
@click.option("--skip-vendored/--keep-vendor-prefix", default=True,
              help="Report vendored packages under their upstream import path.")
@click.option("-r", "--repos", "show_repos", is_flag=True,
              help="Annotate each dependency with its VCS repository root.")
@click.option("-f", "--first-per-repo", "first_only", is_flag=True,
              help="Only list the first dependency of each repository (implies --repos).")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None,
              help="Write output to this file instead of stdout")
@click.option("-C", "--dir", "workdir", type=click.Path(exists=True, file_okay=False),
              default=None, help="Run go list in this directory")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(
    patterns: tuple[str, ...],
    include_standard: bool,
    include_tests: bool,
    skip_vendored: bool,
    show_repos: bool,
    first_only: bool,
    as_json: bool,
    output: str | None,
    workdir: str | None,
    verbose: bool,
) -> None:
    """List the packages a Go project depends on."""
    try:
        settings = Settings.from_env()
    except GoDepsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_format)

    request = ResolutionRequest(
        roots=patterns or (".",),
        include_standard=include_standard,
        include_tests=include_tests,
        skip_vendored=skip_vendored,
    )
    provider = GoListProvider(command=settings.go_command, cwd=workdir)

    try:
        packages = DependencyResolver(provider).resolve(request)
        repos: list[RepoRoot] | None = None
        if show_repos or first_only:
            with GoImportClient(
                timeout=settings.http_timeout, insecure=settings.insecure
            ) as client:
                repos = find_repos(packages, RepoRootClassifier(client))
            if first_only:
                kept = first_per_repo(packages, repos)
                packages = [p for p, _ in kept]
                repos = [r for _, r in kept]
    except GoDepsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with click.open_file(output or "-", "w") as out:
        if as_json:
            rows = [
                _row(p, repos[i] if repos is not None else None)
                for i, p in enumerate(packages)
            ]
            out.write(json.dumps(rows, indent=2) + "\n")
        else:
            for line in _format_text(packages, repos):
                out.write(line + "\n")

    if output:
        click.echo(f"Wrote {len(packages)} dependencies to {output}", err=True)


if __name__ == "__main__":
    main()
