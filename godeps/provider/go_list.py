"""``go list`` metadata provider.

Runs ``go list -e -json <paths>`` once per batch and turns the record stream
into :class:`PackageDescriptor` objects.
"""

from __future__ import annotations

import subprocess
import tempfile
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import IO, Any

import structlog

from godeps.exceptions import MalformedResponse, ProviderUnavailable
from godeps.models import PackageDescriptor, PackageError
from godeps.provider.base import normalize_vendored
from godeps.provider.stream import iter_json_objects

log = structlog.get_logger("godeps.provider")

_STDERR_LIMIT = 2000  # characters of stderr kept in error messages


class GoListProvider:
    """Metadata provider backed by the ``go list`` command."""

    def __init__(
        self,
        command: Sequence[str] = ("go",),
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self._command = tuple(command)
        self._cwd = cwd
        self._env = env

    def list_packages(self, patterns: Sequence[str]) -> list[str]:
        """Return import paths matching *patterns*, one per output line."""
        if not patterns:
            return []
        with self._run(["list", "-e", *patterns]) as stdout:
            try:
                return [line.strip() for line in stdout if line.strip()]
            except UnicodeDecodeError as e:
                raise ProviderUnavailable(f"go list produced undecodable output: {e}") from e

    def describe(
        self,
        paths: Iterable[str],
        module_root: str | None = None,
    ) -> dict[str, PackageDescriptor]:
        """Describe *paths* with a single ``go list -e -json`` call.

        When *module_root* is given, packages under ``<module_root>/vendor/``
        are keyed by their un-prefixed import path and flagged vendored.
        """
        args = list(dict.fromkeys(paths))
        if not args:
            return {}

        packages: dict[str, PackageDescriptor] = {}
        with self._run(["list", "-e", "-json", *args]) as stdout:
            try:
                for record in iter_json_objects(stdout):
                    pkg = parse_package(record)
                    if module_root:
                        pkg = normalize_vendored(pkg, module_root)
                    if pkg.import_path in packages:
                        log.debug("go_list.duplicate_record", import_path=pkg.import_path)
                        continue
                    packages[pkg.import_path] = pkg
            except UnicodeDecodeError as e:
                raise ProviderUnavailable(f"go list produced undecodable output: {e}") from e

        log.debug("go_list.described", requested=len(args), returned=len(packages))
        return packages

    @contextmanager
    def _run(self, args: list[str]) -> Iterator[IO[str]]:
        """Start go with *args* and yield its stdout.

        The process is always waited for. If the caller fails while reading,
        the process is killed first so it cannot block on a full pipe.
        """
        cmd = [*self._command, *args]
        log.debug("go_list.exec", cmd=cmd, cwd=self._cwd)

        # stderr goes to a file so a chatty process cannot fill a second pipe
        with tempfile.TemporaryFile() as stderr:
            try:
                proc = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=stderr,
                    cwd=self._cwd,
                    env=self._env,
                    text=True,
                    encoding="utf-8",
                )
            except OSError as e:
                raise ProviderUnavailable(f"cannot start {cmd[0]}: {e}") from e

            with proc:
                assert proc.stdout is not None
                try:
                    yield proc.stdout
                except MalformedResponse as e:
                    proc.kill()
                    proc.wait()
                    # go may have failed mid-stream; its stderr says why
                    detail = _read_stderr(stderr)
                    if detail:
                        raise MalformedResponse(f"{e} (go stderr: {detail})") from e
                    raise
                except BaseException:
                    proc.kill()
                    raise

            if proc.returncode != 0:
                detail = _read_stderr(stderr)
                raise ProviderUnavailable(
                    f"go {' '.join(args[:2])} failed (exit {proc.returncode}): {detail}"
                )


def _read_stderr(stderr: IO[bytes]) -> str:
    stderr.seek(0)
    return stderr.read().decode("utf-8", errors="replace").strip()[:_STDERR_LIMIT]


def _string_list(record: dict[str, Any], key: str) -> list[str]:
    value = record.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MalformedResponse(f"field {key!r} must be a list of strings")
    return list(dict.fromkeys(value))


def _parse_error(value: Any) -> PackageError | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise MalformedResponse("field 'Error' must be an object")
    return PackageError(
        message=str(value.get("Err", "")),
        pos=str(value.get("Pos", "")),
        import_stack=[str(p) for p in value.get("ImportStack") or []],
    )


def parse_package(record: dict[str, Any]) -> PackageDescriptor:
    """Build a descriptor from one ``go list -json`` record."""
    import_path = record.get("ImportPath")
    if not isinstance(import_path, str) or not import_path:
        raise MalformedResponse(f"record without ImportPath: {sorted(record)[:10]}")

    standard = record.get("Standard", False)
    if not isinstance(standard, bool):
        raise MalformedResponse(f"field 'Standard' of {import_path} must be a boolean")

    return PackageDescriptor(
        import_path=import_path,
        name=str(record.get("Name", "")),
        dir=str(record.get("Dir", "")),
        standard=standard,
        dependencies=_string_list(record, "Imports"),
        test_imports=_string_list(record, "TestImports"),
        xtest_imports=_string_list(record, "XTestImports"),
        error=_parse_error(record.get("Error")),
    )
