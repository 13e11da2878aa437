"""Tests for GoListProvider - a fake go executable replays canned output."""

from __future__ import annotations

import subprocess
import time
from unittest.mock import patch

import pytest

from godeps.exceptions import MalformedResponse, ProviderUnavailable
from godeps.provider.base import normalize_vendored, strip_vendor_prefix
from godeps.provider.go_list import GoListProvider, parse_package
from godeps.testing import pkg


class TestListPackages:
    def test_one_path_per_line(self, fake_go):
        fake_go.respond("example.com/m\nexample.com/m/sub\n\n")
        assert fake_go.provider().list_packages(["./..."]) == [
            "example.com/m",
            "example.com/m/sub",
        ]
        assert fake_go.invocations == [["list", "-e", "./..."]]

    def test_no_patterns_does_not_spawn(self, fake_go):
        assert fake_go.provider().list_packages([]) == []
        assert fake_go.invocations == []


class TestDescribe:
    def test_parses_records(self, fake_go):
        fake_go.respond_records(
            {
                "Dir": "/src/m",
                "ImportPath": "example.com/m",
                "Name": "m",
                "Imports": ["fmt", "github.com/x/y"],
                "TestImports": ["testing"],
                "XTestImports": ["example.com/m", "github.com/z/w"],
            },
            {"ImportPath": "fmt", "Name": "fmt", "Standard": True, "Goroot": True},
        )
        found = fake_go.provider().describe(["example.com/m", "fmt"])

        assert list(found) == ["example.com/m", "fmt"]
        m = found["example.com/m"]
        assert m.dependencies == ["fmt", "github.com/x/y"]
        assert m.test_imports == ["testing"]
        assert m.xtest_imports == ["example.com/m", "github.com/z/w"]
        assert m.standard is False
        assert found["fmt"].standard is True
        assert fake_go.invocations == [["list", "-e", "-json", "example.com/m", "fmt"]]

    def test_duplicate_paths_queried_once(self, fake_go):
        fake_go.respond_records({"ImportPath": "a.com/x"})
        fake_go.provider().describe(["a.com/x", "a.com/x"])
        assert fake_go.invocations == [["list", "-e", "-json", "a.com/x"]]

    def test_empty_batch_does_not_spawn(self, fake_go):
        assert fake_go.provider().describe([]) == {}
        assert fake_go.invocations == []

    def test_load_error_is_kept(self, fake_go):
        fake_go.respond_records(
            {
                "ImportPath": "github.com/gone/pkg",
                "Error": {
                    "ImportStack": ["example.com/m", "github.com/gone/pkg"],
                    "Pos": "m.go:3:2",
                    "Err": "cannot find package \"github.com/gone/pkg\"",
                },
            }
        )
        found = fake_go.provider().describe(["github.com/gone/pkg"])
        err = found["github.com/gone/pkg"].error
        assert err is not None
        assert "cannot find package" in err.message
        assert err.pos == "m.go:3:2"
        assert err.import_stack == ["example.com/m", "github.com/gone/pkg"]

    def test_vendored_paths_normalized(self, fake_go):
        fake_go.respond_records(
            {
                "ImportPath": "example.com/m/vendor/github.com/x/y",
                "Imports": ["example.com/m/vendor/github.com/x/z", "fmt"],
            }
        )
        found = fake_go.provider().describe(
            ["example.com/m/vendor/github.com/x/y"], module_root="example.com/m"
        )
        y = found["github.com/x/y"]
        assert y.vendored is True
        assert y.dependencies == ["example.com/m/vendor/github.com/x/z", "fmt"]

    def test_vendored_paths_kept_without_module_root(self, fake_go):
        fake_go.respond_records({"ImportPath": "example.com/m/vendor/github.com/x/y"})
        found = fake_go.provider().describe(["example.com/m/vendor/github.com/x/y"])
        assert found["example.com/m/vendor/github.com/x/y"].vendored is False

    def test_first_record_wins_after_normalization(self, fake_go):
        fake_go.respond_records(
            {"ImportPath": "example.com/m/vendor/github.com/x/y", "Name": "vendored"},
            {"ImportPath": "github.com/x/y", "Name": "upstream"},
        )
        found = fake_go.provider().describe(["./..."], module_root="example.com/m")
        assert found["github.com/x/y"].name == "vendored"


class TestFailures:
    def test_missing_executable(self):
        provider = GoListProvider(command=("/nonexistent/bin/go",))
        with pytest.raises(ProviderUnavailable, match="cannot start"):
            provider.describe(["fmt"])

    def test_nonzero_exit_includes_stderr(self, fake_go):
        fake_go.exit_code = 1
        fake_go.stderr = "go: go.mod file not found"
        with pytest.raises(ProviderUnavailable, match="go.mod file not found"):
            fake_go.provider().describe(["fmt"])

    def test_nonzero_exit_for_list(self, fake_go):
        fake_go.exit_code = 2
        with pytest.raises(ProviderUnavailable, match="exit 2"):
            fake_go.provider().list_packages(["."])

    def test_malformed_json(self, fake_go):
        fake_go.respond('{"ImportPath": "a"\n')
        with pytest.raises(MalformedResponse):
            fake_go.provider().describe(["a"])

    def test_process_killed_when_output_is_malformed(self, fake_go):
        fake_go.respond_records({"Name": "no import path"})
        fake_go.sleep = 30
        started: list[subprocess.Popen] = []
        real_popen = subprocess.Popen

        def _popen(*args, **kwargs):
            proc = real_popen(*args, **kwargs)
            started.append(proc)
            return proc

        t0 = time.monotonic()
        with patch("godeps.provider.go_list.subprocess.Popen", side_effect=_popen):
            with pytest.raises(MalformedResponse, match="ImportPath"):
                fake_go.provider().describe(["a"])

        assert time.monotonic() - t0 < 10
        (proc,) = started
        assert proc.returncode is not None
        assert proc.stdout.closed

    def test_truncated_output_carries_stderr(self, fake_go):
        fake_go.respond('{"ImportPath": "a", "Imports": [\n')
        fake_go.stderr = "go: error obtaining buildID for a"
        fake_go.exit_code = 1
        with pytest.raises(MalformedResponse, match="error obtaining buildID"):
            fake_go.provider().describe(["a"])

    def test_undecodable_output(self, fake_go):
        fake_go.respond(b'{"ImportPath": "\xff\xfe"}')
        with pytest.raises(ProviderUnavailable, match="undecodable"):
            fake_go.provider().describe(["a"])

    def test_record_without_import_path(self, fake_go):
        fake_go.respond_records({"Name": "x"})
        with pytest.raises(MalformedResponse, match="ImportPath"):
            fake_go.provider().describe(["a"])


class TestParsePackage:
    def test_wrong_field_type(self):
        with pytest.raises(MalformedResponse, match="Imports"):
            parse_package({"ImportPath": "a", "Imports": "fmt"})

    def test_standard_must_be_bool(self):
        with pytest.raises(MalformedResponse, match="Standard"):
            parse_package({"ImportPath": "a", "Standard": "yes"})

    def test_error_must_be_object(self):
        with pytest.raises(MalformedResponse, match="Error"):
            parse_package({"ImportPath": "a", "Error": "boom"})

    def test_duplicate_imports_collapsed(self):
        desc = parse_package({"ImportPath": "a", "Imports": ["b", "c", "b"]})
        assert desc.dependencies == ["b", "c"]


class TestVendorNormalization:
    def test_strip_prefix(self):
        assert strip_vendor_prefix("m.com/a/vendor/x.org/y", "m.com/a") == ("x.org/y", True)

    def test_other_module_untouched(self):
        assert strip_vendor_prefix("m.com/b/vendor/x.org/y", "m.com/a") == (
            "m.com/b/vendor/x.org/y",
            False,
        )

    def test_vendor_dir_itself_untouched(self):
        assert strip_vendor_prefix("m.com/a/vendor/", "m.com/a") == ("m.com/a/vendor/", False)

    def test_normalize_keys_by_upstream_path(self):
        desc = pkg(
            "m.com/a/vendor/x.org/y",
            deps=["m.com/a/vendor/x.org/z"],
            test_imports=["m.com/a/vendor/x.org/t"],
        )
        out = normalize_vendored(desc, "m.com/a")
        assert out.import_path == "x.org/y"
        assert out.vendored is True
        # dependencies stay queryable as go reported them
        assert out.dependencies == ["m.com/a/vendor/x.org/z"]
        assert out.test_imports == ["m.com/a/vendor/x.org/t"]
        assert desc.import_path == "m.com/a/vendor/x.org/y"  # input untouched

    def test_normalize_leaves_other_packages_alone(self):
        desc = pkg("x.org/y", deps=["m.com/a/vendor/x.org/z"])
        assert normalize_vendored(desc, "m.com/a") is desc
