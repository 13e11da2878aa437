"""Tests for JSON record framing - no go toolchain needed."""

from __future__ import annotations

import io
import json

import pytest

from godeps.exceptions import MalformedResponse
from godeps.provider.stream import ObjectSplitter, decode_object, iter_json_objects


def _records(text: str, chunk_size: int = 64 * 1024) -> list[dict]:
    return list(iter_json_objects(io.StringIO(text), chunk_size=chunk_size))


_GO_LIST_OUTPUT = """\
{
\t"Dir": "/src/example.com/m",
\t"ImportPath": "example.com/m",
\t"Name": "m",
\t"Imports": [
\t\t"fmt",
\t\t"github.com/x/y"
\t]
}
{
\t"ImportPath": "github.com/x/y",
\t"Doc": "Package y has {braces} and \\"quotes\\" in its doc.",
\t"Error": {
\t\t"ImportStack": ["example.com/m", "github.com/x/y"],
\t\t"Err": "cannot find package"
\t}
}
"""


class TestIterJsonObjects:
    def test_multiline_records(self):
        records = _records(_GO_LIST_OUTPUT)
        assert [r["ImportPath"] for r in records] == ["example.com/m", "github.com/x/y"]
        assert records[0]["Imports"] == ["fmt", "github.com/x/y"]

    def test_braces_and_escapes_inside_strings(self):
        records = _records(_GO_LIST_OUTPUT)
        assert records[1]["Doc"] == 'Package y has {braces} and "quotes" in its doc.'
        assert records[1]["Error"]["Err"] == "cannot find package"

    @pytest.mark.parametrize("chunk_size", [1, 2, 7, 31])
    def test_chunk_boundaries_do_not_matter(self, chunk_size):
        assert _records(_GO_LIST_OUTPUT, chunk_size) == _records(_GO_LIST_OUTPUT)

    def test_records_without_separator(self):
        records = _records('{"ImportPath":"a"}{"ImportPath":"b"}')
        assert [r["ImportPath"] for r in records] == ["a", "b"]

    def test_escaped_backslash_before_quote(self):
        text = json.dumps({"ImportPath": "a", "Doc": "ends with \\"}) + "\n"
        assert _records(text)[0]["Doc"] == "ends with \\"

    def test_empty_stream(self):
        assert _records("") == []
        assert _records("  \n\t ") == []

    def test_truncated_stream(self):
        with pytest.raises(MalformedResponse, match="unclosed"):
            _records('{"ImportPath": "a", "Imports": [')

    def test_garbage_between_records(self):
        with pytest.raises(MalformedResponse, match="expected"):
            _records('{"ImportPath": "a"} oops {"ImportPath": "b"}')

    def test_plain_text_output(self):
        with pytest.raises(MalformedResponse):
            _records("example.com/m\n")

    def test_invalid_json_inside_braces(self):
        with pytest.raises(MalformedResponse, match="invalid JSON"):
            _records("{ImportPath: a}")


class TestObjectSplitter:
    def test_feed_returns_completed_objects_only(self):
        splitter = ObjectSplitter()
        assert splitter.feed('{"a": {"b"') == []
        assert splitter.feed(': 1}}\n{"c"') == ['{"a": {"b": 1}}']
        assert splitter.feed(": 2}") == ['{"c": 2}']
        splitter.close()

    def test_close_inside_object(self):
        splitter = ObjectSplitter()
        splitter.feed('{"a": "}')
        with pytest.raises(MalformedResponse):
            splitter.close()


class TestDecodeObject:
    def test_non_object(self):
        with pytest.raises(MalformedResponse, match="expected a JSON object"):
            decode_object("[1, 2]")
