"""Framing for streams of concatenated JSON objects.

``go list -json`` writes one indented JSON object per package with no
separator other than whitespace, so records are split by brace depth rather
than by lines. The splitter tracks string literals and escapes so braces
inside strings do not count.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any, TextIO

from godeps.exceptions import MalformedResponse

_CHUNK_SIZE = 64 * 1024
_WHITESPACE = " \t\r\n"


class ObjectSplitter:
    """Incrementally split text into top-level JSON object literals."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self._offset = 0  # characters consumed so far, for error messages

    def feed(self, chunk: str) -> list[str]:
        """Consume *chunk* and return every object literal it completes."""
        objects: list[str] = []
        start = 0  # start of the pending slice of chunk
        for i, ch in enumerate(chunk):
            if self._depth == 0:
                if ch in _WHITESPACE:
                    start = i + 1
                    continue
                if ch != "{":
                    raise MalformedResponse(
                        f"expected '{{' at offset {self._offset + i}, got {ch!r}"
                    )
                start = i
                self._depth = 1
                continue

            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif ch == "\\":
                    self._escaped = True
                elif ch == '"':
                    self._in_string = False
                continue

            if ch == '"':
                self._in_string = True
            elif ch == "{":
                self._depth += 1
            elif ch == "}":
                self._depth -= 1
                if self._depth == 0:
                    self._parts.append(chunk[start : i + 1])
                    objects.append("".join(self._parts))
                    self._parts.clear()
                    start = i + 1

        if self._depth > 0:
            self._parts.append(chunk[start:])
        self._offset += len(chunk)
        return objects

    def close(self) -> None:
        """Fail if the stream ended in the middle of an object."""
        if self._depth > 0:
            raise MalformedResponse(
                f"stream ended inside an object ({self._depth} unclosed brace(s))"
            )


def decode_object(text: str) -> dict[str, Any]:
    """Decode one framed record, requiring a JSON object."""
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"invalid JSON record: {e}") from e
    if not isinstance(value, dict):
        raise MalformedResponse(f"expected a JSON object, got {type(value).__name__}")
    return value


def iter_json_objects(stream: TextIO, chunk_size: int = _CHUNK_SIZE) -> Iterator[dict[str, Any]]:
    """Yield each JSON object from a stream of concatenated objects.

    Reads at most a line at a time, so a record is decoded as soon as its
    closing brace arrives instead of after a full chunk.
    """
    splitter = ObjectSplitter()
    while True:
        chunk = stream.readline(chunk_size)
        if not chunk:
            break
        for text in splitter.feed(chunk):
            yield decode_object(text)
    splitter.close()
