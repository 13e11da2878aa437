"""Shared pytest fixtures for godeps tests."""

import json
import logging
import os
import sys
from pathlib import Path

import pytest
import structlog

from godeps.provider import GoListProvider

_FAKE_GO = """\
import json, os, sys, time
with open(os.environ["FAKE_GO_ARGS"], "a") as f:
    f.write(json.dumps(sys.argv[1:]) + "\\n")
sys.stderr.write(os.environ.get("FAKE_GO_STDERR", ""))
sys.stderr.flush()
with open(os.environ["FAKE_GO_STDOUT"], "rb") as f:
    sys.stdout.buffer.write(f.read())
sys.stdout.flush()
time.sleep(float(os.environ.get("FAKE_GO_SLEEP", "0")))
sys.exit(int(os.environ.get("FAKE_GO_EXIT", "0")))
"""


class FakeGo:
    """A stand-in ``go`` executable that replays canned stdout."""

    def __init__(self, tmp_path: Path) -> None:
        self.script = tmp_path / "fake_go.py"
        self.script.write_text(_FAKE_GO)
        self.stdout_file = tmp_path / "stdout"
        self.stdout_file.write_bytes(b"")
        self.args_file = tmp_path / "args.jsonl"
        self.stderr = ""
        self.exit_code = 0
        self.sleep = 0.0  # seconds to stay alive after writing stdout

    def respond(self, text: str | bytes) -> None:
        data = text.encode() if isinstance(text, str) else text
        self.stdout_file.write_bytes(data)

    def respond_records(self, *records: dict) -> None:
        self.respond("\n".join(json.dumps(r, indent="\t") for r in records) + "\n")

    @property
    def invocations(self) -> list[list[str]]:
        if not self.args_file.exists():
            return []
        return [json.loads(line) for line in self.args_file.read_text().splitlines()]

    def provider(self) -> GoListProvider:
        env = dict(os.environ)
        env.update(
            {
                "FAKE_GO_ARGS": str(self.args_file),
                "FAKE_GO_STDOUT": str(self.stdout_file),
                "FAKE_GO_STDERR": self.stderr,
                "FAKE_GO_EXIT": str(self.exit_code),
                "FAKE_GO_SLEEP": str(self.sleep),
            }
        )
        return GoListProvider(command=(sys.executable, str(self.script)), env=env)


@pytest.fixture
def fake_go(tmp_path):
    return FakeGo(tmp_path)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers bound to streams that CliRunner closes after each invoke."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
