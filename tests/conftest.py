"""Shared test fixtures for protobuild.

Fixtures defined here are available to all tests in the suite without
needing an explicit import.  ``fake_protoc`` stands in for the vendored
binary: it intercepts ``subprocess.run`` and writes a dependency manifest
the way protoc would.
"""
from __future__ import annotations

import os
import subprocess
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest


class FakeProtoc:
    """Scripted replacement for protoc invocations.

    Parameters
    ----------
    deps:
        Files written to the dependency manifest, one per continuation line.
    returncode:
        Exit status reported for dependency discovery.
    """

    def __init__(self, deps: list[str], returncode: int = 0, stderr: str = "") -> None:
        self.deps = deps
        self.returncode = returncode
        self.stderr = stderr
        self.manifest: str | None = None
        self.manifest_bytes: bytes | None = None
        self.calls: list[list[str]] = []

    def render(self, target: str) -> str:
        if self.manifest is not None:
            return self.manifest
        if not self.deps:
            return f"{target}: \n"
        return f"{target}: " + " \\\n  ".join(self.deps) + "\n"

    def __call__(self, command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(command))
        dependency_out = next(
            (arg.split("=", 1)[1] for arg in command if arg.startswith("--dependency_out=")),
            None,
        )
        if dependency_out is not None and self.returncode == 0:
            descriptor_out = next(
                arg.split("=", 1)[1] for arg in command if arg.startswith("--descriptor_set_out=")
            )
            if self.manifest_bytes is not None:
                Path(dependency_out).write_bytes(self.manifest_bytes)
            else:
                Path(dependency_out).write_text(self.render(descriptor_out), encoding="utf-8")
            return subprocess.CompletedProcess(command, 0, stdout="", stderr="")
        if dependency_out is not None:
            return subprocess.CompletedProcess(command, self.returncode, stdout="", stderr=self.stderr)
        # generation run: emit one module per input file
        python_out = next(arg.split("=", 1)[1] for arg in command if arg.startswith("--python_out="))
        for arg in command[1:]:
            if arg.endswith(".proto"):
                target = Path(python_out) / (arg[: -len(".proto")] + "_pb2.py")
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text("# generated\n", encoding="utf-8")
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")


@pytest.fixture()
def fake_protoc() -> Iterator[FakeProtoc]:
    """Patch every protoc invocation with a ``FakeProtoc``."""
    fake = FakeProtoc(["protos/trace.proto", "protos/common.proto", "protos/track.proto"])
    with patch("protobuild.closure.subprocess.run", side_effect=fake), patch(
        "protobuild.generators.protoc_python.subprocess.run", side_effect=fake
    ):
        yield fake


@pytest.fixture()
def null_sink() -> str:
    return os.devnull


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string."""
    return "0.1.0"
