"""Quickstart: resolve the vendored protoc and list a schema's dependencies.

Run from a project that vendors protoc under ``vendored_protoc/``::

    python examples/01_quickstart.py protos/perfetto/trace/trace.proto
"""
from __future__ import annotations

import sys

import protobuild
from protobuild.pipeline import resolve_dependencies


def main(roots: list[str]) -> int:
    config = protobuild.BuildConfig.from_env().with_overrides(roots=tuple(roots) or None)
    try:
        print(f"protoc: {protobuild.protoc_bin_path()}")
        for path in resolve_dependencies(config):
            print(path)
    except protobuild.BuildError as exc:
        print(f"Error [{exc.stage}]: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
