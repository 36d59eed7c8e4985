"""Dependency closure extraction.

Runs ``protoc`` in dependency-discovery mode over a fixed set of root
schema files and turns the manifest it writes into the ordered list of
every file the roots transitively import.  The descriptor set protoc would
normally produce is sent to the null sink; only the manifest is wanted.

A single attempt is made.  Any spawn, exit-status or read failure is
raised; nothing is retried and no partial file list is ever returned.
"""
from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from protobuild.errors import ManifestReadFailure, SubprocessFailure
from protobuild.manifest import parse_manifest, sentinel_for

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_NAME = "protos.deps"


def dependency_command(
    protoc: str,
    manifest_path: Path,
    roots: Sequence[str],
    null_sink: str = os.devnull,
) -> list[str]:
    """Return the protoc argument vector for dependency discovery."""
    return [
        protoc,
        f"--dependency_out={manifest_path}",
        f"--descriptor_set_out={null_sink}",
        *roots,
    ]


def extract_closure(
    protoc: str,
    roots: Sequence[str],
    out_dir: str | Path,
    *,
    cwd: str | Path | None = None,
    manifest_name: str = DEFAULT_MANIFEST_NAME,
    null_sink: str = os.devnull,
    timeout: float | None = None,
    strict: bool = True,
) -> list[str]:
    """Return the dependency closure of *roots* as reported by *protoc*.

    Parameters
    ----------
    protoc:
        Path to the protoc executable.
    roots:
        Root ``.proto`` files, passed to protoc in the given order.
    out_dir:
        Scratch directory that receives the dependency manifest.
    cwd:
        Working directory for protoc.  Relative roots resolve against it.
    manifest_name:
        File name of the manifest inside *out_dir*.
    null_sink:
        Path used to discard the descriptor set.  Also names the sentinel
        target in the manifest.
    timeout:
        Seconds to wait for protoc.  ``None`` waits indefinitely.
    strict:
        Reject manifests that do not start with the sentinel target.

    Returns
    -------
    list[str]
        Paths in manifest order.  Duplicates are not removed.

    Raises
    ------
    ValueError
        If *roots* is empty.
    SubprocessFailure
        If protoc cannot be started, times out or exits non-zero.
    ManifestReadFailure
        If the manifest cannot be read after a successful run.
    ManifestFormatError
        In strict mode, if the manifest is not a rule for the sentinel.
    """
    if not roots:
        raise ValueError("at least one root schema file is required")

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    manifest_path = out_dir / manifest_name
    command = dependency_command(protoc, manifest_path, roots, null_sink)
    logger.debug("Running %s", " ".join(command))

    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise SubprocessFailure(
            f"protoc did not finish within {timeout} seconds", command=command
        ) from exc
    except OSError as exc:
        raise SubprocessFailure(
            f"failed to run protoc {protoc!r}: {exc}", command=command
        ) from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        message = f"protoc exited with status {result.returncode}"
        if stderr:
            message = f"{message}: {stderr.splitlines()[-1]}"
        raise SubprocessFailure(
            message, command=command, returncode=result.returncode, stderr=stderr
        )

    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadFailure(manifest_path, exc) from exc

    files = parse_manifest(text, sentinel_for(null_sink), strict=strict)
    logger.info("Resolved %d schema file(s) from %d root(s)", len(files), len(roots))
    return files


__all__ = ["DEFAULT_MANIFEST_NAME", "dependency_command", "extract_closure"]
