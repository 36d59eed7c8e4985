"""Error types for the protobuild pipeline.

Every failure in the build step is fatal.  Each exception class names the
``stage`` it belongs to so that the CLI can report which part of the
pipeline failed with a single, human-readable line.
"""
from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base class for all protobuild failures."""

    stage: str = "build"


class ConfigError(BuildError):
    """Raised when a build configuration file is invalid."""

    stage = "config"


class ResolutionError(BuildError):
    """Raised when no vendored protoc exists for the host platform.

    Parameters
    ----------
    os:
        Operating-system identifier, exactly as it was looked up.
    arch:
        CPU-architecture identifier, exactly as it was looked up.
    """

    stage = "resolve"

    def __init__(self, os: str, arch: str) -> None:  # noqa: A002
        self.os = os
        self.arch = arch
        super().__init__(
            f"failed to locate vendored protoc for OS {os!r} and ARCH {arch!r}"
        )


class PathEncodingError(BuildError):
    """Raised when the protoc path cannot be represented as UTF-8 text."""

    stage = "encode"

    def __init__(self, path: str | Path) -> None:
        self.path = path
        # surrogate-escaped bytes cannot be printed as-is
        shown = str(path).encode("utf-8", "backslashreplace").decode("utf-8")
        super().__init__(f"protoc path '{shown}' is not valid UTF-8")


class SubprocessFailure(BuildError):
    """Raised when protoc cannot be spawned or exits with a failure status."""

    stage = "dependencies"

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ManifestReadFailure(BuildError):
    """Raised when the dependency manifest cannot be read back."""

    stage = "dependencies"

    def __init__(self, path: Path, cause: OSError | UnicodeDecodeError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"cannot read dependency manifest {path}: {cause}")


class ManifestFormatError(BuildError):
    """Raised when a dependency manifest does not start with the sentinel rule."""

    stage = "dependencies"

    def __init__(self, sentinel: str, text: str) -> None:
        self.sentinel = sentinel
        self.head = text[:60]
        super().__init__(
            f"dependency manifest does not start with target {sentinel.strip()!r} "
            f"(found {self.head!r})"
        )


class GenerationFailure(BuildError):
    """Raised when the code generator fails over the resolved file set."""

    stage = "generate"

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


__all__ = [
    "BuildError",
    "ConfigError",
    "ResolutionError",
    "PathEncodingError",
    "SubprocessFailure",
    "ManifestReadFailure",
    "ManifestFormatError",
    "GenerationFailure",
]
