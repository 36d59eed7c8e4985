"""protobuild: locate a vendored protoc, resolve schema dependencies, generate bindings.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import protobuild

    # Path to the vendored protoc for this host
    protoc = protobuild.protoc_bin_path()

    # Files the roots transitively import
    files = protobuild.extract_closure(str(protoc), ["protos/trace.proto"], "build")

    # Whole pipeline: resolve, extract, generate
    result = protobuild.build(protobuild.BuildConfig(roots=("protos/trace.proto",)))

    protobuild.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from protobuild.closure import extract_closure
from protobuild.config import BuildConfig
from protobuild.errors import (
    BuildError,
    ConfigError,
    GenerationFailure,
    ManifestFormatError,
    ManifestReadFailure,
    PathEncodingError,
    ResolutionError,
    SubprocessFailure,
)
from protobuild.manifest import parse_manifest
from protobuild.platforms import PlatformKey, ProtocBinary, protoc_bin_path

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from protobuild.generators import CodeGenerator
    from protobuild.pipeline import BuildResult


def build(
    config: BuildConfig | None = None,
    platform: PlatformKey | None = None,
    generator: "CodeGenerator | None" = None,
) -> "BuildResult":
    """Run the whole build step.

    Parameters
    ----------
    config:
        Build configuration.  Defaults to ``BuildConfig.from_env()``.
    platform:
        Platform to resolve protoc for.  Defaults to the running host.
    generator:
        Code generator to use.  Defaults to ``config.target``.

    Returns
    -------
    BuildResult
        The protoc used, the dependency closure and the generated files.

    Raises
    ------
    BuildError
        If any stage fails.
    """
    from protobuild.pipeline import run_build

    if config is None:
        config = BuildConfig.from_env()
    return run_build(config, platform=platform, generator=generator)


__all__ = [
    "__version__",
    "build",
    "extract_closure",
    "parse_manifest",
    "protoc_bin_path",
    "BuildConfig",
    "PlatformKey",
    "ProtocBinary",
    "BuildError",
    "ConfigError",
    "GenerationFailure",
    "ManifestFormatError",
    "ManifestReadFailure",
    "PathEncodingError",
    "ResolutionError",
    "SubprocessFailure",
]
