"""Build orchestration: resolve protoc, extract the closure, generate.

The stages run strictly in order and every failure is terminal::

    resolve  ->  encode  ->  dependencies  ->  generate

The generator is never called unless the dependency closure was extracted
in full.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from protobuild.closure import extract_closure
from protobuild.config import BuildConfig
from protobuild.errors import ConfigError, PathEncodingError
from protobuild.generators import (
    CodeGenerator,
    GenerationOutput,
    GenerationRequest,
    available_generators,
    get_generator,
)
from protobuild.platforms import PlatformKey, protoc_bin_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a successful build.

    Parameters
    ----------
    protoc:
        The protoc executable that was used.
    files:
        Dependency closure of the roots, in manifest order.
    output_dir:
        Directory the generated sources were written to.
    generated:
        What the generator reported.
    """

    protoc: str
    files: tuple[str, ...]
    output_dir: Path
    generated: GenerationOutput


def ensure_text_path(path: str | Path) -> str:
    """Return *path* as a string, or raise if it is not valid UTF-8.

    Undecodable bytes in a filesystem path surface in Python as lone
    surrogates, which cannot be encoded back to UTF-8.
    """
    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise PathEncodingError(path) from None
    return text


def locate_protoc(config: BuildConfig, platform: PlatformKey | None = None) -> str:
    """Return the protoc path for *platform* below ``config.project_root``."""
    relative = protoc_bin_path(platform, config.vendored_root)
    return ensure_text_path(Path(config.project_root).absolute() / relative)


def resolve_dependencies(
    config: BuildConfig,
    platform: PlatformKey | None = None,
    protoc: str | None = None,
) -> list[str]:
    """Return the dependency closure of ``config.roots``."""
    if protoc is None:
        protoc = locate_protoc(config, platform)
    return extract_closure(
        protoc,
        config.roots,
        Path(config.out_dir).absolute(),
        cwd=config.project_root,
        manifest_name=config.manifest_name,
        timeout=config.timeout,
        strict=config.strict_manifest,
    )


def run_build(
    config: BuildConfig,
    *,
    platform: PlatformKey | None = None,
    generator: CodeGenerator | None = None,
) -> BuildResult:
    """Run the full pipeline for *config*.

    Parameters
    ----------
    config:
        Build configuration.
    platform:
        Platform to resolve protoc for.  Defaults to the running host.
    generator:
        Code generator to use.  Defaults to ``config.target``.

    Raises
    ------
    BuildError
        Subclass naming the stage that failed.
    """
    if generator is None and config.target not in available_generators():
        raise ConfigError(
            f"unknown generator {config.target!r}; "
            f"available: {', '.join(available_generators())}"
        )

    protoc = locate_protoc(config, platform)
    logger.info("Using protoc at %s", protoc)

    files = resolve_dependencies(config, protoc=protoc)

    if generator is None:
        generator = get_generator(config.target, protoc=protoc, timeout=config.timeout)
    output_dir = config.output_dir.absolute()
    request = GenerationRequest(
        include=Path(config.project_root).absolute(),
        files=tuple(files),
        output_dir=output_dir,
    )
    generated = generator.generate(request)
    return BuildResult(
        protoc=protoc,
        files=tuple(files),
        output_dir=output_dir,
        generated=generated,
    )


__all__ = [
    "BuildResult",
    "ensure_text_path",
    "locate_protoc",
    "resolve_dependencies",
    "run_build",
]
