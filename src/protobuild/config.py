"""Build configuration loader.

A build is described by a small YAML file::

    roots:
      - protos/perfetto/trace/trace.proto
    out_dir: ${OUT_DIR}
    target: python
    timeout: 120

String values of the form ``${NAME}`` are read from the environment.
Keys that are left out take the defaults of ``BuildConfig``.
"""
from __future__ import annotations

import dataclasses
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from protobuild.closure import DEFAULT_MANIFEST_NAME
from protobuild.errors import ConfigError
from protobuild.platforms import DEFAULT_VENDORED_ROOT

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

DEFAULT_ROOTS: tuple[str, ...] = ("protos/perfetto/trace/trace.proto",)


def _resolve_env(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    match = _ENV_PATTERN.fullmatch(value.strip())
    if match:
        return os.getenv(match.group(1)) or ""
    return value


def _default_out_dir() -> str:
    return os.getenv("OUT_DIR") or "build"


@dataclass(frozen=True)
class BuildConfig:
    roots: tuple[str, ...] = DEFAULT_ROOTS
    project_root: str = "."
    out_dir: str = field(default_factory=_default_out_dir)
    output_subdir: str = "protos"
    vendored_root: str = DEFAULT_VENDORED_ROOT
    manifest_name: str = DEFAULT_MANIFEST_NAME
    target: str = "python"
    timeout: float | None = None
    strict_manifest: bool = True

    @property
    def output_dir(self) -> Path:
        """Designated directory for generated sources."""
        return Path(self.out_dir) / self.output_subdir

    @classmethod
    def from_env(cls) -> "BuildConfig":
        return cls()

    @classmethod
    def load(cls, path: str | Path) -> "BuildConfig":
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"cannot read config {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
        return cls.from_dict(data, source=str(path))

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<config>") -> "BuildConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{source}: unknown key(s) {', '.join(unknown)}")

        values = {key: _resolve_env(value) for key, value in data.items()}
        if "roots" in values:
            values["roots"] = _check_roots(values["roots"], source)
        if values.get("out_dir") == "":
            values["out_dir"] = _default_out_dir()
        if values.get("timeout") is not None:
            try:
                values["timeout"] = float(values["timeout"])
            except (TypeError, ValueError):
                raise ConfigError(f"{source}: timeout must be a number of seconds") from None
        if isinstance(values.get("strict_manifest"), str):
            values["strict_manifest"] = values["strict_manifest"].lower() in {"1", "true", "yes"}
        for key in ("project_root", "out_dir", "output_subdir", "vendored_root", "manifest_name", "target"):
            if key in values and not isinstance(values[key], str):
                raise ConfigError(f"{source}: {key} must be a string")
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "BuildConfig":
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if "roots" in changes:
            changes["roots"] = _check_roots(changes["roots"], "<overrides>")
        return dataclasses.replace(self, **changes)


def _check_roots(roots: Any, source: str) -> tuple[str, ...]:
    if isinstance(roots, str) or not isinstance(roots, (list, tuple)) or not roots:
        raise ConfigError(f"{source}: roots must be a non-empty list of paths")
    if not all(isinstance(root, str) and root for root in roots):
        raise ConfigError(f"{source}: every root must be a non-empty string")
    return tuple(roots)


__all__ = ["BuildConfig", "DEFAULT_ROOTS"]
