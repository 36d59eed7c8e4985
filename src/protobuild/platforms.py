"""Platform resolution for the vendored ``protoc`` binaries.

The host is described by a ``PlatformKey`` (operating system, CPU
architecture).  Each supported key maps to exactly one ``ProtocBinary``
through an enumerated table; anything outside the table is a hard
``ResolutionError``.  There is no fuzzy matching and no fallback binary.

Canonical identifiers
---------------------
==============  ===============================================
Field           Values
==============  ===============================================
``os``          ``linux``, ``macos``, ``windows``
``arch``        ``x86``, ``x86_64``, ``aarch64``, ``powerpc64``
==============  ===============================================

Host spellings reported by :mod:`platform` are renamed to these
identifiers by ``PlatformKey.current``.  Unknown spellings pass through
lower-cased so that the resulting ``ResolutionError`` shows what the host
actually reported.
"""
from __future__ import annotations

import functools
import logging
import platform as _platform
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from protobuild.errors import ResolutionError

logger = logging.getLogger(__name__)

DEFAULT_VENDORED_ROOT = "vendored_protoc"

# Matches any architecture in the platform table.
ANY_ARCH = "*"

_OS_ALIASES: dict[str, str] = {
    "darwin": "macos",
}

_ARCH_ALIASES: dict[str, str] = {
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "amd64": "x86_64",
    "arm64": "aarch64",
    "ppc64le": "powerpc64",
}


@dataclass(frozen=True)
class PlatformKey:
    """An (operating system, architecture) pair used as a table key."""

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"

    @classmethod
    def from_host_names(cls, system: str, machine: str) -> "PlatformKey":
        """Build a key from raw ``platform.system()``/``platform.machine()`` values."""
        system = system.strip().lower()
        machine = machine.strip().lower()
        return cls(
            os=_OS_ALIASES.get(system, system),
            arch=_ARCH_ALIASES.get(machine, machine),
        )

    @classmethod
    def current(cls) -> "PlatformKey":
        """Return the key for the running host, captured once per process."""
        return _host_key()


@functools.lru_cache(maxsize=None)
def _host_key() -> PlatformKey:
    key = PlatformKey.from_host_names(_platform.system(), _platform.machine())
    logger.debug("Detected host platform %s", key)
    return key


class ProtocBinary(Enum):
    """Vendored protoc builds, valued by their path below the vendored root."""

    LINUX_X86_32 = "linux-x86_32/protoc"
    LINUX_X86_64 = "linux-x86_64/protoc"
    LINUX_AARCH_64 = "linux-aarch_64/protoc"
    LINUX_PPCLE_64 = "linux-ppcle_64/protoc"
    MACOS_X86_64 = "macos-x86_64/protoc"
    MACOS_AARCH_64 = "macos-aarch_64/protoc"
    WIN32 = "win32/protoc.exe"

    @property
    def relative_path(self) -> Path:
        return Path(self.value)


_PLATFORM_TABLE: dict[PlatformKey, ProtocBinary] = {
    PlatformKey("linux", "x86"): ProtocBinary.LINUX_X86_32,
    PlatformKey("linux", "x86_64"): ProtocBinary.LINUX_X86_64,
    PlatformKey("linux", "aarch64"): ProtocBinary.LINUX_AARCH_64,
    PlatformKey("linux", "powerpc64"): ProtocBinary.LINUX_PPCLE_64,
    PlatformKey("macos", "x86_64"): ProtocBinary.MACOS_X86_64,
    PlatformKey("macos", "aarch64"): ProtocBinary.MACOS_AARCH_64,
    PlatformKey("windows", ANY_ARCH): ProtocBinary.WIN32,
}


def _check_table(table: dict[PlatformKey, ProtocBinary]) -> None:
    """Fail unless every ``ProtocBinary`` is reachable from exactly one key."""
    mapped = list(table.values())
    missing = [binary.name for binary in ProtocBinary if binary not in mapped]
    duplicated = sorted({binary.name for binary in mapped if mapped.count(binary) > 1})
    if missing or duplicated:
        raise RuntimeError(
            "protoc platform table is inconsistent: "
            f"unmapped binaries {missing}, binaries mapped twice {duplicated}"
        )


_check_table(_PLATFORM_TABLE)


def resolve_binary(key: PlatformKey) -> ProtocBinary:
    """Return the vendored binary for *key*.

    Raises
    ------
    ResolutionError
        If *key* is not in the platform table.  The error carries the
        ``os`` and ``arch`` strings unchanged.
    """
    binary = _PLATFORM_TABLE.get(key)
    if binary is None:
        binary = _PLATFORM_TABLE.get(PlatformKey(key.os, ANY_ARCH))
    if binary is None:
        raise ResolutionError(key.os, key.arch)
    return binary


def protoc_bin_path(
    key: PlatformKey | None = None,
    vendored_root: str | Path = DEFAULT_VENDORED_ROOT,
) -> Path:
    """Return the relative path to the vendored ``protoc`` for *key*.

    Parameters
    ----------
    key:
        Platform to resolve.  Defaults to the running host.
    vendored_root:
        Directory holding the per-platform builds.

    Raises
    ------
    ResolutionError
        If no binary is vendored for the platform.
    """
    if key is None:
        key = PlatformKey.current()
    path = Path(vendored_root) / resolve_binary(key).relative_path
    logger.debug("Resolved protoc for %s -> %s", key, path)
    return path


def supported_platforms() -> list[tuple[PlatformKey, ProtocBinary]]:
    """Return the platform table as ``(key, binary)`` pairs in table order."""
    return list(_PLATFORM_TABLE.items())


__all__ = [
    "ANY_ARCH",
    "DEFAULT_VENDORED_ROOT",
    "PlatformKey",
    "ProtocBinary",
    "protoc_bin_path",
    "resolve_binary",
    "supported_platforms",
]
