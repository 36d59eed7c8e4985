"""Dependency manifest parsing.

``protoc --dependency_out`` writes a makefile-style rule::

    /dev/null: protos/a.proto protos/b.proto \\
      protos/c.proto

The target is the descriptor-set output, which this project always points
at the null sink, so the target label is a known sentinel.  Parsing joins
the continuation lines, drops the sentinel and splits the remainder into
paths.
"""
from __future__ import annotations

import re

from protobuild.errors import ManifestFormatError

_CONTINUATION = re.compile(r"\\\r?\n")

# str.split() with no argument also splits on Unicode whitespace.
_ASCII_WHITESPACE = re.compile(r"[ \t\n\r\f\v]+")


def sentinel_for(null_sink: str) -> str:
    """Return the target label protoc writes for a ``null_sink`` descriptor set."""
    return f"{null_sink}: "


def normalize_manifest(text: str, sentinel: str) -> str:
    """Join continuation lines and strip a leading *sentinel*.

    A missing sentinel is left alone, so the function is idempotent for any
    input that does not begin with the sentinel repeated twice.  Only one
    leading sentinel is removed per call.
    """
    text = _CONTINUATION.sub(" ", text)
    if text.startswith(sentinel):
        text = text[len(sentinel):]
    return text


def tokenize_manifest(text: str) -> list[str]:
    """Split *text* on ASCII whitespace, keeping order and duplicates."""
    return [token for token in _ASCII_WHITESPACE.split(text) if token]


def parse_manifest(text: str, sentinel: str, strict: bool = True) -> list[str]:
    """Return the prerequisite paths listed in a dependency manifest.

    Parameters
    ----------
    text:
        Raw manifest contents.
    sentinel:
        Expected leading target label, including the trailing ``": "``.
    strict:
        When ``True``, a manifest that does not begin with *sentinel* is
        rejected.  When ``False`` the sentinel strip is a silent no-op and
        whatever tokens remain are returned.

    Raises
    ------
    ManifestFormatError
        In strict mode, if the sentinel target is absent.
    """
    joined = _CONTINUATION.sub(" ", text)
    # "out:" at end of text is a rule with no prerequisites
    if joined.rstrip() == sentinel.rstrip():
        return []
    if strict and not joined.startswith(sentinel):
        raise ManifestFormatError(sentinel, joined)
    return tokenize_manifest(normalize_manifest(joined, sentinel))


__all__ = [
    "normalize_manifest",
    "parse_manifest",
    "sentinel_for",
    "tokenize_manifest",
]
