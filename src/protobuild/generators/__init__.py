"""Code-generation backends.

Public API
----------
The stable surface is ``get_generator``, ``available_generators`` and the
types re-exported below.

Example
-------
::

    from pathlib import Path
    from protobuild.generators import GenerationRequest, get_generator

    generator = get_generator("python", protoc="vendored_protoc/linux-x86_64/protoc")
    output = generator.generate(
        GenerationRequest(include=Path("."), files=("a.proto",), output_dir=Path("out"))
    )
    print(output.summary())
"""
from __future__ import annotations

from collections.abc import Callable

from protobuild.generators.base import CodeGenerator, GenerationOutput, GenerationRequest
from protobuild.generators.protoc_python import ProtocPythonGenerator

_REGISTRY: dict[str, Callable[..., CodeGenerator]] = {
    "python": lambda protoc, timeout=None: ProtocPythonGenerator(protoc, timeout=timeout),
    "python+pyi": lambda protoc, timeout=None: ProtocPythonGenerator(
        protoc, emit_pyi=True, timeout=timeout
    ),
}


def get_generator(name: str, protoc: str, timeout: float | None = None) -> CodeGenerator:
    """Return the backend registered under *name*.

    Raises
    ------
    ValueError
        If *name* is not a registered backend.
    """
    if name not in _REGISTRY:
        available = ", ".join(available_generators())
        raise ValueError(f"Unknown generator {name!r}. Available generators: {available}")
    return _REGISTRY[name](protoc, timeout=timeout)


def available_generators() -> list[str]:
    """Return the sorted list of registered backend names."""
    return sorted(_REGISTRY)


__all__ = [
    "CodeGenerator",
    "GenerationOutput",
    "GenerationRequest",
    "ProtocPythonGenerator",
    "available_generators",
    "get_generator",
]
