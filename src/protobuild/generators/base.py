"""Abstract base class for code-generation backends.

A backend turns the resolved schema file set into target-language source
under an output directory.  ``protobuild`` does not emit code itself; each
backend drives an external tool and reports the files it produced.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class GenerationRequest:
    """Inputs handed to a code generator.

    Parameters
    ----------
    include:
        Include root that import paths in the schema files resolve against.
    files:
        Resolved schema files, in dependency-manifest order.
    output_dir:
        Directory that receives the generated sources.
    """

    include: Path
    files: tuple[str, ...]
    output_dir: Path


@dataclass
class GenerationOutput:
    """Result of a generator run.

    Parameters
    ----------
    files:
        Generated files, as sorted paths relative to the output directory.
    metadata:
        Arbitrary key/value pairs emitted by the generator, such as the
        generator name and the number of input schema files.
    """

    files: list[str] = field(default_factory=list)
    metadata: dict[str, object] = field(default_factory=dict)

    def summary(self) -> str:
        """Return a one-line human-readable summary of this output."""
        inputs = self.metadata.get("input_count", 0)
        return f"Generated {len(self.files)} file(s) from {inputs} schema file(s)"


class CodeGenerator(ABC):
    """Base class for code-generation backends.

    The contract for :meth:`generate` is:

    * **All or nothing**: any failure raises
      :class:`~protobuild.errors.GenerationFailure`.
    * **Deterministic**: identical requests produce identical outputs.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique short name for this backend, e.g. ``"python"``."""

    @abstractmethod
    def generate(self, request: GenerationRequest) -> GenerationOutput:
        """Generate sources for *request*.

        Raises
        ------
        GenerationFailure
            If the backend reports an error over the file set.
        """

    @staticmethod
    def _collect(output_dir: Path) -> list[str]:
        """Return every file below *output_dir* as sorted POSIX-style relative paths."""
        if not output_dir.is_dir():
            return []
        return sorted(
            path.relative_to(output_dir).as_posix()
            for path in output_dir.rglob("*")
            if path.is_file()
        )
