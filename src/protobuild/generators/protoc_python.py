"""Python bindings backend driven by protoc's built-in emitters.

Invokes::

    protoc --proto_path=<include> --python_out=<out> [--pyi_out=<out>] <files...>

``protoc`` writes one ``*_pb2.py`` (and optionally ``*_pb2.pyi``) per
schema file, mirroring the schema's directory layout under ``<out>``.
"""
from __future__ import annotations

import logging
import subprocess

from protobuild.errors import GenerationFailure
from protobuild.generators.base import CodeGenerator, GenerationOutput, GenerationRequest

logger = logging.getLogger(__name__)


class ProtocPythonGenerator(CodeGenerator):
    """Generates Python modules with ``protoc --python_out``.

    Parameters
    ----------
    protoc:
        Path to the protoc executable.
    emit_pyi:
        Also write ``.pyi`` type stubs next to the modules.
    timeout:
        Seconds to wait for protoc.  ``None`` waits indefinitely.
    """

    def __init__(self, protoc: str, emit_pyi: bool = False, timeout: float | None = None) -> None:
        self._protoc = protoc
        self._emit_pyi = emit_pyi
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "python+pyi" if self._emit_pyi else "python"

    def command(self, request: GenerationRequest) -> list[str]:
        """Return the protoc argument vector for *request*."""
        out = str(request.output_dir)
        args = [
            self._protoc,
            f"--proto_path={request.include}",
            f"--python_out={out}",
        ]
        if self._emit_pyi:
            args.append(f"--pyi_out={out}")
        args.extend(request.files)
        return args

    def generate(self, request: GenerationRequest) -> GenerationOutput:
        request.output_dir.mkdir(parents=True, exist_ok=True)
        metadata: dict[str, object] = {
            "generator": self.name,
            "input_count": len(request.files),
        }
        if not request.files:
            logger.info("No schema files to generate; skipping protoc")
            return GenerationOutput(files=self._collect(request.output_dir), metadata=metadata)

        command = self.command(request)
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=request.include,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise GenerationFailure(
                f"protoc did not finish generating within {self._timeout} seconds"
            ) from exc
        except OSError as exc:
            raise GenerationFailure(f"failed to run protoc {self._protoc!r}: {exc}") from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            detail = stderr.splitlines()[-1] if stderr else "no diagnostics"
            raise GenerationFailure(
                f"protoc failed to generate Python sources "
                f"(status {result.returncode}): {detail}",
                returncode=result.returncode,
                stderr=stderr,
            )

        output = GenerationOutput(files=self._collect(request.output_dir), metadata=metadata)
        logger.info("%s into %s", output.summary(), request.output_dir)
        return output
