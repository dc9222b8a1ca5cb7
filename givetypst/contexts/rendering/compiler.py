"""
Typst Compilation Module

Compiles Typst source (plus optional JSON data) to PDF inside a throwaway
workspace. The compiler backend is pluggable: anything with a ``name``, an
``is_available()`` check, and a ``compile(work_dir)`` method that turns
``work_dir/main.typ`` into ``work_dir/output.pdf`` will do.

Templates read their data with ``json("data.json")``.
"""

import json
import shutil
import subprocess
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from givetypst.contexts.rendering.logger import (
    _log_debug,
    _log_warning,
    log_compilation_result,
    log_compilation_start,
)
from givetypst.contexts.rendering.workspace import compilation_workspace, write_private_file
from givetypst.exceptions import CompileError, DataMarshalError, GiveTypstError, ResourceError
from givetypst.utils.config import DEFAULT_TYPST_BINARY, DEFAULT_TYPST_IMAGE

# Fixed file names inside the workspace
SOURCE_FILE_NAME = "main.typ"
DATA_FILE_NAME = "data.json"
OUTPUT_FILE_NAME = "output.pdf"

CONTAINER_WORK_DIR = "/work"


class TypstCompiler(Protocol):
    """A compilation backend operating on a prepared workspace."""

    name: str

    def is_available(self) -> bool:
        """Whether the backend's executable can be resolved."""
        ...

    def compile(self, work_dir: Path) -> None:
        """
        Compile work_dir/main.typ (reading work_dir/data.json if present) to work_dir/output.pdf.

        Raises:
            CompileError: If the compiler fails; the message includes its output verbatim
        """
        ...


def _combine_output(stdout: Optional[str], stderr: Optional[str]) -> str:
    return "".join(part for part in (stdout, stderr) if part)


class LocalTypstCompiler:
    """
    Compiles with a typst binary installed on this machine.

    Args:
        binary: Name or path of the typst executable
        timeout: Seconds before the compiler process is killed (None = no limit)
    """

    name = "typst"

    def __init__(self, binary: str = DEFAULT_TYPST_BINARY, timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def compile(self, work_dir: Path) -> None:
        cmd = [
            self.binary,
            "compile",
            str(work_dir / SOURCE_FILE_NAME),
            str(work_dir / OUTPUT_FILE_NAME),
        ]

        try:
            result = subprocess.run(
                cmd,
                cwd=work_dir,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = _combine_output(e.stdout, e.stderr) if isinstance(e.stdout, str) else ""
            raise CompileError(
                f"compile failed: timed out after {self.timeout}s", output=output, original_error=e
            ) from e
        except OSError as e:
            raise CompileError(f"compile failed: {e}", original_error=e) from e

        output = _combine_output(result.stdout, result.stderr)
        if result.returncode != 0:
            raise CompileError(f"compile failed: {output}", output=output)
        if output:
            _log_debug(f"typst reported: {output.strip()}")


class ContainerTypstCompiler:
    """
    Compiles inside a throwaway container using the docker CLI.

    Each call creates its own container with networking disabled, copies the
    workspace into it, runs typst, copies the PDF back, and removes the
    container. No container is ever shared between compilations.

    Args:
        image: Image that provides the typst binary
        docker_binary: Name or path of the docker CLI
        timeout: Seconds allowed for the compile step (None = no limit)
    """

    name = "typst"

    def __init__(
        self,
        image: str = DEFAULT_TYPST_IMAGE,
        docker_binary: str = "docker",
        timeout: Optional[float] = None,
    ):
        self.image = image
        self.docker_binary = docker_binary
        self.timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self.docker_binary) is not None

    def _docker(self, args: List[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                [self.docker_binary, *args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CompileError(
                f"compile failed: docker {args[0]} timed out after {timeout}s", original_error=e
            ) from e
        except OSError as e:
            raise CompileError(f"compile failed: {e}", original_error=e) from e

    def _create_container(self) -> str:
        result = self._docker(
            [
                "create",
                "--network",
                "none",
                "--workdir",
                CONTAINER_WORK_DIR,
                "--entrypoint",
                "typst",
                self.image,
                "compile",
                f"{CONTAINER_WORK_DIR}/{SOURCE_FILE_NAME}",
                f"{CONTAINER_WORK_DIR}/{OUTPUT_FILE_NAME}",
            ]
        )
        if result.returncode != 0:
            raise CompileError(f"failed to create typst container: {result.stderr.strip()}")
        return result.stdout.strip()

    def _remove_container(self, container_id: str) -> None:
        result = self._docker(["rm", "--force", container_id])
        if result.returncode != 0:
            _log_warning(f"Failed to remove container {container_id}: {result.stderr.strip()}")

    def compile(self, work_dir: Path) -> None:
        container_id = self._create_container()
        _log_debug(f"Created container {container_id[:12]} from {self.image}")

        try:
            # Trailing "/." copies the directory contents, creating /work if needed
            copy_in = self._docker(["cp", f"{work_dir}/.", f"{container_id}:{CONTAINER_WORK_DIR}"])
            if copy_in.returncode != 0:
                raise CompileError(f"failed to copy workspace to container: {copy_in.stderr.strip()}")

            run = self._docker(["start", "--attach", container_id], timeout=self.timeout)
            output = _combine_output(run.stdout, run.stderr)
            if run.returncode != 0:
                raise CompileError(f"compile failed: {output}", output=output)

            copy_out = self._docker(
                [
                    "cp",
                    f"{container_id}:{CONTAINER_WORK_DIR}/{OUTPUT_FILE_NAME}",
                    str(work_dir / OUTPUT_FILE_NAME),
                ]
            )
            if copy_out.returncode != 0:
                raise CompileError(f"failed to copy output PDF from container: {copy_out.stderr.strip()}")
        finally:
            self._remove_container(container_id)


def create_compiler(backend: str = "local", **options) -> TypstCompiler:
    """
    Build a compiler for a backend name.

    Args:
        backend: "local" or "container"
        **options: Keyword arguments for the backend constructor

    Returns:
        A TypstCompiler

    Raises:
        ValueError: If backend is unknown
    """
    if backend == "local":
        return LocalTypstCompiler(**options)
    if backend == "container":
        return ContainerTypstCompiler(**options)
    raise ValueError(f"Unknown compiler backend: {backend!r}")


def compile_typst(
    source: Union[str, bytes],
    data: Optional[Dict[str, Any]] = None,
    compiler: Optional[TypstCompiler] = None,
) -> bytes:
    """
    Compile Typst source into a PDF.

    Creates a temporary workspace, writes main.typ (and data.json when data is
    not None) with owner-only permissions, runs the compiler, and reads back
    output.pdf. The workspace is removed on every exit path.

    Args:
        source: Typst source, text or raw bytes (bytes are written unchanged)
        data: JSON object made available to the template as data.json
        compiler: Backend to use (default: LocalTypstCompiler())

    Returns:
        PDF bytes

    Raises:
        ResourceError: If the workspace cannot be created, written, or read
        DataMarshalError: If data cannot be serialized to JSON
        CompileError: If the compiler fails
    """
    if compiler is None:
        compiler = LocalTypstCompiler()

    source_bytes = source.encode("utf-8") if isinstance(source, str) else source

    start_time = time.time()

    try:
        with compilation_workspace() as work_dir:
            # If data is provided, marshal it to JSON and write it to a file.
            if data is not None:
                try:
                    data_bytes = json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False).encode("utf-8")
                except (TypeError, ValueError) as e:
                    raise DataMarshalError(f"failed to marshal data: {e}", original_error=e) from e
                try:
                    write_private_file(work_dir / DATA_FILE_NAME, data_bytes)
                except OSError as e:
                    raise ResourceError(f"failed to write data file: {e}", original_error=e) from e

            try:
                write_private_file(work_dir / SOURCE_FILE_NAME, source_bytes)
            except OSError as e:
                raise ResourceError(f"failed to write source file: {e}", original_error=e) from e

            log_compilation_start(compiler.name, work_dir, len(source_bytes), data is not None)

            compiler.compile(work_dir)

            try:
                pdf = (work_dir / OUTPUT_FILE_NAME).read_bytes()
            except OSError as e:
                raise ResourceError(f"failed to read output PDF: {e}", original_error=e) from e
    except GiveTypstError as e:
        log_compilation_result(
            success=False,
            elapsed_time=time.time() - start_time,
            error=str(e),
            compiler_output=getattr(e, "output", ""),
        )
        raise

    log_compilation_result(success=True, elapsed_time=time.time() - start_time, pdf_size=len(pdf))
    return pdf
