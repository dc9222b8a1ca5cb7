"""Shared fixtures: file-backed buckets and a compiler that needs no typst install."""

import stat
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

from givetypst.contexts.rendering.compiler import DATA_FILE_NAME, OUTPUT_FILE_NAME, SOURCE_FILE_NAME
from givetypst.exceptions import CompileError

FAKE_PDF_HEADER = b"%PDF-1.7\n"


class FakeCompiler:
    """
    Stand-in compiler that "renders" by echoing its inputs into output.pdf.

    Records what it saw in the workspace so tests can assert on it.
    """

    name = "typst"

    def __init__(self, available: bool = True, error_output: Optional[str] = None, write_output: bool = True):
        self.available = available
        self.error_output = error_output
        self.write_output = write_output
        self.work_dirs = []
        self.files: Dict[str, bytes] = {}
        self.modes: Dict[str, int] = {}

    def is_available(self) -> bool:
        return self.available

    def compile(self, work_dir: Path) -> None:
        self.work_dirs.append(work_dir)
        self.files = {p.name: p.read_bytes() for p in work_dir.iterdir()}
        self.modes = {p.name: stat.S_IMODE(p.stat().st_mode) for p in work_dir.iterdir()}

        if self.error_output is not None:
            raise CompileError(f"compile failed: {self.error_output}", output=self.error_output)

        if self.write_output:
            content = FAKE_PDF_HEADER + self.files[SOURCE_FILE_NAME]
            if DATA_FILE_NAME in self.files:
                content += b"\n" + self.files[DATA_FILE_NAME]
            (work_dir / OUTPUT_FILE_NAME).write_bytes(content)


@pytest.fixture()
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture()
def make_bucket(tmp_path) -> Callable[[Dict[str, bytes]], str]:
    """Return a factory that writes files into a fresh directory and returns its file:// URL."""
    counter = {"n": 0}

    def _make(files: Dict[str, bytes]) -> str:
        counter["n"] += 1
        root = tmp_path / f"bucket{counter['n']}"
        root.mkdir()
        for key, content in files.items():
            path = root / key
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        return root.as_uri()

    return _make


@pytest.fixture()
def compiler_factory() -> Callable[..., FakeCompiler]:
    """Build FakeCompilers with non-default behavior (unavailable, failing, silent)."""
    return FakeCompiler
