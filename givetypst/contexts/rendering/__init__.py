"""
Rendering Context

Responsibilities:
- Compiles Typst source and JSON data to PDF
- Manages temporary workspaces for each compilation
- Surfaces compiler diagnostics verbatim

Owns: Typst compilation, workspace lifecycle, compiler backends
Never: Reads from storage or interprets request bodies
"""

from givetypst.contexts.rendering.compiler import (
    ContainerTypstCompiler,
    LocalTypstCompiler,
    TypstCompiler,
    compile_typst,
    create_compiler,
)

__all__ = [
    "ContainerTypstCompiler",
    "LocalTypstCompiler",
    "TypstCompiler",
    "compile_typst",
    "create_compiler",
]
