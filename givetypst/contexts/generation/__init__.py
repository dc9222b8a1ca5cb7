"""
Generation Context

Responsibilities:
- Validates generate requests
- Resolves template data (inline or from the bucket)
- Orchestrates fetch and compilation for one request

Owns: Request schema, data-source rules, pipeline ordering
Never: Talks HTTP directly or runs the compiler itself
"""

from givetypst.contexts.generation.data_resolver import DataResolver, parse_json_object
from givetypst.contexts.generation.models import GenerateRequest, parse_generate_request
from givetypst.contexts.generation.pipeline import DocumentPipeline, GeneratedDocument

__all__ = [
    "DataResolver",
    "DocumentPipeline",
    "GenerateRequest",
    "GeneratedDocument",
    "parse_generate_request",
    "parse_json_object",
]
