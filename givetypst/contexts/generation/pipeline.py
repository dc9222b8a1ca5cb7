"""
Generate pipeline orchestration.

One request flows through:

    parse body -> validate -> resolve data -> fetch template -> compile -> PDF

Any step may fail; the failure is raised as a GiveTypstError whose
``status_code`` and string form become the HTTP response. Nothing is retried.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from givetypst.contexts.generation.data_resolver import DataResolver
from givetypst.contexts.generation.logger import _log_info, log_request_failed
from givetypst.contexts.generation.models import GenerateRequest, parse_generate_request
from givetypst.contexts.rendering.compiler import TypstCompiler, compile_typst
from givetypst.contexts.storage.fetcher import ArtifactFetcher
from givetypst.exceptions import DataFormatError, GiveTypstError, StorageError, ValidationError
from givetypst.utils.config import ServerSettings

PDF_CONTENT_TYPE = "application/pdf"
PDF_CONTENT_DISPOSITION = 'inline; filename="output.pdf"'


@dataclass(frozen=True)
class GeneratedDocument:
    """A compiled PDF and the headers it should be served with."""

    content: bytes
    content_type: str = PDF_CONTENT_TYPE
    content_disposition: str = PDF_CONTENT_DISPOSITION


class DocumentPipeline:
    """
    Turns a generate request body into a PDF.

    Args:
        settings: Process settings (size limits)
        fetcher: Fetcher for the bucket holding templates and data
        compiler: Typst compiler backend
    """

    def __init__(self, settings: ServerSettings, fetcher: ArtifactFetcher, compiler: TypstCompiler):
        self.settings = settings
        self.fetcher = fetcher
        self.compiler = compiler
        self.resolver = DataResolver(fetcher, settings.max_data_size)

    def fetch_template(self, key: str) -> bytes:
        """Fetch raw template bytes from the bucket, bounded by max_template_size."""
        return self.fetcher.fetch(key, self.settings.max_template_size).content

    def resolve_data(self, request: GenerateRequest) -> Optional[Dict[str, Any]]:
        """Resolve request data, prefixing storage and format failures."""
        try:
            return self.resolver.resolve(request.data, request.data_key)
        except (StorageError, DataFormatError) as e:
            raise e.add_context("failed to fetch data")

    def run(self, request: GenerateRequest) -> GeneratedDocument:
        """
        Run the pipeline for a parsed request.

        Raises:
            ValidationError: If templateKey is missing or both data sources are set
            StorageError: If the template or data file cannot be fetched
            DataFormatError: If the data file is not a JSON object
            CompileError: If typst rejects the template
            ResourceError: If the compilation workspace fails
        """
        # Validate templateKey is provided.
        if not request.template_key:
            raise ValidationError("templateKey is required")

        data = self.resolve_data(request)

        try:
            source = self.fetch_template(request.template_key)
        except StorageError as e:
            raise e.add_context("failed to fetch template")

        pdf = compile_typst(source, data, compiler=self.compiler)
        return GeneratedDocument(content=pdf)

    def generate(self, body: bytes) -> GeneratedDocument:
        """
        Parse a raw request body and run the pipeline.

        Args:
            body: Raw JSON request body

        Returns:
            GeneratedDocument with the PDF bytes

        Raises:
            GiveTypstError: On any failure (see run())
        """
        start_time = time.time()
        template_key = ""

        try:
            request = parse_generate_request(body)
            template_key = request.template_key or ""
            document = self.run(request)
        except GiveTypstError as e:
            log_request_failed(template_key, e.status_code, str(e))
            raise

        _log_info(
            f"Generated {template_key}: {len(document.content)} bytes ({time.time() - start_time:.2f}s)"
        )
        return document
