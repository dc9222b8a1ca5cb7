"""
HTTP application.

Routes:
    POST /generate  JSON body -> PDF (application/pdf) or plain-text error
    GET  /health    "OK" or 503 with a short diagnostic
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from givetypst import __version__
from givetypst.contexts.generation.pipeline import DocumentPipeline
from givetypst.contexts.rendering.compiler import TypstCompiler, create_compiler
from givetypst.contexts.serving.health import check_health
from givetypst.contexts.serving.logger import _log_debug, _log_info
from givetypst.contexts.storage.fetcher import ArtifactFetcher
from givetypst.exceptions import GiveTypstError
from givetypst.utils.config import ServerSettings


def build_compiler(settings: ServerSettings) -> TypstCompiler:
    """Create the compiler backend selected in settings."""
    if settings.compiler == "container":
        return create_compiler(
            "container", image=settings.container_image, timeout=settings.compile_timeout
        )
    return create_compiler("local", binary=settings.typst_binary, timeout=settings.compile_timeout)


def create_app(
    settings: ServerSettings,
    compiler: Optional[TypstCompiler] = None,
    fetcher: Optional[ArtifactFetcher] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Process settings
        compiler: Compiler backend (default: built from settings)
        fetcher: Artifact fetcher (default: one for settings.bucket_url)

    Returns:
        Configured FastAPI app
    """
    if compiler is None:
        compiler = build_compiler(settings)
    if fetcher is None:
        fetcher = ArtifactFetcher(settings.bucket_url, timeout=settings.fetch_timeout)

    pipeline = DocumentPipeline(settings, fetcher, compiler)

    app = FastAPI(title="givetypst", version=__version__)
    app.state.settings = settings
    app.state.pipeline = pipeline

    @app.exception_handler(GiveTypstError)
    async def handle_givetypst_error(request: Request, exc: GiveTypstError) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    @app.post("/generate")
    async def generate(request: Request) -> Response:
        body = await request.body()
        # Compilation blocks on a subprocess; keep it off the event loop
        document = await run_in_threadpool(pipeline.generate, body)
        return Response(
            content=document.content,
            media_type=document.content_type,
            headers={"Content-Disposition": document.content_disposition},
        )

    @app.get("/health", response_class=PlainTextResponse)
    def health() -> str:
        check_health(compiler, fetcher)
        _log_debug("Health check passed")
        return "OK"

    _log_info(f"Serving templates from {settings.bucket_url} with {compiler.__class__.__name__}")
    return app
