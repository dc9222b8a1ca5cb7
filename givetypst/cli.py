#!/usr/bin/env python3
"""
givetypst CLI

Generate PDFs from Typst templates stored in cloud storage.

Commands:
    serve   - Run the HTTP server
    render  - Compile a local template (and optional JSON data) to PDF
    version - Show version and exit

Environment Variables:
    BUCKET_URL          URL of the cloud storage bucket containing templates (required for serve)
    PORT                HTTP port to listen on (overrides --port)
    MAX_TEMPLATE_SIZE   Maximum template file size in bytes (default: 1048576)
    MAX_DATA_SIZE       Maximum data file size in bytes (default: 10485760)

Examples:\n

    givetypst serve                                        # Serve on port 8080

    givetypst serve --port 9000 --verbose                  # Debug logging

    givetypst render invoice.typ --data invoice.json       # Compile locally
"""

from pathlib import Path
from typing import Optional

import typer
import uvicorn
from loguru import logger
from typing_extensions import Annotated

from givetypst import __version__
from givetypst.contexts.generation.data_resolver import parse_json_object
from givetypst.contexts.rendering.compiler import compile_typst
from givetypst.contexts.serving.app import build_compiler, create_app
from givetypst.exceptions import GiveTypstError
from givetypst.utils.config import load_settings
from givetypst.utils.logger import setup_logger

SHUTDOWN_TIMEOUT = 10

app = typer.Typer(
    help="Generate PDFs from Typst templates stored in cloud storage",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("serve")
def serve_command(
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="HTTP port to listen on (default: 8080)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output (debug mode)"),
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML config file", exists=True, dir_okay=False),
    ] = None,
    compiler: Annotated[
        Optional[str],
        typer.Option("--compiler", help="Compiler backend: local or container"),
    ] = None,
):
    """
    Run the HTTP server.

    Requires BUCKET_URL. Stops gracefully on SIGINT/SIGTERM.

    Examples:\n

        $ BUCKET_URL=file:///srv/templates givetypst serve

        $ BUCKET_URL=s3://templates?region=eu-west-1 givetypst serve --compiler container
    """
    setup_logger(verbose=verbose, serialize=True)

    try:
        settings = load_settings(config, port=port, verbose=verbose, compiler=compiler)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)

    if not settings.bucket_url:
        logger.error("BUCKET_URL environment variable is required")
        raise typer.Exit(code=1)

    application = create_app(settings)

    logger.info(f"starting HTTP server on port {settings.port}")
    uvicorn.run(
        application,
        host="0.0.0.0",
        port=settings.port,
        log_level="debug" if verbose else "info",
        timeout_graceful_shutdown=SHUTDOWN_TIMEOUT,
    )
    logger.info("server stopped gracefully")


@app.command("render")
def render_command(
    template: Annotated[
        Path,
        typer.Argument(help="Typst template file", exists=True, dir_okay=False),
    ],
    data: Annotated[
        Optional[Path],
        typer.Option("--data", "-d", help="JSON data file exposed to the template as data.json", exists=True, dir_okay=False),
    ] = None,
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Where to write the PDF"),
    ] = Path("output.pdf"),
    compiler: Annotated[
        Optional[str],
        typer.Option("--compiler", help="Compiler backend: local or container"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show compiler output"),
    ] = False,
):
    """
    Compile a local Typst template to PDF without a bucket or server.

    Uses the same compilation path as the server.

    Examples:\n

        $ givetypst render report.typ                            # Writes output.pdf

        $ givetypst render report.typ -d report.json -o out.pdf  # With data
    """
    setup_logger(verbose=verbose)

    try:
        settings = load_settings(compiler=compiler)
        data_obj = parse_json_object(data.read_bytes(), key=str(data)) if data else None
        pdf = compile_typst(template.read_bytes(), data_obj, compiler=build_compiler(settings))
    except (GiveTypstError, ValueError) as e:
        typer.secho(f"✗ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output.write_bytes(pdf)
    typer.secho(f"✓ Wrote {output} ({len(pdf)} bytes)", fg=typer.colors.GREEN, bold=True)


@app.command("version")
def version_command():
    """Show version and exit."""
    typer.echo(f"givetypst version {__version__}")


if __name__ == "__main__":
    app()
