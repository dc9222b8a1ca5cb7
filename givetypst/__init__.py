"""
givetypst - Generate PDFs from Typst templates stored in cloud storage

An HTTP service that fetches a Typst template (and optional JSON data) from a
bucket, compiles it with the typst CLI, and returns the rendered PDF.

Architecture:
- Storage Context: Bucket connectors and size-bounded artifact fetching
- Rendering Context: Typst compilation inside throwaway workspaces
- Generation Context: Request validation, data resolution, pipeline orchestration
- Serving Context: HTTP routes and health reporting
"""

__version__ = "0.1.0"
