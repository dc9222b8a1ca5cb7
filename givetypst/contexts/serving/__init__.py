"""
Serving Context

Responsibilities:
- Exposes POST /generate and GET /health
- Maps pipeline errors to plain-text HTTP responses
- Reports compiler and bucket health

Owns: HTTP surface, health checks
Never: Contains generation logic
"""

from givetypst.contexts.serving.app import build_compiler, create_app
from givetypst.contexts.serving.health import check_health

__all__ = ["build_compiler", "check_health", "create_app"]
