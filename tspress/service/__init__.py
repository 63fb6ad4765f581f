"""HTTP service mode for tspress."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
