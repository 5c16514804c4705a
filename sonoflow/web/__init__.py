"""HTTP and WebSocket surface for SonoFlow."""

from .app import create_app

__all__ = ["create_app"]
