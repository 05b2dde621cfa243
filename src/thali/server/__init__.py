"""ASGI application factory and dependencies for the Thali server."""

from thali.server.app import app, create_app

__all__ = ["app", "create_app"]
