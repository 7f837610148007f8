"""Web API for the site geometry engine."""

from .app import GeometryWebApp, create_app

__all__ = ['GeometryWebApp', 'create_app']
