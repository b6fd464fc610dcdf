"""API route modules."""
from jlpt_api.routes import admin, catalog, sessions

__all__ = ["admin", "catalog", "sessions"]
