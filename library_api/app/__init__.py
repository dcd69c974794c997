"""
Application package.

``main`` builds the FastAPI app, ``api`` holds the route dispatcher and
routers, ``services`` owns the in-memory catalog and ``schemas`` the
pydantic models passed between them.
"""

from .main import app  # noqa: F401
