"""
Main entrypoint for the Library API.

``create_app`` configures logging, builds the FastAPI application and
mounts the API router.  The module instantiates ``app`` at import time
so it can be served directly, e.g.::

    uvicorn library_api.app.main:app --reload

Title, version and the mount prefix come from ``Settings`` in
``core.config``.
"""

import logging

from fastapi import FastAPI

from .core.config import settings
from .core.logging_config import setup_logging
from .api.router import router as api_router
from .api.endpoints.library import dispatcher

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured application with the library controller mounted
        under ``settings.api_prefix`` (``/api/library`` by default).
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
    )

    @app.get("/")
    async def health_check() -> dict:
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.api_prefix)

    for binding in dispatcher.bindings:
        logger.debug("Library route %s", binding)
    logger.info("Library API ready with %d route bindings", len(dispatcher.bindings))

    return app


app = create_app()
