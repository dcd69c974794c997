"""
Top-level API router.

Aggregates the controller routers under a common router that
``create_app`` mounts at ``settings.api_prefix``.  When a new
controller is added, include its router here.
"""

from fastapi import APIRouter

from .endpoints import library

router = APIRouter()

# The library router declares its own "/library" paths on plain
# Starlette routes; do not add a prefix here or they would appear under
# ``/library/library``.
router.include_router(library.router, tags=["library"])
