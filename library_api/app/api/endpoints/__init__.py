"""
Endpoint subpackage.

Each module defines an APIRouter for one controller.  The routers are
aggregated in ``api/router.py`` and included in the application there.
"""
