"""
Library controller endpoints.

FastAPI only delivers requests here; which operation runs is decided by
the ``Dispatcher`` and its route table.  Two catch-all Starlette routes
cover the controller root (``/library``) and everything below it.  They
carry no method filter, so every method reaches the dispatcher and 404
versus 405 is decided by the route table alone.

The Starlette request is reduced to a ``LibraryRequest`` and the
dispatcher's ``LibraryResponse`` is turned back into a Starlette
response:

- no body: empty response with the status code only;
- text: ``text/plain`` (a title, the joke message or a replacement result);
- list or mapping: JSON.
"""

from typing import Dict
from urllib.parse import quote

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

from library_api.app.api.dispatcher import Dispatcher
from library_api.app.schemas.library import LibraryRequest, LibraryResponse

CONTROLLER_PATH = "/library"

router = APIRouter()

dispatcher = Dispatcher()


def render(result: LibraryResponse) -> Response:
    """Convert a dispatch result into a Starlette response."""
    if result.is_empty:
        response: Response = Response(status_code=result.status_code)
    elif isinstance(result.body, str):
        response = PlainTextResponse(result.body, status_code=result.status_code)
    else:
        response = JSONResponse(result.body, status_code=result.status_code)
    response.headers.update(result.headers)
    return response


def relative_raw_path(request: Request) -> str:
    """The still percent-encoded path below the controller root.

    Starlette decodes the ``path`` parameter, which turns ``a%2Fb`` into
    two segments.  The dispatcher decodes each segment after splitting,
    so it is handed the raw form.
    """
    path = request.path_params.get("path", "")
    decoded_full = request.scope["path"]
    mount = decoded_full[: len(decoded_full) - len(path)].rstrip("/")
    raw = request.scope.get("raw_path")
    if raw:
        raw_full = raw.split(b"?", 1)[0].decode("utf-8", "replace")
        if raw_full.startswith(mount):
            return raw_full[len(mount):]
    return quote(path, safe="/")


def first_query_values(request: Request) -> Dict[str, str]:
    # The first occurrence of a repeated key wins.
    params = request.query_params
    return {key: params.getlist(key)[0] for key in params.keys()}


async def library_endpoint(request: Request) -> Response:
    library_request = LibraryRequest(
        method=request.method,
        path=relative_raw_path(request),
        query=first_query_values(request),
    )
    return render(dispatcher.dispatch(library_request))


router.routes.extend(
    [
        Route(CONTROLLER_PATH, library_endpoint, include_in_schema=False),
        Route(CONTROLLER_PATH + "/{path:path}", library_endpoint, include_in_schema=False),
    ]
)
