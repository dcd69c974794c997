"""
Pydantic schemas exchanged between the HTTP layer and the dispatcher.

``LibraryRequest`` is the transport-neutral view of an incoming
request: the HTTP method, the path relative to the library controller,
and the query and route values.  ``LibraryResponse`` carries the
rendered outcome; its ``body`` is either a list of titles (JSON), a
plain text title, an error detail mapping (JSON) or ``None`` for an
empty body.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class LibraryRequest(BaseModel):
    """A parsed request addressed to the library controller."""

    method: str = Field(..., description="HTTP method, e.g. GET")
    path: str = Field("", description="Path relative to /api/library, e.g. get/3; segments may be percent-encoded")
    query: Dict[str, str] = Field(default_factory=dict, description="Query string values")
    route_values: Dict[str, str] = Field(
        default_factory=dict,
        description="Route data captured from the path; filled in by the dispatcher",
    )


class LibraryResponse(BaseModel):
    """The outcome of dispatching a ``LibraryRequest``."""

    status_code: int = 200
    body: Union[List[str], Dict[str, str], str, None] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.body is None
