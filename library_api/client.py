"""Library API client.

A small wrapper around the library controller's HTTP endpoints built on
``requests``.  Each method returns a tuple ``(data, error)``: on
success ``error`` is ``None``; on failure ``data`` is ``None`` (or
``False``) and ``error`` is a dictionary with the keys ``status_code``
and ``message``.

Outcomes that the API reports with a status code but that are part of
its normal contract are not errors here:

* :meth:`add_book` returns the joke message when the name is empty;
* :meth:`change_book` returns ``""`` when the old title is absent;
* :meth:`delete_book` returns ``False`` when the title is absent (400).

:meth:`get_book` treats the 418 reply for an unknown index as an error.

Any object with a ``requests.Session``-compatible ``request`` method can
be passed as ``session`` (FastAPI's ``TestClient`` works).  The timeout
is only sent to real ``requests.Session`` objects.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class LibraryClient:
    """Client for the ``/api/library`` endpoints."""

    def __init__(
        self,
        *,
        base_url: str,
        prefix: str = "/api/library",
        session: Optional[Any] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: Server root, e.g. ``http://localhost:8000``.
            prefix: Path of the library controller on that server.
            session: Optional requests session.  A new one is created
                when omitted.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.prefix = "/" + prefix.strip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(
        self, method: str, path: str = "", *, params: Dict[str, Any] | None = None
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Send a request and return ``(response, error)``.

        Only transport failures produce an error here; status codes are
        interpreted by the calling method.
        """
        url = f"{self.base_url}{self.prefix}"
        if path:
            url = f"{url}/{path}"
        options: Dict[str, Any] = {}
        # Only requests sessions take a per-request timeout; TestClient deprecates it.
        if isinstance(self.session, requests.Session):
            options["timeout"] = self.timeout
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(method=method, url=url, params=params, **options)
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}
        return response, None

    @staticmethod
    def _error(response: Any) -> Error:
        message = ""
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("detail") or str(body)
        except ValueError:
            message = response.text
        if not message:
            message = f"HTTP {response.status_code}"
        logger.error("API request failed (%s): %s", response.status_code, message)
        return {"status_code": response.status_code, "message": message}

    # ------------------------------------------------------------------
    # Catalog operations
    # ------------------------------------------------------------------
    def list_books(self, *, method: str = "GET") -> Tuple[List[str], Optional[Error]]:
        """Return all titles.

        ``method`` selects one of the equivalent list routes: ``GET``,
        ``PATCH`` and ``OPTIONS`` use ``all``, ``POST`` uses ``everything``.
        """
        method = method.upper()
        path = "everything" if method == "POST" else "all"
        response, error = self._request(method, path)
        if error:
            return [], error
        if response.status_code != 200:
            return [], self._error(response)
        return response.json(), None

    def get_book(self, index: int, *, from_route: bool = False) -> Tuple[Optional[str], Optional[Error]]:
        """Fetch the title at ``index`` via ``get?index=`` or ``get/{index}``."""
        if from_route:
            response, error = self._request("GET", f"get/{index}")
        else:
            response, error = self._request("GET", "get", params={"index": index})
        if error:
            return None, error
        if response.status_code != 200:
            return None, self._error(response)
        return response.text, None

    def add_book(self, name: str) -> Tuple[Optional[str], Optional[Error]]:
        """Add a title.  Returns the server's message, if any."""
        response, error = self._request("POST", "bringBook", params={"bookName": name})
        if error:
            return None, error
        if response.status_code != 200:
            return None, self._error(response)
        return response.text or None, None

    def change_book(self, old_name: str, new_name: str) -> Tuple[Optional[str], Optional[Error]]:
        """Rename the first ``old_name``.  Returns ``new_name`` or ``""``."""
        response, error = self._request(
            "PUT", f"changeBook/{quote(old_name, safe='')}", params={"newName": new_name}
        )
        if error:
            return None, error
        if response.status_code != 200:
            return None, self._error(response)
        return response.text, None

    def delete_book(self, name: str) -> Tuple[bool, Optional[Error]]:
        """Delete the first ``name``.  ``False`` means it was not in the catalog."""
        response, error = self._request("DELETE", f"deleteBook/{quote(name, safe='')}")
        if error:
            return False, error
        if response.status_code == 200:
            return True, None
        if response.status_code == 400:
            return False, None
        return False, self._error(response)
