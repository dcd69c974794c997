"""
Routing and dispatch for the library controller.

Every reachable endpoint is declared once in ``ROUTE_TABLE`` as a
``RouteBinding``: an HTTP method, a path pattern relative to
``/api/library``, the logical operation it triggers and where each of
the operation's parameters comes from.  Several bindings may lead to
the same operation, and two bindings may share a path as long as their
methods differ; the method is part of the match key.

Path patterns are split into segments.  A segment written ``{name}`` is
a route variable and captures any non-empty value under ``name``; at
most one variable is allowed per pattern.  Literal segments compare
case-insensitively.

``Dispatcher.dispatch`` takes a ``LibraryRequest`` and returns a
``LibraryResponse``.  Missing routes become 404, a known path with the
wrong method becomes 405 with an ``Allow`` header, and a parameter that
cannot be converted becomes 400.  Everything else is decided by the
operation itself; "not found" outcomes are ordinary status codes, not
exceptions.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import unquote

from fastapi import status

from library_api.app.schemas.library import LibraryRequest, LibraryResponse
from library_api.app.services.library_service import LibraryService

logger = logging.getLogger(__name__)

JOKE_MESSAGE = "Это очень плохая шутка!"

_VARIABLE_RE = re.compile(r"^\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)\}$")
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")


class Operation(str, Enum):
    """Logical operations offered by the library controller."""

    LIST_ALL = "ListAll"
    FETCH_BY_INDEX = "FetchByIndex"
    ADD_BOOK = "AddBook"
    REPLACE_BOOK = "ReplaceBook"
    DELETE_BOOK = "DeleteBook"


class ParamSource(str, Enum):
    QUERY = "query"
    ROUTE = "route"


class InvalidParameterError(ValueError):
    """Raised when a request parameter is missing or cannot be converted."""


@dataclass(frozen=True)
class ParamSpec:
    """Declares one operation parameter and where it is read from.

    A missing optional parameter takes the type's default: ``0`` for
    ``int`` and ``""`` for ``str``.  A required ``str`` parameter also
    rejects the empty string.
    """

    name: str
    source: ParamSource
    kind: type = str
    required: bool = False


@dataclass(frozen=True)
class RoutePattern:
    """A path template split into segments, e.g. ``get/{index}``."""

    template: str
    segments: Tuple[str, ...]
    variable: Optional[str] = None

    @classmethod
    def parse(cls, template: str) -> "RoutePattern":
        segments = tuple(s for s in template.strip("/").split("/") if s)
        variable = None
        for segment in segments:
            found = _VARIABLE_RE.match(segment)
            if found is None:
                if "{" in segment or "}" in segment:
                    raise ValueError(f"Malformed route segment {segment!r} in {template!r}")
                continue
            if variable is not None:
                raise ValueError(f"Route {template!r} declares more than one variable")
            variable = found.group("name")
        return cls(template=template, segments=segments, variable=variable)

    def _is_variable(self, segment: str) -> bool:
        return self.variable is not None and segment == "{%s}" % self.variable

    def match(self, parts: Tuple[str, ...]) -> Optional[Dict[str, str]]:
        """Return the captured route values if ``parts`` fits this pattern."""
        if len(parts) != len(self.segments):
            return None
        captured: Dict[str, str] = {}
        for expected, actual in zip(self.segments, parts):
            if self._is_variable(expected):
                if not actual:
                    return None
                captured[self.variable] = actual
            elif expected.lower() != actual.lower():
                return None
        return captured

    def overlaps(self, other: "RoutePattern") -> bool:
        """Whether some concrete path would match both patterns."""
        if len(self.segments) != len(other.segments):
            return False
        for mine, theirs in zip(self.segments, other.segments):
            if self._is_variable(mine) or other._is_variable(theirs):
                continue
            if mine.lower() != theirs.lower():
                return False
        return True


@dataclass(frozen=True)
class RouteBinding:
    method: str
    pattern: RoutePattern
    operation: Operation
    params: Tuple[ParamSpec, ...] = ()

    def __str__(self) -> str:
        return f"{self.method} /{self.pattern.template} -> {self.operation.value}"


@dataclass
class RouteMatch:
    binding: RouteBinding
    route_values: Dict[str, str]


def bind(method: str, template: str, operation: Operation, *params: ParamSpec) -> RouteBinding:
    """Build a ``RouteBinding`` from a method and a path template."""
    return RouteBinding(
        method=method.upper(),
        pattern=RoutePattern.parse(template),
        operation=operation,
        params=tuple(params),
    )


_INDEX_FROM_QUERY = ParamSpec("index", ParamSource.QUERY, int)
_INDEX_FROM_ROUTE = ParamSpec("index", ParamSource.ROUTE, int)
_BOOK_NAME_FROM_QUERY = ParamSpec("bookName", ParamSource.QUERY)

ROUTE_TABLE: Tuple[RouteBinding, ...] = (
    # ListAll: ``all`` is shared by GET, PATCH and OPTIONS; POST uses its own path.
    bind("GET", "all", Operation.LIST_ALL),
    bind("POST", "everything", Operation.LIST_ALL),
    bind("PATCH", "all", Operation.LIST_ALL),
    bind("OPTIONS", "all", Operation.LIST_ALL),
    # FetchByIndex with the index taken from the query string.
    bind("GET", "", Operation.FETCH_BY_INDEX, _INDEX_FROM_QUERY),
    bind("GET", "take", Operation.FETCH_BY_INDEX, _INDEX_FROM_QUERY),
    bind("GET", "get", Operation.FETCH_BY_INDEX, _INDEX_FROM_QUERY),
    # FetchByIndex with the index taken from route data.  The controller
    # root has no ``{index}`` segment, so POST there always reads index 0.
    bind("POST", "", Operation.FETCH_BY_INDEX, _INDEX_FROM_ROUTE),
    bind("GET", "get/{index}", Operation.FETCH_BY_INDEX, _INDEX_FROM_ROUTE),
    bind("POST", "bringBook", Operation.ADD_BOOK, _BOOK_NAME_FROM_QUERY),
    bind("POST", "sendBook", Operation.ADD_BOOK, _BOOK_NAME_FROM_QUERY),
    bind(
        "PUT",
        "changeBook/{oldName}",
        Operation.REPLACE_BOOK,
        ParamSpec("oldName", ParamSource.ROUTE, required=True),
        ParamSpec("newName", ParamSource.QUERY, required=True),
    ),
    # DeleteBook reads ``bookName`` from the generic route data.
    bind("DELETE", "deleteBook/{bookName}", Operation.DELETE_BOOK),
)


def split_path(path: str) -> Tuple[str, ...]:
    """Split a path into segments, decoding each one after the split.

    An encoded slash (``%2F``) therefore stays inside its segment.
    """
    stripped = path.strip("/")
    if not stripped:
        return ()
    return tuple(unquote(segment) for segment in stripped.split("/"))


def _lookup(values: Mapping[str, str], name: str) -> Optional[str]:
    # Query keys are case-insensitive.
    if name in values:
        return values[name]
    lowered = name.lower()
    for key, value in values.items():
        if key.lower() == lowered:
            return value
    return None


def _parse_int(name: str, raw: str) -> int:
    text = raw.strip()
    if not _INTEGER_RE.match(text):
        raise InvalidParameterError(f"The value {raw!r} is not valid for {name}.")
    return int(text)


class Dispatcher:
    """Resolve library requests against a route table and run the operation.

    Parameters
    ----------
    bindings : Iterable[RouteBinding]
        The route table.  Defaults to ``ROUTE_TABLE``.  The table must
        not contain two bindings with the same method whose patterns can
        match the same path; such a table is rejected with
        ``ValueError``.
    store : type
        The catalog to operate on.  Defaults to ``LibraryService``.
    """

    def __init__(self, bindings: Iterable[RouteBinding] = ROUTE_TABLE, store: Any = LibraryService) -> None:
        self._bindings: Tuple[RouteBinding, ...] = tuple(bindings)
        self._store = store
        self._check_unambiguous()
        self._handlers: Dict[Operation, Callable[[Dict[str, Any], Mapping[str, str]], LibraryResponse]] = {
            Operation.LIST_ALL: self._list_all,
            Operation.FETCH_BY_INDEX: self._fetch_by_index,
            Operation.ADD_BOOK: self._add_book,
            Operation.REPLACE_BOOK: self._replace_book,
            Operation.DELETE_BOOK: self._delete_book,
        }

    @property
    def bindings(self) -> Tuple[RouteBinding, ...]:
        return self._bindings

    def _check_unambiguous(self) -> None:
        for position, first in enumerate(self._bindings):
            for second in self._bindings[position + 1:]:
                if first.method == second.method and first.pattern.overlaps(second.pattern):
                    raise ValueError(f"Ambiguous routes: {first} and {second}")

    # ------------------------------------------------------------------
    # Matching

    def resolve(self, method: str, path: str) -> Optional[RouteMatch]:
        """Find the binding for ``method`` and ``path``, if any."""
        method = method.upper()
        parts = split_path(path)
        for binding in self._bindings:
            if binding.method != method:
                continue
            captured = binding.pattern.match(parts)
            if captured is not None:
                logger.debug("Resolved %s /%s to %s", method, path.strip("/"), binding)
                return RouteMatch(binding=binding, route_values=captured)
        return None

    def allowed_methods(self, path: str) -> List[str]:
        """Methods bound to any pattern matching ``path``, sorted."""
        parts = split_path(path)
        return sorted({b.method for b in self._bindings if b.pattern.match(parts) is not None})

    # ------------------------------------------------------------------
    # Dispatch

    def dispatch(self, request: LibraryRequest) -> LibraryResponse:
        match = self.resolve(request.method, request.path)
        if match is None:
            return self._no_route(request)

        route_values = dict(request.route_values)
        route_values.update(match.route_values)
        try:
            arguments = self._bind_arguments(match.binding, request.query, route_values)
        except InvalidParameterError as exc:
            logger.warning("Rejected %s /%s: %s", request.method.upper(), request.path.strip("/"), exc)
            return LibraryResponse(status_code=status.HTTP_400_BAD_REQUEST, body={"detail": str(exc)})

        return self._handlers[match.binding.operation](arguments, route_values)

    def _no_route(self, request: LibraryRequest) -> LibraryResponse:
        allowed = self.allowed_methods(request.path)
        if allowed:
            logger.warning("Method %s not allowed for /%s", request.method.upper(), request.path.strip("/"))
            return LibraryResponse(
                status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                body={"detail": "Method Not Allowed"},
                headers={"Allow": ", ".join(allowed)},
            )
        logger.warning("No route for %s /%s", request.method.upper(), request.path.strip("/"))
        return LibraryResponse(status_code=status.HTTP_404_NOT_FOUND, body={"detail": "Not Found"})

    @staticmethod
    def _bind_arguments(
        binding: RouteBinding,
        query: Mapping[str, str],
        route_values: Mapping[str, str],
    ) -> Dict[str, Any]:
        arguments: Dict[str, Any] = {}
        for spec in binding.params:
            if spec.source is ParamSource.QUERY:
                raw = _lookup(query, spec.name)
            else:
                raw = route_values.get(spec.name)

            if raw is None or (raw == "" and spec.kind is str):
                if spec.required:
                    raise InvalidParameterError(f"The {spec.name} field is required.")
                arguments[spec.name] = spec.kind()
            elif spec.kind is int:
                arguments[spec.name] = _parse_int(spec.name, raw)
            else:
                arguments[spec.name] = raw
        return arguments

    # ------------------------------------------------------------------
    # Operations

    def _list_all(self, arguments: Dict[str, Any], route_values: Mapping[str, str]) -> LibraryResponse:
        return LibraryResponse(body=self._store.list_all())

    def _fetch_by_index(self, arguments: Dict[str, Any], route_values: Mapping[str, str]) -> LibraryResponse:
        title, found = self._store.get_at(arguments["index"])
        if not found:
            return LibraryResponse(status_code=status.HTTP_418_IM_A_TEAPOT)
        return LibraryResponse(body=title)

    def _add_book(self, arguments: Dict[str, Any], route_values: Mapping[str, str]) -> LibraryResponse:
        book_name = arguments["bookName"]
        if not book_name:
            return LibraryResponse(body=JOKE_MESSAGE)
        self._store.add(book_name)
        return LibraryResponse()

    def _replace_book(self, arguments: Dict[str, Any], route_values: Mapping[str, str]) -> LibraryResponse:
        _, result = self._store.replace_first_match(arguments["oldName"], arguments["newName"])
        return LibraryResponse(body=result)

    def _delete_book(self, arguments: Dict[str, Any], route_values: Mapping[str, str]) -> LibraryResponse:
        # Read straight from route data; absent means empty.
        book_name = route_values.get("bookName") or ""
        removed = self._store.remove_first_match(book_name)
        return LibraryResponse(
            status_code=status.HTTP_200_OK if removed else status.HTTP_400_BAD_REQUEST,
        )
