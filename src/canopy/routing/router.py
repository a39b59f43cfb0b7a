"""Compiled router with trie-based path matching.

Endpoints are added when the app freezes and the trie is read-only from
then on, so concurrent request workers can match without locking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from canopy.errors import ConfigurationError, MethodNotAllowed, NotFound
from canopy.routing.route import Endpoint, PathSegment, RouteMatch

# Regex for each supported ``{name:type}`` converter
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id:int}"    -> [PathSegment("users"), PathSegment("{id:int}", is_param=True, ...)]
        "/files/{rest:path}" -> [PathSegment("files"), PathSegment("{rest:path}", ...)]

    Raises ``ConfigurationError`` for ``<param>`` placeholders and unknown
    converters.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route path {path!r} uses <param> placeholders. "
                "Canopy expects {param} or {param:type}."
            )
            raise ConfigurationError(msg)
        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue
        param_name, _, param_type = part[1:-1].partition(":")
        param_type = param_type or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown path converter {param_type!r} in route {path!r}."
            raise ConfigurationError(msg)
        segments.append(
            PathSegment(value=part, is_param=True, param_name=param_name, param_type=param_type)
        )
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "endpoints", "param_child")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        # One parameter edge per level
        self.param_child: _ParamEdge | None = None
        self.catch_all: _CatchAllEdge | None = None
        self.endpoints: dict[str, Endpoint] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """Consumes the remaining path."""

    param_name: str
    endpoints: dict[str, Endpoint]


class Router:
    """Trie router keyed by path segment, then by method.

    Usage::

        router = Router()
        router.add(Endpoint("/users/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, endpoint: Endpoint) -> None:
        """Add an endpoint. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(endpoint.path):
            if seg.is_param and seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(seg.param_name or "path", {})
                self._store(node.catch_all.endpoints, endpoint)
                return

            if seg.is_param:
                node = self._param_node(node, seg, endpoint.path)
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        self._store(node.endpoints, endpoint)

    @staticmethod
    def _param_node(node: _TrieNode, seg: PathSegment, path: str) -> _TrieNode:
        edge = node.param_child
        if edge is None:
            edge = _ParamEdge(
                param_name=seg.param_name or "",
                param_type=seg.param_type,
                regex=re.compile(f"^{CONVERTERS[seg.param_type]}$"),
                node=_TrieNode(),
            )
            node.param_child = edge
        elif (edge.param_name, edge.param_type) != (seg.param_name, seg.param_type):
            msg = (
                f"Path parameter {seg.value!r} in {path!r} conflicts with "
                f"{{{edge.param_name}:{edge.param_type}}} already registered at the same position."
            )
            raise ConfigurationError(msg)
        return edge.node

    @staticmethod
    def _store(table: dict[str, Endpoint], endpoint: Endpoint) -> None:
        for method in endpoint.methods:
            if method in table:
                msg = f"Route {method} {endpoint.path!r} is already registered."
                raise ConfigurationError(msg)
            table[method] = endpoint

    @property
    def routes(self) -> list[Endpoint]:
        """Every registered endpoint, depth first, in insertion order per node."""
        seen: set[int] = set()
        result: list[Endpoint] = []

        def collect(table: dict[str, Endpoint]) -> None:
            for endpoint in table.values():
                if id(endpoint) not in seen:
                    seen.add(id(endpoint))
                    result.append(endpoint)

        def walk(node: _TrieNode) -> None:
            collect(node.endpoints)
            for child in node.children.values():
                walk(child)
            if node.param_child is not None:
                walk(node.param_child.node)
            if node.catch_all is not None:
                collect(node.catch_all.endpoints)

        walk(self._root)
        return result

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request method and path.

        Raises ``NotFound`` if no route matches the path and
        ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})
        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        endpoints, params = result
        if method in endpoints:
            return RouteMatch(endpoint=endpoints[method], path_params=params)
        raise MethodNotAllowed(frozenset(endpoints))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Endpoint], dict[str, str]] | None:
        """Static child first, then the parameter edge, then the catch-all."""
        if index == len(parts):
            return (node.endpoints, params) if node.endpoints else None

        part = parts[index]

        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        edge = node.param_child
        if edge is not None and edge.regex.match(part):
            result = self._match_node(
                edge.node, parts, index + 1, {**params, edge.param_name: part}
            )
            if result is not None:
                return result

        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.endpoints, {**params, node.catch_all.param_name: remaining}

        return None
