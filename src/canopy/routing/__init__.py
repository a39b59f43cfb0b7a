"""Routing — scopes for registration, compiled trie for matching.

Route trees register onto ``Scope`` objects during the build. When the
app freezes, every registration is compiled into an ``Endpoint`` and
added to the immutable ``Router`` trie.
"""

from canopy.routing.route import Endpoint, RouteMatch
from canopy.routing.router import Router
from canopy.routing.scope import Scope, join_paths

__all__ = ["Endpoint", "RouteMatch", "Router", "Scope", "join_paths"]
