"""A single registrable endpoint in a route tree."""

from collections.abc import Sequence
from dataclasses import dataclass

from canopy._internal.types import Handler
from canopy.errors import MissingHandler
from canopy.groups.result import Applied, ApplyResult, Failed
from canopy.middleware.protocol import Middleware
from canopy.routing.scope import Scope


@dataclass(frozen=True, slots=True)
class Route:
    """One handler for one method, bound to a path inside its group.

    ``path`` is relative to the owning group's mounted prefix; the
    default ``""`` registers at the prefix itself. ``middlewares`` apply to
    this route only and run after every group-level tier, immediately
    before ``handler``.

    A route without a handler can be constructed; it is rejected when
    applied.
    """

    path: str = ""
    handler: Handler | None = None
    middlewares: Sequence[Middleware] = ()

    def apply(self, scope: Scope, method: str, inherited: Sequence[Middleware] = ()) -> ApplyResult:
        """Register ``(*inherited, *middlewares, handler)`` on *scope*."""
        if self.handler is None:
            return Failed(
                MissingHandler(self.path, method=method, full_path=scope.full_path(self.path))
            )
        scope.handle(method, self.path, *inherited, *self.middlewares, self.handler)
        return Applied(scope)
