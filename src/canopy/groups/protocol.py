"""The one capability every route tree node shares."""

from typing import Protocol, runtime_checkable

from canopy.groups.result import ApplyResult
from canopy.routing.scope import Scope


@runtime_checkable
class Applicable(Protocol):
    """Anything that can be mounted under a scope.

    ``RouterGroup`` and ``RestRouterGroup`` implement it; so can any
    custom node that rewrites itself and delegates to a ``RouterGroup``::

        @dataclass
        class HealthGroup:
            path: str = "/healthz"

            def apply(self, scope: Scope) -> ApplyResult:
                return RouterGroup(
                    base_path=self.path,
                    routes={"GET": [Route(handler=lambda: "ok")]},
                ).apply(scope)
    """

    def apply(self, scope: Scope) -> ApplyResult: ...
