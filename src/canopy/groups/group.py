"""Generic route group — the interior node of a route tree.

Applying a group walks five steps, each of which can end the walk:

1. mount: derive the group's scope from the parent's and bind
   ``persistent_middlewares`` to it;
2. pre-hook;
3. register the group's own routes with ``middlewares`` in front of them;
4. apply each sub-group under the mounted scope;
5. post-hook.

The first failure is returned as is. Nothing already registered is
undone; a router behind a failed build must be thrown away.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from canopy._internal.types import Hook
from canopy.errors import HookFailure
from canopy.groups.protocol import Applicable
from canopy.groups.result import Applied, ApplyResult, Failed
from canopy.groups.route import Route
from canopy.middleware.protocol import Middleware
from canopy.routing.scope import Scope

logger = logging.getLogger("canopy.build")

# Methods outside this list keep the mapping's insertion order, after these
METHOD_ORDER: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE")


def ordered_methods(routes: Mapping[str, Sequence[Route]]) -> list[str]:
    """The keys of *routes* in registration order.

    Keys are ranked case-insensitively, so ``"get"`` sorts with ``"GET"``.
    """
    rank = {method: index for index, method in enumerate(METHOD_ORDER)}
    # sorted() is stable: unknown methods keep their insertion order
    return sorted(routes, key=lambda method: rank.get(method.upper(), len(rank)))


def run_hook(hook: Hook, scope: Scope, stage: str, base_path: str) -> Failed | None:
    """Call a lifecycle hook; a raised or returned exception fails the build."""
    try:
        signal = hook(scope)
    except Exception as exc:
        signal = exc
    if isinstance(signal, BaseException):
        return Failed(HookFailure(stage, signal, base_path=base_path))
    return None


@dataclass(slots=True)
class RouterGroup:
    """Routes sharing a base path and middleware, plus nested groups.

    Attributes:
        base_path: Appended to the parent's mounted path. ``""`` adds no
            segment.
        middlewares: Run for this group's own routes only, after the
            persistent tier. Sub-groups do not see them.
        persistent_middlewares: Bound to the mounted scope, so they run for
            this group's routes and for everything in its sub-groups,
            which add their own rather than replacing these.
        routes: HTTP method to the routes registered for it, in order.
        pre_hook: Called with the mounted scope before any route is
            registered. Raise, or return an exception, to stop the build.
        post_hook: Called with the mounted scope after every route and
            sub-group is registered. Same failure contract as ``pre_hook``.
        sub_groups: Child nodes mounted under this group's scope.

    Construction validates nothing; a route without a handler is
    rejected when the group is applied.
    """

    base_path: str = ""
    middlewares: Sequence[Middleware] = ()
    persistent_middlewares: Sequence[Middleware] = ()
    routes: dict[str, list[Route]] = field(default_factory=dict)
    pre_hook: Hook | None = None
    post_hook: Hook | None = None
    sub_groups: list[Applicable] = field(default_factory=list)

    def apply(self, parent: Scope) -> ApplyResult:
        """Mount this group under *parent* and register everything in it."""
        scope = parent.group(self.base_path)
        scope.use(*self.persistent_middlewares)
        logger.debug("mounted group %s", scope.base_path)

        if self.pre_hook is not None:
            failed = run_hook(self.pre_hook, scope, "pre", scope.base_path)
            if failed is not None:
                return failed

        for method in ordered_methods(self.routes):
            for route in self.routes[method]:
                result = route.apply(scope, method, self.middlewares)
                if isinstance(result, Failed):
                    return result

        for child in self.sub_groups:
            result = child.apply(scope)
            if isinstance(result, Failed):
                return result

        if self.post_hook is not None:
            failed = run_hook(self.post_hook, scope, "post", scope.base_path)
            if failed is not None:
                return failed

        return Applied(scope)
