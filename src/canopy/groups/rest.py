"""REST shorthand: one named slot per method instead of a route map."""

from dataclasses import dataclass, field

from canopy.groups.group import RouterGroup
from canopy.groups.result import ApplyResult
from canopy.groups.route import Route
from canopy.routing.scope import Scope


@dataclass(slots=True)
class RestRouterGroup:
    """A resource endpoint with GET/POST/PUT/PATCH/DELETE slots.

    Base path, middleware tiers, hooks and sub-groups come from the
    embedded ``group``. Its ``routes`` are rebuilt from the slots on every
    apply, so anything set there directly is discarded::

        users = RestRouterGroup(
            get_route=Route(handler=list_users),
            post_route=Route(handler=create_user, middlewares=[require_admin]),
            group=RouterGroup(base_path="/users"),
        )
    """

    get_route: Route | None = None
    post_route: Route | None = None
    put_route: Route | None = None
    patch_route: Route | None = None
    delete_route: Route | None = None
    group: RouterGroup = field(default_factory=RouterGroup)

    @property
    def named_routes(self) -> dict[str, Route | None]:
        return {
            "GET": self.get_route,
            "POST": self.post_route,
            "PUT": self.put_route,
            "PATCH": self.patch_route,
            "DELETE": self.delete_route,
        }

    def expand(self) -> dict[str, list[Route]]:
        """The route map the slots stand for: every slot with a handler."""
        return {
            method: [route]
            for method, route in self.named_routes.items()
            if route is not None and route.handler is not None
        }

    def apply(self, parent: Scope) -> ApplyResult:
        self.group.routes = self.expand()
        return self.group.apply(parent)
