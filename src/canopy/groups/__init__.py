"""Declarative route trees.

A tree of ``RouterGroup`` / ``RestRouterGroup`` nodes with ``Route``
leaves describes an API; ``canopy.build()`` applies it, once, to a fresh
app::

    tree = RouterGroup(
        persistent_middlewares=[request_id],
        routes={"GET": [Route(handler=index)]},
        sub_groups=[
            RestRouterGroup(
                get_route=Route(handler=list_users),
                post_route=Route(handler=create_user),
                group=RouterGroup(base_path="/users", middlewares=[require_auth]),
            ),
        ],
    )
    app = build(tree).unwrap()
"""

from canopy.groups.group import METHOD_ORDER, RouterGroup
from canopy.groups.protocol import Applicable
from canopy.groups.rest import RestRouterGroup
from canopy.groups.result import Applied, ApplyResult, Failed
from canopy.groups.route import Route

__all__ = [
    "METHOD_ORDER",
    "Applicable",
    "Applied",
    "ApplyResult",
    "Failed",
    "RestRouterGroup",
    "Route",
    "RouterGroup",
]
