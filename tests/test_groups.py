"""Tests for canopy.groups — applying Route and RouterGroup trees."""

import pytest

from canopy.app import App
from canopy.context import g
from canopy.errors import HookFailure, MissingHandler
from canopy.groups import METHOD_ORDER, Applicable, Applied, Failed, Route, RouterGroup
from canopy.groups.group import ordered_methods
from canopy.http.request import Request
from canopy.testing import TestClient


def ok() -> str:
    return ""


def tag(name: str):
    """Middleware that appends *name* to ``g.trail``."""

    async def mw(request: Request, next):
        g.setdefault("trail", []).append(name)
        return await next(request)

    mw.__name__ = name
    return mw


def trail() -> str:
    return ",".join(g.get("trail", []))


class TestRoute:
    def test_apply_registers_under_scope(self) -> None:
        app = App()
        scope = app.root.group("/api")
        result = Route(path="/users", handler=ok).apply(scope, "GET")
        assert isinstance(result, Applied)
        assert result.scope is scope
        assert [(p.method, p.path) for p in app.registered] == [("GET", "/api/users")]

    def test_default_path_is_group_prefix(self) -> None:
        app = App()
        Route(handler=ok).apply(app.root.group("/items"), "POST")
        assert app.registered[0].path == "/items"

    def test_missing_handler_fails(self) -> None:
        app = App()
        result = Route(path="/x").apply(app.root.group("/api"), "GET")
        assert isinstance(result, Failed)
        assert not result.ok
        assert isinstance(result.error, MissingHandler)
        assert result.error.path == "/x"
        assert result.error.method == "GET"
        assert result.error.full_path == "/api/x"
        assert app.registered == ()

    def test_construction_without_handler_is_allowed(self) -> None:
        route = Route(path="/later")
        assert route.handler is None

    def test_chain_order(self) -> None:
        app = App()
        first, second = tag("group"), tag("route")
        Route(handler=ok, middlewares=[second]).apply(app.root, "GET", [first])
        assert app.registered[0].chain == (first, second, ok)


class TestRouterGroupApply:
    async def test_all_methods_at_base_path(self) -> None:
        app = App()
        group = RouterGroup(
            base_path="/test",
            routes={method: [Route(handler=ok)] for method in ("GET", "POST", "PATCH", "DELETE")},
        )
        assert isinstance(group.apply(app.root.group("")), Applied)

        async with TestClient(app) as client:
            for method in ("GET", "POST", "PATCH", "DELETE"):
                response = await client.request(method, "/test")
                assert response.status == 200, method

    def test_missing_handler_in_routes(self) -> None:
        app = App()
        result = RouterGroup(routes={"GET": [Route()]}).apply(app.root)
        assert isinstance(result, Failed)
        assert isinstance(result.error, MissingHandler)
        assert "handler is None for route" in str(result.error)

    def test_applied_scope_is_mounted_scope(self) -> None:
        app = App()
        result = RouterGroup(base_path="/v1").apply(app.root)
        assert isinstance(result, Applied)
        assert result.scope.base_path == "/v1"
        assert result.scope.parent is app.root

    def test_empty_group_registers_nothing(self) -> None:
        app = App()
        assert isinstance(RouterGroup().apply(app.root), Applied)
        assert app.registered == ()

    def test_is_applicable(self) -> None:
        assert isinstance(RouterGroup(), Applicable)
        assert callable(RouterGroup().apply)

    async def test_nested(self) -> None:
        app = App()
        group = RouterGroup(
            base_path="/test",
            sub_groups=[RouterGroup(base_path="/nested", routes={"GET": [Route(handler=ok)]})],
        )
        assert isinstance(group.apply(app.root.group("")), Applied)

        async with TestClient(app) as client:
            assert (await client.get("/test/nested")).status == 200
            assert (await client.get("/test")).status == 404

    def test_methods_registered_in_canonical_order(self) -> None:
        app = App()
        RouterGroup(
            routes={
                "OPTIONS": [Route(handler=ok)],
                "DELETE": [Route(handler=ok)],
                "GET": [Route(handler=ok)],
                "PUT": [Route(handler=ok)],
            }
        ).apply(app.root)
        assert [p.method for p in app.registered] == ["GET", "PUT", "DELETE", "OPTIONS"]

    def test_routes_within_method_keep_order(self) -> None:
        app = App()
        RouterGroup(
            routes={"GET": [Route(path="/b", handler=ok), Route(path="/a", handler=ok)]}
        ).apply(app.root)
        assert [p.path for p in app.registered] == ["/b", "/a"]

    def test_own_routes_before_sub_groups(self) -> None:
        app = App()
        RouterGroup(
            base_path="/p",
            routes={"GET": [Route(handler=ok)]},
            sub_groups=[RouterGroup(base_path="/c", routes={"GET": [Route(handler=ok)]})],
        ).apply(app.root)
        assert [p.path for p in app.registered] == ["/p", "/p/c"]

    def test_reapply_to_fresh_app_is_identical(self) -> None:
        group = RouterGroup(
            base_path="/r",
            routes={"POST": [Route(handler=ok)], "GET": [Route(path="/x", handler=ok)]},
        )
        first, second = App(), App()
        group.apply(first.root)
        group.apply(second.root)
        assert [(p.method, p.path) for p in first.registered] == [
            (p.method, p.path) for p in second.registered
        ]


class TestOrderedMethods:
    def test_known_methods_first(self) -> None:
        routes = {"TRACE": [], "PATCH": [], "GET": [], "HEAD": []}
        assert list(ordered_methods(routes)) == ["GET", "PATCH", "TRACE", "HEAD"]

    def test_method_order_constant(self) -> None:
        assert METHOD_ORDER == ("GET", "POST", "PUT", "PATCH", "DELETE")


class TestRouterGroupMiddleware:
    async def test_route_middleware_reaches_handler(self) -> None:
        async def set_marker(request: Request, next):
            g.test = "test"
            return await next(request)

        def handler() -> str:
            return g.test

        app = App()
        RouterGroup(
            routes={"GET": [Route(handler=handler, middlewares=[set_marker])]}
        ).apply(app.root.group(""))

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "test"

    async def test_tier_order(self) -> None:
        app = App()
        RouterGroup(
            persistent_middlewares=[tag("persistent")],
            middlewares=[tag("group")],
            routes={"GET": [Route(handler=trail, middlewares=[tag("route")])]},
        ).apply(app.root)

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.text == "persistent,group,route"

    async def test_persistent_inherited_plain_not(self) -> None:
        app = App()
        RouterGroup(
            base_path="/outer",
            persistent_middlewares=[tag("outer-persistent")],
            middlewares=[tag("outer-plain")],
            sub_groups=[
                RouterGroup(
                    base_path="/inner",
                    persistent_middlewares=[tag("inner-persistent")],
                    middlewares=[tag("inner-plain")],
                    routes={"GET": [Route(handler=trail)]},
                ),
            ],
        ).apply(app.root)

        async with TestClient(app) as client:
            response = await client.get("/outer/inner")
        assert response.text == "outer-persistent,inner-persistent,inner-plain"

    async def test_sibling_does_not_see_persistent(self) -> None:
        app = App()
        RouterGroup(
            sub_groups=[
                RouterGroup(
                    base_path="/a",
                    persistent_middlewares=[tag("a")],
                    routes={"GET": [Route(handler=trail)]},
                ),
                RouterGroup(base_path="/b", routes={"GET": [Route(handler=trail)]}),
            ],
        ).apply(app.root)

        async with TestClient(app) as client:
            assert (await client.get("/a")).text == "a"
            assert (await client.get("/b")).text == ""

    async def test_middleware_can_short_circuit(self) -> None:
        from canopy.errors import abort

        async def deny(request: Request, next):
            abort(403, "nope")

        app = App()
        RouterGroup(persistent_middlewares=[deny], routes={"GET": [Route(handler=ok)]}).apply(
            app.root
        )

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 403
        assert response.text == "nope"


class TestRouterGroupHooks:
    def test_pre_hook_returned_error(self) -> None:
        app = App()
        cause = ValueError("error")
        result = RouterGroup(
            base_path="/h",
            pre_hook=lambda scope: cause,
            routes={"GET": [Route(handler=ok)]},
        ).apply(app.root)

        assert isinstance(result, Failed)
        assert isinstance(result.error, HookFailure)
        assert result.error.stage == "pre"
        assert result.error.cause is cause
        assert result.error.base_path == "/h"
        assert app.registered == ()

    def test_pre_hook_raised_error(self) -> None:
        def boom(scope) -> None:
            raise RuntimeError("error")

        result = RouterGroup(pre_hook=boom).apply(App().root)
        assert isinstance(result, Failed)
        assert isinstance(result.error.cause, RuntimeError)
        assert result.error.__cause__ is result.error.cause

    def test_post_hook_error_keeps_registered_routes(self) -> None:
        app = App()
        result = RouterGroup(
            post_hook=lambda scope: ValueError("error"),
            routes={"GET": [Route(handler=ok)]},
        ).apply(app.root)

        assert isinstance(result, Failed)
        assert result.error.stage == "post"
        assert len(app.registered) == 1

    def test_hooks_receive_mounted_scope(self) -> None:
        seen = []
        app = App()
        RouterGroup(
            base_path="/mounted",
            pre_hook=lambda scope: seen.append(("pre", scope.base_path)),
            post_hook=lambda scope: seen.append(("post", scope.base_path)),
        ).apply(app.root)
        assert seen == [("pre", "/mounted"), ("post", "/mounted")]

    def test_post_hook_runs_after_children(self) -> None:
        seen = []
        RouterGroup(
            pre_hook=lambda scope: seen.append("parent-pre"),
            post_hook=lambda scope: seen.append("parent-post"),
            sub_groups=[RouterGroup(pre_hook=lambda scope: seen.append("child-pre"))],
        ).apply(App().root)
        assert seen == ["parent-pre", "child-pre", "parent-post"]

    def test_hook_returning_none_succeeds(self) -> None:
        result = RouterGroup(pre_hook=lambda scope: None, post_hook=lambda scope: None).apply(
            App().root
        )
        assert isinstance(result, Applied)


class TestRouterGroupFailurePropagation:
    def test_child_failure_propagated_unchanged(self) -> None:
        cause = ValueError("error")
        result = RouterGroup(
            sub_groups=[RouterGroup(pre_hook=lambda scope: cause)],
        ).apply(App().root)

        assert isinstance(result, Failed)
        assert result.error.cause is cause

    def test_failure_stops_later_siblings_and_post_hook(self) -> None:
        seen = []
        app = App()
        result = RouterGroup(
            post_hook=lambda scope: seen.append("post"),
            sub_groups=[
                RouterGroup(base_path="/first", routes={"GET": [Route(handler=ok)]}),
                RouterGroup(base_path="/broken", routes={"GET": [Route()]}),
                RouterGroup(base_path="/third", routes={"GET": [Route(handler=ok)]}),
            ],
        ).apply(app.root)

        assert isinstance(result, Failed)
        assert result.error.full_path == "/broken"
        assert seen == []
        assert [p.path for p in app.registered] == ["/first"]

    async def test_earlier_routes_stay_live(self) -> None:
        app = App()
        RouterGroup(
            routes={"GET": [Route(handler=ok)], "POST": [Route()]},
        ).apply(app.root)

        async with TestClient(app) as client:
            assert (await client.get("/")).status == 200
            assert (await client.post("/")).status == 405

    def test_failed_route_stops_remaining_routes(self) -> None:
        app = App()
        result = RouterGroup(
            routes={"GET": [Route(path="/a", handler=ok), Route(path="/b"), Route(path="/c", handler=ok)]},
        ).apply(app.root)
        assert isinstance(result, Failed)
        assert [p.path for p in app.registered] == ["/a"]


@pytest.mark.parametrize(
    ("base_path", "route_path", "expected"),
    [
        ("", "", "/"),
        ("/api", "", "/api"),
        ("/api", "/users", "/api/users"),
        ("api", "users/", "/api/users/"),
        ("/api/", "//users", "/api/users"),
    ],
)
def test_full_paths(base_path: str, route_path: str, expected: str) -> None:
    app = App()
    RouterGroup(base_path=base_path, routes={"GET": [Route(path=route_path, handler=ok)]}).apply(
        app.root
    )
    assert app.registered[0].path == expected


class TestLowercaseMethodKeys:
    def test_ranked_with_canonical_methods(self) -> None:
        routes = {"delete": [], "OPTIONS": [], "get": [], "Post": []}
        assert ordered_methods(routes) == ["get", "Post", "delete", "OPTIONS"]

    def test_registered_upper_cased_in_order(self) -> None:
        app = App()
        RouterGroup(
            routes={"patch": [Route(handler=ok)], "get": [Route(handler=ok)]},
        ).apply(app.root)
        assert [r.method for r in app.registered] == ["GET", "PATCH"]
