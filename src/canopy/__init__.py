"""Canopy — declarative route trees for ASGI apps.

Describe an API as a tree of groups, then build it once at startup::

    from canopy import Route, RouterGroup, build

    async def request_id(request, next):
        g.request_id = request.headers.get("x-request-id", "-")
        return await next(request)

    tree = RouterGroup(
        persistent_middlewares=[request_id],
        routes={"GET": [Route(handler=lambda: "hello")]},
        sub_groups=[
            RouterGroup(
                base_path="/users",
                routes={"POST": [Route(handler=create_user)]},
            ),
        ],
    )

    app = build(tree).unwrap()
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "Applicable",
    "Applied",
    "ApplyResult",
    "BuildError",
    "BuildResult",
    "CanopyError",
    "ConfigurationError",
    "Engine",
    "Failed",
    "HTTPError",
    "HookFailure",
    "MethodNotAllowed",
    "Middleware",
    "MissingHandler",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "RestRouterGroup",
    "Route",
    "RouterGroup",
    "Scope",
    "abort",
    "build",
    "g",
    "get_request",
]

# public name -> defining module
_EXPORTS: dict[str, str] = {
    "App": "canopy.app",
    "AppConfig": "canopy.config",
    "Applicable": "canopy.groups",
    "Applied": "canopy.groups",
    "ApplyResult": "canopy.groups",
    "BuildError": "canopy.errors",
    "BuildResult": "canopy.engine",
    "CanopyError": "canopy.errors",
    "ConfigurationError": "canopy.errors",
    "Engine": "canopy.engine",
    "Failed": "canopy.groups",
    "HTTPError": "canopy.errors",
    "HookFailure": "canopy.errors",
    "MethodNotAllowed": "canopy.errors",
    "Middleware": "canopy.middleware.protocol",
    "MissingHandler": "canopy.errors",
    "Next": "canopy.middleware.protocol",
    "NotFound": "canopy.errors",
    "Request": "canopy.http.request",
    "Response": "canopy.http.response",
    "RestRouterGroup": "canopy.groups",
    "Route": "canopy.groups",
    "RouterGroup": "canopy.groups",
    "Scope": "canopy.routing.scope",
    "abort": "canopy.errors",
    "build": "canopy.engine",
    "g": "canopy.context",
    "get_request": "canopy.context",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import canopy`` fast while providing a flat top-level API.
    """
    module_name = _EXPORTS.get(name)
    if module_name is None:
        msg = f"module 'canopy' has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
