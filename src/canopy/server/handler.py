"""ASGI handler — translates ASGI scope/messages to canopy types.

The only component that touches raw ASGI directly. Converts the scope
to a typed Request, runs app-wide middleware around routing, runs the
matched endpoint's own chain around its handler, and sends the Response
back through ASGI send().
"""

import inspect
from collections.abc import Callable, Sequence
from contextvars import Token
from typing import Any

from canopy._internal.asgi import Receive, Scope, Send
from canopy._internal.invoke import invoke
from canopy.context import g, request_var
from canopy.errors import HTTPError
from canopy.http.request import Request
from canopy.http.response import Response
from canopy.middleware.protocol import Next
from canopy.routing.route import Endpoint
from canopy.routing.router import Router
from canopy.server.errors import handle_http_error, handle_internal_error
from canopy.server.negotiation import negotiate
from canopy.server.sender import send_response


def wrap_middleware(middleware: Sequence[Callable[..., Any]], innermost: Next) -> Next:
    """Compose *middleware* around *innermost*; the first element runs first."""
    handler = innermost
    for mw in reversed(middleware):

        async def call_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = call_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)
    g._reset()

    try:

        async def dispatch(req: Request) -> Response:
            match = router.match(req.method, req.path)
            return await run_endpoint(match.endpoint, req.with_path_params(match.path_params))

        response = await wrap_middleware(middleware, dispatch)(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        g._reset()
        request_var.reset(token)

    await send_response(response, send, method=request.method)


async def run_endpoint(endpoint: Endpoint, request: Request) -> Response:
    """Run an endpoint's middleware chain, ending in its handler."""

    async def call_handler(req: Request) -> Response:
        kwargs = _build_handler_kwargs(endpoint.handler, req)
        return negotiate(await invoke(endpoint.handler, **kwargs))

    return await wrap_middleware(endpoint.middleware, call_handler)(request)


def _build_handler_kwargs(handler: Callable[..., Any], request: Request) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted to the annotated type when possible)
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in request.path_params:
            value = request.path_params[name]
            if param.annotation is not inspect.Parameter.empty:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
