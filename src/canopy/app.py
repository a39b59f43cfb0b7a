"""Canopy application class.

The host router that route trees are applied to. Mutable during the
build (scopes register routes, middleware, error handlers); frozen at
runtime when ``app.run()`` or ``__call__()`` is first invoked.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from canopy._internal.asgi import Receive, Scope, Send
from canopy._internal.types import ErrorHandler
from canopy.config import AppConfig
from canopy.middleware.protocol import Middleware
from canopy.routing.route import Endpoint
from canopy.routing.router import Router
from canopy.routing.scope import Scope as RouteScope
from canopy.server.handler import handle_request

logger = logging.getLogger("canopy.app")


@dataclass(frozen=True, slots=True)
class Registration:
    """A route registered on the app, waiting to be compiled."""

    scope: RouteScope
    method: str
    path: str
    chain: tuple[Callable[..., Any], ...]


class App:
    """A canopy application.

    Usually produced by ``canopy.build()`` or ``Engine.new()`` rather than
    constructed by hand, but a bare ``App`` works as a plain router::

        app = App()
        api = app.root.group("/api").use(auth)
        api.handle("GET", "/users", list_users)

    Thread safety:
        Registration is single-threaded. The freeze transition uses a
        Lock + double-check so exactly one thread compiles the route
        table, even when several ASGI workers call ``__call__()`` on
        their first request at the same time.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_root",
        "_router",
        "_shape",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[Registration] = []
        # Mirrors every registration so bad paths fail while the tree is applied
        self._shape: Router = Router()
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._root: RouteScope = RouteScope(self._register, "/")

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()

    # -- Registration --

    @property
    def root(self) -> RouteScope:
        """The top-level scope (empty base path)."""
        return self._root

    def _register(
        self,
        scope: RouteScope,
        method: str,
        path: str,
        chain: tuple[Callable[..., Any], ...],
    ) -> None:
        self._check_not_frozen()
        # Raises ConfigurationError for bad converters, parameter clashes
        # and duplicates ("/a" and "/a/" are the same route)
        self._shape.add(Endpoint(path=path, handler=chain[-1], methods=frozenset({method})))
        self._pending_routes.append(Registration(scope, method, path, chain))
        logger.debug("registered %s %s (%d in chain)", method, path, len(chain))

    def add_middleware(self, middleware: Middleware) -> None:
        """Add app-wide middleware.

        App-wide middleware wraps routing itself, so it also runs for
        requests that match no route (404) or no method (405).
        """
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Introspection --

    @property
    def registered(self) -> tuple[Registration, ...]:
        """Every registration so far, in order. Does not freeze the app."""
        return tuple(self._pending_routes)

    @property
    def routes(self) -> list[Endpoint]:
        """Every compiled endpoint. Freezes the app."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce (requires ``canopy[server]``)."""
        from canopy.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=1 if self.config.debug else self.config.workers,
            reload=self.config.debug,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Compile the route table at startup, before the first request."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self._ensure_frozen()
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock. Scope-wide
        middleware is read here, not at registration time, so a
        ``Scope.use()`` reaches routes registered before it.
        """
        router = Router()
        for pending in self._pending_routes:
            *route_middleware, handler = pending.chain
            router.add(
                Endpoint(
                    path=pending.path,
                    handler=handler,
                    methods=frozenset({pending.method}),
                    middleware=(*pending.scope.middleware, *route_middleware),
                )
            )
        router.compile()
        self._router = router
        self._middleware = tuple(self._middleware_list)
        self._frozen = True
        logger.debug(
            "compiled %d routes, %d app-wide middleware",
            len(self._pending_routes),
            len(self._middleware),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and error handlers before calling app.run()."
            )
            raise RuntimeError(msg)
