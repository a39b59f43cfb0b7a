"""API — a JSON items resource declared as a route tree.

Demonstrates the declarative layer end to end: an ``Engine`` with
app-wide middleware, a ``/api`` group whose persistent middleware reaches
every nested route, REST groups for the collection and the single item,
and a pre-hook that refuses to build when storage is not ready.

Run:
    cd examples/api && canopy run app:engine
    cd examples/api && canopy routes app:engine
"""

import threading
from dataclasses import dataclass

from canopy import Engine, Request, RestRouterGroup, Route, RouterGroup, abort, g

# ---------------------------------------------------------------------------
# In-memory storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    title: str
    done: bool = False


_items: dict[int, Item] = {}
_next_id = 1
_lock = threading.Lock()


def _get_next_id() -> int:
    global _next_id
    with _lock:
        n = _next_id
        _next_id += 1
        return n


def _to_dict(item: Item) -> dict:
    return {"id": item.id, "title": item.title, "done": item.done}


def _storage_ready(scope) -> Exception | None:
    if not isinstance(_items, dict):
        return RuntimeError("item storage unavailable")
    return None


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


async def read_only_fridays(request: Request, next):
    """App-wide: runs even for paths no route matches."""
    if request.headers.get("x-day") == "friday" and request.method != "GET":
        abort(400, "read-only on Fridays")
    return await next(request)


async def api_key(request: Request, next):
    key = request.headers.get("x-api-key")
    if key is None:
        abort(401, "missing API key")
    g.client = key
    return await next(request)


async def json_only(request: Request, next):
    if request.content_type != "application/json":
        abort(415, "expected application/json")
    return await next(request)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def list_items() -> dict:
    with _lock:
        items = sorted(_items.values(), key=lambda i: i.id)
    return {"data": [_to_dict(i) for i in items], "client": g.client}


async def create_item(request: Request):
    data = await request.json()
    item = Item(id=_get_next_id(), title=data["title"])
    with _lock:
        _items[item.id] = item
    return _to_dict(item), 201


def get_item(item_id: int) -> dict:
    with _lock:
        item = _items.get(item_id)
    if item is None:
        abort(404, f"item {item_id} not found")
    return _to_dict(item)


async def update_item(item_id: int, request: Request) -> dict:
    data = await request.json()
    with _lock:
        item = _items.get(item_id)
        if item is None:
            abort(404, f"item {item_id} not found")
        item = Item(id=item_id, title=data.get("title", item.title), done=data.get("done", item.done))
        _items[item_id] = item
    return _to_dict(item)


def delete_item(item_id: int) -> None:
    with _lock:
        if _items.pop(item_id, None) is None:
            abort(404, f"item {item_id} not found")


def health() -> str:
    return "ok"


# ---------------------------------------------------------------------------
# Route tree
# ---------------------------------------------------------------------------

items = RestRouterGroup(
    get_route=Route(handler=list_items),
    post_route=Route(handler=create_item, middlewares=[json_only]),
    group=RouterGroup(
        base_path="/items",
        sub_groups=[
            RestRouterGroup(
                get_route=Route(handler=get_item),
                patch_route=Route(handler=update_item, middlewares=[json_only]),
                delete_route=Route(handler=delete_item),
                group=RouterGroup(base_path="/{item_id:int}"),
            ),
        ],
    ),
)

engine = Engine(
    middlewares=[read_only_fridays],
    router_groups=[
        RouterGroup(routes={"GET": [Route(path="/health", handler=health)]}),
        RouterGroup(
            base_path="/api",
            persistent_middlewares=[api_key],
            pre_hook=_storage_ready,
            sub_groups=[items],
        ),
    ],
)


if __name__ == "__main__":
    engine.new().run()
