"""ASGI response sending — translates a canopy Response to ASGI messages."""

from canopy._internal.asgi import Send
from canopy.http.response import Response


def _body_allowed(status: int) -> bool:
    # 1xx, 204 and 304 never carry a body
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response* as one ``http.response.start`` and one body message."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )

    body = response.body_bytes if _body_allowed(response.status) else b""
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    # HEAD answers advertise the length but carry no body
    await send({"type": "http.response.body", "body": b"" if method == "HEAD" else body})
