"""ASGI handler — the single per-request entry point.

The only component that touches raw ASGI directly. Converts the scope to
a ``Request``, dispatches it, and sends the one response back.
"""

from roost._internal.asgi import Receive, Scope, Send
from roost.http.request import Request
from roost.server.dispatcher import Dispatcher
from roost.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
) -> None:
    """Process a single HTTP request through the dispatcher."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await dispatcher.dispatch(request)
    await send_response(response, send)
