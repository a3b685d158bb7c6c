"""Request dispatcher.

For each request:

1. Paths under the static prefix (and ``/robots.txt``) go to the
   static-asset collaborator.
2. The route table is scanned in registration order; the first route
   whose method and full path match wins.
3. Captured groups become the parameter mapping, and the bound operation
   is called with whatever its parameters ask for.
4. The return value becomes the response body.

``dispatch()`` always returns exactly one response. A failure while
matching or invoking becomes a 500; it is never propagated, so one bad
request cannot take the serving loop down with it.
"""

import logging
from dataclasses import dataclass
from typing import Any

from roost._internal.invoke import invoke
from roost.discovery.descriptor import ParamShape
from roost.errors import DispatchInvocationFailure, HTTPError
from roost.http.request import Request
from roost.http.response import Redirect, Response
from roost.routing.route import RouteMatch
from roost.routing.table import RouteTable
from roost.static import StaticAssets

logger = logging.getLogger("roost.server")

NOT_FOUND_BODY = "<html><body><h1>404 - Not Found</h1></body></html>"
STATIC_CACHE_CONTROL = "public, max-age=3600"
ROBOTS_PATH = "/robots.txt"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Per-request state: extracted parameters plus the transport handle."""

    params: dict[str, str]
    request: Request


class Dispatcher:
    """Dispatch requests against a frozen route table.

    Usage::

        dispatcher = Dispatcher(table, static=StaticAssets("static"))
        response = await dispatcher.dispatch(request)
    """

    __slots__ = ("_expose_errors", "_route_table", "_static")

    def __init__(
        self,
        route_table: RouteTable,
        *,
        static: StaticAssets | None = None,
        expose_errors: bool = True,
    ) -> None:
        self._route_table = route_table
        self._static = static
        self._expose_errors = expose_errors

    @property
    def route_table(self) -> RouteTable:
        return self._route_table

    async def dispatch(self, request: Request) -> Response:
        """Produce the response for *request*. Never raises ``Exception``."""
        try:
            if self._static is not None:
                if self._static.handles(request.path):
                    return self.serve_static(request.path)
                if request.path == ROBOTS_PATH:
                    return self.serve_static(self._static.prefix + ROBOTS_PATH)

            match = self._route_table.match(request.method, request.path)
            if match is None:
                return self.not_found(request)

            ctx = RequestContext(params=match.path_params, request=request)
            result = await self.call(match, ctx)
            return to_response(result)
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            response = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)
            for name, value in exc.headers:
                response = response.with_header(name, value)
            return response
        except Exception as exc:
            return self.internal_error(request, exc)

    async def call(self, match: RouteMatch, ctx: RequestContext) -> Any:
        """Invoke the matched operation with arguments built from its parameter shapes.

        Raises ``DispatchInvocationFailure`` wrapping whatever the
        operation raised, except ``HTTPError``, which passes through.
        """
        route = match.route
        args = [supply(shape, name, ctx) for name, shape in route.operation.params]
        try:
            return await invoke(route.handler, *args)
        except HTTPError:
            raise
        except Exception as exc:
            raise DispatchInvocationFailure(route.method, route.path, exc) from exc

    def serve_static(self, path: str) -> Response:
        assert self._static is not None
        asset = self._static.lookup(path)
        if asset is None:
            return Response(body=b"", status=404, content_type="text/plain; charset=utf-8")
        return Response(
            body=asset.content,
            content_type=asset.content_type,
        ).with_header("Cache-Control", STATIC_CACHE_CONTROL)

    def not_found(self, request: Request) -> Response:
        logger.debug("404 %s %s", request.method, request.path)
        return Response(body=NOT_FOUND_BODY, status=404)

    def internal_error(self, request: Request, exc: Exception) -> Response:
        logger.exception("500 %s %s", request.method, request.path)
        if not self._expose_errors:
            return Response(body="Internal Server Error", status=500)
        return Response(body=f"Internal Server Error: {exc}", status=500)


def supply(shape: ParamShape, name: str, ctx: RequestContext) -> Any:
    """The argument for one operation parameter.

    Unrecognized shapes get ``None`` rather than failing the call.
    """
    match shape:
        case ParamShape.EXCHANGE:
            return ctx.request
        case ParamShape.PARAMS:
            return ctx.params
        case ParamShape.TEXT:
            return ctx.params.get(name, "")
        case _:
            return None


def to_response(value: Any) -> Response:
    """Convert an operation's return value into a 200 response.

    ``str`` and ``bytes`` are sent verbatim, ``None`` as an empty body,
    ``Response`` and ``Redirect`` as given, anything else stringified.
    """
    if isinstance(value, Response):
        return value
    if isinstance(value, Redirect):
        response = Response(body="", status=value.status).with_header("Location", value.url)
        for name, header_value in value.headers:
            response = response.with_header(name, header_value)
        return response
    if value is None:
        return Response(body="")
    if isinstance(value, (str, bytes)):
        return Response(body=value)
    return Response(body=str(value))
