"""Server startup.

Starts a pounce ASGI server with the live roost App object. Pounce runs
each request on its own task, so a slow operation never blocks new
connections from being accepted.
"""


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    workers: int = 1,
) -> None:
    """Start a pounce server for *app* on *host*:*port*.

    Pounce's ``run()`` takes an import string, but here we have a live
    ``App`` object, so ``pounce.Server`` is used directly with the ASGI
    callable.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        reload=reload,
    )
    server = Server(config, app)
    server.run()
