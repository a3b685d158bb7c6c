"""Roost — a minimal component runtime for web applications.

Marked classes are discovered, wired together, and exposed as routes.

Basic usage::

    from roost import App, controller, get, inject, service

    @service
    class Greeter:
        def greet(self, name: str) -> str:
            return f"Hello, {name}!"

    @controller("/hello")
    class HelloController:
        greeter = inject(Greeter)

        @get("/{name}")
        def hello(self, name: str) -> str:
            return self.greeter.greet(name)

    app = App(components=[Greeter, HelloController])
    app.run()
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "ConfigurationService",
    "HTTPError",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "RoostError",
    "RuntimeContext",
    "controller",
    "delete",
    "get",
    "inject",
    "post",
    "put",
    "route",
    "service",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    if name == "App":
        from roost.app import App

        return App

    if name in ("AppConfig", "ConfigurationService"):
        from roost import config as _config

        return getattr(_config, name)

    if name == "RuntimeContext":
        from roost.context import RuntimeContext

        return RuntimeContext

    if name == "Request":
        from roost.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from roost.http import response as _resp

        return getattr(_resp, name)

    if name in ("controller", "delete", "get", "inject", "post", "put", "route", "service"):
        from roost import markers as _markers

        return getattr(_markers, name)

    if name in ("ConfigurationError", "HTTPError", "NotFound", "RoostError"):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
