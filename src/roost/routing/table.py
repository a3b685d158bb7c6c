"""Route table — ordered, linear, first match wins.

Routes are tried in the order they were added. There is no specificity
ranking: when two patterns overlap, the one registered first answers.
The table is frozen once bootstrap finishes and is read-only while
requests are served, so no locking is needed.

Usage::

    table = RouteTable()
    table.add(compile_route("/users", operation, controller))
    table.freeze()
    match = table.match("GET", "/users/42")
"""

from collections.abc import Iterator

from roost.routing.route import Route, RouteMatch


class RouteTable:
    __slots__ = ("_frozen", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._frozen = False

    def add(self, route: Route) -> None:
        """Append a route. Must be called before freeze()."""
        if self._frozen:
            msg = "Cannot add routes after the route table is frozen."
            raise RuntimeError(msg)
        self._routes.append(route)

    def freeze(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in registration order."""
        return tuple(self._routes)

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route whose method and full path match, else ``None``."""
        for route in self._routes:
            if route.method != method:
                continue
            params = route.match(path)
            if params is not None:
                return RouteMatch(route=route, path_params=params)
        return None

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)
