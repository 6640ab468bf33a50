"""Route Registry.

Central registry for every screen of the client.  The application
entry-point registers each route once; the ``AppShell`` resolves
paths against it on every navigation and runs the route guard with the
route's declared requirements.

Adding a new screen = one ``register()`` call + one view class.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from superhub.logger import StructuredLogger
from superhub.routing import RouteRequirements


class RouteContext:
    """Everything a view factory may need about the navigation.

    Attributes
    ----------
    path:
        Full requested path including the query string.
    query:
        Parsed query parameters (first value per key).
    navigate:
        Shell navigation callback.
    notice:
        Optional one-off message to show on arrival (e.g. "session
        expired" on the login screen).
    """

    __slots__ = ("path", "query", "navigate", "notice")

    def __init__(
        self,
        path: str,
        query: dict[str, str],
        navigate: Callable[[str], None],
        notice: Optional[str] = None,
    ) -> None:
        self.path = path
        self.query = query
        self.navigate = navigate
        self.notice = notice


ViewFactory = Callable[[ctk.CTkFrame, RouteContext], ctk.CTkFrame]


class RouteEntry:
    """Metadata for a single registered route."""

    __slots__ = ("route", "title", "factory", "requirements")

    def __init__(
        self,
        route: str,
        title: str,
        factory: ViewFactory,
        requirements: RouteRequirements,
    ) -> None:
        self.route = route
        self.title = title
        self.factory = factory
        self.requirements = requirements


class RouteRegistry:
    """Manages the collection of registered routes.

    Parameters
    ----------
    logger:
        Structured logger for registration events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, RouteEntry] = {}
        self._logger = logger
        self._default_route: str = ""

    def register(
        self,
        route: str,
        title: str,
        factory: ViewFactory,
        requirements: RouteRequirements = RouteRequirements(),
        *,
        default: bool = False,
    ) -> None:
        """Register a screen.

        Parameters
        ----------
        route:
            Path without query string, e.g. ``"/verify-email"``.
        title:
            Window title suffix while the route is shown.
        factory:
            ``(parent, context) -> CTkFrame`` invoked on every visit.
        requirements:
            Access requirements evaluated by the route guard.
        default:
            If ``True``, unknown paths fall back to this route.
        """
        if route in self._entries:
            self._logger.warning("Route '%s' already registered; overwriting.", route)
        self._entries[route] = RouteEntry(
            route=route, title=title, factory=factory, requirements=requirements,
        )
        if default or not self._default_route:
            self._default_route = route
        self._logger.debug("Route registered: %s (%s)", route, title)

    def get(self, route: str) -> RouteEntry:
        """Return the entry for *route*.

        Raises
        ------
        KeyError
            If *route* is not registered.
        """
        if route not in self._entries:
            raise KeyError(f"Route '{route}' is not registered.")
        return self._entries[route]

    def __contains__(self, route: object) -> bool:
        return route in self._entries

    @property
    def default_route(self) -> str:
        return self._default_route
