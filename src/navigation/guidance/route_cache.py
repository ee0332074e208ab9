# route_cache.py
# Session-owned cache of route geometries, keyed by route id.
# Created by the session that uses it; lives and dies with that session.

import logging
from collections import OrderedDict
from typing import Optional

from .route_geometry import RouteGeometry

logger = logging.getLogger(__name__)


class RouteCache:
    """
    Least-recently-used store of RouteGeometry objects.

    Args:
        max_entries: Routes kept before the oldest is evicted.
    """

    def __init__(self, max_entries: int = 8) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1.")
        self.max_entries = max_entries
        self._routes: "OrderedDict[str, RouteGeometry]" = OrderedDict()

    def get(self, route_id: str) -> Optional[RouteGeometry]:
        route = self._routes.get(route_id)
        if route is not None:
            self._routes.move_to_end(route_id)
        return route

    def put(self, route_id: str, route: RouteGeometry) -> None:
        self._routes[route_id] = route
        self._routes.move_to_end(route_id)
        while len(self._routes) > self.max_entries:
            evicted, _ = self._routes.popitem(last=False)
            logger.debug(f"Evicted route {evicted} from cache")

    def clear(self) -> None:
        self._routes.clear()

    def __contains__(self, route_id: object) -> bool:
        return route_id in self._routes

    def __len__(self) -> int:
        return len(self._routes)
