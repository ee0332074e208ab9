# navigator.py
# Public entry point for the guidance system.
# Owns no business logic; delegates everything to specialist modules.

import logging
import threading
from typing import Callable, Optional

from .announcer import Announcer
from .guidance_engine import GuidanceEngine
from .models import GuidanceTick, LocationFix
from .nav_config import NavConfig
from .nav_logger import NavLogger
from .route_builder import is_highway_road
from .route_cache import RouteCache
from .route_geometry import RouteGeometry

logger = logging.getLogger(__name__)


class NavigationSession:
    """
    High-level guidance facade for one trip.

    Typical lifecycle:
        session = NavigationSession(route, on_announcement=speaker.say,
                                    on_reroute=request_new_route)

        # GPS loop:
        tick = session.update(fix)

        # When the routing provider answers the reroute request:
        session.install_route(new_route, route_id="r2")

    Args:
        route:           Initial RouteGeometry.
        config:          Optional NavConfig; defaults to NavConfig().
        on_announcement: Receives every announcement string.
        on_reroute:      Called once per off-route streak when a reroute
                         should be requested.
        nav_logger:      Optional NavLogger for route and event files.
        route_cache:     Optional RouteCache; one is created per session otherwise.
    """

    def __init__(
        self,
        route: RouteGeometry,
        config: Optional[NavConfig] = None,
        on_announcement: Optional[Callable[[str], None]] = None,
        on_reroute: Optional[Callable[[GuidanceTick], None]] = None,
        nav_logger: Optional[NavLogger] = None,
        route_cache: Optional[RouteCache] = None,
    ) -> None:
        self.config = config or NavConfig()
        self._on_announcement = on_announcement
        self._on_reroute = on_reroute
        self._logger = nav_logger
        self._cache = route_cache or RouteCache(self.config.route_cache_size)
        self._lock = threading.Lock()

        # Specialist modules
        self._engine    = GuidanceEngine(route, self.config)
        self._announcer = Announcer(self._announce, self.config)

        self._active = True
        self._reroute_requested = False
        self._highway = False

        if self._logger:
            self._logger.save_route(route)

    # ------------------------------------------------------------------
    # Route control
    # ------------------------------------------------------------------

    def install_route(self, route: RouteGeometry, route_id: Optional[str] = None) -> None:
        """Replace the active route (e.g. after a reroute) and restart announcements."""
        with self._lock:
            self._engine.install_route(route)
            self._announcer.reset()
            self._reroute_requested = False
            self._active = True

        if route_id is not None:
            self._cache.put(route_id, route)
        if self._logger:
            self._logger.save_route(route)

    def reinstall_route(self, route_id: str) -> bool:
        """Re-activate a route seen earlier in this session."""
        route = self._cache.get(route_id)
        if route is None:
            logger.warning(f"Route {route_id} not in session cache.")
            return False
        self.install_route(route)
        return True

    def set_highway_mode(self, highway: bool) -> None:
        self._highway = highway
        self._engine.set_highway_mode(highway)
        self._announcer.set_highway_mode(highway)

    def stop(self) -> None:
        """Forcibly end guidance."""
        self._active = False
        logger.info("Guidance stopped by user.")

    # ------------------------------------------------------------------
    # GPS update: call this on every position fix
    # ------------------------------------------------------------------

    def update(self, fix: LocationFix) -> Optional[GuidanceTick]:
        """
        Process a new GPS fix.

        Returns:
            GuidanceTick, or None when guidance has been stopped.
        """
        with self._lock:
            if not self._active:
                return None

            # Route cannot change under the session lock; the tick refers to it.
            route = self._engine.route
            tick = self._engine.on_location(fix)

            if self.config.auto_road_class:
                self._apply_road_class(route, tick)

            self._announcer.on_tick(tick)

            if tick.should_reroute and not self._reroute_requested:
                self._reroute_requested = True
                logger.warning("Requesting reroute.")
                request_reroute = True
            else:
                request_reroute = False
                if not tick.is_off_route:
                    self._reroute_requested = False

        if request_reroute and self._on_reroute:
            self._on_reroute(tick)

        if self._logger:
            self._logger.log_event(tick, fix)
        return tick

    # ------------------------------------------------------------------
    # Convenience read-only properties
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def highway_mode(self) -> bool:
        return self._highway

    @property
    def route(self) -> RouteGeometry:
        return self._engine.route

    @property
    def engine(self) -> GuidanceEngine:
        return self._engine

    @property
    def announcer(self) -> Announcer:
        return self._announcer

    @property
    def route_cache(self) -> RouteCache:
        return self._cache

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _announce(self, text: str) -> None:
        if self._logger:
            self._logger.log_announcement(text)
        if self._on_announcement:
            self._on_announcement(text)

    def _apply_road_class(self, route: RouteGeometry, tick: GuidanceTick) -> None:
        # Road being driven is the one entered at the last maneuver passed.
        road = None
        for m in route.maneuvers:
            if m.point_index > tick.matched_index:
                break
            road = m.road_name
        if road is None and tick.next_maneuver is not None:
            road = tick.next_maneuver.road_name

        highway = is_highway_road(road)
        if highway != self._highway:
            logger.info(f"Road class changed: {'highway' if highway else 'city'} ({road})")
            self.set_highway_mode(highway)
