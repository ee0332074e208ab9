# guidance_engine.py
# State machine that matches GPS fixes against the active RouteGeometry.
# Call on_location() on every fix, install_route() whenever a new route arrives.

import logging
import threading
from typing import Optional

import numpy as np

from .models import Coord, GuidanceState, GuidanceTick, LocationFix
from .nav_config import NavConfig
from .route_geometry import RouteGeometry

logger = logging.getLogger(__name__)


class GuidanceEngine:
    """
    Stateful progress tracker for a single guidance session.

    Usage:
        engine = GuidanceEngine(route, config)

        # Inside GPS loop:
        tick = engine.on_location(fix)

        # After the routing provider returns a new route:
        engine.install_route(new_route)

    on_location() and install_route() share one lock, so a tick is never
    computed against a half-replaced route. Fixes must be fed in arrival
    order from a single producer.
    """

    def __init__(self, route: RouteGeometry, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        self._lock = threading.Lock()
        self._route = route
        self._last_matched_index: int = 0
        self._off_route_strikes: int = 0
        self._off_route_since: Optional[float] = None
        self._highway: bool = False

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def install_route(self, route: RouteGeometry) -> None:
        """Swap in a new route and restart progress from its first point."""
        with self._lock:
            self._route = route
            self._last_matched_index = 0
            self._off_route_strikes = 0
            self._off_route_since = None
        logger.info(f"New route installed: {len(route.points)} points, "
                    f"{route.total_distance / 1000.0:.1f} km, {len(route.maneuvers)} maneuvers.")

    def reset_off_route_state(self) -> None:
        with self._lock:
            self._off_route_strikes = 0
            self._off_route_since = None
        logger.debug("Off-route state reset")

    def set_highway_mode(self, highway: bool) -> None:
        self._highway = highway
        logger.debug(f"Highway mode: {highway}")

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def route(self) -> RouteGeometry:
        return self._route

    @property
    def last_matched_index(self) -> int:
        return self._last_matched_index

    @property
    def off_route_strikes(self) -> int:
        return self._off_route_strikes

    @property
    def highway_mode(self) -> bool:
        return self._highway

    # ------------------------------------------------------------------
    # Core method, call on every GPS fix
    # ------------------------------------------------------------------

    def on_location(self, fix: LocationFix) -> GuidanceTick:
        """
        Match a GPS fix against the active route.

        Args:
            fix: Current GPS reading.

        Returns:
            GuidanceTick with snapped point, remaining distance, next
            maneuver and off-route / reroute flags.
        """
        with self._lock:
            route = self._route
            if route.is_degenerate:
                return self._degenerate_tick(route, fix)
            return self._track(route, fix)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _degenerate_tick(self, route: RouteGeometry, fix: LocationFix) -> GuidanceTick:
        snapped = route.points[0] if route.points else fix.coord
        return GuidanceTick(
            snapped_point=snapped,
            remaining_meters=0.0,
            next_maneuver=None,
            distance_to_maneuver=0.0,
            low_confidence=fix.is_low_confidence(self.config.low_confidence_accuracy_m),
            state=GuidanceState.NO_ROUTE,
        )

    def _match(self, route: RouteGeometry, position: Coord):
        """Return (index, distance_m, corrected_backwards)."""
        dists = route.distances_to(position)
        start = max(0, self._last_matched_index - self.config.backward_window_points)

        index = int(np.argmin(dists[start:])) + start
        best = int(np.argmin(dists))
        if best < start and dists[best] * self.config.backward_correction_factor < dists[index]:
            logger.info(f"Backward correction: index {self._last_matched_index} -> {best}")
            return best, float(dists[best]), True
        return index, float(dists[index]), False

    def _track(self, route: RouteGeometry, fix: LocationFix) -> GuidanceTick:
        cfg = self.config
        index, distance, corrected = self._match(route, fix.coord)

        # 1. Off-route check
        threshold = cfg.off_route_threshold(self._highway)
        off_route = distance > threshold
        low_confidence = fix.is_low_confidence(cfg.low_confidence_accuracy_m)

        # 2. Reroute confirmation
        if off_route:
            self._off_route_strikes += 1
            if self._off_route_since is None:
                self._off_route_since = fix.timestamp
            logger.warning(f"Off-route strike #{self._off_route_strikes} "
                           f"({distance:.0f} m from route, threshold {threshold:.0f} m)")
        else:
            self._off_route_strikes = 0
            self._off_route_since = None

        should_reroute = off_route and (
            self._off_route_strikes >= cfg.reroute_min_consecutive_fixes
            or self._streak_expired(fix)
        )
        if should_reroute:
            logger.warning(f"Reroute needed after {self._off_route_strikes} strikes")

        # 3. Progress update (never backwards unless corrected)
        hold = low_confidence and cfg.hold_progress_on_low_confidence
        if not off_route and not hold and (index >= self._last_matched_index or corrected):
            self._last_matched_index = index

        working = self._last_matched_index
        next_maneuver = route.next_maneuver(working)

        if should_reroute:
            state = GuidanceState.REROUTE_REQUESTED
        elif off_route:
            state = GuidanceState.OFF_ROUTE_SUSPECTED
        else:
            state = GuidanceState.ON_ROUTE

        return GuidanceTick(
            snapped_point=route.points[index],
            remaining_meters=route.remaining_distance(working),
            next_maneuver=next_maneuver,
            distance_to_maneuver=route.distance_to_next_maneuver(working),
            is_off_route=off_route,
            should_reroute=should_reroute,
            distance_from_route_m=distance,
            matched_index=working,
            low_confidence=low_confidence,
            state=state,
        )

    def _streak_expired(self, fix: LocationFix) -> bool:
        limit = self.config.reroute_min_duration_s
        if limit is None or self._off_route_since is None or fix.timestamp is None:
            return False
        return fix.timestamp - self._off_route_since >= limit
