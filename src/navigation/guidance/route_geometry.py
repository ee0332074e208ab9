# route_geometry.py
# Immutable planned path: points, cumulative distance, maneuvers.
# Built once per route and replaced wholesale on reroute, never mutated.

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

from .geo_utils import haversine_distance, haversine_many
from .models import Coord, Maneuver

logger = logging.getLogger(__name__)


class RouteGeometryError(ValueError):
    """Raised when a route violates the geometry invariants."""


@dataclass(frozen=True)
class RouteGeometry:
    """
    A decoded route laid out on a 1-D cumulative-distance line.

    Args:
        points:              Ordered route coordinates.
        cumulative_distance: Metres from the start to each point.
        maneuvers:           Maneuvers ordered by strictly increasing point_index.
        total_distance:      Route length in metres; derived when omitted.

    Raises:
        RouteGeometryError: If lengths differ, distances go backwards or a
                            maneuver points outside the route.
    """
    points: Tuple[Coord, ...]
    cumulative_distance: Tuple[float, ...]
    maneuvers: Tuple[Maneuver, ...] = ()
    total_distance: Optional[float] = None

    _lats: np.ndarray = field(init=False, repr=False, compare=False)
    _lons: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "cumulative_distance", tuple(float(d) for d in self.cumulative_distance))
        object.__setattr__(self, "maneuvers", tuple(self.maneuvers))
        self._validate()
        object.__setattr__(self, "_lats", np.array([p.lat for p in self.points], dtype=float))
        object.__setattr__(self, "_lons", np.array([p.lon for p in self.points], dtype=float))

    def _validate(self) -> None:
        pts, cum = self.points, self.cumulative_distance

        if len(pts) != len(cum):
            raise RouteGeometryError(
                f"points and cumulative_distance differ in length ({len(pts)} != {len(cum)})"
            )

        if not pts:
            if self.total_distance not in (None, 0, 0.0):
                raise RouteGeometryError("empty route must have total_distance 0")
            if self.maneuvers:
                raise RouteGeometryError("empty route cannot carry maneuvers")
            object.__setattr__(self, "total_distance", 0.0)
            return

        if not all(math.isfinite(d) for d in cum):
            raise RouteGeometryError("cumulative_distance contains non-finite values")
        if abs(cum[0]) > 1e-9:
            raise RouteGeometryError(f"cumulative_distance must start at 0, got {cum[0]}")
        for i in range(1, len(cum)):
            if cum[i] < cum[i - 1]:
                raise RouteGeometryError(
                    f"cumulative_distance decreases at index {i} ({cum[i - 1]} -> {cum[i]})"
                )

        if self.total_distance is None:
            object.__setattr__(self, "total_distance", cum[-1])
        elif not math.isclose(self.total_distance, cum[-1], rel_tol=1e-9, abs_tol=1e-6):
            raise RouteGeometryError(
                f"total_distance {self.total_distance} does not match last cumulative distance {cum[-1]}"
            )
        else:
            object.__setattr__(self, "total_distance", float(self.total_distance))

        prev = -1
        for m in self.maneuvers:
            if not 0 <= m.point_index < len(pts):
                raise RouteGeometryError(
                    f"maneuver point_index {m.point_index} outside route of {len(pts)} points"
                )
            if m.point_index <= prev:
                raise RouteGeometryError(
                    f"maneuver point_index {m.point_index} is not after previous {prev}"
                )
            prev = m.point_index

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_points(cls, points: Sequence[Coord], maneuvers: Sequence[Maneuver] = ()) -> "RouteGeometry":
        """Build a geometry, computing cumulative distances with haversine."""
        cum = [0.0] if points else []
        for prev, curr in zip(points, points[1:]):
            cum.append(cum[-1] + haversine_distance(prev.lat, prev.lon, curr.lat, curr.lon))
        return cls(points=tuple(points), cumulative_distance=tuple(cum), maneuvers=tuple(maneuvers))

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def last_index(self) -> int:
        return max(0, len(self.points) - 1)

    @property
    def is_degenerate(self) -> bool:
        return len(self.points) < 2

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def distances_to(self, location: Coord) -> np.ndarray:
        """Haversine distance in metres from location to every route point."""
        return haversine_many(location.lat, location.lon, self._lats, self._lons)

    def nearest_point_index(self, location: Coord, start: int = 0) -> int:
        """
        Index of the route point closest to location.

        Only points at or after start are considered. Ties resolve to the
        lowest index. An empty route returns 0.
        """
        if not self.points:
            return 0
        start = min(max(0, start), self.last_index)
        dists = self.distances_to(location)
        return int(np.argmin(dists[start:])) + start

    def distance_at_index(self, index: int) -> float:
        if index < 0:
            return 0.0
        if index >= len(self.cumulative_distance):
            return self.total_distance
        return self.cumulative_distance[index]

    def remaining_distance(self, from_index: int) -> float:
        return max(0.0, self.total_distance - self.distance_at_index(from_index))

    def next_maneuver(self, from_index: int) -> Optional[Maneuver]:
        for m in self.maneuvers:
            if m.point_index > from_index:
                return m
        return None

    def distance_to_next_maneuver(self, from_index: int) -> float:
        nxt = self.next_maneuver(from_index)
        if nxt is None:
            return 0.0
        return max(0.0, self.distance_at_index(nxt.point_index) - self.distance_at_index(from_index))

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "points": [{"lat": p.lat, "lon": p.lon} for p in self.points],
            "cumulative_distance": list(self.cumulative_distance),
            "total_distance": self.total_distance,
            "maneuvers": [m.to_dict() for m in self.maneuvers],
        }

    @staticmethod
    def from_dict(d: dict) -> "RouteGeometry":
        return RouteGeometry(
            points=tuple(Coord(p["lat"], p["lon"]) for p in d["points"]),
            cumulative_distance=tuple(d["cumulative_distance"]),
            maneuvers=tuple(Maneuver.from_dict(m) for m in d.get("maneuvers", [])),
            total_distance=d.get("total_distance"),
        )
