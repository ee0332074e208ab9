# route_builder.py
# Turns a decoded polyline plus raw routing-provider actions into a RouteGeometry.
# Action dicts follow the HERE Routes v8 "actions" shape.

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .geo_utils import calculate_bearing
from .models import Coord, Maneuver, ManeuverKind
from .route_geometry import RouteGeometry

logger = logging.getLogger(__name__)

PointLike = Union[Coord, Tuple[float, float]]

_EXIT_RE = re.compile(r"\bexit\s+(\d+[A-Za-z]?)\b", re.IGNORECASE)
_HIGHWAY_RE = re.compile(
    r"\b(I-?\s?\d+|US[- ]?\d+|Interstate|Highway|Hwy|Freeway|Fwy|Expressway|Expy|Turnpike|Tpke|Motorway)\b",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _to_coord(p: PointLike) -> Coord:
    if isinstance(p, Coord):
        return p
    lat, lon = p
    return Coord(float(lat), float(lon))


def _exit_number(action: dict, instruction: str) -> Optional[str]:
    exit_info = action.get("exit") or {}
    if exit_info.get("number"):
        return str(exit_info["number"])
    match = _EXIT_RE.search(instruction)
    return match.group(1) if match else None


def _bearings(points: Sequence[Coord], offset: int) -> Tuple[float, float]:
    here = points[offset]
    before = 0.0
    if offset > 0:
        prev = points[offset - 1]
        before = calculate_bearing(prev.lat, prev.lon, here.lat, here.lon)
    after = before
    if offset < len(points) - 1:
        nxt = points[offset + 1]
        after = calculate_bearing(here.lat, here.lon, nxt.lat, nxt.lon)
    return before, after


def _road_name(action: dict) -> Optional[str]:
    road = action.get("road") or {}
    return road.get("name") or road.get("number")


def _build_maneuvers(points: Sequence[Coord], actions: Iterable[dict]) -> List[Maneuver]:
    maneuvers: List[Maneuver] = []
    last_offset = -1

    for action in actions:
        offset = action.get("offset")
        if offset is None:
            logger.warning(f"Dropping action without offset: {action.get('action')}")
            continue
        if not 0 <= offset < len(points):
            logger.warning(f"Action offset {offset} exceeds polyline size {len(points)}")
            continue
        if offset <= last_offset:
            logger.warning(f"Dropping action at offset {offset}: not after previous offset {last_offset}")
            continue

        instruction = action.get("instruction") or "Continue"
        before, after = _bearings(points, offset)
        maneuvers.append(Maneuver(
            point_index=offset,
            kind=ManeuverKind.parse(action.get("action"), action.get("direction")),
            instruction=instruction,
            bearing_before=before,
            bearing_after=after,
            distance_m=float(action.get("length") or 0),
            exit_number=_exit_number(action, instruction),
            duration_s=action.get("duration"),
            road_name=_road_name(action),
        ))
        last_offset = offset

    return maneuvers


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_route_geometry(points: Sequence[PointLike], actions: Iterable[dict] = ()) -> RouteGeometry:
    """
    Build a validated RouteGeometry from decoded points and provider actions.

    Args:
        points:  Decoded polyline as Coord or (lat, lon) pairs.
        actions: Provider action dicts (action, direction, instruction,
                 offset, length, duration, road, exit).

    Returns:
        RouteGeometry with haversine cumulative distances.
    """
    coords = [_to_coord(p) for p in points]
    if not coords:
        logger.error("No route points available!")

    maneuvers = _build_maneuvers(coords, actions)
    route = RouteGeometry.from_points(coords, maneuvers)
    logger.info(f"Built route: {len(coords)} points, {route.total_distance / 1000.0:.1f} km, "
                f"{len(maneuvers)} maneuvers")
    return route


def is_highway_road(road_name: Optional[str]) -> bool:
    """Road-class hint: True when the name looks like a highway (I-65, US 31, ... Hwy)."""
    if not road_name:
        return False
    return bool(_HIGHWAY_RE.search(road_name))
