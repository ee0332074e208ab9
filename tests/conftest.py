from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from navigation.guidance.geo_utils import destination_point
from navigation.guidance.models import Coord, Maneuver, ManeuverKind
from navigation.guidance.route_geometry import RouteGeometry

START = Coord(39.7684, -86.1581)   # Indianapolis


def straight_points(n: int, spacing_m: float = 100.0, bearing: float = 0.0, start: Coord = START):
    """n points spaced spacing_m apart along a constant bearing."""
    points = [start]
    for _ in range(n - 1):
        last = points[-1]
        points.append(Coord(*destination_point(last.lat, last.lon, bearing, spacing_m)))
    return points


def offset(point: Coord, bearing: float, distance_m: float) -> Coord:
    return Coord(*destination_point(point.lat, point.lon, bearing, distance_m))


def maneuver(index: int, instruction: str = "Turn right onto Main Street",
             kind: ManeuverKind = ManeuverKind.TURN_RIGHT, road_name=None) -> Maneuver:
    return Maneuver(
        point_index=index,
        kind=kind,
        instruction=instruction,
        bearing_before=0.0,
        bearing_after=90.0,
        distance_m=500.0,
        road_name=road_name,
    )


@pytest.fixture
def line_route() -> RouteGeometry:
    """21 points due north, 100 m apart (2 km), turns at index 10 and 20."""
    return RouteGeometry.from_points(
        straight_points(21),
        [
            maneuver(10),
            maneuver(20, "You have arrived", ManeuverKind.ARRIVE),
        ],
    )
