# models.py
# Shared data structures and enums used across all modules.

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Coordinate / GPS fix
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate."""
    lat: float
    lon: float


@dataclass(frozen=True)
class LocationFix:
    """A single GPS reading as delivered by the platform location service."""
    coord: Coord
    accuracy_m: Optional[float] = None
    timestamp: Optional[float] = None      # seconds

    def is_low_confidence(self, ceiling_m: float) -> bool:
        return self.accuracy_m is not None and self.accuracy_m > ceiling_m


# ---------------------------------------------------------------------------
# Maneuvers
# ---------------------------------------------------------------------------

def _normalize_action(text: str) -> str:
    text = re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", text.strip())
    return re.sub(r"[\s_]+", "-", text).lower()


class ManeuverKind(Enum):
    TURN_LEFT  = "turn-left"
    TURN_RIGHT = "turn-right"
    MERGE      = "merge"
    EXIT       = "exit"
    KEEP_LEFT  = "keep-left"
    KEEP_RIGHT = "keep-right"
    U_TURN     = "u-turn"
    ARRIVE     = "arrive"
    CONTINUE   = "continue"
    OTHER      = "other"

    @classmethod
    def parse(cls, action: Optional[str], direction: Optional[str] = None) -> "ManeuverKind":
        """
        Map a routing-provider action string onto a ManeuverKind.

        Accepts the dashed form ("turn-right"), camelCase ("uTurn",
        "roundaboutExit") and HERE-style split actions ("turn" + "right").
        Anything unrecognised becomes OTHER.
        """
        if not action:
            return cls.OTHER
        key = _normalize_action(action)
        if direction and key in ("turn", "keep", "merge", "ramp", "u-turn"):
            key = f"{key}-{_normalize_action(direction)}"
        return _ACTION_ALIASES.get(key, cls.OTHER)


_ACTION_ALIASES = {
    "turn-left":          ManeuverKind.TURN_LEFT,
    "turn-slight-left":   ManeuverKind.TURN_LEFT,
    "turn-sharp-left":    ManeuverKind.TURN_LEFT,
    "left-turn":          ManeuverKind.TURN_LEFT,
    "turn-right":         ManeuverKind.TURN_RIGHT,
    "turn-slight-right":  ManeuverKind.TURN_RIGHT,
    "turn-sharp-right":   ManeuverKind.TURN_RIGHT,
    "right-turn":         ManeuverKind.TURN_RIGHT,
    "merge":              ManeuverKind.MERGE,
    "merge-left":         ManeuverKind.MERGE,
    "merge-right":        ManeuverKind.MERGE,
    "exit":               ManeuverKind.EXIT,
    "take-exit":          ManeuverKind.EXIT,
    "ramp":               ManeuverKind.EXIT,
    "ramp-left":          ManeuverKind.EXIT,
    "ramp-right":         ManeuverKind.EXIT,
    "roundabout-exit":    ManeuverKind.EXIT,
    "keep-left":          ManeuverKind.KEEP_LEFT,
    "keep-right":         ManeuverKind.KEEP_RIGHT,
    "u-turn":             ManeuverKind.U_TURN,
    "u-turn-left":        ManeuverKind.U_TURN,
    "u-turn-right":       ManeuverKind.U_TURN,
    "uturn":              ManeuverKind.U_TURN,
    "arrive":             ManeuverKind.ARRIVE,
    "destination":        ManeuverKind.ARRIVE,
    "continue":           ManeuverKind.CONTINUE,
    "continue-straight":  ManeuverKind.CONTINUE,
    "straight":           ManeuverKind.CONTINUE,
}


@dataclass(frozen=True)
class Maneuver:
    """A single driving instruction anchored to a route point."""
    point_index: int
    kind: ManeuverKind
    instruction: str
    bearing_before: float
    bearing_after: float
    distance_m: float                      # distance to travel after the maneuver
    exit_number: Optional[str] = None
    duration_s: Optional[int] = None
    road_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "point_index": self.point_index,
            "kind": self.kind.value,
            "instruction": self.instruction,
            "bearing_before": self.bearing_before,
            "bearing_after": self.bearing_after,
            "distance_m": self.distance_m,
            "exit_number": self.exit_number,
            "duration_s": self.duration_s,
            "road_name": self.road_name,
        }

    @staticmethod
    def from_dict(d: dict) -> "Maneuver":
        return Maneuver(
            point_index=d["point_index"],
            kind=ManeuverKind(d["kind"]),
            instruction=d["instruction"],
            bearing_before=d["bearing_before"],
            bearing_after=d["bearing_after"],
            distance_m=d["distance_m"],
            exit_number=d.get("exit_number"),
            duration_s=d.get("duration_s"),
            road_name=d.get("road_name"),
        )


# ---------------------------------------------------------------------------
# Guidance status
# ---------------------------------------------------------------------------

class GuidanceState(Enum):
    NO_ROUTE            = "no_route"
    ON_ROUTE            = "on_route"
    OFF_ROUTE_SUSPECTED = "off_route_suspected"
    REROUTE_REQUESTED   = "reroute_requested"


@dataclass(frozen=True)
class GuidanceTick:
    """Returned by GuidanceEngine.on_location() for every GPS fix."""
    snapped_point: Coord
    remaining_meters: float
    next_maneuver: Optional[Maneuver]
    distance_to_maneuver: float
    is_off_route: bool = False
    should_reroute: bool = False
    distance_from_route_m: float = 0.0
    matched_index: int = 0
    low_confidence: bool = False
    state: GuidanceState = GuidanceState.ON_ROUTE
