# announcer.py
# Turns the stream of GuidanceTicks into a bounded stream of spoken prompts.
# Depends only on the tick value, never on the engine itself.

import logging
import math
from typing import Callable, Optional, Sequence

from .models import GuidanceTick, Maneuver
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


# Presentation-only rewrites so instructions read naturally mid-sentence.
_INSTRUCTION_REPLACEMENTS = (
    ("Turn right", "turn right"),
    ("Turn left", "turn left"),
    ("Continue straight", "continue straight"),
    ("Take exit", "take exit"),
    ("Merge", "merge"),
    ("Keep right", "keep right"),
    ("Keep left", "keep left"),
    ("Make a U-turn", "make a u-turn"),
    ("You have arrived", "you have arrived at your destination"),
)


def clean_instruction(instruction: str) -> str:
    for old, new in _INSTRUCTION_REPLACEMENTS:
        instruction = instruction.replace(old, new)
    return instruction


def format_distance(meters: float) -> str:
    """
    Spoken distance.

    45 -> "45 meters", 730 -> "700 meters", 1500 -> "1 kilometer",
    2600 -> "2 kilometers".
    """
    if meters < 100:
        return f"{int(meters)} meters"
    if meters < 1000:
        return f"{int(meters / 100) * 100} meters"
    km = meters / 1000.0
    if km < 2:
        return "1 kilometer"
    return f"{int(km)} kilometers"


class Announcer:
    """
    Debounces maneuver announcements along a descending distance ladder.

    For each maneuver, the closest rung the vehicle has reached fires once;
    rungs fire in strictly decreasing order and never repeat.

    Args:
        on_announcement: Called with each announcement string.
        config:          NavConfig instance for ladders.
    """

    def __init__(
        self,
        on_announcement: Callable[[str], None],
        config: Optional[NavConfig] = None,
    ) -> None:
        self.config = config or NavConfig()
        self._on_announcement = on_announcement
        self._last_announced: Optional[Maneuver] = None
        self._last_threshold: float = math.inf
        self._highway: bool = False

    @property
    def ladder(self) -> Sequence[float]:
        return self.config.ladder(self._highway)

    @property
    def highway_mode(self) -> bool:
        return self._highway

    @property
    def last_announcement_threshold(self) -> float:
        return self._last_threshold

    @property
    def last_announced_maneuver(self) -> Optional[Maneuver]:
        return self._last_announced

    def set_highway_mode(self, highway: bool) -> None:
        self._highway = highway
        logger.debug(f"Highway mode: {highway}")

    def on_tick(self, tick: GuidanceTick) -> Optional[str]:
        """
        Process one tick; emits at most one announcement.

        Returns:
            The announcement text, or None if nothing was said.
        """
        maneuver = tick.next_maneuver
        if maneuver is None:
            return None
        distance = tick.distance_to_maneuver

        same = self._is_current(maneuver)
        if same and distance >= self._last_threshold:
            return None

        if not same:
            self._last_announced = maneuver
            self._last_threshold = math.inf

        threshold = next(
            (t for t in self.ladder if distance <= t and t < self._last_threshold),
            None,
        )
        if threshold is None:
            return None

        text = self._build(maneuver, distance)
        logger.info(f"Announcing: {text}")
        self._on_announcement(text)
        self._last_threshold = threshold
        return text

    def announce_now(self, text: str) -> None:
        """Force an announcement regardless of ladder state."""
        logger.info(f"Force announcing: {text}")
        self._on_announcement(text)

    def reset(self) -> None:
        self._last_announced = None
        self._last_threshold = math.inf
        logger.debug("Announcer state reset")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _is_current(self, maneuver: Maneuver) -> bool:
        return (
            self._last_announced is not None
            and self._last_announced.point_index == maneuver.point_index
        )

    def _build(self, maneuver: Maneuver, distance: float) -> str:
        instruction = clean_instruction(maneuver.instruction)
        if distance > self.config.immediate_distance_m:
            return f"In {format_distance(distance)}, {instruction}"
        return instruction
