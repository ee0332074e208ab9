# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

import os
from dataclasses import dataclass
from typing import Optional, Tuple


# ---------------------------------------------------------------------------
# Announcement ladders (metres, descending)
# ---------------------------------------------------------------------------

HIGHWAY_LADDER_M: Tuple[float, ...] = (1200.0, 600.0, 400.0)
CITY_LADDER_M: Tuple[float, ...] = (250.0, 150.0, 80.0)


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Off-route detection
    off_route_threshold_m: float = 35.0           # local / city roads
    highway_off_route_threshold_m: float = 90.0
    reroute_min_consecutive_fixes: int = 3        # strikes before a reroute is suggested
    reroute_min_duration_s: Optional[float] = None

    # Snapping
    backward_window_points: int = 5               # how far behind the last match we still search
    backward_correction_factor: float = 3.0       # a point behind must be this many times closer
    low_confidence_accuracy_m: float = 50.0
    hold_progress_on_low_confidence: bool = False

    # Announcements
    highway_ladder_m: Tuple[float, ...] = HIGHWAY_LADDER_M
    city_ladder_m: Tuple[float, ...] = CITY_LADDER_M
    immediate_distance_m: float = 100.0           # below this, say the instruction alone
    auto_road_class: bool = False                 # derive highway mode from road names

    # Session
    route_cache_size: int = 8

    # Speech
    tts_rate: int = 150
    tts_volume: float = 1.0

    # Logging
    log_dir: str = "."                            # directory for saved JSON files
    route_filename: str = "active_route.json"
    session_filename: str = "nav_session.jsonl"

    @property
    def route_filepath(self) -> str:
        return os.path.join(self.log_dir, self.route_filename)

    @property
    def session_filepath(self) -> str:
        return os.path.join(self.log_dir, self.session_filename)

    def off_route_threshold(self, highway: bool) -> float:
        return self.highway_off_route_threshold_m if highway else self.off_route_threshold_m

    def ladder(self, highway: bool) -> Tuple[float, ...]:
        return self.highway_ladder_m if highway else self.city_ladder_m
