# nav_logger.py
# Handles all file I/O for the guidance system.
# Saves routes as JSON and session events as JSON lines.

import json
import os
import logging
from datetime import datetime
from typing import Optional

from .models import GuidanceTick, LocationFix
from .nav_config import NavConfig
from .route_geometry import RouteGeometry

# Standard Python logger; configure at app entry point if needed
logger = logging.getLogger(__name__)


class NavLogger:
    """
    Persists route data and guidance events to JSON files.

    Args:
        config: NavConfig instance for file paths and directories.
    """

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        os.makedirs(self.config.log_dir, exist_ok=True)

    # ------------------------------------------------------------------
    # Route persistence
    # ------------------------------------------------------------------

    def save_route(self, route: RouteGeometry) -> bool:
        """
        Serialize a route to JSON.

        Returns:
            True on success, False on failure.
        """
        filepath = self.config.route_filepath
        try:
            data = {
                "saved_at": datetime.now().isoformat(),
                "point_count": len(route.points),
                "route": route.to_dict(),
            }
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.info(f"Route saved to {filepath} ({len(route.points)} points).")
            return True
        except IOError as e:
            logger.error(f"Failed to save route to {filepath}: {e}")
            return False

    def load_route(self, filepath: Optional[str] = None) -> Optional[RouteGeometry]:
        """
        Load a previously saved route from JSON.

        Args:
            filepath: Path override; uses config default if omitted.

        Returns:
            RouteGeometry, or None if loading failed.
        """
        path = filepath or self.config.route_filepath
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            route = RouteGeometry.from_dict(data["route"])
            logger.info(f"Route loaded from {path} ({len(route.points)} points).")
            return route
        except (IOError, KeyError, ValueError) as e:
            logger.error(f"Failed to load route from {path}: {e}")
            return None

    # ------------------------------------------------------------------
    # Session event logging
    # ------------------------------------------------------------------

    def log_event(self, tick: GuidanceTick, fix: LocationFix) -> None:
        """Append a single guidance tick to the session log file."""
        nxt = tick.next_maneuver
        self._append({
            "timestamp": datetime.now().isoformat(),
            "fix_time": fix.timestamp,
            "lat": fix.coord.lat,
            "lon": fix.coord.lon,
            "accuracy_m": fix.accuracy_m,
            "state": tick.state.value,
            "matched_index": tick.matched_index,
            "remaining_m": round(tick.remaining_meters, 1),
            "distance_from_route_m": round(tick.distance_from_route_m, 1),
            "next_maneuver": nxt.instruction if nxt else None,
            "distance_to_maneuver_m": round(tick.distance_to_maneuver, 1),
            "low_confidence": tick.low_confidence,
        })

    def log_announcement(self, text: str) -> None:
        """Append a spoken announcement to the session log file."""
        self._append({
            "timestamp": datetime.now().isoformat(),
            "announcement": text,
        })

    def _append(self, entry: dict) -> None:
        event_file = self.config.session_filepath
        try:
            with open(event_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except IOError as e:
            logger.error(f"Failed to write event log: {e}")
