# main.py
# Entry point: replays a GPS trace through the guidance pipeline.
# In production, replace the trace loop with your real location source.
#
#   python -m navigation.guidance.main                      # built-in demo route + mock trace
#   python -m navigation.guidance.main --route logs/active_route.json --trace drive.csv --speak

import argparse
import logging
import time
from typing import List, Optional

import numpy as np
import pandas as pd

from speech.tts import Speaker

from .geo_utils import calculate_bearing, destination_point
from .models import Coord, LocationFix, GuidanceState
from .nav_config import NavConfig
from .nav_logger import NavLogger
from .navigator import NavigationSession
from .route_builder import build_route_geometry
from .route_geometry import RouteGeometry

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Demo route (Indianapolis, north → east → north)
# ------------------------------------------------------------------
DEMO_START = Coord(39.7684, -86.1581)
DEMO_LEGS = [(0.0, 2000.0), (90.0, 1500.0), (0.0, 3000.0)]   # (bearing, metres)
DEMO_SPACING_M = 50.0


def demo_route() -> RouteGeometry:
    points: List[Coord] = [DEMO_START]
    turn_offsets = []
    for bearing, length in DEMO_LEGS:
        for _ in range(int(length / DEMO_SPACING_M)):
            last = points[-1]
            points.append(Coord(*destination_point(last.lat, last.lon, bearing, DEMO_SPACING_M)))
        turn_offsets.append(len(points) - 1)

    actions = [
        {"action": "depart", "offset": 0, "instruction": "Head north on Meridian St",
         "length": 2000, "road": {"name": "Meridian St"}},
        {"action": "turn", "direction": "right", "offset": turn_offsets[0],
         "instruction": "Turn right onto Main Street", "length": 1500, "road": {"name": "Main Street"}},
        {"action": "turn", "direction": "left", "offset": turn_offsets[1],
         "instruction": "Turn left onto Highway 65", "length": 3000, "road": {"name": "Highway 65"}},
        {"action": "arrive", "offset": turn_offsets[2], "instruction": "You have arrived"},
    ]
    return build_route_geometry(points, actions)


# ------------------------------------------------------------------
# Traces
# ------------------------------------------------------------------

def mock_trace(route: RouteGeometry, noise_m: float = 5.0, seed: int = 7) -> List[LocationFix]:
    """Every route point plus GPS noise, with a short off-route excursion midway."""
    rng = np.random.default_rng(seed)
    deg = noise_m / 111_195.0
    fixes: List[LocationFix] = []
    t = 0.0
    detour_at = len(route.points) // 2

    for i, p in enumerate(route.points):
        lat, lon = p.lat + rng.normal(0, deg), p.lon + rng.normal(0, deg)
        fixes.append(LocationFix(Coord(lat, lon), accuracy_m=noise_m, timestamp=t))
        t += 2.0
        if i == detour_at and i + 1 < len(route.points):
            nxt = route.points[i + 1]
            side = (calculate_bearing(p.lat, p.lon, nxt.lat, nxt.lon) + 90.0) % 360
            for step in range(1, 5):
                off = destination_point(p.lat, p.lon, side, 60.0 * step)
                fixes.append(LocationFix(Coord(*off), accuracy_m=noise_m, timestamp=t))
                t += 2.0
    return fixes


def load_trace(path: str) -> List[LocationFix]:
    """Read a CSV with lat, lon and optional accuracy, timestamp columns."""
    df = pd.read_csv(path)
    missing = {"lat", "lon"} - set(df.columns)
    if missing:
        raise ValueError(f"Trace {path} is missing columns: {sorted(missing)}")

    fixes = []
    for row in df.itertuples(index=False):
        accuracy = getattr(row, "accuracy", None)
        timestamp = getattr(row, "timestamp", None)
        fixes.append(LocationFix(
            coord=Coord(float(row.lat), float(row.lon)),
            accuracy_m=None if accuracy is None or pd.isna(accuracy) else float(accuracy),
            timestamp=None if timestamp is None or pd.isna(timestamp) else float(timestamp),
        ))
    logger.info(f"Loaded {len(fixes)} fixes from {path}")
    return fixes


# ------------------------------------------------------------------
# CLI
# ------------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a GPS trace through turn-by-turn guidance.")
    parser.add_argument("--route", help="Route JSON saved by NavLogger (default: demo route)")
    parser.add_argument("--trace", help="CSV trace with lat,lon[,accuracy,timestamp] (default: mock trace)")
    parser.add_argument("--highway", action="store_true", help="Use highway thresholds")
    parser.add_argument("--auto-road-class", action="store_true", help="Derive highway mode from road names")
    parser.add_argument("--speak", action="store_true", help="Speak announcements with pyttsx3")
    parser.add_argument("--log-dir", default="logs")
    parser.add_argument("--interval", type=float, default=0.0, help="Seconds to sleep between fixes")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = NavConfig(log_dir=args.log_dir, auto_road_class=args.auto_road_class)
    nav_logger = NavLogger(config)

    route = nav_logger.load_route(args.route) if args.route else demo_route()
    if route is None:
        print(f"[Main] Could not load route: {args.route}")
        return
    fixes = load_trace(args.trace) if args.trace else mock_trace(route)

    speaker = None
    if args.speak:
        speaker = Speaker(rate=config.tts_rate, volume=config.tts_volume)
        speaker.start()

    def announce(text: str) -> None:
        print(f"  🔊 {text}")
        if speaker:
            speaker.say(text)

    def reroute(tick) -> None:
        print(f"  ⚠  Reroute requested ({tick.distance_from_route_m:.0f} m off route).")

    session = NavigationSession(route, config, on_announcement=announce,
                                on_reroute=reroute, nav_logger=nav_logger)
    session.set_highway_mode(args.highway)

    print(f"\n--- Replaying {len(fixes)} fixes ---")
    for i, fix in enumerate(fixes):
        tick = session.update(fix)
        if tick is None:
            break
        if i % 10 == 0 or tick.state != GuidanceState.ON_ROUTE:
            nxt = tick.next_maneuver.instruction if tick.next_maneuver else "—"
            print(f"  GPS {i:4d} [{tick.state.name}] {tick.remaining_meters / 1000.0:.2f} km left, "
                  f"next: {nxt} in {tick.distance_to_maneuver:.0f} m")
        if args.interval:
            time.sleep(args.interval)

    print("\n--- Session complete ---")
    print(f"    Log files written to: {config.log_dir}/")
    if speaker:
        speaker.stop()


if __name__ == "__main__":
    main()
