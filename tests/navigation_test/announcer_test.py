import math

import pytest

from conftest import maneuver
from navigation.guidance.announcer import Announcer, clean_instruction, format_distance
from navigation.guidance.models import Coord, GuidanceTick, ManeuverKind
from navigation.guidance.nav_config import NavConfig

TURN = maneuver(10, "Turn right onto Main Street")
EXIT = maneuver(30, "Take exit 12B toward Chicago", ManeuverKind.EXIT)


def tick(distance: float, nxt=TURN) -> GuidanceTick:
    return GuidanceTick(
        snapped_point=Coord(39.77, -86.15),
        remaining_meters=5000.0,
        next_maneuver=nxt,
        distance_to_maneuver=distance,
    )


@pytest.fixture
def spoken():
    return []


@pytest.fixture
def announcer(spoken) -> Announcer:
    a = Announcer(spoken.append, NavConfig())
    a.set_highway_mode(True)
    return a


def test_highway_ladder_fires_each_rung_once(announcer, spoken):
    for d in (1300, 1100, 700, 500, 390):
        announcer.on_tick(tick(d))

    assert spoken == [
        "In 1 kilometer, turn right onto Main Street",
        "In 500 meters, turn right onto Main Street",
        "In 300 meters, turn right onto Main Street",
    ]
    assert announcer.last_announcement_threshold == 400.0


def test_on_tick_returns_the_announcement(announcer):
    assert announcer.on_tick(tick(1300)) is None
    assert announcer.on_tick(tick(1100)) == "In 1 kilometer, turn right onto Main Street"
    assert announcer.on_tick(tick(1050)) is None


def test_new_maneuver_restarts_the_ladder(announcer, spoken):
    for d in (1100, 500, 390):
        announcer.on_tick(tick(d))
    assert len(spoken) == 3

    announcer.on_tick(tick(1300, nxt=EXIT))
    assert len(spoken) == 3
    announcer.on_tick(tick(1150, nxt=EXIT))
    assert spoken[-1] == "In 1 kilometer, take exit 12B toward Chicago"
    assert announcer.last_announced_maneuver.point_index == 30


def test_reset_announces_again_from_scratch(announcer, spoken):
    announcer.on_tick(tick(1100))
    announcer.on_tick(tick(1100))
    assert len(spoken) == 1

    announcer.reset()
    assert announcer.last_announced_maneuver is None
    assert math.isinf(announcer.last_announcement_threshold)

    announcer.on_tick(tick(1100))
    assert spoken == ["In 1 kilometer, turn right onto Main Street"] * 2


def test_city_ladder_and_immediate_phrasing(spoken):
    announcer = Announcer(spoken.append)
    for d in (300, 240, 140, 90, 75):
        announcer.on_tick(tick(d))

    assert spoken == [
        "In 200 meters, turn right onto Main Street",
        "In 100 meters, turn right onto Main Street",
        "turn right onto Main Street",
    ]


def test_first_unfired_rung_is_taken_when_starting_close(spoken):
    announcer = Announcer(spoken.append)
    announcer.on_tick(tick(50))
    assert announcer.last_announcement_threshold == 250.0
    announcer.on_tick(tick(45))
    assert announcer.last_announcement_threshold == 150.0
    assert spoken == ["turn right onto Main Street"] * 2


def test_exactly_on_rung_fires_and_hundred_is_immediate(spoken):
    announcer = Announcer(spoken.append)
    announcer.on_tick(tick(250))
    announcer.on_tick(tick(100))
    assert spoken == [
        "In 200 meters, turn right onto Main Street",
        "turn right onto Main Street",
    ]


def test_no_maneuver_means_no_announcement(announcer, spoken):
    assert announcer.on_tick(tick(100, nxt=None)) is None
    assert spoken == []


def test_equal_maneuver_is_the_same_maneuver(announcer, spoken):
    announcer.on_tick(tick(1100, nxt=maneuver(10, "Turn right onto Main Street")))
    announcer.on_tick(tick(1000, nxt=maneuver(10, "Turn right onto Main Street")))
    assert len(spoken) == 1


def test_announce_now_bypasses_ladder(announcer, spoken):
    announcer.announce_now("Route recalculated")
    assert spoken == ["Route recalculated"]


def test_ladders_come_from_config(spoken):
    announcer = Announcer(spoken.append, NavConfig(city_ladder_m=(500.0, 50.0)))
    announcer.on_tick(tick(450))
    announcer.on_tick(tick(150))
    announcer.on_tick(tick(40))
    assert len(spoken) == 2


@pytest.mark.parametrize("meters, text", [
    (45, "45 meters"),
    (99.9, "99 meters"),
    (730, "700 meters"),
    (999, "900 meters"),
    (1000, "1 kilometer"),
    (1500, "1 kilometer"),
    (1999, "1 kilometer"),
    (2600, "2 kilometers"),
    (12400, "12 kilometers"),
])
def test_format_distance(meters, text):
    assert format_distance(meters) == text


@pytest.mark.parametrize("raw, cleaned", [
    ("Turn left onto Highway 65", "turn left onto Highway 65"),
    ("Continue straight on I-65", "continue straight on I-65"),
    ("Keep right at the fork", "keep right at the fork"),
    ("Make a U-turn", "make a u-turn"),
    ("You have arrived", "you have arrived at your destination"),
    ("Merge onto US-31", "merge onto US-31"),
])
def test_clean_instruction(raw, cleaned):
    assert clean_instruction(raw) == cleaned
