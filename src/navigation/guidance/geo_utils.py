# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules.

import math

import numpy as np


EARTH_RADIUS_M = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in metres.

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_many(lat: float, lon: float, lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """
    Vectorised haversine from one point to many.

    Args:
        lat, lon:   Origin in decimal degrees.
        lats, lons: Arrays of destinations in decimal degrees.

    Returns:
        Array of distances in metres, same shape as lats.
    """
    d_lat = np.radians(lats - lat)
    d_lon = np.radians(lons - lon)
    a = (
        np.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat))
        * np.cos(np.radians(lats))
        * np.sin(d_lon / 2) ** 2
    )
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Forward azimuth (bearing) from point 1 to point 2 in degrees [0, 360).

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Bearing in degrees.
    """
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    d_lon = rlon2 - rlon1
    y = math.sin(d_lon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def destination_point(lat: float, lon: float, bearing_deg: float, distance_m: float):
    """
    Point reached by travelling distance_m from (lat, lon) along bearing_deg.

    Returns:
        (lat, lon) in decimal degrees.
    """
    ratio = distance_m / EARTH_RADIUS_M
    brg = math.radians(bearing_deg)
    rlat, rlon = math.radians(lat), math.radians(lon)

    end_lat = math.asin(
        math.sin(rlat) * math.cos(ratio)
        + math.cos(rlat) * math.sin(ratio) * math.cos(brg)
    )
    end_lon = rlon + math.atan2(
        math.sin(brg) * math.sin(ratio) * math.cos(rlat),
        math.cos(ratio) - math.sin(rlat) * math.sin(end_lat),
    )
    return math.degrees(end_lat), (math.degrees(end_lon) + 540) % 360 - 180
