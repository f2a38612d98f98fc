"""Distance helpers for nearby-service search."""

from math import radians, sin, cos, sqrt, atan2

EARTH_RADIUS_KM = 6371


def get_bounding_box(lat, lng, radius_km):
    """
    Calculate a bounding box for SQL filtering.
    Returns (min_lat, max_lat, min_lng, max_lng).
    """
    lat_delta = radius_km / 111.0  # ~111 km per degree latitude
    cos_lat = cos(radians(lat))
    if cos_lat < 1e-6:
        # At the poles every longitude is in range
        return (lat - lat_delta, lat + lat_delta, -180.0, 180.0)
    lng_delta = radius_km / (111.0 * cos_lat)

    return (
        lat - lat_delta,
        lat + lat_delta,
        lng - lng_delta,
        lng + lng_delta
    )


def distance(lat1, lon1, lat2, lon2):
    """Calculate distance in km between two coordinates using Haversine formula."""
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat/2)**2 + cos(lat1) * cos(lat2) * sin(dlon/2)**2
    c = 2 * atan2(sqrt(a), sqrt(1-a))
    return EARTH_RADIUS_KM * c


def longitude_ranges(min_lng, max_lng):
    """
    Split a bounding-box longitude span into ranges inside [-180, 180].
    A span crossing the antimeridian becomes two ranges.
    """
    if max_lng - min_lng >= 360:
        return [(-180.0, 180.0)]
    if min_lng < -180:
        return [(min_lng + 360, 180.0), (-180.0, max_lng)]
    if max_lng > 180:
        return [(min_lng, 180.0), (-180.0, max_lng - 360)]
    return [(min_lng, max_lng)]
