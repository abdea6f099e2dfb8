from __future__ import annotations

from typing import Tuple

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_DECODE_MAP = {char: idx for idx, char in enumerate(BASE32)}


def encode(lat: float, lng: float, precision: int = 9) -> str:
    """
    Encode lat/lng into a geohash string of exactly ``precision`` characters.

    Bits alternate longitude/latitude starting with longitude; every 5 bits
    map to one base32 character. Coordinates outside the WGS84 range are
    clamped.
    """
    if precision < 1:
        raise ValueError(f"precision must be >= 1, got {precision}")
    lat = max(-90.0, min(90.0, float(lat)))
    lng = max(-180.0, min(180.0, float(lng)))

    lat_min, lat_max = -90.0, 90.0
    lng_min, lng_max = -180.0, 180.0

    chars = []
    value = 0
    bit_count = 0
    even = True
    while len(chars) < precision:
        if even:
            mid = (lng_min + lng_max) / 2.0
            if lng >= mid:
                value = (value << 1) | 1
                lng_min = mid
            else:
                value = value << 1
                lng_max = mid
        else:
            mid = (lat_min + lat_max) / 2.0
            if lat >= mid:
                value = (value << 1) | 1
                lat_min = mid
            else:
                value = value << 1
                lat_max = mid
        even = not even
        bit_count += 1
        if bit_count == 5:
            chars.append(BASE32[value])
            value = 0
            bit_count = 0
    return "".join(chars)


def decode_bbox(geohash: str) -> Tuple[float, float, float, float]:
    """Return the cell covered by ``geohash`` as (min_lat, max_lat, min_lng, max_lng)."""
    if not geohash:
        raise ValueError("geohash must not be empty")
    lat_min, lat_max = -90.0, 90.0
    lng_min, lng_max = -180.0, 180.0
    even = True
    for char in geohash.lower():
        try:
            value = _DECODE_MAP[char]
        except KeyError:
            raise ValueError(f"invalid geohash character {char!r}") from None
        for shift in range(4, -1, -1):
            bit = (value >> shift) & 1
            if even:
                mid = (lng_min + lng_max) / 2.0
                if bit:
                    lng_min = mid
                else:
                    lng_max = mid
            else:
                mid = (lat_min + lat_max) / 2.0
                if bit:
                    lat_min = mid
                else:
                    lat_max = mid
            even = not even
    return lat_min, lat_max, lng_min, lng_max


def decode(geohash: str) -> Tuple[float, float]:
    """Center of the geohash cell as (lat, lng)."""
    lat_min, lat_max, lng_min, lng_max = decode_bbox(geohash)
    return (lat_min + lat_max) / 2.0, (lng_min + lng_max) / 2.0
