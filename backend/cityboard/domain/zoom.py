from __future__ import annotations

# (min zoom, geohash precision), finest first. Existing map clients depend on these steps.
ZOOM_PRECISION_STEPS = [
    (15, 8),
    (13, 7),
    (11, 6),
    (9, 5),
    (7, 4),
]
DEFAULT_PRECISION = 3


def precision_for_zoom(zoom: int) -> int:
    for min_zoom, precision in ZOOM_PRECISION_STEPS:
        if zoom >= min_zoom:
            return precision
    return DEFAULT_PRECISION
