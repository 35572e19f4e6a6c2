"""Validation and coordinate translation for persistent map markers.

Markers arrive in UI/storage coordinates as flat lists:

    barrier: [1, x1, y1, x2, y2]
    zone:    [0, x1, y1, x2, y2, x3, y3, x4, y4]

A zone given by two opposite corners ([0, x1, y1, x2, y2]) is also
accepted. The UI Y axis is mirrored against the robot's native map, so
every Y coordinate is replaced by ``dimension_mm - y`` before it is sent.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .const import DIMENSION_MM, MAX_MARKER_WEIGHT, PersistentDataType
from .exceptions import RoborockCapacityExceededError, RoborockInvalidArgumentError
from .models import PersistentMarker

# Allowed coordinate counts per marker kind
_COORDINATE_COUNTS = {
    PersistentDataType.ZONE: (8, 4),
    PersistentDataType.BARRIER: (4,),
}


def flip_y(y: int, dimension_mm: int = DIMENSION_MM) -> int:
    """Mirror a Y coordinate between UI and device origin."""
    return dimension_mm - y


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_coordinate(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_marker(raw: Any, dimension_mm: int = DIMENSION_MM) -> PersistentMarker:
    """Validate one raw marker and return it in UI coordinates.

    Raises:
        RoborockInvalidArgumentError: If the marker is malformed.
    """
    if not _is_sequence(raw) or not raw:
        raise RoborockInvalidArgumentError(f"Marker must be a non-empty list, got {raw!r}")

    try:
        kind = PersistentDataType(raw[0])
    except ValueError:
        raise RoborockInvalidArgumentError(f"Unknown marker type: {raw[0]!r}") from None

    coordinates = tuple(raw[1:])
    if len(coordinates) not in _COORDINATE_COUNTS[kind]:
        raise RoborockInvalidArgumentError(
            f"{kind.name.lower()} marker has {len(coordinates)} coordinates "
            f"(expected {' or '.join(map(str, _COORDINATE_COUNTS[kind]))})"
        )

    for value in coordinates:
        if not _is_coordinate(value):
            raise RoborockInvalidArgumentError(f"Coordinate must be an integer, got {value!r}")
        if not 0 <= value <= dimension_mm:
            raise RoborockInvalidArgumentError(
                f"Coordinate {value} outside map canvas (0..{dimension_mm})"
            )

    return PersistentMarker(kind=kind, coordinates=coordinates)


def marker_weight(markers: Sequence[PersistentMarker]) -> int:
    """Return the weighted marker count (zone = 4, barrier = 2)."""
    return sum(marker.weight for marker in markers)


def translate_persistent_data(
    persistent_data: Any,
    dimension_mm: int = DIMENSION_MM,
    max_weight: int = MAX_MARKER_WEIGHT,
) -> list[list[int]]:
    """Validate, flip and budget-check markers for a save_map command.

    Args:
        persistent_data: List of raw markers in UI coordinates.
        dimension_mm: Map canvas edge length.
        max_weight: Weighted marker budget of the robot.

    Returns:
        save_map params, one ``[kind, x1, y1, ...]`` list per marker with
        Y coordinates in device orientation.

    Raises:
        RoborockInvalidArgumentError: If the data is not a list of valid markers.
        RoborockCapacityExceededError: If the marker budget is exceeded.
    """
    if not _is_sequence(persistent_data):
        raise RoborockInvalidArgumentError(
            f"Persistent data has to be a list, got {type(persistent_data).__name__}"
        )

    flipped = [
        parse_marker(raw, dimension_mm).flipped(dimension_mm)
        for raw in persistent_data
    ]

    weight = marker_weight(flipped)
    if weight > max_weight:
        raise RoborockCapacityExceededError(
            f"Too many forbidden markers to save: weight {weight} exceeds {max_weight}",
            weight=weight,
            limit=max_weight,
        )

    return [marker.to_params() for marker in flipped]
