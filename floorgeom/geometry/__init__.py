"""
floorgeom geometry

2D primitives, polygon offsetting, room topology and room alignment.
"""

from floorgeom.geometry.polygon2d import PolygonValidityReport, ensure_ccw, is_ccw, signed_area, validate_polygon
from floorgeom.geometry.segments import (
    distance,
    edges_match,
    line_intersection,
    point_on_segment,
    point_segment_distance,
    segment_intersection,
    segment_segment_distance,
)

__all__ = [
    "PolygonValidityReport",
    "ensure_ccw",
    "is_ccw",
    "signed_area",
    "validate_polygon",
    "distance",
    "edges_match",
    "line_intersection",
    "point_on_segment",
    "point_segment_distance",
    "segment_intersection",
    "segment_segment_distance",
]
