from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from floorgeom.geometry.polygon2d import ensure_ccw
from floorgeom.geometry.segments import _cross, _sub, outward_normal
from floorgeom.geometry.tolerance import EPS_PARALLEL


Point2 = Tuple[float, float]

logger = logging.getLogger(__name__)


def _edge_normals(pts: List[Point2]) -> List[Optional[Point2]]:
    n = len(pts)
    normals: List[Optional[Point2]] = [outward_normal(pts[i], pts[(i + 1) % n]) for i in range(n)]
    if all(v is None for v in normals):
        return normals
    # Zero-length edges inherit the nearest preceding edge's normal.
    for i in range(n):
        if normals[i] is not None:
            continue
        j = i - 1
        while normals[j % n] is None:
            j -= 1
        normals[i] = normals[j % n]
    return normals


def _offset_line_intersection(p: Point2, n_prev: Point2, n_next: Point2, distance: float) -> Optional[Point2]:
    # Offset line through p + n*d with direction perpendicular to n.
    d_prev = (-n_prev[1], n_prev[0])
    d_next = (-n_next[1], n_next[0])
    denom = _cross(d_prev, d_next)
    if abs(denom) < EPS_PARALLEL:
        return None
    a = (p[0] + n_prev[0] * distance, p[1] + n_prev[1] * distance)
    b = (p[0] + n_next[0] * distance, p[1] + n_next[1] * distance)
    t = _cross(_sub(b, a), d_next) / denom
    return (a[0] + d_prev[0] * t, a[1] + d_prev[1] * t)


def offset_polygon(vertices: Sequence[Point2], distance: float) -> List[Point2]:
    """
    Offset a simple polygon along its outward normals with mitred corners.

    Positive distances grow the polygon. The result keeps the input's vertex
    count and is CCW wound. Vertices whose adjacent offset lines are parallel
    are translated along the incoming edge normal instead.
    """
    pts = [(float(x), float(y)) for x, y in vertices]
    d = float(distance)
    if d == 0.0 or len(pts) < 3:
        return pts
    pts = ensure_ccw(pts)
    n = len(pts)
    normals = _edge_normals(pts)
    if any(v is None for v in normals):
        logger.debug("offset_polygon: all edges degenerate, returning input")
        return pts

    out: List[Point2] = []
    for i in range(n):
        n_prev = normals[(i - 1) % n]
        n_next = normals[i]
        hit = _offset_line_intersection(pts[i], n_prev, n_next, d)
        if hit is None:
            hit = (pts[i][0] + n_prev[0] * d, pts[i][1] + n_prev[1] * d)
        out.append(hit)
    return ensure_ccw(out)


def calculate_centerline_polygon(floor_polygon: Sequence[Point2], centerline_offset: float) -> List[Point2]:
    return offset_polygon(floor_polygon, centerline_offset)


def calculate_external_polygon(floor_polygon: Sequence[Point2], wall_thickness: float) -> List[Point2]:
    return offset_polygon(floor_polygon, wall_thickness)
