from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from floorgeom.geometry.tolerance import EPS_POS


Point2 = Tuple[float, float]
Segment2 = Tuple[Point2, Point2]


def _sub(a: Point2, b: Point2) -> Point2:
    return (float(a[0] - b[0]), float(a[1] - b[1]))


def _add(a: Point2, b: Point2) -> Point2:
    return (float(a[0] + b[0]), float(a[1] + b[1]))


def _scale(a: Point2, s: float) -> Point2:
    return (float(a[0] * s), float(a[1] * s))


def _dot(a: Point2, b: Point2) -> float:
    return float(a[0] * b[0] + a[1] * b[1])


def _cross(a: Point2, b: Point2) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def _norm(a: Point2) -> float:
    return math.hypot(a[0], a[1])


def distance(a: Point2, b: Point2) -> float:
    return math.hypot(float(b[0]) - float(a[0]), float(b[1]) - float(a[1]))


def midpoint(a: Point2, b: Point2) -> Point2:
    return (0.5 * (float(a[0]) + float(b[0])), 0.5 * (float(a[1]) + float(b[1])))


def segment_angle(a: Point2, b: Point2) -> float:
    return math.atan2(float(b[1]) - float(a[1]), float(b[0]) - float(a[0]))


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [-pi, pi]."""
    a = math.fmod(float(angle), 2.0 * math.pi)
    if a > math.pi:
        a -= 2.0 * math.pi
    elif a < -math.pi:
        a += 2.0 * math.pi
    return a


def normalize_angle_positive(angle: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    a = math.fmod(float(angle), 2.0 * math.pi)
    if a < 0.0:
        a += 2.0 * math.pi
    return a


def rotate_point(p: Point2, center: Point2, angle: float) -> Point2:
    c = math.cos(angle)
    s = math.sin(angle)
    dx = float(p[0]) - float(center[0])
    dy = float(p[1]) - float(center[1])
    return (float(center[0]) + dx * c - dy * s, float(center[1]) + dx * s + dy * c)


def outward_normal(a: Point2, b: Point2) -> Optional[Point2]:
    """Right-hand unit normal of a->b; points outside for a CCW polygon edge."""
    d = _sub(b, a)
    n = _norm(d)
    if n <= EPS_POS:
        return None
    return (d[1] / n, -d[0] / n)


def closest_point_on_segment(p: Point2, a: Point2, b: Point2) -> Point2:
    ab = _sub(b, a)
    denom = _dot(ab, ab)
    if denom <= EPS_POS:
        return (float(a[0]), float(a[1]))
    t = _dot(_sub(p, a), ab) / denom
    t = min(1.0, max(0.0, t))
    return (float(a[0]) + ab[0] * t, float(a[1]) + ab[1] * t)


def point_segment_distance(p: Point2, a: Point2, b: Point2) -> float:
    return distance(p, closest_point_on_segment(p, a, b))


def segment_segment_distance(s1: Segment2, s2: Segment2) -> float:
    """Minimum of the four endpoint-to-segment distances."""
    a, b = s1
    c, d = s2
    return min(
        point_segment_distance(a, c, d),
        point_segment_distance(b, c, d),
        point_segment_distance(c, a, b),
        point_segment_distance(d, a, b),
    )


def project_point_on_line(p: Point2, a: Point2, b: Point2) -> Point2:
    ab = _sub(b, a)
    denom = _dot(ab, ab)
    if denom <= EPS_POS:
        return (float(a[0]), float(a[1]))
    t = _dot(_sub(p, a), ab) / denom
    return (float(a[0]) + ab[0] * t, float(a[1]) + ab[1] * t)


def line_intersection(a1: Point2, a2: Point2, b1: Point2, b2: Point2, eps: float = EPS_POS) -> Optional[Point2]:
    """Intersection of the infinite lines a1-a2 and b1-b2, or None when parallel."""
    da = _sub(a2, a1)
    db = _sub(b2, b1)
    denom = _cross(da, db)
    if abs(denom) <= eps:
        return None
    t = _cross(_sub(b1, a1), db) / denom
    return (float(a1[0]) + da[0] * t, float(a1[1]) + da[1] * t)


def segment_intersection(a1: Point2, a2: Point2, b1: Point2, b2: Point2, eps: float = 1e-9) -> Optional[Point2]:
    """Intersection point of two bounded segments, endpoints included."""
    p = line_intersection(a1, a2, b1, b2)
    if p is None:
        return None
    for s0, s1 in ((a1, a2), (b1, b2)):
        if p[0] < min(s0[0], s1[0]) - eps or p[0] > max(s0[0], s1[0]) + eps:
            return None
        if p[1] < min(s0[1], s1[1]) - eps or p[1] > max(s0[1], s1[1]) + eps:
            return None
    return p


def segment_projection_t(p: Point2, a: Point2, b: Point2) -> Optional[float]:
    ab = _sub(b, a)
    denom = _dot(ab, ab)
    if denom <= EPS_POS:
        return None
    return _dot(_sub(p, a), ab) / denom


def point_on_segment(p: Point2, a: Point2, b: Point2, tolerance: float) -> bool:
    t = segment_projection_t(p, a, b)
    if t is None or t < 0.0 or t > 1.0:
        return False
    return distance(p, project_point_on_line(p, a, b)) <= tolerance


def points_match(a: Point2, b: Point2, tolerance: float) -> bool:
    return abs(float(a[0]) - float(b[0])) < tolerance and abs(float(a[1]) - float(b[1])) < tolerance


def edges_match(e1: Segment2, e2: Segment2, tolerance: float) -> bool:
    """Endpoints correspond in either order within tolerance."""
    a, b = e1
    c, d = e2
    if points_match(a, c, tolerance) and points_match(b, d, tolerance):
        return True
    return points_match(a, d, tolerance) and points_match(b, c, tolerance)


def polygon_edges(points: Sequence[Point2]) -> List[Segment2]:
    n = len(points)
    return [((float(points[i][0]), float(points[i][1])), (float(points[(i + 1) % n][0]), float(points[(i + 1) % n][1]))) for i in range(n)]
