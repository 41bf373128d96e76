from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from floorgeom.errors import InvalidTopologyError
from floorgeom.geometry.segments import point_on_segment
from floorgeom.geometry.tolerance import EPS_WELD


Point2 = Tuple[float, float]


@dataclass(frozen=True)
class PolygonValidityReport:
    valid: bool
    self_intersections: int = 0
    winding: str = "CCW"
    duplicate_vertices: int = 0
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": bool(self.valid),
            "self_intersections": int(self.self_intersections),
            "winding": str(self.winding),
            "duplicate_vertices": int(self.duplicate_vertices),
            "warnings": list(self.warnings),
        }


def signed_area(poly: Sequence[Point2]) -> float:
    if len(poly) < 3:
        return 0.0
    s = 0.0
    for i in range(len(poly)):
        x1, y1 = poly[i]
        x2, y2 = poly[(i + 1) % len(poly)]
        s += x1 * y2 - x2 * y1
    return 0.5 * s


def is_ccw(poly: Sequence[Point2]) -> bool:
    return signed_area(poly) > 0.0


def ensure_ccw(poly: Sequence[Point2]) -> List[Point2]:
    pts = [(float(x), float(y)) for x, y in poly]
    if len(pts) < 3:
        return pts
    if signed_area(pts) < 0.0:
        pts.reverse()
    return pts


def _orient(a: Point2, b: Point2, c: Point2) -> float:
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def _segments_intersect(a: Point2, b: Point2, c: Point2, d: Point2, tol: float = EPS_WELD) -> bool:
    o1 = _orient(a, b, c)
    o2 = _orient(a, b, d)
    o3 = _orient(c, d, a)
    o4 = _orient(c, d, b)
    if (o1 * o2 < 0.0) and (o3 * o4 < 0.0):
        return True
    # Touching or collinear overlap counts as contact.
    return (
        point_on_segment(c, a, b, tol)
        or point_on_segment(d, a, b, tol)
        or point_on_segment(a, c, d, tol)
        or point_on_segment(b, c, d, tol)
    )


def _folds_back(a: Point2, b: Point2, c: Point2, tol: float = EPS_WELD) -> bool:
    """Edge b->c runs back over edge a->b."""
    ux, uy = b[0] - a[0], b[1] - a[1]
    vx, vy = c[0] - b[0], c[1] - b[1]
    lu = (ux * ux + uy * uy) ** 0.5
    lv = (vx * vx + vy * vy) ** 0.5
    if lu <= tol or lv <= tol:
        return False
    return abs(ux * vy - uy * vx) <= tol * lu * lv and ux * vx + uy * vy < 0.0


def validate_polygon(points: Sequence[Point2]) -> PolygonValidityReport:
    if len(points) < 3:
        return PolygonValidityReport(valid=False, warnings=["Polygon has fewer than 3 points."])
    warnings: List[str] = []

    dup = 0
    seen = set()
    inv = 1.0 / EPS_WELD
    for p in points:
        key = (round(float(p[0]) * inv), round(float(p[1]) * inv))
        if key in seen:
            dup += 1
        seen.add(key)
    if dup:
        warnings.append(f"{dup} duplicate vertices.")

    si = 0
    n = len(points)
    for i in range(n):
        a, b = points[i], points[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            c, d = points[j], points[(j + 1) % n]
            if _segments_intersect(a, b, c, d):
                si += 1
        if _folds_back(a, b, points[(i + 2) % n]):
            si += 1

    area = signed_area(points)
    if abs(area) <= EPS_WELD:
        warnings.append("Polygon has zero area.")
    winding = "CCW" if area > 0.0 else "CW"
    return PolygonValidityReport(
        valid=si == 0,
        self_intersections=si,
        winding=winding,
        duplicate_vertices=dup,
        warnings=warnings,
    )


def assert_valid_polygon(points: Sequence[Point2]) -> None:
    if len(points) < 3:
        raise InvalidTopologyError("Polygon requires at least 3 vertices.")
    report = validate_polygon(points)
    if not report.valid:
        raise InvalidTopologyError(f"Polygon is not simple ({report.self_intersections} self-contacts).")


# Vertex edits return a new list; the caller keeps its original on InvalidTopologyError.


def move_vertex(points: Sequence[Point2], index: int, position: Point2) -> List[Point2]:
    out = [(float(x), float(y)) for x, y in points]
    if index < 0 or index >= len(out):
        raise IndexError(f"vertex index {index} out of range")
    out[index] = (float(position[0]), float(position[1]))
    assert_valid_polygon(out)
    return out


def insert_vertex(points: Sequence[Point2], edge_index: int, position: Point2) -> List[Point2]:
    """Insert a vertex right after edge_index (i.e. on the edge edge_index -> edge_index+1)."""
    out = [(float(x), float(y)) for x, y in points]
    if edge_index < 0 or edge_index >= len(out):
        raise IndexError(f"edge index {edge_index} out of range")
    out.insert(edge_index + 1, (float(position[0]), float(position[1])))
    assert_valid_polygon(out)
    return out


def delete_vertex(points: Sequence[Point2], index: int) -> List[Point2]:
    out = [(float(x), float(y)) for x, y in points]
    if index < 0 or index >= len(out):
        raise IndexError(f"vertex index {index} out of range")
    del out[index]
    assert_valid_polygon(out)
    return out
