from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from floorgeom.geometry.id import wall_id
from floorgeom.geometry.param.model import Aperture, RoomParam, WallOverride, WallThicknessTable, WallType
from floorgeom.geometry.param.rebuild import ensure_room_polygons
from floorgeom.geometry.segments import distance, line_intersection, outward_normal
from floorgeom.geometry.tolerance import ADJACENCY_TOLERANCE, EPS_PARALLEL
from floorgeom.geometry.topology.adjacency import classify_edges


Point2 = Tuple[float, float]
JoinStyle = Literal["miter", "butt"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WallIssue:
    code: str
    message: str
    edge_index: int
    aperture_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "edge_index": int(self.edge_index),
            "aperture_id": self.aperture_id,
        }


@dataclass(frozen=True)
class ApertureSpan:
    aperture: Aperture
    start: float
    end: float
    # Cut-out endpoints on the wall centerline.
    segment: Tuple[Point2, Point2]


@dataclass(frozen=True)
class WallQuad:
    id: str
    room_id: str
    edge_index: int
    # [inner_start, inner_end, outer_end, outer_start]
    points: Tuple[Point2, Point2, Point2, Point2]
    wall_type: WallType
    classification: Literal["interior", "exterior"]
    thickness: float
    length: float
    neighbor_id: Optional[str] = None
    height: Optional[float] = None
    apertures: List[ApertureSpan] = field(default_factory=list)
    issues: List[WallIssue] = field(default_factory=list)

    @property
    def inner_start(self) -> Point2:
        return self.points[0]

    @property
    def inner_end(self) -> Point2:
        return self.points[1]

    @property
    def outer_end(self) -> Point2:
        return self.points[2]

    @property
    def outer_start(self) -> Point2:
        return self.points[3]

    @property
    def is_interior(self) -> bool:
        return self.classification == "interior"


@dataclass(frozen=True)
class WallBuildResult:
    room_id: str
    walls: List[WallQuad] = field(default_factory=list)
    issues: List[WallIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def to_dict(self) -> dict:
        return {
            "room_id": self.room_id,
            "walls": [
                {
                    "id": w.id,
                    "edge_index": w.edge_index,
                    "points": [list(p) for p in w.points],
                    "wall_type": w.wall_type.value,
                    "classification": w.classification,
                    "thickness": w.thickness,
                    "apertures": [a.aperture.id for a in w.apertures],
                }
                for w in self.walls
            ],
            "issues": [i.to_dict() for i in self.issues],
        }


def _shift(p: Point2, n: Point2, d: float) -> Point2:
    return (p[0] + n[0] * d, p[1] + n[1] * d)


def _corner(
    p: Point2,
    prev_start: Point2,
    n_prev: Point2,
    d_prev: float,
    next_end: Point2,
    n_next: Point2,
    d_next: float,
    fallback: Point2,
) -> Point2:
    # Intersection of the previous and next walls' face lines; butt point when parallel.
    hit = line_intersection(
        _shift(prev_start, n_prev, d_prev),
        _shift(p, n_prev, d_prev),
        _shift(p, n_next, d_next),
        _shift(next_end, n_next, d_next),
        eps=EPS_PARALLEL,
    )
    return fallback if hit is None else hit


def place_apertures(
    edge_index: int,
    start: Point2,
    end: Point2,
    apertures: Sequence[Aperture],
) -> Tuple[List[ApertureSpan], List[WallIssue]]:
    """Resolve apertures along a wall; out-of-range ones are reported and skipped."""
    length = distance(start, end)
    spans: List[ApertureSpan] = []
    issues: List[WallIssue] = []
    if length <= 0.0:
        return spans, issues
    ux = (end[0] - start[0]) / length
    uy = (end[1] - start[1]) / length
    for ap in apertures:
        if ap.anchor_vertex == "end":
            a0 = length - float(ap.distance) - float(ap.width)
            a1 = length - float(ap.distance)
        else:
            a0 = float(ap.distance)
            a1 = float(ap.distance) + float(ap.width)
        if not (0.0 <= a0 <= a1 <= length):
            msg = f"{ap.type} {ap.id} spans [{a0:.3f}, {a1:.3f}] outside wall length {length:.3f}"
            logger.debug("edge %d: %s", edge_index, msg)
            issues.append(WallIssue(code="aperture_out_of_range", message=msg, edge_index=edge_index, aperture_id=ap.id))
            continue
        seg = ((start[0] + ux * a0, start[1] + uy * a0), (start[0] + ux * a1, start[1] + uy * a1))
        spans.append(ApertureSpan(aperture=ap, start=a0, end=a1, segment=seg))
    return spans, issues


def build_walls(
    room: RoomParam,
    thickness_table: Optional[WallThicknessTable] = None,
    neighbor_rooms: Sequence[RoomParam] = (),
    *,
    tolerance: float = ADJACENCY_TOLERANCE,
    overrides: Optional[Mapping[int, WallOverride]] = None,
    apertures: Optional[Mapping[int, Sequence[Aperture]]] = None,
    join: JoinStyle = "miter",
) -> WallBuildResult:
    """
    Rebuild every wall quad of `room` from its centerline polygon.

    Quads are in the room's local frame. Edges matching a neighbour's
    centerline edge become interior walls; all others are exterior.
    """
    table = thickness_table or WallThicknessTable()
    overrides = overrides or {}
    apertures = apertures or {}
    room = ensure_room_polygons(room)
    center = list(room.centerline_polygon or [])
    n = len(center)
    if n < 3:
        issue = WallIssue(code="degenerate_polygon", message="centerline polygon has fewer than 3 points", edge_index=-1)
        return WallBuildResult(room_id=room.id, walls=[], issues=[issue])

    neighbor_ids = classify_edges(room, neighbor_rooms, tolerance)
    c = float(table.centerline_offset)

    normals: List[Optional[Point2]] = []
    thicknesses: List[float] = []
    types: List[WallType] = []
    issues: List[WallIssue] = []
    for i in range(n):
        normals.append(outward_normal(center[i], center[(i + 1) % n]))
        ov = overrides.get(i, WallOverride())
        wt = WallType.INTERIOR_DIVISION if neighbor_ids[i] is not None else WallType.EXTERIOR
        if ov.wall_type is not None:
            wt = WallType(ov.wall_type)
        t = float(ov.thickness) if ov.thickness is not None else table.thickness_for(wt)
        if t <= 0.0:
            issues.append(WallIssue(code="invalid_thickness", message=f"override thickness {t} must be > 0", edge_index=i))
            t = table.thickness_for(wt)
        types.append(wt)
        thicknesses.append(t)

    walls: List[WallQuad] = []
    for i in range(n):
        s = center[i]
        e = center[(i + 1) % n]
        nrm = normals[i]
        if nrm is None:
            issues.append(WallIssue(code="degenerate_edge", message="zero-length centerline edge", edge_index=i))
            continue
        d_in = -c
        d_out = thicknesses[i] - c
        inner_start = _shift(s, nrm, d_in)
        inner_end = _shift(e, nrm, d_in)
        outer_end = _shift(e, nrm, d_out)
        outer_start = _shift(s, nrm, d_out)

        if join == "miter":
            ip = (i - 1) % n
            inx = (i + 1) % n
            n_prev = normals[ip]
            n_next = normals[inx]
            if n_prev is not None:
                prev_start = center[ip]
                inner_start = _corner(s, prev_start, n_prev, d_in, e, nrm, d_in, inner_start)
                outer_start = _corner(s, prev_start, n_prev, thicknesses[ip] - c, e, nrm, d_out, outer_start)
            if n_next is not None:
                next_end = center[(i + 2) % n]
                # Same corner seen from the other side: this wall is the "previous" one.
                inner_end = _corner(e, s, nrm, d_in, next_end, n_next, d_in, inner_end)
                outer_end = _corner(e, s, nrm, d_out, next_end, n_next, thicknesses[inx] - c, outer_end)

        spans, ap_issues = place_apertures(i, s, e, apertures.get(i, ()))
        issues.extend(ap_issues)
        ov = overrides.get(i, WallOverride())
        walls.append(
            WallQuad(
                id=wall_id(room.id, i),
                room_id=room.id,
                edge_index=i,
                points=(inner_start, inner_end, outer_end, outer_start),
                wall_type=types[i],
                classification="interior" if neighbor_ids[i] is not None else "exterior",
                thickness=thicknesses[i],
                length=distance(s, e),
                neighbor_id=neighbor_ids[i],
                height=ov.height,
                apertures=spans,
                issues=ap_issues,
            )
        )
    logger.debug("build_walls(%s): %d walls, %d issues", room.id, len(walls), len(issues))
    return WallBuildResult(room_id=room.id, walls=walls, issues=issues)


def build_all_walls(
    rooms: Sequence[RoomParam],
    thickness_table: Optional[WallThicknessTable] = None,
    *,
    tolerance: float = ADJACENCY_TOLERANCE,
    overrides: Optional[Mapping[str, Mapping[int, WallOverride]]] = None,
    apertures: Optional[Mapping[str, Mapping[int, Sequence[Aperture]]]] = None,
    join: JoinStyle = "miter",
) -> Dict[str, WallBuildResult]:
    overrides = overrides or {}
    apertures = apertures or {}
    out: Dict[str, WallBuildResult] = {}
    for room in rooms:
        out[room.id] = build_walls(
            room,
            thickness_table,
            [r for r in rooms if r.id != room.id],
            tolerance=tolerance,
            overrides=overrides.get(room.id),
            apertures=apertures.get(room.id),
            join=join,
        )
    return out
