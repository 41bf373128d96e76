from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Tuple

from floorgeom.core.transform import Transform2D
from floorgeom.geometry.param.model import RoomParam
from floorgeom.geometry.segments import (
    distance,
    midpoint,
    normalize_angle,
    normalize_angle_positive,
    polygon_edges,
    project_point_on_line,
    rotate_point,
    segment_angle,
    segment_segment_distance,
)


Point2 = Tuple[float, float]
Segment2 = Tuple[Point2, Point2]
SnapMode = Literal["edge-vertex", "edge-only", "vertex-only", "none"]

logger = logging.getLogger(__name__)

# Score bonus that ranks every opposite pair above any non-opposite pair.
OPPOSITE_BONUS = 1000.0


@dataclass(frozen=True)
class SnapThresholds:
    segment: float = 60.0
    vertex: float = 50.0
    angle_tolerance: float = math.radians(10.0)


@dataclass(frozen=True)
class SnapDebugInfo:
    moving_segment: Optional[Segment2] = None
    stationary_segment: Optional[Segment2] = None
    moving_vertex: Optional[Point2] = None
    stationary_vertex: Optional[Point2] = None
    segment_distance: Optional[float] = None
    vertex_distance: Optional[float] = None


@dataclass(frozen=True)
class SnapResult:
    """
    Advisory docking transform for a room being dragged.

    `translation` is the corrected total offset: the tentative drag offset
    plus the snap correction. `rotation` is applied about `pivot` before
    the correction. For mode "none" the tentative offset is returned as-is.
    """
    rotation: float
    translation: Point2
    snapped: bool
    mode: SnapMode
    offset: Point2 = (0.0, 0.0)
    pivot: Point2 = (0.0, 0.0)
    debug: Optional[SnapDebugInfo] = None

    @property
    def correction(self) -> Point2:
        return (self.translation[0] - self.offset[0], self.translation[1] - self.offset[1])

    def apply(self, points: Sequence[Point2]) -> List[Point2]:
        """Map dragged world points (offset already applied) to their snapped positions."""
        dx, dy = self.correction
        out: List[Point2] = []
        for p in points:
            r = rotate_point(p, self.pivot, self.rotation)
            out.append((r[0] + dx, r[1] + dy))
        return out

    def apply_to_transform(self, transform: Transform2D) -> Transform2D:
        """Committed assembly transform for a room that was at `transform` before the drag."""
        return transform.translated(self.offset).rotated_about(self.pivot, self.rotation).translated(self.correction)


@dataclass(frozen=True)
class _PairCandidate:
    moving: Segment2
    stationary: Segment2
    distance: float
    opposite: bool
    score: float


def room_segments(room: RoomParam, offset: Point2 = (0.0, 0.0)) -> List[Segment2]:
    pts = room.transform.points_to_world(room.polygon2d)
    ox, oy = float(offset[0]), float(offset[1])
    if len(pts) < 2:
        return []
    return polygon_edges([(x + ox, y + oy) for x, y in pts])


def is_opposite(moving: Segment2, stationary: Segment2, angle_tolerance: float) -> bool:
    diff = normalize_angle_positive(segment_angle(*moving) - segment_angle(*stationary))
    return abs(diff - math.pi) <= angle_tolerance


def alignment_rotation(moving: Segment2, stationary: Segment2) -> float:
    """Smaller of the rotations making `moving` parallel or anti-parallel to `stationary`."""
    a_m = segment_angle(*moving)
    a_s = segment_angle(*stationary)
    parallel = normalize_angle(a_s - a_m)
    anti = normalize_angle(a_s + math.pi - a_m)
    return parallel if abs(parallel) < abs(anti) else anti


def _closest_vertex_pair(moving: Segment2, stationary: Segment2) -> Tuple[Point2, Point2, float]:
    best = (moving[0], stationary[0], distance(moving[0], stationary[0]))
    for m in moving:
        for s in stationary:
            d = distance(m, s)
            if d < best[2]:
                best = (m, s, d)
    return best


def _find_best_pair(
    moving_segments: Sequence[Segment2],
    stationary_segments: Sequence[Segment2],
    thresholds: SnapThresholds,
) -> Tuple[Optional[_PairCandidate], Optional[Tuple[Point2, Point2, float]]]:
    best: Optional[_PairCandidate] = None
    closest_vertices: Optional[Tuple[Point2, Point2, float]] = None
    seg_t = float(thresholds.segment)
    for ms in moving_segments:
        for ss in stationary_segments:
            vp = _closest_vertex_pair(ms, ss)
            if closest_vertices is None or vp[2] < closest_vertices[2]:
                closest_vertices = vp
            d = segment_segment_distance(ms, ss)
            if d >= seg_t:
                continue
            opposite = is_opposite(ms, ss, thresholds.angle_tolerance)
            if opposite:
                score = OPPOSITE_BONUS + (seg_t - d) / seg_t * 100.0
            else:
                score = (seg_t - d) / seg_t * 10.0
            if best is None or score > best.score:
                best = _PairCandidate(moving=ms, stationary=ss, distance=d, opposite=opposite, score=score)
    return best, closest_vertices


def compute_snap(
    moving_room: RoomParam,
    offset: Point2,
    stationary_rooms: Sequence[RoomParam],
    thresholds: Optional[SnapThresholds] = None,
) -> SnapResult:
    """
    Find the docking transform for `moving_room` dragged by `offset`.

    Opposite (anti-parallel within the angle tolerance) edge pairs closer than
    the segment threshold win over everything else; among them the closest
    pair wins. The room is rotated about its dragged position so the pair
    becomes exactly anti-parallel, then translated so that the nearest vertex
    pair coincides ("edge-vertex") or, when no vertices are close, so that the
    edges become colinear ("edge-only"). Without a qualifying edge pair the
    globally closest vertex pair is snapped by translation alone.
    """
    th = thresholds or SnapThresholds()
    off = (float(offset[0]), float(offset[1]))
    pivot = (float(moving_room.transform.position[0]) + off[0], float(moving_room.transform.position[1]) + off[1])
    none = SnapResult(rotation=0.0, translation=off, snapped=False, mode="none", offset=off, pivot=pivot)

    moving_segments = room_segments(moving_room, off)
    stationary_segments: List[Segment2] = []
    for room in stationary_rooms:
        if room.id == moving_room.id:
            continue
        stationary_segments.extend(room_segments(room))
    if not moving_segments or not stationary_segments:
        return none

    best, closest_vertices = _find_best_pair(moving_segments, stationary_segments, th)

    if best is not None and best.opposite:
        rotation = alignment_rotation(best.moving, best.stationary)
        rotated = (rotate_point(best.moving[0], pivot, rotation), rotate_point(best.moving[1], pivot, rotation))
        _, _, pair_vertex_d = _closest_vertex_pair(best.moving, best.stationary)
        if pair_vertex_d < th.vertex:
            m, s, vd = _closest_vertex_pair(rotated, best.stationary)
            translation = (off[0] + s[0] - m[0], off[1] + s[1] - m[1])
            debug = SnapDebugInfo(best.moving, best.stationary, m, s, best.distance, vd)
            mode: SnapMode = "edge-vertex"
        else:
            mid = midpoint(*rotated)
            proj = project_point_on_line(mid, best.stationary[0], best.stationary[1])
            translation = (off[0] + proj[0] - mid[0], off[1] + proj[1] - mid[1])
            debug = SnapDebugInfo(best.moving, best.stationary, segment_distance=best.distance)
            mode = "edge-only"
        logger.debug("compute_snap(%s): %s rotation=%.6f translation=%s", moving_room.id, mode, rotation, translation)
        return SnapResult(
            rotation=rotation,
            translation=translation,
            snapped=True,
            mode=mode,
            offset=off,
            pivot=pivot,
            debug=debug,
        )

    if closest_vertices is not None and closest_vertices[2] < th.vertex:
        m, s, vd = closest_vertices
        translation = (off[0] + s[0] - m[0], off[1] + s[1] - m[1])
        logger.debug("compute_snap(%s): vertex-only translation=%s", moving_room.id, translation)
        return SnapResult(
            rotation=0.0,
            translation=translation,
            snapped=True,
            mode="vertex-only",
            offset=off,
            pivot=pivot,
            debug=SnapDebugInfo(moving_vertex=m, stationary_vertex=s, vertex_distance=vd),
        )
    return none


class SnapSession:
    """Holds the most recent snap result for display while a drag is in progress."""

    def __init__(self, thresholds: Optional[SnapThresholds] = None, enabled: bool = True):
        self.thresholds = thresholds or SnapThresholds()
        self.enabled = enabled
        self._last: Optional[SnapResult] = None

    @property
    def last_result(self) -> Optional[SnapResult]:
        return self._last

    def update(self, moving_room: RoomParam, offset: Point2, stationary_rooms: Sequence[RoomParam]) -> SnapResult:
        if not self.enabled:
            off = (float(offset[0]), float(offset[1]))
            res = SnapResult(rotation=0.0, translation=off, snapped=False, mode="none", offset=off)
        else:
            res = compute_snap(moving_room, offset, stationary_rooms, self.thresholds)
        self._last = res
        return res

    def clear(self) -> None:
        self._last = None
