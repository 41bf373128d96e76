from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from floorgeom.geometry.param.model import RoomParam
from floorgeom.geometry.param.rebuild import rebuild_room_polygons
from floorgeom.geometry.segments import distance, point_on_segment
from floorgeom.geometry.tolerance import JOIN_TOLERANCE


Point2 = Tuple[float, float]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VertexInjection:
    room_id: str
    source_room_id: str
    # New vertex index in the target room's floor polygon.
    index: int
    point: Point2


@dataclass(frozen=True)
class JoinResult:
    modified: bool
    updated_polygons: Dict[str, List[Point2]] = field(default_factory=dict)
    rooms: Tuple[RoomParam, ...] = ()
    injected: List[VertexInjection] = field(default_factory=list)


def find_vertex_edge_hits(source_world: List[Point2], target_world: List[Point2], tolerance: float) -> List[Tuple[int, Point2]]:
    """(edge_index, vertex) pairs where a source vertex lies on a target edge without an existing target vertex nearby."""
    hits: List[Tuple[int, Point2]] = []
    n = len(target_world)
    for v in source_world:
        if any(distance(v, t) <= tolerance for t in target_world):
            continue
        for j in range(n):
            if point_on_segment(v, target_world[j], target_world[(j + 1) % n], tolerance):
                hits.append((j, v))
                break
    return hits


def _inject(source: RoomParam, target: RoomParam, tolerance: float) -> Tuple[RoomParam, List[VertexInjection]]:
    src = source.transform.points_to_world(source.polygon2d)
    local = list(target.polygon2d)
    injected: List[VertexInjection] = []
    for v in src:
        world = target.transform.points_to_world(local)
        hits = find_vertex_edge_hits([v], world, tolerance)
        if not hits:
            continue
        edge_index, point = hits[0]
        p_local = target.transform.to_local(point)
        local.insert(edge_index + 1, p_local)
        injected.append(VertexInjection(room_id=target.id, source_room_id=source.id, index=edge_index + 1, point=p_local))
        logger.debug("join: injected (%.3f, %.3f) into %s after edge %d", p_local[0], p_local[1], target.id, edge_index)
    if not injected:
        return target, injected
    return rebuild_room_polygons(target.with_polygon(local)), injected


def join_rooms(room_a: RoomParam, room_b: RoomParam, tolerance: float = JOIN_TOLERANCE) -> JoinResult:
    """
    Inject T-junction vertices between two rooms, in both directions.

    Vertices of A lying on an edge of B (within `tolerance`, world frame) are
    inserted into B right after that edge's start vertex, then the same is
    done for B's vertices against A. Running it again on the result is a no-op.
    """
    new_b, into_b = _inject(room_a, room_b, tolerance)
    new_a, into_a = _inject(new_b, room_a, tolerance)
    updated: Dict[str, List[Point2]] = {}
    if into_a:
        updated[new_a.id] = list(new_a.polygon2d)
    if into_b:
        updated[new_b.id] = list(new_b.polygon2d)
    return JoinResult(
        modified=bool(updated),
        updated_polygons=updated,
        rooms=(new_a, new_b),
        injected=into_b + into_a,
    )


def join_all_rooms(rooms: List[RoomParam], tolerance: float = JOIN_TOLERANCE) -> Tuple[List[RoomParam], List[VertexInjection]]:
    """Pairwise join over a room list; returns updated rooms in input order."""
    out = list(rooms)
    injected: List[VertexInjection] = []
    for i in range(len(out)):
        for j in range(i + 1, len(out)):
            res = join_rooms(out[i], out[j], tolerance)
            if res.modified:
                out[i], out[j] = res.rooms
                injected.extend(res.injected)
    return out, injected
