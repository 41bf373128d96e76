from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from floorgeom.geometry.id import stable_id
from floorgeom.geometry.param.model import RoomParam
from floorgeom.geometry.param.rebuild import world_centerline_polygon
from floorgeom.geometry.segments import edges_match, polygon_edges
from floorgeom.geometry.tolerance import ADJACENCY_TOLERANCE


Point2 = Tuple[float, float]


@dataclass(frozen=True)
class SharedEdge:
    room_a: str
    edge_a: int
    room_b: str
    edge_b: int
    segment: Tuple[Point2, Point2]

    @property
    def id(self) -> str:
        a, b = sorted([(self.room_a, self.edge_a), (self.room_b, self.edge_b)])
        return stable_id("shared_edge", {"a": list(a), "b": list(b)})


def are_rooms_adjacent(room_a: RoomParam, room_b: RoomParam, tolerance: float = ADJACENCY_TOLERANCE) -> bool:
    """True when any world-space centerline edge of one room matches an edge of the other."""
    edges_a = polygon_edges(world_centerline_polygon(room_a))
    edges_b = polygon_edges(world_centerline_polygon(room_b))
    for ea in edges_a:
        for eb in edges_b:
            if edges_match(ea, eb, tolerance):
                return True
    return False


def find_adjacent_rooms(room: RoomParam, others: Sequence[RoomParam], tolerance: float = ADJACENCY_TOLERANCE) -> List[RoomParam]:
    return [o for o in others if o.id != room.id and are_rooms_adjacent(room, o, tolerance)]


def classify_edges(room: RoomParam, neighbors: Sequence[RoomParam], tolerance: float = ADJACENCY_TOLERANCE) -> List[Optional[str]]:
    """
    Per centerline edge of `room`, the id of the first neighbour sharing it, or None.

    Neighbours with the same id as `room` are ignored.
    """
    edges = polygon_edges(world_centerline_polygon(room))
    neighbor_edges = [(nb.id, polygon_edges(world_centerline_polygon(nb))) for nb in neighbors if nb.id != room.id]
    out: List[Optional[str]] = []
    for e in edges:
        match: Optional[str] = None
        for nb_id, nb_edges in neighbor_edges:
            if any(edges_match(e, other, tolerance) for other in nb_edges):
                match = nb_id
                break
        out.append(match)
    return out


def find_shared_edges(rooms: Sequence[RoomParam], tolerance: float = ADJACENCY_TOLERANCE) -> List[SharedEdge]:
    polys = [(r.id, polygon_edges(world_centerline_polygon(r))) for r in rooms]
    out: List[SharedEdge] = []
    for i in range(len(polys)):
        ida, edges_a = polys[i]
        for j in range(i + 1, len(polys)):
            idb, edges_b = polys[j]
            for ea_i, ea in enumerate(edges_a):
                for eb_i, eb in enumerate(edges_b):
                    if edges_match(ea, eb, tolerance):
                        out.append(SharedEdge(room_a=ida, edge_a=ea_i, room_b=idb, edge_b=eb_i, segment=ea))
    return out
