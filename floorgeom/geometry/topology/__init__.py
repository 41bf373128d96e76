from floorgeom.geometry.topology.adjacency import SharedEdge, are_rooms_adjacent, classify_edges, find_adjacent_rooms, find_shared_edges
from floorgeom.geometry.topology.joining import JoinResult, VertexInjection, join_all_rooms, join_rooms
from floorgeom.geometry.topology.walls import (
    ApertureSpan,
    WallBuildResult,
    WallIssue,
    WallQuad,
    build_all_walls,
    build_walls,
    place_apertures,
)

__all__ = [
    "SharedEdge",
    "are_rooms_adjacent",
    "classify_edges",
    "find_adjacent_rooms",
    "find_shared_edges",
    "JoinResult",
    "VertexInjection",
    "join_all_rooms",
    "join_rooms",
    "ApertureSpan",
    "WallBuildResult",
    "WallIssue",
    "WallQuad",
    "build_all_walls",
    "build_walls",
    "place_apertures",
]
