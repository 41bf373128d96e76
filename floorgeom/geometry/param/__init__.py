from __future__ import annotations

from floorgeom.geometry.param.model import (
    CENTERLINE_OFFSET,
    DEFAULT_WALL_THICKNESS,
    EXTERIOR_WALL_THICKNESS,
    INTERIOR_WALL_THICKNESS,
    Aperture,
    RoomParam,
    WallOverride,
    WallThicknessTable,
    WallType,
)
from floorgeom.geometry.param.rebuild import (
    ensure_room_polygons,
    rebuild_room_polygons,
    world_centerline_polygon,
    world_floor_polygon,
)

__all__ = [
    "CENTERLINE_OFFSET",
    "DEFAULT_WALL_THICKNESS",
    "EXTERIOR_WALL_THICKNESS",
    "INTERIOR_WALL_THICKNESS",
    "Aperture",
    "RoomParam",
    "WallOverride",
    "WallThicknessTable",
    "WallType",
    "ensure_room_polygons",
    "rebuild_room_polygons",
    "world_centerline_polygon",
    "world_floor_polygon",
]
