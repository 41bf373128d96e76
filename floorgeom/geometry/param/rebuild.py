from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

from floorgeom.geometry.offset import calculate_centerline_polygon, calculate_external_polygon
from floorgeom.geometry.param.model import CENTERLINE_OFFSET, EXTERIOR_WALL_THICKNESS, RoomParam


Point2 = Tuple[float, float]


def rebuild_room_polygons(
    room: RoomParam,
    *,
    centerline_offset: float = CENTERLINE_OFFSET,
    external_thickness: float = EXTERIOR_WALL_THICKNESS,
) -> RoomParam:
    return replace(
        room,
        centerline_polygon=calculate_centerline_polygon(room.polygon2d, centerline_offset),
        external_polygon=calculate_external_polygon(room.polygon2d, external_thickness),
    )


def ensure_room_polygons(room: RoomParam) -> RoomParam:
    if room.is_dirty:
        return rebuild_room_polygons(room)
    return room


def world_floor_polygon(room: RoomParam) -> List[Point2]:
    return room.transform.points_to_world(room.polygon2d)


def world_centerline_polygon(room: RoomParam) -> List[Point2]:
    room = ensure_room_polygons(room)
    return room.transform.points_to_world(room.centerline_polygon or [])
