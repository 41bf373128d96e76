from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Literal, Mapping, Optional, Tuple, Union

from floorgeom.core.transform import Transform2D
from floorgeom.geometry.polygon2d import ensure_ccw


Point2 = Tuple[float, float]

# Centerline sits this far outside the floor polygon: half the standard interior wall.
CENTERLINE_OFFSET = 5.0

# Standard interior wall thickness.
INTERIOR_WALL_THICKNESS = 10.0

# Outer face of the external polygon, measured from the floor polygon.
EXTERIOR_WALL_THICKNESS = 20.0


class WallType(str, Enum):
    EXTERIOR = "exterior"
    INTERIOR_DIVISION = "interior_division"
    INTERIOR_STRUCTURAL = "interior_structural"
    INTERIOR_PARTITION = "interior_partition"
    TERRAIN_CONTACT = "terrain_contact"
    ADIABATIC = "adiabatic"


DEFAULT_WALL_THICKNESS: Dict[WallType, float] = {
    WallType.EXTERIOR: 20.0,
    WallType.INTERIOR_DIVISION: 10.0,
    WallType.INTERIOR_STRUCTURAL: 15.0,
    WallType.INTERIOR_PARTITION: 7.0,
    WallType.TERRAIN_CONTACT: 30.0,
    WallType.ADIABATIC: 20.0,
}


@dataclass(frozen=True)
class WallThicknessTable:
    thickness: Mapping[WallType, float] = field(default_factory=lambda: dict(DEFAULT_WALL_THICKNESS))
    centerline_offset: float = CENTERLINE_OFFSET

    def __post_init__(self) -> None:
        missing = [t.value for t in WallType if t not in self.thickness]
        if missing:
            raise ValueError(f"WallThicknessTable missing wall types: {', '.join(missing)}")
        for t, v in self.thickness.items():
            if float(v) <= 0.0:
                raise ValueError(f"Wall thickness for {WallType(t).value} must be > 0, got {v}")

    def thickness_for(self, wall_type: Union[WallType, str]) -> float:
        return float(self.thickness[WallType(wall_type)])


@dataclass(frozen=True)
class Aperture:
    id: str
    type: Literal["door", "window"] = "door"
    width: float = 90.0
    distance: float = 0.0
    anchor_vertex: Literal["start", "end"] = "start"
    height: Optional[float] = None


@dataclass(frozen=True)
class WallOverride:
    # Per-edge authored settings that survive wall rebuilds.
    wall_type: Optional[WallType] = None
    thickness: Optional[float] = None
    height: Optional[float] = None


@dataclass(frozen=True)
class RoomParam:
    id: str
    polygon2d: List[Point2] = field(default_factory=list)
    transform: Transform2D = field(default_factory=Transform2D)
    # Derived caches; None means dirty.
    centerline_polygon: Optional[List[Point2]] = None
    external_polygon: Optional[List[Point2]] = None
    name: str = ""

    @classmethod
    def create(cls, id: str, polygon2d: List[Point2], transform: Optional[Transform2D] = None, name: str = "") -> "RoomParam":
        """Build a room with a CCW floor polygon and freshly derived centerline/external polygons."""
        from floorgeom.geometry.param.rebuild import rebuild_room_polygons

        room = cls(id=id, polygon2d=ensure_ccw(polygon2d), transform=transform or Transform2D(), name=name)
        return rebuild_room_polygons(room)

    @property
    def is_dirty(self) -> bool:
        return self.centerline_polygon is None or self.external_polygon is None

    def with_polygon(self, polygon2d: List[Point2]) -> "RoomParam":
        return replace(
            self,
            polygon2d=[(float(x), float(y)) for x, y in polygon2d],
            centerline_polygon=None,
            external_polygon=None,
        )

    def with_transform(self, transform: Transform2D) -> "RoomParam":
        return replace(self, transform=transform)
