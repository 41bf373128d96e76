"""
floorgeom

2D parametric geometry engine for floor-plan editing: a relaxation
constraint solver for sketches, wall topology derived from room polygons,
and room-to-room alignment snapping.
"""

__version__ = "0.1.0"

from floorgeom.core.transform import Transform2D
from floorgeom.errors import FloorGeomError, InvalidTopologyError, SketchValidationError
from floorgeom.geometry.alignment import SnapResult, SnapSession, SnapThresholds, compute_snap
from floorgeom.geometry.offset import offset_polygon
from floorgeom.geometry.param.model import Aperture, RoomParam, WallOverride, WallThicknessTable, WallType
from floorgeom.geometry.topology import WallQuad, are_rooms_adjacent, build_walls, join_rooms
from floorgeom.sketch import Sketch, SolveResult, solve

__all__ = [
    "__version__",
    "Transform2D",
    "FloorGeomError",
    "InvalidTopologyError",
    "SketchValidationError",
    "SnapResult",
    "SnapSession",
    "SnapThresholds",
    "compute_snap",
    "offset_polygon",
    "Aperture",
    "RoomParam",
    "WallOverride",
    "WallThicknessTable",
    "WallType",
    "WallQuad",
    "are_rooms_adjacent",
    "build_walls",
    "join_rooms",
    "Sketch",
    "SolveResult",
    "solve",
]
