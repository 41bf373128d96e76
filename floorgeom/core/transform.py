from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np


Point2 = Tuple[float, float]


@dataclass(frozen=True)
class Transform2D:
    """
    2D assembly transform: scale, then rotate, then translate.

    Rotation is in radians, counter-clockwise in a y-up frame.
    """
    position: Point2 = (0.0, 0.0)
    rotation: float = 0.0
    scale: Point2 = (1.0, 1.0)

    def get_rotation_matrix(self) -> np.ndarray:
        """Get 2x2 rotation matrix."""
        c = math.cos(self.rotation)
        s = math.sin(self.rotation)
        return np.array([[c, -s], [s, c]], dtype=float)

    def to_world(self, p: Point2) -> Point2:
        x, y = self.to_world_array(np.array([p], dtype=float))[0]
        return (float(x), float(y))

    def to_local(self, p: Point2) -> Point2:
        x, y = self.to_local_array(np.array([p], dtype=float))[0]
        return (float(x), float(y))

    def to_world_array(self, pts: np.ndarray) -> np.ndarray:
        pts = np.asarray(pts, dtype=float).reshape(-1, 2)
        scaled = pts * np.asarray(self.scale, dtype=float)
        return scaled @ self.get_rotation_matrix().T + np.asarray(self.position, dtype=float)

    def to_local_array(self, pts: np.ndarray) -> np.ndarray:
        sx, sy = float(self.scale[0]), float(self.scale[1])
        if abs(sx) <= 1e-12 or abs(sy) <= 1e-12:
            raise ValueError("Transform2D.to_local requires non-zero scale.")
        pts = np.asarray(pts, dtype=float).reshape(-1, 2)
        # Row vectors: x @ R undoes x @ R.T
        unrotated = (pts - np.asarray(self.position, dtype=float)) @ self.get_rotation_matrix()
        return unrotated / np.array([sx, sy], dtype=float)

    def points_to_world(self, pts: Sequence[Point2]) -> List[Point2]:
        if not pts:
            return []
        return [(float(x), float(y)) for x, y in self.to_world_array(np.asarray(pts, dtype=float))]

    def points_to_local(self, pts: Sequence[Point2]) -> List[Point2]:
        if not pts:
            return []
        return [(float(x), float(y)) for x, y in self.to_local_array(np.asarray(pts, dtype=float))]

    def translated(self, delta: Point2) -> "Transform2D":
        return Transform2D(
            position=(float(self.position[0]) + float(delta[0]), float(self.position[1]) + float(delta[1])),
            rotation=self.rotation,
            scale=self.scale,
        )

    def rotated_about(self, center: Point2, angle: float) -> "Transform2D":
        """Compose a world-space rotation about `center` onto this transform."""
        c = math.cos(angle)
        s = math.sin(angle)
        dx = float(self.position[0]) - float(center[0])
        dy = float(self.position[1]) - float(center[1])
        pos = (float(center[0]) + dx * c - dy * s, float(center[1]) + dx * s + dy * c)
        return Transform2D(position=pos, rotation=float(self.rotation) + float(angle), scale=self.scale)


IDENTITY = Transform2D()

__all__ = ["Transform2D", "IDENTITY", "Point2"]
