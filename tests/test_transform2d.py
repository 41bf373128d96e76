from __future__ import annotations

import math

import numpy as np
import pytest

from floorgeom.core.transform import Transform2D


def test_to_world_applies_scale_rotation_then_translation() -> None:
    t = Transform2D(position=(100.0, 50.0), rotation=math.pi / 2.0)
    x, y = t.to_world((10.0, 0.0))
    assert abs(x - 100.0) < 1e-9
    assert abs(y - 60.0) < 1e-9

    s = Transform2D(position=(100.0, 50.0), scale=(2.0, 2.0))
    assert s.to_world((1.0, 1.0)) == (102.0, 52.0)


def test_to_local_inverts_to_world() -> None:
    t = Transform2D(position=(-40.0, 12.5), rotation=0.7, scale=(1.5, 0.5))
    pts = [(0.0, 0.0), (500.0, 0.0), (500.0, 300.0), (-3.0, 7.0)]
    back = t.points_to_local(t.points_to_world(pts))
    assert np.allclose(np.array(back), np.array(pts), atol=1e-9)


def test_rotated_about_keeps_world_geometry_consistent() -> None:
    t = Transform2D(position=(10.0, 0.0), rotation=0.0)
    r = t.rotated_about((0.0, 0.0), math.pi)
    x, y = r.to_world((1.0, 0.0))
    assert abs(x + 11.0) < 1e-9
    assert abs(y) < 1e-9
    assert t.translated((1.0, 2.0)).position == (11.0, 2.0)


def test_to_local_rejects_zero_scale() -> None:
    t = Transform2D(scale=(0.0, 1.0))
    with pytest.raises(ValueError):
        t.to_local((1.0, 1.0))
