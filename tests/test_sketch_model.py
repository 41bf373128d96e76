from __future__ import annotations

import pytest

from floorgeom.errors import SketchValidationError
from floorgeom.sketch.model import (
    DistanceConstraint,
    HorizontalConstraint,
    LineLengthConstraint,
    LinePrimitive,
    ParallelConstraint,
    PointPrimitive,
    Sketch,
    primitive_from_dict,
    sketch_from_dicts,
)


def test_sketch_rejects_duplicate_ids() -> None:
    with pytest.raises(SketchValidationError):
        Sketch((PointPrimitive("p", 0.0, 0.0), PointPrimitive("p", 1.0, 1.0)))


def test_sketch_rejects_dangling_and_mistyped_references() -> None:
    a = PointPrimitive("a", 0.0, 0.0)
    b = PointPrimitive("b", 10.0, 0.0)
    with pytest.raises(SketchValidationError):
        Sketch((a, LinePrimitive("l", "a", "missing")))
    line = LinePrimitive("l", "a", "b")
    with pytest.raises(SketchValidationError):
        Sketch((a, b, line, HorizontalConstraint("h", line_id="a")))
    with pytest.raises(SketchValidationError):
        Sketch((a, b, line, DistanceConstraint("d", p1_id="a", p2_id="l", distance=5.0)))


def test_sketch_lookup_and_partitions() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0, fixed=True),
            PointPrimitive("b", 10.0, 0.0),
            LinePrimitive("l", "a", "b"),
            HorizontalConstraint("h", line_id="l"),
        )
    )
    assert len(sk) == 4
    assert "l" in sk
    assert sk.point("a").fixed is True
    assert sk.line("l").p2_id == "b"
    assert [c.id for c in sk.constraints] == ["h"]
    with pytest.raises(KeyError):
        sk.point("l")


def test_with_positions_never_moves_fixed_points() -> None:
    sk = Sketch((PointPrimitive("a", 0.0, 0.0, fixed=True), PointPrimitive("b", 1.0, 1.0)))
    moved = sk.with_positions({"a": (5.0, 5.0), "b": (2.0, 3.0)})
    assert moved.point("a").xy == (0.0, 0.0)
    assert moved.point("b").xy == (2.0, 3.0)
    assert sk.point("b").xy == (1.0, 1.0)


def test_primitive_from_dict_accepts_editor_aliases() -> None:
    c = primitive_from_dict({"type": "distance", "id": "c", "p1_id": "a", "p2_id": "b", "distance": "12.5"})
    assert isinstance(c, DistanceConstraint)
    assert c.distance == 12.5
    ln = primitive_from_dict({"type": "length", "id": "c2", "l_id": "l", "length": 3})
    assert isinstance(ln, LineLengthConstraint)
    assert ln.line_id == "l"
    par = primitive_from_dict({"type": "parallel_ll", "id": "c3", "l1_id": "l", "l2_id": "m"})
    assert isinstance(par, ParallelConstraint)
    with pytest.raises(SketchValidationError):
        primitive_from_dict({"type": "tangent", "id": "x"})
    with pytest.raises(SketchValidationError):
        primitive_from_dict({"type": "horizontal", "id": "x"})


def test_sketch_dicts_round_trip() -> None:
    items = [
        {"type": "point", "id": "a", "x": 0.0, "y": 0.0, "fixed": True},
        {"type": "point", "id": "b", "x": 3.0, "y": 4.0},
        {"type": "line", "id": "l", "p1_id": "a", "p2_id": "b"},
        {"type": "line_length", "id": "len", "line_id": "l", "length": 5.0},
    ]
    sk = sketch_from_dicts(items)
    assert sketch_from_dicts(sk.to_dicts()) == sk
    assert sk.to_dicts()[1]["fixed"] is False
