from __future__ import annotations

import math
import random

import numpy as np
import pytest

from floorgeom.sketch.constraints import StepLimits, compile_constraints
from floorgeom.sketch.model import (
    AngleConstraint,
    CoincidentConstraint,
    CollinearConstraint,
    DistanceConstraint,
    EqualLengthConstraint,
    HorizontalConstraint,
    LineAngleConstraint,
    LineLengthConstraint,
    LinePrimitive,
    MidpointConstraint,
    ParallelConstraint,
    PerpendicularConstraint,
    PointOnLineConstraint,
    PointPrimitive,
    Sketch,
    VerticalConstraint,
)
from floorgeom.sketch.solver import SolverConfig, solve


def _dist(sk: Sketch, a: str, b: str) -> float:
    pa, pb = sk.point(a), sk.point(b)
    return math.hypot(pb.x - pa.x, pb.y - pa.y)


def _dir(sk: Sketch, line_id: str):
    ln = sk.line(line_id)
    a, b = sk.point(ln.p1_id), sk.point(ln.p2_id)
    return (b.x - a.x, b.y - a.y)


@pytest.mark.parametrize("seed", range(8))
def test_distance_converges_from_random_starts(seed: int) -> None:
    rng = random.Random(seed)
    sk = Sketch(
        (
            PointPrimitive("a", rng.uniform(-500.0, 500.0), rng.uniform(-500.0, 500.0)),
            PointPrimitive("b", rng.uniform(-500.0, 500.0), rng.uniform(-500.0, 500.0)),
            DistanceConstraint("d", p1_id="a", p2_id="b", distance=150.0),
        )
    )
    res = solve(sk, 1000, 1e-8)
    assert res.success is True
    assert abs(_dist(res.sketch, "a", "b") - 150.0) < 1e-3


def test_fixed_points_never_move() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0, fixed=True),
            PointPrimitive("b", 120.0, 30.0),
            PointPrimitive("c", 40.0, 90.0),
            PointPrimitive("d", 200.0, 5.0, fixed=True),
            PointPrimitive("e", 55.0, -20.0, fixed=True),
            PointPrimitive("g", 260.0, 70.0),
            PointPrimitive("h", 5.0, 150.0, fixed=True),
            LinePrimitive("ab", "a", "b"),
            LinePrimitive("bc", "b", "c"),
            LinePrimitive("ac", "a", "c"),
            LinePrimitive("dg", "d", "g"),
            LinePrimitive("dh", "d", "h"),
            DistanceConstraint("d1", p1_id="a", p2_id="b", distance=100.0),
            HorizontalConstraint("h1", line_id="ab"),
            VerticalConstraint("v1", line_id="dh"),
            PerpendicularConstraint("perp", l1_id="ab", l2_id="bc"),
            ParallelConstraint("par", l1_id="dg", l2_id="ac"),
            LineAngleConstraint("la", l1_id="dh", l2_id="bc", angle=0.3),
            EqualLengthConstraint("eq", l1_id="dg", l2_id="dh"),
            AngleConstraint("ang", p1_id="e", vertex_id="a", p2_id="c", angle=1.0),
            CollinearConstraint("col", p1_id="a", p2_id="e", p3_id="g"),
            CoincidentConstraint("co", p1_id="e", p2_id="c"),
            PointOnLineConstraint("pol", point_id="e", line_id="bc"),
            MidpointConstraint("mid", point_id="h", line_id="bc"),
            LineLengthConstraint("len", line_id="dh", length=80.0),
        )
    )
    rows = {p.id: i for i, p in enumerate(sk.points)}
    pos = np.array([[p.x, p.y] for p in sk.points], dtype=float)
    free = np.array([not p.fixed for p in sk.points], dtype=bool)
    start = pos.copy()
    lim = StepLimits(learning_rate=0.7, max_step=100.0, max_angle_step=math.pi / 8.0, eps=1e-9)
    relaxers = compile_constraints(sk, rows)
    assert {r.constraint.kind for r in relaxers} == {c.kind for c in sk.constraints}
    for _ in range(50):
        for r in relaxers:
            r.apply(pos, free, lim)
            # Checked after every single relaxation, not only at the end.
            assert np.array_equal(pos[~free], start[~free]), r.constraint.id
    assert np.all(np.isfinite(pos))

    res = solve(sk, 200, 1e-9)
    for pid in ("a", "d", "e", "h"):
        assert res.sketch.point(pid).xy == sk.point(pid).xy


def test_free_points_settle_relative_to_fixed_anchors() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0, fixed=True),
            PointPrimitive("b", 90.0, 20.0),
            PointPrimitive("f", 50.0, 0.0, fixed=True),
            PointPrimitive("g", 150.0, 30.0),
            PointPrimitive("d", 200.0, 0.0, fixed=True),
            PointPrimitive("e", 230.0, 60.0),
            LinePrimitive("ab", "a", "b"),
            LinePrimitive("de", "d", "e"),
            DistanceConstraint("dist", p1_id="a", p2_id="b", distance=100.0),
            HorizontalConstraint("h", line_id="ab"),
            CollinearConstraint("col", p1_id="a", p2_id="f", p3_id="g"),
            PerpendicularConstraint("perp", l1_id="ab", l2_id="de"),
            EqualLengthConstraint("eq", l1_id="de", l2_id="ab"),
        )
    )
    res = solve(sk, 2000, 1e-10)
    out = res.sketch
    assert res.success
    # Measured against the input coordinates of the fixed anchors.
    b, g, e = out.point("b"), out.point("g"), out.point("e")
    assert abs(b.x - 100.0) < 1e-3 and abs(b.y) < 1e-3
    assert abs(g.x - 150.0) < 1e-9 and abs(g.y) < 1e-3
    assert abs(e.x - 200.0) < 1e-3 and abs(e.y - 100.0) < 1e-3


def test_horizontal_and_vertical_lines() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0),
            PointPrimitive("b", 100.0, 37.0),
            PointPrimitive("c", 200.0, 0.0),
            PointPrimitive("d", 260.0, 90.0),
            LinePrimitive("ab", "a", "b"),
            LinePrimitive("cd", "c", "d"),
            HorizontalConstraint("h", line_id="ab"),
            VerticalConstraint("v", line_id="cd"),
        )
    )
    res = solve(sk, 500, 1e-10)
    out = res.sketch
    assert res.success
    assert abs(out.point("a").y - out.point("b").y) < 1e-4
    assert abs(out.point("c").x - out.point("d").x) < 1e-4
    # Both endpoints meet halfway.
    assert abs(out.point("a").y - 18.5) < 1e-4


def test_distance_with_horizontal_and_fixed_anchor() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0, fixed=True),
            PointPrimitive("b", 80.0, 30.0),
            LinePrimitive("ab", "a", "b"),
            DistanceConstraint("d", p1_id="a", p2_id="b", distance=100.0),
            HorizontalConstraint("h", line_id="ab"),
        )
    )
    res = solve(sk, 1000, 1e-10)
    b = res.sketch.point("b")
    assert res.success
    assert abs(b.x - 100.0) < 1e-3
    assert abs(b.y) < 1e-3


def test_perpendicular_and_parallel_lines() -> None:
    base = (
        PointPrimitive("a", 0.0, 0.0),
        PointPrimitive("b", 100.0, 10.0),
        PointPrimitive("c", 200.0, 0.0),
        PointPrimitive("d", 230.0, 100.0),
        LinePrimitive("l1", "a", "b"),
        LinePrimitive("l2", "c", "d"),
    )
    perp = solve(Sketch(base + (PerpendicularConstraint("p", l1_id="l1", l2_id="l2"),)), 500, 1e-12)
    u, v = _dir(perp.sketch, "l1"), _dir(perp.sketch, "l2")
    assert perp.success
    assert abs(u[0] * v[0] + u[1] * v[1]) / (math.hypot(*u) * math.hypot(*v)) < 1e-5

    par = solve(Sketch(base + (ParallelConstraint("q", l1_id="l1", l2_id="l2"),)), 500, 1e-12)
    u, v = _dir(par.sketch, "l1"), _dir(par.sketch, "l2")
    assert par.success
    assert abs(u[0] * v[1] - u[1] * v[0]) / (math.hypot(*u) * math.hypot(*v)) < 1e-5
    # Rotation about midpoints keeps lengths.
    assert abs(math.hypot(*u) - math.hypot(100.0, 10.0)) < 1e-6


def test_point_on_line_moves_point_or_line() -> None:
    sk = Sketch(
        (
            PointPrimitive("p", 50.0, 40.0),
            PointPrimitive("a", 0.0, 0.0, fixed=True),
            PointPrimitive("b", 100.0, 0.0, fixed=True),
            LinePrimitive("l", "a", "b"),
            PointOnLineConstraint("c", point_id="p", line_id="l"),
        )
    )
    p = solve(sk, 500, 1e-10).sketch.point("p")
    assert abs(p.y) < 1e-4
    assert abs(p.x - 50.0) < 1e-9

    moved = Sketch(
        (
            PointPrimitive("p", 50.0, 40.0, fixed=True),
            PointPrimitive("a", 0.0, 0.0),
            PointPrimitive("b", 100.0, 0.0),
            LinePrimitive("l", "a", "b"),
            PointOnLineConstraint("c", point_id="p", line_id="l"),
        )
    )
    out = solve(moved, 500, 1e-10).sketch
    a, b = out.point("a"), out.point("b")
    assert abs(a.y - 40.0) < 1e-4 and abs(b.y - 40.0) < 1e-4


def test_midpoint_equal_length_collinear_and_coincident() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0, fixed=True),
            PointPrimitive("b", 100.0, 0.0, fixed=True),
            PointPrimitive("m", 10.0, 80.0),
            PointPrimitive("c", 0.0, 50.0, fixed=True),
            PointPrimitive("d", 40.0, 50.0),
            PointPrimitive("q", 50.0, 20.0),
            PointPrimitive("r", 7.0, 7.0),
            LinePrimitive("ab", "a", "b"),
            LinePrimitive("cd", "c", "d"),
            MidpointConstraint("mid", point_id="m", line_id="ab"),
            EqualLengthConstraint("eq", l1_id="ab", l2_id="cd"),
            CollinearConstraint("col", p1_id="a", p2_id="q", p3_id="b"),
            CoincidentConstraint("co", p1_id="r", p2_id="b"),
        )
    )
    res = solve(sk, 1000, 1e-10)
    out = res.sketch
    assert res.success
    assert abs(out.point("m").x - 50.0) < 1e-4 and abs(out.point("m").y) < 1e-4
    assert abs(_dist(out, "c", "d") - 100.0) < 1e-4
    assert abs(out.point("q").y) < 1e-4
    assert abs(out.point("r").x - 100.0) < 1e-4 and abs(out.point("r").y) < 1e-4


def test_point_angle_and_line_length() -> None:
    sk = Sketch(
        (
            PointPrimitive("v", 0.0, 0.0, fixed=True),
            PointPrimitive("p1", 100.0, 0.0, fixed=True),
            PointPrimitive("p2", 100.0, 100.0),
            LinePrimitive("l", "v", "p2"),
            AngleConstraint("ang", p1_id="p1", vertex_id="v", p2_id="p2", angle=math.pi / 2.0),
            LineLengthConstraint("len", line_id="l", length=200.0),
        )
    )
    res = solve(sk, 1000, 1e-10)
    p2 = res.sketch.point("p2")
    assert res.success
    assert abs(p2.x) < 5e-3
    assert abs(p2.y - 200.0) < 5e-3


def test_no_constraints_is_immediate_success() -> None:
    sk = Sketch((PointPrimitive("a", 1.0, 2.0),))
    res = solve(sk, 10, 1e-6)
    assert res.success
    assert res.status.iterations == 0
    assert res.sketch == sk


def test_conflicting_constraints_report_nonconvergence_with_best_effort() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0),
            PointPrimitive("b", 120.0, 0.0),
            DistanceConstraint("near", p1_id="a", p2_id="b", distance=100.0),
            DistanceConstraint("far", p1_id="a", p2_id="b", distance=200.0),
        )
    )
    res = solve(sk, 100, 1e-6)
    assert res.success is False
    assert res.status.iterations == 100
    assert any("max iterations" in w for w in res.status.warnings)
    worst = res.worst_constraints(1)
    assert len(worst) == 1
    assert {r.constraint_id for r in res.residuals} == {"near", "far"}
    d = _dist(res.sketch, "a", "b")
    assert 100.0 < d < 200.0


def test_degenerate_distance_is_skipped_not_raised() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 5.0, 5.0),
            PointPrimitive("b", 5.0, 5.0),
            DistanceConstraint("d", p1_id="a", p2_id="b", distance=10.0),
        )
    )
    res = solve(sk, 20, 1e-6)
    assert res.success is False
    assert res.sketch.point("a").xy == (5.0, 5.0)


def test_solve_is_deterministic_and_does_not_mutate_input() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0),
            PointPrimitive("b", 90.0, 35.0),
            PointPrimitive("c", 20.0, 80.0),
            LinePrimitive("ab", "a", "b"),
            LinePrimitive("ac", "a", "c"),
            DistanceConstraint("d", p1_id="a", p2_id="b", distance=120.0),
            PerpendicularConstraint("p", l1_id="ab", l2_id="ac"),
        )
    )
    r1 = solve(sk, 300, 1e-9)
    r2 = solve(sk, 300, 1e-9)
    assert r1.primitives == r2.primitives
    assert sk.point("b").xy == (90.0, 35.0)


def test_fixed_learning_rate_config() -> None:
    sk = Sketch(
        (
            PointPrimitive("a", 0.0, 0.0, fixed=True),
            PointPrimitive("b", 30.0, 0.0),
            DistanceConstraint("d", p1_id="a", p2_id="b", distance=60.0),
        )
    )
    res = solve(sk, 200, 1e-10, SolverConfig(learning_rate=0.25, adaptive=False))
    assert res.success
    assert res.learning_rate == 0.25
    assert abs(res.sketch.point("b").x - 60.0) < 1e-4
