from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type

import numpy as np

from floorgeom.geometry.tolerance import EPS_SEGMENT
from floorgeom.sketch.model import (
    AngleConstraint,
    CoincidentConstraint,
    CollinearConstraint,
    Constraint,
    DistanceConstraint,
    EqualLengthConstraint,
    HorizontalConstraint,
    LineAngleConstraint,
    LineLengthConstraint,
    MidpointConstraint,
    ParallelConstraint,
    PerpendicularConstraint,
    PointOnLineConstraint,
    Sketch,
    VerticalConstraint,
)


@dataclass(frozen=True)
class StepLimits:
    learning_rate: float
    max_step: float
    max_angle_step: float
    eps: float


def _wrap_pi(a: float) -> float:
    return (a + math.pi) % (2.0 * math.pi) - math.pi


def _wrap_half_pi(a: float) -> float:
    """Wrap into [-pi/2, pi/2): angle between undirected lines."""
    return (a + 0.5 * math.pi) % math.pi - 0.5 * math.pi


def _move(pos: np.ndarray, free: np.ndarray, i: int, delta: np.ndarray, lim: StepLimits) -> None:
    if not free[i]:
        return
    n = float(np.hypot(delta[0], delta[1]))
    if n > lim.max_step:
        delta = delta * (lim.max_step / n)
    pos[i] += delta


def _rotate_line(pos: np.ndarray, free: np.ndarray, a: int, b: int, angle: float) -> None:
    if free[a] and free[b]:
        pivot = 0.5 * (pos[a] + pos[b])
    elif free[b]:
        pivot = pos[a].copy()
    elif free[a]:
        pivot = pos[b].copy()
    else:
        return
    c, s = math.cos(angle), math.sin(angle)
    rot = np.array([[c, -s], [s, c]])
    for i in (a, b):
        if free[i]:
            pos[i] = pivot + rot @ (pos[i] - pivot)


def _rotate_about(pos: np.ndarray, free: np.ndarray, i: int, center: np.ndarray, angle: float) -> None:
    if not free[i]:
        return
    c, s = math.cos(angle), math.sin(angle)
    pos[i] = center + np.array([[c, -s], [s, c]]) @ (pos[i] - center)


def _line_free(free: np.ndarray, a: int, b: int) -> bool:
    return bool(free[a] or free[b])


def _share(f1: bool, f2: bool, err: float, lr: float) -> tuple:
    """Split a correction between two movable bodies; a fixed body hands over its half."""
    if f1 and f2:
        return -0.5 * err * lr, 0.5 * err * lr
    if f2:
        return 0.0, err * lr
    if f1:
        return -err * lr, 0.0
    return 0.0, 0.0


class Relaxer:
    """Compiled constraint over point rows of the solver's position array."""

    def __init__(self, constraint: Constraint, rows: Dict[str, int], sketch: Sketch):
        self.constraint = constraint

    def error(self, pos: np.ndarray) -> float:
        raise NotImplementedError

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        raise NotImplementedError


def _line_rows(sketch: Sketch, rows: Dict[str, int], line_id: str) -> tuple:
    line = sketch.line(line_id)
    return rows[line.p1_id], rows[line.p2_id]


class _PointPairLength(Relaxer):
    a: int
    b: int
    target: float

    def error(self, pos: np.ndarray) -> float:
        return float(np.linalg.norm(pos[self.b] - pos[self.a])) - self.target

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        v = pos[self.b] - pos[self.a]
        cur = float(np.linalg.norm(v))
        if cur < lim.eps:
            return
        err = self.target - cur
        d1, d2 = _share(bool(free[self.a]), bool(free[self.b]), err, lim.learning_rate)
        u = v / cur
        _move(pos, free, self.a, u * d1, lim)
        _move(pos, free, self.b, u * d2, lim)


class DistanceRelaxer(_PointPairLength):
    def __init__(self, constraint: DistanceConstraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.a = rows[constraint.p1_id]
        self.b = rows[constraint.p2_id]
        self.target = float(constraint.distance)


class LineLengthRelaxer(_PointPairLength):
    def __init__(self, constraint: LineLengthConstraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.a, self.b = _line_rows(sketch, rows, constraint.line_id)
        self.target = float(constraint.length)


class CoincidentRelaxer(Relaxer):
    def __init__(self, constraint: CoincidentConstraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.a = rows[constraint.p1_id]
        self.b = rows[constraint.p2_id]

    def error(self, pos: np.ndarray) -> float:
        return float(np.linalg.norm(pos[self.b] - pos[self.a]))

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        v = pos[self.b] - pos[self.a]
        lr = lim.learning_rate
        if free[self.a] and free[self.b]:
            _move(pos, free, self.a, v * (0.5 * lr), lim)
            _move(pos, free, self.b, -v * (0.5 * lr), lim)
        elif free[self.a]:
            _move(pos, free, self.a, v * lr, lim)
        elif free[self.b]:
            _move(pos, free, self.b, -v * lr, lim)


class _AxisAlignRelaxer(Relaxer):
    axis = 1

    def __init__(self, constraint: Constraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.a, self.b = _line_rows(sketch, rows, getattr(constraint, "line_id"))

    def error(self, pos: np.ndarray) -> float:
        return float(pos[self.b, self.axis] - pos[self.a, self.axis])

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        err = self.error(pos)
        # Moving a toward b shrinks the error: a takes +, b takes -.
        d_b, d_a = _share(bool(free[self.b]), bool(free[self.a]), err, lim.learning_rate)
        delta = np.zeros(2)
        delta[self.axis] = d_a
        _move(pos, free, self.a, delta.copy(), lim)
        delta[self.axis] = d_b
        _move(pos, free, self.b, delta.copy(), lim)


class HorizontalRelaxer(_AxisAlignRelaxer):
    axis = 1


class VerticalRelaxer(_AxisAlignRelaxer):
    axis = 0


class _LinePairAngleRelaxer(Relaxer):
    def __init__(self, constraint: Constraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.a1, self.b1 = _line_rows(sketch, rows, getattr(constraint, "l1_id"))
        self.a2, self.b2 = _line_rows(sketch, rows, getattr(constraint, "l2_id"))

    def _angles(self, pos: np.ndarray) -> tuple:
        d1 = pos[self.b1] - pos[self.a1]
        d2 = pos[self.b2] - pos[self.a2]
        return d1, d2, math.atan2(d2[1], d2[0]) - math.atan2(d1[1], d1[0])

    def signed_error(self, diff: float) -> float:
        raise NotImplementedError

    def error(self, pos: np.ndarray) -> float:
        _, _, diff = self._angles(pos)
        return self.signed_error(diff)

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        d1, d2, diff = self._angles(pos)
        if np.hypot(*d1) < lim.eps or np.hypot(*d2) < lim.eps:
            return
        err = self.signed_error(diff)
        err = max(-lim.max_angle_step, min(lim.max_angle_step, err))
        r1, r2 = _share(_line_free(free, self.a1, self.b1), _line_free(free, self.a2, self.b2), err, lim.learning_rate)
        if r1:
            _rotate_line(pos, free, self.a1, self.b1, r1)
        if r2:
            _rotate_line(pos, free, self.a2, self.b2, r2)


class ParallelRelaxer(_LinePairAngleRelaxer):
    def signed_error(self, diff: float) -> float:
        return -_wrap_half_pi(diff)


class PerpendicularRelaxer(_LinePairAngleRelaxer):
    def signed_error(self, diff: float) -> float:
        d = _wrap_half_pi(diff)
        target = 0.5 * math.pi if d >= 0.0 else -0.5 * math.pi
        return target - d


class LineAngleRelaxer(_LinePairAngleRelaxer):
    def __init__(self, constraint: LineAngleConstraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.target = float(constraint.angle)

    def signed_error(self, diff: float) -> float:
        return -_wrap_pi(diff - self.target)


class AngleRelaxer(Relaxer):
    def __init__(self, constraint: AngleConstraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.p1 = rows[constraint.p1_id]
        self.v = rows[constraint.vertex_id]
        self.p2 = rows[constraint.p2_id]
        self.target = float(constraint.angle)

    def _signed(self, pos: np.ndarray) -> tuple:
        r1 = pos[self.p1] - pos[self.v]
        r2 = pos[self.p2] - pos[self.v]
        cross = r1[0] * r2[1] - r1[1] * r2[0]
        return r1, r2, math.atan2(cross, float(r1 @ r2))

    def error(self, pos: np.ndarray) -> float:
        _, _, s = self._signed(pos)
        return self.target - abs(s)

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        r1, r2, s = self._signed(pos)
        if np.hypot(*r1) < lim.eps or np.hypot(*r2) < lim.eps:
            return
        sign = 1.0 if s >= 0.0 else -1.0
        err = max(-lim.max_angle_step, min(lim.max_angle_step, self.target - abs(s)))
        # Opening the angle turns ray 2 away from ray 1 in the direction of `sign`.
        d1, d2 = _share(bool(free[self.p1]), bool(free[self.p2]), sign * err, lim.learning_rate)
        center = pos[self.v].copy()
        if d1:
            _rotate_about(pos, free, self.p1, center, d1)
        if d2:
            _rotate_about(pos, free, self.p2, center, d2)


class _PointTargetRelaxer(Relaxer):
    """Pulls a point onto a target derived from a line; moves the line when the point is fixed."""

    def __init__(self, constraint: Constraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.p = rows[getattr(constraint, "point_id")]
        self.a, self.b = _line_rows(sketch, rows, getattr(constraint, "line_id"))

    def target(self, pos: np.ndarray) -> Optional[np.ndarray]:
        raise NotImplementedError

    # Motion of the target per unit translation of a single free endpoint.
    endpoint_gain = 1.0

    def error(self, pos: np.ndarray) -> float:
        t = self.target(pos)
        if t is None:
            return 0.0
        return float(np.linalg.norm(t - pos[self.p]))

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        t = self.target(pos)
        if t is None:
            return
        delta = (t - pos[self.p]) * lim.learning_rate
        if free[self.p]:
            _move(pos, free, self.p, delta, lim)
            return
        if free[self.a] and free[self.b]:
            _move(pos, free, self.a, -delta, lim)
            _move(pos, free, self.b, -delta, lim)
        elif free[self.a] or free[self.b]:
            i = self.a if free[self.a] else self.b
            _move(pos, free, i, -delta / self.endpoint_gain, lim)


class PointOnLineRelaxer(_PointTargetRelaxer):
    def target(self, pos: np.ndarray) -> Optional[np.ndarray]:
        ab = pos[self.b] - pos[self.a]
        denom = float(ab @ ab)
        if denom <= EPS_SEGMENT * EPS_SEGMENT:
            return None
        t = float((pos[self.p] - pos[self.a]) @ ab) / denom
        return pos[self.a] + ab * t


class MidpointRelaxer(_PointTargetRelaxer):
    endpoint_gain = 0.5

    def target(self, pos: np.ndarray) -> Optional[np.ndarray]:
        return 0.5 * (pos[self.a] + pos[self.b])


class EqualLengthRelaxer(Relaxer):
    def __init__(self, constraint: EqualLengthConstraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.a1, self.b1 = _line_rows(sketch, rows, constraint.l1_id)
        self.a2, self.b2 = _line_rows(sketch, rows, constraint.l2_id)

    def error(self, pos: np.ndarray) -> float:
        return float(np.linalg.norm(pos[self.b1] - pos[self.a1]) - np.linalg.norm(pos[self.b2] - pos[self.a2]))

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        len1 = float(np.linalg.norm(pos[self.b1] - pos[self.a1]))
        len2 = float(np.linalg.norm(pos[self.b2] - pos[self.a2]))
        if len1 < lim.eps or len2 < lim.eps:
            return
        err = len1 - len2
        d1, d2 = _share(_line_free(free, self.a1, self.b1), _line_free(free, self.a2, self.b2), err, lim.learning_rate)
        if d1:
            _set_length(pos, free, self.a1, self.b1, max(0.0, len1 + d1), lim)
        if d2:
            _set_length(pos, free, self.a2, self.b2, max(0.0, len2 + d2), lim)


def _set_length(pos: np.ndarray, free: np.ndarray, a: int, b: int, target: float, lim: StepLimits) -> None:
    v = pos[b] - pos[a]
    cur = float(np.linalg.norm(v))
    if cur < lim.eps:
        return
    u = v / cur
    grow = target - cur
    if free[a] and free[b]:
        _move(pos, free, a, -u * (0.5 * grow), lim)
        _move(pos, free, b, u * (0.5 * grow), lim)
    elif free[b]:
        _move(pos, free, b, u * grow, lim)
    elif free[a]:
        _move(pos, free, a, -u * grow, lim)


class CollinearRelaxer(Relaxer):
    def __init__(self, constraint: CollinearConstraint, rows: Dict[str, int], sketch: Sketch):
        super().__init__(constraint, rows, sketch)
        self.p1 = rows[constraint.p1_id]
        self.p2 = rows[constraint.p2_id]
        self.p3 = rows[constraint.p3_id]

    @staticmethod
    def _offset(pos: np.ndarray, p: int, a: int, b: int, eps: float) -> Optional[np.ndarray]:
        ab = pos[b] - pos[a]
        n = float(np.linalg.norm(ab))
        if n < eps:
            return None
        t = float((pos[p] - pos[a]) @ ab) / (n * n)
        return pos[a] + ab * t - pos[p]

    def error(self, pos: np.ndarray) -> float:
        off = self._offset(pos, self.p2, self.p1, self.p3, EPS_SEGMENT)
        return 0.0 if off is None else float(np.linalg.norm(off))

    def apply(self, pos: np.ndarray, free: np.ndarray, lim: StepLimits) -> None:
        # Middle point first; an outer point only when the middle is fixed.
        for p, a, b in ((self.p2, self.p1, self.p3), (self.p1, self.p2, self.p3), (self.p3, self.p1, self.p2)):
            if not free[p]:
                continue
            off = self._offset(pos, p, a, b, lim.eps)
            if off is not None:
                _move(pos, free, p, off * lim.learning_rate, lim)
            return


RELAXERS: Dict[Type[Constraint], Callable[..., Relaxer]] = {
    DistanceConstraint: DistanceRelaxer,
    CoincidentConstraint: CoincidentRelaxer,
    AngleConstraint: AngleRelaxer,
    HorizontalConstraint: HorizontalRelaxer,
    VerticalConstraint: VerticalRelaxer,
    PerpendicularConstraint: PerpendicularRelaxer,
    ParallelConstraint: ParallelRelaxer,
    LineAngleConstraint: LineAngleRelaxer,
    PointOnLineConstraint: PointOnLineRelaxer,
    MidpointConstraint: MidpointRelaxer,
    EqualLengthConstraint: EqualLengthRelaxer,
    CollinearConstraint: CollinearRelaxer,
    LineLengthConstraint: LineLengthRelaxer,
}


def compile_constraints(sketch: Sketch, rows: Dict[str, int]) -> List[Relaxer]:
    return [RELAXERS[type(c)](c, rows, sketch) for c in sketch.constraints]
