from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple

import numpy as np

from floorgeom.geometry.tolerance import EPS_SEGMENT
from floorgeom.sketch.constraints import StepLimits, compile_constraints
from floorgeom.sketch.model import Primitive, Sketch


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverConfig:
    learning_rate: float = 0.5
    max_learning_rate: float = 0.9
    min_learning_rate: float = 0.05
    adaptive: bool = True
    # Relative error drop that counts as progress for learning-rate growth.
    improvement_ratio: float = 0.98
    growth: float = 1.1
    oscillation_window: int = 10
    oscillation_ratio: float = 0.4
    max_step: float = 100.0
    max_angle_step: float = np.pi / 8.0
    eps: float = EPS_SEGMENT


@dataclass(frozen=True)
class SolverStatus:
    converged: bool
    iterations: int
    residual: float
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConstraintResidual:
    constraint_id: str
    kind: str
    error: float


@dataclass(frozen=True)
class SolveResult:
    sketch: Sketch
    status: SolverStatus
    residuals: List[ConstraintResidual] = field(default_factory=list)
    learning_rate: float = 0.0

    @property
    def success(self) -> bool:
        return self.status.converged

    @property
    def primitives(self) -> Tuple[Primitive, ...]:
        return self.sketch.primitives

    def worst_constraints(self, n: int = 10) -> List[ConstraintResidual]:
        return sorted(self.residuals, key=lambda r: -abs(r.error))[: max(0, int(n))]


def _is_oscillating(history: Deque[float], ratio: float) -> bool:
    if len(history) < history.maxlen:
        return False
    vals = list(history)
    up = sum(1 for a, b in zip(vals, vals[1:]) if b > a)
    down = len(vals) - 1 - up
    return min(up, down) / float(len(vals) - 1) > ratio


def solve(
    sketch: Sketch,
    max_iterations: int = 1000,
    tolerance: float = 1e-6,
    config: Optional[SolverConfig] = None,
) -> SolveResult:
    """
    Relax `sketch` toward its constraints and return an updated copy.

    Every iteration applies each constraint once, in sketch order, nudging
    only non-fixed points. The sum of squared constraint errors is measured
    after each sweep; the solve succeeds once it drops below `tolerance`.
    Otherwise the best-effort positions after `max_iterations` sweeps are
    returned with `success=False`. The input sketch is never modified.
    """
    cfg = config or SolverConfig()
    points = sketch.points
    rows: Dict[str, int] = {p.id: i for i, p in enumerate(points)}
    pos = np.array([[p.x, p.y] for p in points], dtype=float).reshape(-1, 2)
    free = np.array([not p.fixed for p in points], dtype=bool)
    relaxers = compile_constraints(sketch, rows)

    def _errors() -> np.ndarray:
        return np.array([r.error(pos) for r in relaxers], dtype=float)

    warnings: List[str] = []
    lr = float(cfg.learning_rate)
    errs = _errors()
    total = float(np.sum(errs * errs))
    iterations = 0
    converged = total < tolerance
    history: Deque[float] = deque(maxlen=max(2, int(cfg.oscillation_window)))
    previous = total

    if relaxers and not converged:
        for it in range(int(max_iterations)):
            lim = StepLimits(learning_rate=lr, max_step=cfg.max_step, max_angle_step=cfg.max_angle_step, eps=cfg.eps)
            for r in relaxers:
                r.apply(pos, free, lim)
            iterations = it + 1
            errs = _errors()
            total = float(np.sum(errs * errs))
            if not np.isfinite(total):
                warnings.append("non-finite constraint error; stopping.")
                break
            if total < tolerance:
                converged = True
                break
            if cfg.adaptive:
                if total < previous * cfg.improvement_ratio:
                    lr = min(lr * cfg.growth, cfg.max_learning_rate)
                history.append(total)
                if _is_oscillating(history, cfg.oscillation_ratio):
                    lr = max(lr * 0.5, cfg.min_learning_rate)
                    history.clear()
            previous = total
        else:
            warnings.append("max iterations reached before convergence.")

    residuals = [
        ConstraintResidual(constraint_id=r.constraint.id, kind=r.constraint.kind, error=float(e))
        for r, e in zip(relaxers, errs)
    ]
    if not converged:
        worst = sorted(residuals, key=lambda x: -abs(x.error))[:10]
        logger.debug(
            "solve: no convergence after %d iterations (residual=%.6g); worst: %s",
            iterations,
            total,
            ", ".join(f"{w.kind}[{w.constraint_id}]={w.error:.4g}" for w in worst),
        )

    positions = {p.id: (float(pos[i, 0]), float(pos[i, 1])) for i, p in enumerate(points) if free[i]}
    return SolveResult(
        sketch=sketch.with_positions(positions),
        status=SolverStatus(converged=converged, iterations=iterations, residual=total, warnings=warnings),
        residuals=residuals,
        learning_rate=lr,
    )
