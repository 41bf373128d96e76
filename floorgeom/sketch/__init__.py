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
    LinePrimitive,
    MidpointConstraint,
    ParallelConstraint,
    PerpendicularConstraint,
    PointOnLineConstraint,
    PointPrimitive,
    Sketch,
    VerticalConstraint,
    primitive_from_dict,
    primitive_to_dict,
    sketch_from_dicts,
)
from floorgeom.sketch.solver import ConstraintResidual, SolveResult, SolverConfig, SolverStatus, solve

__all__ = [
    "AngleConstraint",
    "CoincidentConstraint",
    "CollinearConstraint",
    "Constraint",
    "DistanceConstraint",
    "EqualLengthConstraint",
    "HorizontalConstraint",
    "LineAngleConstraint",
    "LineLengthConstraint",
    "LinePrimitive",
    "MidpointConstraint",
    "ParallelConstraint",
    "PerpendicularConstraint",
    "PointOnLineConstraint",
    "PointPrimitive",
    "Sketch",
    "VerticalConstraint",
    "primitive_from_dict",
    "primitive_to_dict",
    "sketch_from_dicts",
    "ConstraintResidual",
    "SolveResult",
    "SolverConfig",
    "SolverStatus",
    "solve",
]
