from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Tuple, Type, Union

from floorgeom.errors import SketchValidationError


Point2 = Tuple[float, float]


@dataclass(frozen=True)
class PointPrimitive:
    id: str
    x: float
    y: float
    fixed: bool = False

    kind: ClassVar[str] = "point"

    @property
    def xy(self) -> Point2:
        return (float(self.x), float(self.y))


@dataclass(frozen=True)
class LinePrimitive:
    id: str
    p1_id: str
    p2_id: str

    kind: ClassVar[str] = "line"


@dataclass(frozen=True)
class Constraint:
    id: str

    kind: ClassVar[str] = ""
    # Field names holding point ids / line ids.
    point_refs: ClassVar[Tuple[str, ...]] = ()
    line_refs: ClassVar[Tuple[str, ...]] = ()


@dataclass(frozen=True)
class DistanceConstraint(Constraint):
    p1_id: str
    p2_id: str
    distance: float

    kind: ClassVar[str] = "p2p_distance"
    point_refs: ClassVar[Tuple[str, ...]] = ("p1_id", "p2_id")


@dataclass(frozen=True)
class CoincidentConstraint(Constraint):
    p1_id: str
    p2_id: str

    kind: ClassVar[str] = "p2p_coincident"
    point_refs: ClassVar[Tuple[str, ...]] = ("p1_id", "p2_id")


@dataclass(frozen=True)
class AngleConstraint(Constraint):
    # Unsigned angle p1-vertex-p2, radians.
    p1_id: str
    vertex_id: str
    p2_id: str
    angle: float

    kind: ClassVar[str] = "p2p_angle"
    point_refs: ClassVar[Tuple[str, ...]] = ("p1_id", "vertex_id", "p2_id")


@dataclass(frozen=True)
class HorizontalConstraint(Constraint):
    line_id: str

    kind: ClassVar[str] = "horizontal"
    line_refs: ClassVar[Tuple[str, ...]] = ("line_id",)


@dataclass(frozen=True)
class VerticalConstraint(Constraint):
    line_id: str

    kind: ClassVar[str] = "vertical"
    line_refs: ClassVar[Tuple[str, ...]] = ("line_id",)


@dataclass(frozen=True)
class PerpendicularConstraint(Constraint):
    l1_id: str
    l2_id: str

    kind: ClassVar[str] = "perpendicular"
    line_refs: ClassVar[Tuple[str, ...]] = ("l1_id", "l2_id")


@dataclass(frozen=True)
class ParallelConstraint(Constraint):
    l1_id: str
    l2_id: str

    kind: ClassVar[str] = "parallel"
    line_refs: ClassVar[Tuple[str, ...]] = ("l1_id", "l2_id")


@dataclass(frozen=True)
class LineAngleConstraint(Constraint):
    # Directed angle from l1 to l2, radians.
    l1_id: str
    l2_id: str
    angle: float

    kind: ClassVar[str] = "l2l_angle"
    line_refs: ClassVar[Tuple[str, ...]] = ("l1_id", "l2_id")


@dataclass(frozen=True)
class PointOnLineConstraint(Constraint):
    point_id: str
    line_id: str

    kind: ClassVar[str] = "point_on_line"
    point_refs: ClassVar[Tuple[str, ...]] = ("point_id",)
    line_refs: ClassVar[Tuple[str, ...]] = ("line_id",)


@dataclass(frozen=True)
class MidpointConstraint(Constraint):
    point_id: str
    line_id: str

    kind: ClassVar[str] = "midpoint"
    point_refs: ClassVar[Tuple[str, ...]] = ("point_id",)
    line_refs: ClassVar[Tuple[str, ...]] = ("line_id",)


@dataclass(frozen=True)
class EqualLengthConstraint(Constraint):
    l1_id: str
    l2_id: str

    kind: ClassVar[str] = "equal_length"
    line_refs: ClassVar[Tuple[str, ...]] = ("l1_id", "l2_id")


@dataclass(frozen=True)
class CollinearConstraint(Constraint):
    p1_id: str
    p2_id: str
    p3_id: str

    kind: ClassVar[str] = "collinear"
    point_refs: ClassVar[Tuple[str, ...]] = ("p1_id", "p2_id", "p3_id")


@dataclass(frozen=True)
class LineLengthConstraint(Constraint):
    line_id: str
    length: float

    kind: ClassVar[str] = "line_length"
    line_refs: ClassVar[Tuple[str, ...]] = ("line_id",)


Primitive = Union[PointPrimitive, LinePrimitive, Constraint]

CONSTRAINT_TYPES: Dict[str, Type[Constraint]] = {
    c.kind: c
    for c in (
        DistanceConstraint,
        CoincidentConstraint,
        AngleConstraint,
        HorizontalConstraint,
        VerticalConstraint,
        PerpendicularConstraint,
        ParallelConstraint,
        LineAngleConstraint,
        PointOnLineConstraint,
        MidpointConstraint,
        EqualLengthConstraint,
        CollinearConstraint,
        LineLengthConstraint,
    )
}

# Alternate type tags used by editor payloads.
CONSTRAINT_ALIASES: Dict[str, str] = {
    "distance": "p2p_distance",
    "coincident": "p2p_coincident",
    "parallel_ll": "parallel",
    "perpendicular_ll": "perpendicular",
    "angle": "l2l_angle",
    "l2l_angle_ll": "l2l_angle",
    "length": "line_length",
}

# Alternate field names used by editor payloads.
FIELD_ALIASES: Dict[str, str] = {
    "l_id": "line_id",
    "p_id": "point_id",
}


@dataclass(frozen=True)
class Sketch:
    """
    Ordered primitives being solved together.

    Construction validates that ids are unique and that every constraint
    reference resolves to a primitive of the expected kind.
    """
    primitives: Tuple[Primitive, ...] = ()
    _index: Dict[str, Primitive] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "primitives", tuple(self.primitives))
        index: Dict[str, Primitive] = {}
        for p in self.primitives:
            if not isinstance(p, (PointPrimitive, LinePrimitive, Constraint)):
                raise SketchValidationError(f"Unsupported primitive {p!r}")
            if not p.id:
                raise SketchValidationError(f"{p.kind} primitive has an empty id")
            if p.id in index:
                raise SketchValidationError(f"Duplicate primitive id: {p.id}")
            index[p.id] = p
        for p in self.primitives:
            if isinstance(p, LinePrimitive):
                for ref in (p.p1_id, p.p2_id):
                    _expect(index, ref, PointPrimitive, f"line {p.id}")
            elif isinstance(p, Constraint):
                for name in p.point_refs:
                    _expect(index, getattr(p, name), PointPrimitive, f"{p.kind} {p.id}.{name}")
                for name in p.line_refs:
                    _expect(index, getattr(p, name), LinePrimitive, f"{p.kind} {p.id}.{name}")
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.primitives)

    def __contains__(self, primitive_id: object) -> bool:
        return primitive_id in self._index

    def get(self, primitive_id: str) -> Primitive:
        try:
            return self._index[primitive_id]
        except KeyError:
            raise KeyError(f"Unknown primitive id: {primitive_id}") from None

    def point(self, point_id: str) -> PointPrimitive:
        p = self.get(point_id)
        if not isinstance(p, PointPrimitive):
            raise KeyError(f"{point_id} is not a point")
        return p

    def line(self, line_id: str) -> LinePrimitive:
        p = self.get(line_id)
        if not isinstance(p, LinePrimitive):
            raise KeyError(f"{line_id} is not a line")
        return p

    @property
    def points(self) -> List[PointPrimitive]:
        return [p for p in self.primitives if isinstance(p, PointPrimitive)]

    @property
    def lines(self) -> List[LinePrimitive]:
        return [p for p in self.primitives if isinstance(p, LinePrimitive)]

    @property
    def constraints(self) -> List[Constraint]:
        return [p for p in self.primitives if isinstance(p, Constraint)]

    def with_positions(self, positions: Mapping[str, Point2]) -> "Sketch":
        """Copy with updated point coordinates; fixed points keep theirs."""
        out: List[Primitive] = []
        for p in self.primitives:
            if isinstance(p, PointPrimitive) and not p.fixed and p.id in positions:
                x, y = positions[p.id]
                out.append(replace(p, x=float(x), y=float(y)))
            else:
                out.append(p)
        return Sketch(tuple(out))

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [primitive_to_dict(p) for p in self.primitives]


def _expect(index: Mapping[str, Primitive], ref: str, expected: type, owner: str) -> None:
    target = index.get(ref)
    if target is None:
        raise SketchValidationError(f"{owner} references unknown id {ref!r}")
    if not isinstance(target, expected):
        raise SketchValidationError(f"{owner} references {ref!r}, which is a {target.kind}, not a {expected.kind}")


def primitive_to_dict(p: Primitive) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": p.kind}
    for f in fields(p):
        out[f.name] = getattr(p, f.name)
    return out


def primitive_from_dict(data: Mapping[str, Any]) -> Primitive:
    kind = str(data.get("type", ""))
    payload = {FIELD_ALIASES.get(k, k): v for k, v in data.items() if k != "type"}
    if kind == "point":
        return PointPrimitive(
            id=str(payload["id"]),
            x=float(payload["x"]),
            y=float(payload["y"]),
            fixed=bool(payload.get("fixed", False)),
        )
    if kind == "line":
        return LinePrimitive(id=str(payload["id"]), p1_id=str(payload["p1_id"]), p2_id=str(payload["p2_id"]))
    cls = CONSTRAINT_TYPES.get(CONSTRAINT_ALIASES.get(kind, kind))
    if cls is None:
        raise SketchValidationError(f"Unknown primitive type: {kind!r}")
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in payload:
            raise SketchValidationError(f"{kind} primitive {payload.get('id')!r} is missing field {f.name!r}")
        kwargs[f.name] = payload[f.name]
    for name in ("distance", "angle", "length"):
        if name in kwargs:
            kwargs[name] = float(kwargs[name])
    return cls(**kwargs)


def sketch_from_dicts(items: Iterable[Mapping[str, Any]]) -> Sketch:
    return Sketch(tuple(primitive_from_dict(d) for d in items))
