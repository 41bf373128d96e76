from __future__ import annotations


class FloorGeomError(ValueError):
    pass


class SketchValidationError(FloorGeomError):
    pass


class InvalidTopologyError(FloorGeomError):
    pass
