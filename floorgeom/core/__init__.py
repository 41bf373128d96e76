from floorgeom.core.transform import IDENTITY, Transform2D

__all__ = ["IDENTITY", "Transform2D"]
