"""Vector and angle primitives for landmark geometry.

Every function is pure.  Inputs may be ``Point3`` instances or array-likes of
length 2 or 3; 2-D inputs are lifted to ``z = 0``.  Missing points (``None``),
non-finite coordinates and zero-length rays all produce ``None`` rather than
a NaN or a misleading zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

import numpy as np

EPSILON = 1e-6


@dataclass(frozen=True)
class Point3:
    """A landmark in normalised image coordinates (0..1), z depth-like."""

    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.as_array())))

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Point3":
        """Build from ``(x, y)``, ``(x, y, z)`` or ``(x, y, z, visibility)``."""
        if len(values) == 2:
            return cls(float(values[0]), float(values[1]))
        if len(values) == 3:
            return cls(float(values[0]), float(values[1]), float(values[2]))
        if len(values) == 4:
            return cls(float(values[0]), float(values[1]), float(values[2]),
                       float(values[3]))
        raise ValueError(f"Point needs 2-4 values, got {len(values)}")


PointLike = Union[Point3, Sequence[float], np.ndarray]


def as_vector(p: Optional[PointLike]) -> Optional[np.ndarray]:
    """Convert to a finite float64 3-vector, or ``None``."""
    if p is None:
        return None
    if isinstance(p, Point3):
        arr = p.as_array()
    else:
        arr = np.asarray(p, dtype=np.float64).reshape(-1)
        if arr.shape == (2,):
            arr = np.append(arr, 0.0)
    if arr.shape != (3,) or not np.all(np.isfinite(arr)):
        return None
    return arr


def vector(a: Optional[PointLike], b: Optional[PointLike]) -> Optional[np.ndarray]:
    """Vector from ``a`` to ``b``."""
    va, vb = as_vector(a), as_vector(b)
    if va is None or vb is None:
        return None
    return vb - va


def angle_between_vectors(v1: Optional[PointLike], v2: Optional[PointLike]) -> Optional[float]:
    """Unsigned angle between two vectors in degrees, [0, 180]."""
    a, b = as_vector(v1), as_vector(v2)
    if a is None or b is None:
        return None
    na, nb = np.linalg.norm(a), np.linalg.norm(b)
    if na < EPSILON or nb < EPSILON:
        return None
    cos_angle = np.clip(np.dot(a, b) / (na * nb), -1.0, 1.0)
    return float(np.degrees(np.arccos(cos_angle)))


def angle_between(
    a: Optional[PointLike],
    vertex: Optional[PointLike],
    c: Optional[PointLike],
) -> Optional[float]:
    """
    Angle at ``vertex`` subtended by the rays to ``a`` and ``c``.

    Returns:
        Degrees in [0, 180]; collinear points give exactly 0 or 180.
        ``None`` when a point is missing / non-finite or a ray is shorter
        than ``EPSILON``.
    """
    return angle_between_vectors(vector(vertex, a), vector(vertex, c))


def signed_angle_with_cross(
    v1: Optional[PointLike],
    v2: Optional[PointLike],
    reference_normal: Optional[PointLike],
) -> Optional[float]:
    """
    Signed angle from ``v1`` to ``v2`` in degrees, [-180, 180].

    The magnitude is the unsigned angle between the vectors; the sign is the
    sign of ``(v1 x v2) . reference_normal``.  A cross product exactly
    perpendicular to the normal counts as positive.
    """
    a, b, n = as_vector(v1), as_vector(v2), as_vector(reference_normal)
    if a is None or b is None or n is None:
        return None
    if np.linalg.norm(a) < EPSILON or np.linalg.norm(b) < EPSILON or np.linalg.norm(n) < EPSILON:
        return None
    cross = np.cross(a, b)
    magnitude = float(np.degrees(np.arctan2(np.linalg.norm(cross), np.dot(a, b))))
    return -magnitude if np.dot(cross, n) < 0 else magnitude


def plane_normal(
    a: Optional[PointLike],
    b: Optional[PointLike],
    c: Optional[PointLike],
) -> Optional[np.ndarray]:
    """Unit normal of the plane through a, b, c: ``(b - a) x (c - a)``."""
    ab, ac = vector(a, b), vector(a, c)
    if ab is None or ac is None:
        return None
    n = np.cross(ab, ac)
    norm = np.linalg.norm(n)
    if norm < EPSILON:
        return None
    return n / norm


def project_onto_plane(v: Optional[PointLike], normal: Optional[PointLike]) -> Optional[np.ndarray]:
    """Component of ``v`` orthogonal to ``normal``."""
    a, n = as_vector(v), as_vector(normal)
    if a is None or n is None:
        return None
    norm = np.linalg.norm(n)
    if norm < EPSILON:
        return None
    n = n / norm
    return a - np.dot(a, n) * n


def distance(a: Optional[PointLike], b: Optional[PointLike]) -> Optional[float]:
    """Euclidean distance."""
    d = vector(a, b)
    if d is None:
        return None
    return float(np.linalg.norm(d))


def centroid(points: Iterable[Optional[PointLike]]) -> Optional[np.ndarray]:
    """Mean position; ``None`` if any point is missing."""
    vecs = [as_vector(p) for p in points]
    if not vecs or any(v is None for v in vecs):
        return None
    return np.mean(np.stack(vecs), axis=0)


def mirror_x(point: Point3) -> Point3:
    """Undo the horizontal camera mirror: ``x' = 1 - x``."""
    return Point3(1.0 - point.x, point.y, point.z, point.visibility)


def clamp(value: float, low: float, high: float) -> float:
    return float(min(max(value, low), high))
