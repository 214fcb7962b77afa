from __future__ import annotations

from dataclasses import dataclass

import numpy as np


class GeometryError(ValueError):
    pass


class SingularSystemError(GeometryError):
    pass


class ParallelGeometryError(GeometryError):
    pass


class DegenerateInputError(GeometryError):
    pass


def as_vec3(v: np.ndarray) -> np.ndarray:
    return np.asarray(v, dtype=np.float64).reshape(3)


def normalize(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64)
    n = float(np.linalg.norm(v))
    if not np.isfinite(n) or n == 0.0:
        raise DegenerateInputError("cannot normalize a zero-length or non-finite vector")
    return v / n


@dataclass(frozen=True)
class Plane:
    """Infinite plane through `point`; `normal` need not be unit length."""

    normal: np.ndarray  # (3,)
    point: np.ndarray  # (3,)

    @classmethod
    def from_normal_point(cls, normal: np.ndarray, point: np.ndarray) -> "Plane":
        return cls(normal=as_vec3(normal), point=as_vec3(point))

    def signed_distance(self, p: np.ndarray) -> np.ndarray:
        p = np.asarray(p, dtype=np.float64)
        return (p - self.point) @ self.normal / np.linalg.norm(self.normal)


@dataclass(frozen=True)
class Line:
    """Parametric line `point + t * direction`."""

    direction: np.ndarray  # (3,)
    point: np.ndarray  # (3,)

    @classmethod
    def from_direction_point(cls, direction: np.ndarray, point: np.ndarray) -> "Line":
        return cls(direction=as_vec3(direction), point=as_vec3(point))

    def at(self, t: float) -> np.ndarray:
        return self.point + float(t) * self.direction


def _det3(c0: np.ndarray, c1: np.ndarray, c2: np.ndarray) -> float:
    # Scalar triple product: exact zero for integer-valued dependent columns.
    return float(np.dot(c0, np.cross(c1, c2)))


def solve3x3(A: np.ndarray, b: np.ndarray, *, eps: float = 0.0) -> np.ndarray:
    """
    Solve A x = b with Cramer's rule.

    `A` is (3,3) and its columns are the three unknowns' coefficient vectors.
    The system is rejected as singular when |det(A)| <= eps; the default eps=0
    only rejects an exactly zero determinant, so callers must supply
    well-conditioned systems.
    """
    A = np.asarray(A, dtype=np.float64).reshape(3, 3)
    b = as_vec3(b)
    c0, c1, c2 = A[:, 0], A[:, 1], A[:, 2]

    D = _det3(c0, c1, c2)
    if not np.isfinite(D) or abs(D) <= eps:
        raise SingularSystemError(f"singular 3x3 system (det={D!r})")

    D1 = _det3(b, c1, c2)
    D2 = _det3(c0, b, c2)
    D3 = _det3(c0, c1, b)
    return np.array([D1 / D, D2 / D, D3 / D], dtype=np.float64)


def intersect_planes(a: Plane, b: Plane, *, eps: float = 0.0) -> Line:
    """
    Line of intersection of two planes.

    The returned direction is `a.normal x b.normal` (not normalized) and the
    returned point lies on both planes.
    """
    na, pa = as_vec3(a.normal), as_vec3(a.point)
    nb, pb = as_vec3(b.normal), as_vec3(b.point)

    nc = np.cross(na, nb)
    det = float(np.dot(nc, nc))
    if not np.isfinite(det):
        raise DegenerateInputError("non-finite plane normals")
    if det <= eps:
        raise ParallelGeometryError("planes are parallel or coincident")

    da = -float(np.dot(na, pa))
    db = -float(np.dot(nb, pb))
    pl = (np.cross(nc, nb) * da + np.cross(na, nc) * db) / det
    return Line(direction=nc, point=pl)


def closest_points_between_lines(a: Line, b: Line, *, eps: float = 0.0) -> tuple[np.ndarray, np.ndarray]:
    """
    Closest pair of points between two (possibly skew) lines.

    Solves [da | -db | n] x = pb - pa with n the common perpendicular, and
    returns (pa + da x0, pb + db x1). Parallel lines have no unique common
    perpendicular and raise `ParallelGeometryError`; nothing is returned.
    """
    na, pa = as_vec3(a.direction), as_vec3(a.point)
    nb, pb = as_vec3(b.direction), as_vec3(b.point)

    nc = np.cross(na, nb)
    n = float(np.linalg.norm(nc))
    if not np.isfinite(n):
        raise DegenerateInputError("non-finite line directions")
    if n <= eps:
        raise ParallelGeometryError("lines are parallel")
    nc = nc / n

    try:
        x = solve3x3(np.column_stack([na, -nb, nc]), pb - pa, eps=eps)
    except SingularSystemError as exc:
        raise ParallelGeometryError("lines are parallel") from exc

    return pa + na * x[0], pb + nb * x[1]


def unproject_ndc(proj_inv: np.ndarray, view_inv: np.ndarray, ndc: np.ndarray) -> np.ndarray:
    """
    Map canonical view volume coordinates to world space.

    `ndc` is (3,) or (...,3); each axis nominally in [-1,1]. The homogeneous
    point (x,y,z,1) goes through the inverse projection, then the inverse
    view, and is divided by its w.
    """
    proj_inv = np.asarray(proj_inv, dtype=np.float64).reshape(4, 4)
    view_inv = np.asarray(view_inv, dtype=np.float64).reshape(4, 4)
    ndc = np.asarray(ndc, dtype=np.float64)
    if ndc.shape[-1] != 3:
        raise ValueError("ndc must have shape (...,3)")

    h = np.concatenate([ndc, np.ones(ndc.shape[:-1] + (1,), dtype=np.float64)], axis=-1)
    v = h @ (view_inv @ proj_inv).T
    return v[..., :3] / v[..., 3:4]
