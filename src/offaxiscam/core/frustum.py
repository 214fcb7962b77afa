from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from offaxiscam.core.linalg import DegenerateInputError, SingularSystemError, as_vec3
from offaxiscam.core.quad import Quad, eye_offsets

logger = logging.getLogger(__name__)

# Clip planes only need to give a valid, well-conditioned frustum.
DEFAULT_ZNEAR = 1e-3
DEFAULT_ZFAR = 1000.0


@dataclass(frozen=True)
class ProjectionPair:
    """
    Camera in matrix form.

    Both matrices use the column-vector convention: clip = projection @ view @ X_world.
    """

    projection: np.ndarray  # (4,4)
    view: np.ndarray  # (4,4)

    @classmethod
    def from_matrices(cls, projection: np.ndarray, view: np.ndarray) -> "ProjectionPair":
        projection = np.asarray(projection, dtype=np.float64).reshape(4, 4)
        view = np.asarray(view, dtype=np.float64).reshape(4, 4)
        if not (np.all(np.isfinite(projection)) and np.all(np.isfinite(view))):
            raise ValueError("non-finite values")
        return cls(projection=projection, view=view)

    @classmethod
    def from_column_major(cls, projection: list[float], view: list[float]) -> "ProjectionPair":
        """Inverse of `column_major` (OpenGL / ANARI memory layout)."""
        P = np.asarray(projection, dtype=np.float64).reshape(4, 4).T
        V = np.asarray(view, dtype=np.float64).reshape(4, 4).T
        return cls.from_matrices(P, V)

    def column_major(self) -> tuple[list[float], list[float]]:
        return (
            self.projection.T.reshape(16).tolist(),
            self.view.T.reshape(16).tolist(),
        )

    def inverses(self) -> tuple[np.ndarray, np.ndarray]:
        """(projection^-1, view^-1)."""
        try:
            return np.linalg.inv(self.projection), np.linalg.inv(self.view)
        except np.linalg.LinAlgError as exc:
            raise SingularSystemError("projection or view matrix is not invertible") from exc


def frustum_matrix(left: float, right: float, bottom: float, top: float, znear: float, zfar: float) -> np.ndarray:
    """
    OpenGL-style asymmetric frustum (glFrustum), right-handed, eye looking down -Z.

    Extents are given on the near plane.
    """
    if right == left or top == bottom or zfar == znear:
        raise DegenerateInputError("empty frustum extent")
    P = np.zeros((4, 4), dtype=np.float64)
    P[0, 0] = 2.0 * znear / (right - left)
    P[1, 1] = 2.0 * znear / (top - bottom)
    P[0, 2] = (right + left) / (right - left)
    P[1, 2] = (top + bottom) / (top - bottom)
    P[2, 2] = -(zfar + znear) / (zfar - znear)
    P[2, 3] = -(2.0 * zfar * znear) / (zfar - znear)
    P[3, 2] = -1.0
    return P


def view_matrix(x: np.ndarray, y: np.ndarray, z: np.ndarray, eye: np.ndarray) -> np.ndarray:
    """
    World -> eye space for an orthonormal frame (x, y, z) centered at `eye`.

    Rows of the rotation block are x, y, z; translation is -R eye, so the eye
    maps to the origin and -z is the viewing direction.
    """
    R = np.stack([as_vec3(x), as_vec3(y), as_vec3(z)], axis=0)
    V = np.eye(4, dtype=np.float64)
    V[:3, :3] = R
    V[:3, 3] = -R @ as_vec3(eye)
    return V


def offaxis_projection(
    quad: Quad,
    eye: np.ndarray,
    *,
    znear: float = DEFAULT_ZNEAR,
    zfar: float = DEFAULT_ZFAR,
    min_eye_distance: float = 1e-9,
) -> ProjectionPair:
    """
    Exact asymmetric frustum for a viewer at `eye` looking through `quad`.

    The quad edges are projected onto the near plane by similar triangles.
    """
    if not (0.0 < znear < zfar):
        raise ValueError("clip planes must satisfy 0 < znear < zfar")

    o = eye_offsets(quad, eye, min_eye_distance=min_eye_distance)
    s = znear / o.distance
    left = -o.left * s
    right = o.right * s
    bottom = -o.bottom * s
    top = o.top * s
    logger.debug("near-plane extents l=%g r=%g b=%g t=%g (dist=%g)", left, right, bottom, top, o.distance)

    return ProjectionPair(
        projection=frustum_matrix(left, right, bottom, top, znear, zfar),
        view=view_matrix(o.x, o.y, o.z, eye),
    )
