from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from offaxiscam.core.frustum import ProjectionPair
from offaxiscam.core.linalg import (
    Plane,
    closest_points_between_lines,
    intersect_planes,
    normalize,
    unproject_ndc,
)
from offaxiscam.core.perspective import CameraParams, offaxis_perspective_camera
from offaxiscam.core.quad import Quad

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reconstruction:
    camera: CameraParams
    far_quad: Quad
    skew: float  # distance between the left/right and bottom/top apex lines

    @property
    def eye(self) -> np.ndarray:
        return self.camera.position


def frustum_corners(proj_inv: np.ndarray, view_inv: np.ndarray) -> np.ndarray:
    """
    World-space corners of the frustum implied by a matrix pair.

    Returns (2,2,2,3) indexed [ix, iy, iz] with index 0 -> NDC -1 and
    1 -> NDC +1 (iz=0 is the near slice, iz=1 the far slice).
    """
    s = np.array([-1.0, 1.0], dtype=np.float64)
    ndc = np.stack(np.meshgrid(s, s, s, indexing="ij"), axis=-1)
    return unproject_ndc(proj_inv, view_inv, ndc)


def _side_planes(v: np.ndarray) -> tuple[Plane, Plane, Plane, Plane]:
    v000, v001 = v[0, 0, 0], v[0, 0, 1]
    v100, v101 = v[1, 0, 0], v[1, 0, 1]
    v110 = v[1, 1, 0]
    v010, v011 = v[0, 1, 0], v[0, 1, 1]

    # edges along +z
    ez00 = normalize(v001 - v000)
    ez10 = normalize(v101 - v100)
    ez01 = normalize(v011 - v010)
    # edges along +y
    ey00 = normalize(v010 - v000)
    ey10 = normalize(v110 - v100)
    # edges along +x
    ex00 = normalize(v100 - v000)
    ex10 = normalize(v110 - v010)

    left = Plane(normal=normalize(np.cross(ey00, ez00)), point=v000)
    right = Plane(normal=normalize(np.cross(ez10, ey10)), point=v100)
    bottom = Plane(normal=normalize(np.cross(ez00, ex00)), point=v000)
    top = Plane(normal=normalize(np.cross(ex10, ez01)), point=v010)
    return left, right, bottom, top


def reconstruct_apex(proj_inv: np.ndarray, view_inv: np.ndarray, *, eps: float = 0.0) -> tuple[np.ndarray, float]:
    """
    Recover the frustum apex (eye) from a matrix pair.

    The left/right side planes meet in one line and the bottom/top planes in
    another; for an ideal perspective frustum both pass through the apex. For
    non-ideal matrices they are skew, and the apex is the midpoint of their
    closest points. Returns (eye, skew).
    """
    left, right, bottom, top = _side_planes(frustum_corners(proj_inv, view_inv))
    lr = intersect_planes(left, right, eps=eps)
    bt = intersect_planes(bottom, top, eps=eps)
    p1, p2 = closest_points_between_lines(lr, bt, eps=eps)
    skew = float(np.linalg.norm(p1 - p2))
    logger.debug("apex lines skew by %g", skew)
    return 0.5 * (p1 + p2), skew


def reconstruct_frustum(
    proj_inv: np.ndarray,
    view_inv: np.ndarray,
    *,
    eps: float = 0.0,
    min_eye_distance: float = 1e-9,
) -> Reconstruction:
    eye, skew = reconstruct_apex(proj_inv, view_inv, eps=eps)

    far = unproject_ndc(
        proj_inv,
        view_inv,
        np.array([[-1.0, -1.0, 1.0], [1.0, -1.0, 1.0], [1.0, 1.0, 1.0]], dtype=np.float64),
    )
    far_quad = Quad.from_corners(far[0], far[1], far[2])
    camera = offaxis_perspective_camera(far_quad, eye, min_eye_distance=min_eye_distance)
    return Reconstruction(camera=camera, far_quad=far_quad, skew=skew)


def camera_from_matrices(
    proj_inv: np.ndarray,
    view_inv: np.ndarray,
    *,
    eps: float = 0.0,
    min_eye_distance: float = 1e-9,
) -> CameraParams:
    """
    Perspective + crop camera equivalent to an arbitrary (projection, view) pair.

    Takes the *inverse* projection and view matrices.
    """
    return reconstruct_frustum(proj_inv, view_inv, eps=eps, min_eye_distance=min_eye_distance).camera


def camera_from_projection_pair(pair: ProjectionPair, *, eps: float = 0.0, min_eye_distance: float = 1e-9) -> CameraParams:
    proj_inv, view_inv = pair.inverses()
    return camera_from_matrices(proj_inv, view_inv, eps=eps, min_eye_distance=min_eye_distance)
