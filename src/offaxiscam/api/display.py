from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from offaxiscam.core.frustum import ProjectionPair, offaxis_projection
from offaxiscam.core.perspective import CameraParams, offaxis_perspective_camera
from offaxiscam.core.reconstruct import camera_from_projection_pair
from offaxiscam.meta import DisplayConfig


@dataclass(frozen=True)
class DisplayCameras:
    """
    Cameras for every (surface, eye) combination of a display.

    Keys are "<surface>/<eye>", e.g. "front/left".
    """

    matrix: dict[str, ProjectionPair]
    perspective: dict[str, CameraParams]

    def reconstructed(self, *, eps: float = 0.0, min_eye_distance: float = 1e-9) -> dict[str, CameraParams]:
        """Perspective cameras recovered from the matrix form alone."""
        return {
            name: camera_from_projection_pair(pair, eps=eps, min_eye_distance=min_eye_distance)
            for name, pair in self.matrix.items()
        }


def cameras_for_display(config: DisplayConfig) -> DisplayCameras:
    tol = config.tolerances
    matrix: dict[str, ProjectionPair] = {}
    perspective: dict[str, CameraParams] = {}
    for surface in config.surfaces:
        for eye_name, eye in config.eyes():
            name = f"{surface.name}/{eye_name}"
            matrix[name] = offaxis_projection(
                surface.quad,
                eye,
                znear=config.clip.znear,
                zfar=config.clip.zfar,
                min_eye_distance=tol.min_eye_distance,
            )
            perspective[name] = offaxis_perspective_camera(surface.quad, eye, min_eye_distance=tol.min_eye_distance)
    return DisplayCameras(matrix=matrix, perspective=perspective)


def camera_difference(a: CameraParams, b: CameraParams) -> dict[str, float]:
    """Largest component-wise differences between two perspective cameras."""
    return {
        "position": float(np.max(np.abs(np.asarray(a.position) - np.asarray(b.position)))),
        "direction": float(np.max(np.abs(np.asarray(a.direction) - np.asarray(b.direction)))),
        "up": float(np.max(np.abs(np.asarray(a.up) - np.asarray(b.up)))),
        "fovy": abs(float(a.fovy) - float(b.fovy)),
        "aspect": abs(float(a.aspect) - float(b.aspect)),
        "imageRegion": float(np.max(np.abs(np.asarray(a.image_region) - np.asarray(b.image_region)))),
    }
