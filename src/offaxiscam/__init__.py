from offaxiscam import meta
from offaxiscam.api import DisplayCameras, cameras_for_display, load_cameras, save_cameras
from offaxiscam.core.frustum import ProjectionPair, offaxis_projection
from offaxiscam.core.linalg import DegenerateInputError, GeometryError, ParallelGeometryError, SingularSystemError
from offaxiscam.core.perspective import CameraParams, offaxis_perspective_camera
from offaxiscam.core.quad import Quad
from offaxiscam.core.reconstruct import camera_from_matrices, camera_from_projection_pair

__all__ = [
    "meta",
    "Quad",
    "ProjectionPair",
    "CameraParams",
    "offaxis_projection",
    "offaxis_perspective_camera",
    "camera_from_matrices",
    "camera_from_projection_pair",
    "DisplayCameras",
    "cameras_for_display",
    "load_cameras",
    "save_cameras",
    "GeometryError",
    "SingularSystemError",
    "ParallelGeometryError",
    "DegenerateInputError",
]
