from offaxiscam.api.camera_io import (
    load_cameras,
    matrix_camera_parameters,
    perspective_camera_parameters,
    save_cameras,
)
from offaxiscam.api.display import DisplayCameras, cameras_for_display

__all__ = [
    "DisplayCameras",
    "cameras_for_display",
    "load_cameras",
    "save_cameras",
    "matrix_camera_parameters",
    "perspective_camera_parameters",
]
