from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from offaxiscam.core.frustum import ProjectionPair
from offaxiscam.core.perspective import CameraParams

CAMERA_SCHEMA = "offaxiscam.camera.v0"


class CameraFileError(ValueError):
    pass


def _to_float_vector(x: Any, n: int, what: str) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64).reshape(-1)
    if x.shape != (n,):
        raise CameraFileError(f"{what} must have {n} values")
    if not np.all(np.isfinite(x)):
        raise CameraFileError(f"{what}: non-finite values")
    return x


def matrix_camera_parameters(pair: ProjectionPair) -> dict[str, Any]:
    """Matrix-form camera parameters (column-major, as a matrix camera consumes them)."""
    proj, view = pair.column_major()
    return {"proj": proj, "view": view}


def perspective_camera_parameters(camera: CameraParams) -> dict[str, Any]:
    """Perspective-form camera parameters (`imageRegion` is a box2 x0,y0,x1,y1)."""
    return {
        "position": np.asarray(camera.position, dtype=np.float64).tolist(),
        "direction": np.asarray(camera.direction, dtype=np.float64).tolist(),
        "up": np.asarray(camera.up, dtype=np.float64).tolist(),
        "fovy": float(camera.fovy),
        "aspect": float(camera.aspect),
        "imageRegion": [float(c) for c in camera.image_region],
    }


def parse_matrix_camera(data: dict[str, Any]) -> ProjectionPair:
    return ProjectionPair.from_column_major(
        _to_float_vector(data["proj"], 16, "proj").tolist(),
        _to_float_vector(data["view"], 16, "view").tolist(),
    )


def parse_perspective_camera(data: dict[str, Any]) -> CameraParams:
    region = _to_float_vector(data["imageRegion"], 4, "imageRegion")
    if np.any(region < 0.0) or np.any(region > 1.0):
        raise CameraFileError("imageRegion must lie within [0,1]")
    fovy = float(data["fovy"])
    aspect = float(data["aspect"])
    if not (fovy > 0.0 and aspect > 0.0):
        raise CameraFileError("fovy and aspect must be > 0")
    return CameraParams(
        position=_to_float_vector(data["position"], 3, "position"),
        direction=_to_float_vector(data["direction"], 3, "direction"),
        up=_to_float_vector(data["up"], 3, "up"),
        fovy=fovy,
        aspect=aspect,
        image_region=tuple(float(c) for c in region),  # type: ignore[arg-type]
    )


def save_cameras(
    path: Path,
    *,
    matrix: dict[str, ProjectionPair] | None = None,
    perspective: dict[str, CameraParams] | None = None,
) -> Path:
    """
    Write named cameras to a JSON file:

      {"schema_version": ..., "cameras": {name: {"matrix": {...}, "perspective": {...}}}}

    A camera may carry either form or both.
    """
    cameras: dict[str, dict[str, Any]] = {}
    for name, pair in (matrix or {}).items():
        cameras.setdefault(name, {})["matrix"] = matrix_camera_parameters(pair)
    for name, cam in (perspective or {}).items():
        cameras.setdefault(name, {})["perspective"] = perspective_camera_parameters(cam)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = {"schema_version": CAMERA_SCHEMA, "cameras": cameras}
    path.write_text(json.dumps(doc, indent=2, sort_keys=True), encoding="utf-8")
    return path


def load_cameras(path: Path) -> tuple[dict[str, ProjectionPair], dict[str, CameraParams]]:
    """Returns (matrix cameras, perspective cameras) keyed by name."""
    doc = json.loads(Path(path).read_text(encoding="utf-8"))
    if str(doc.get("schema_version")) != CAMERA_SCHEMA:
        raise CameraFileError("unsupported camera schema")

    matrix: dict[str, ProjectionPair] = {}
    perspective: dict[str, CameraParams] = {}
    for name, entry in doc.get("cameras", {}).items():
        try:
            if "matrix" in entry:
                matrix[name] = parse_matrix_camera(entry["matrix"])
            if "perspective" in entry:
                perspective[name] = parse_perspective_camera(entry["perspective"])
        except CameraFileError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise CameraFileError(f"camera {name!r}: {exc!r}") from exc
    return matrix, perspective
