from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import numpy as np

from offaxiscam.core.frustum import DEFAULT_ZFAR, DEFAULT_ZNEAR
from offaxiscam.core.linalg import GeometryError
from offaxiscam.core.quad import Quad

DISPLAY_SCHEMA = "offaxiscam.display.v0"


class MetaValidationError(ValueError):
    pass


@dataclass(frozen=True)
class SurfaceMeta:
    name: str
    quad: Quad


@dataclass(frozen=True)
class StereoMeta:
    separation: float
    axis: tuple[float, float, float] = (1.0, 0.0, 0.0)


@dataclass(frozen=True)
class ClipMeta:
    znear: float = DEFAULT_ZNEAR
    zfar: float = DEFAULT_ZFAR


@dataclass(frozen=True)
class ToleranceMeta:
    singular_eps: float = 0.0
    min_eye_distance: float = 1e-9


@dataclass(frozen=True)
class DisplayConfig:
    schema_version: str
    surfaces: tuple[SurfaceMeta, ...]
    eye: tuple[float, float, float]
    stereo: StereoMeta | None = None
    clip: ClipMeta = ClipMeta()
    tolerances: ToleranceMeta = ToleranceMeta()

    def eyes(self) -> Iterator[tuple[str, np.ndarray]]:
        """Named eye positions: ("mono", eye), or ("left", ...), ("right", ...) in stereo."""
        eye = np.asarray(self.eye, dtype=np.float64)
        if self.stereo is None:
            yield "mono", eye
            return
        axis = np.asarray(self.stereo.axis, dtype=np.float64)
        half = 0.5 * self.stereo.separation * axis / np.linalg.norm(axis)
        yield "left", eye - half
        yield "right", eye + half

    def surface(self, name: str) -> SurfaceMeta:
        for s in self.surfaces:
            if s.name == name:
                return s
        raise KeyError(name)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise MetaValidationError(msg)


def _float(raw: Any, what: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise MetaValidationError(f"{what} must be a number") from None


def _vec3(raw: Any, what: str) -> tuple[float, float, float]:
    _require(isinstance(raw, (list, tuple)) and len(raw) == 3, f"{what} must be [x,y,z]")
    v = tuple(_float(c, what) for c in raw)
    _require(all(np.isfinite(v)), f"{what} must be finite")
    return v  # type: ignore[return-value]


def _parse_surface(i: int, data: dict[str, Any]) -> SurfaceMeta:
    _require(isinstance(data, dict), f"surfaces[{i}] must be an object")
    name = str(data.get("name", f"surface_{i}"))
    try:
        if "LL" in data or "LR" in data or "UR" in data:
            quad = Quad.from_corners(
                _vec3(data.get("LL"), f"{name}.LL"),
                _vec3(data.get("LR"), f"{name}.LR"),
                _vec3(data.get("UR"), f"{name}.UR"),
            )
        else:
            size = data.get("size")
            _require(isinstance(size, (list, tuple)) and len(size) == 2, f"{name}.size must be [width,height]")
            rotvec = data.get("rotvec")
            quad = Quad.from_pose(
                _vec3(data.get("center"), f"{name}.center"),
                _float(size[0], f"{name}.size"),
                _float(size[1], f"{name}.size"),
                None if rotvec is None else _vec3(rotvec, f"{name}.rotvec"),
            )
    except GeometryError as exc:
        raise MetaValidationError(f"{name}: {exc}") from exc
    return SurfaceMeta(name=name, quad=quad)


def load_display_config(path: Path) -> DisplayConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_display_config(data)


def parse_display_config(data: dict[str, Any]) -> DisplayConfig:
    schema_version = data.get("schema_version")
    _require(schema_version == DISPLAY_SCHEMA, f"schema_version must be {DISPLAY_SCHEMA}")

    raw_surfaces = data.get("surfaces")
    _require(isinstance(raw_surfaces, list) and len(raw_surfaces) > 0, "surfaces must be a non-empty list")
    surfaces = tuple(_parse_surface(i, s) for i, s in enumerate(raw_surfaces))
    names = [s.name for s in surfaces]
    _require(len(set(names)) == len(names), "surface names must be unique")

    eye = _vec3(data.get("eye"), "eye")

    stereo = None
    raw_stereo = data.get("stereo")
    if raw_stereo is not None:
        _require(isinstance(raw_stereo, dict), "stereo must be an object")
        sep = _float(raw_stereo.get("separation", 0.0), "stereo.separation")
        _require(sep > 0.0, "stereo.separation must be > 0")
        axis = _vec3(raw_stereo.get("axis", [1.0, 0.0, 0.0]), "stereo.axis")
        _require(float(np.linalg.norm(axis)) > 0.0, "stereo.axis must be non-zero")
        stereo = StereoMeta(separation=sep, axis=axis)

    clip_raw = data.get("clip", {})
    _require(isinstance(clip_raw, dict), "clip must be an object")
    clip = ClipMeta(
        znear=_float(clip_raw.get("znear", DEFAULT_ZNEAR), "clip.znear"),
        zfar=_float(clip_raw.get("zfar", DEFAULT_ZFAR), "clip.zfar"),
    )
    _require(0.0 < clip.znear < clip.zfar, "clip must satisfy 0 < znear < zfar")

    tol_raw = data.get("tolerances", {})
    _require(isinstance(tol_raw, dict), "tolerances must be an object")
    tol = ToleranceMeta(
        singular_eps=_float(tol_raw.get("singular_eps", 0.0), "tolerances.singular_eps"),
        min_eye_distance=_float(tol_raw.get("min_eye_distance", 1e-9), "tolerances.min_eye_distance"),
    )
    _require(tol.singular_eps >= 0.0, "tolerances.singular_eps must be >= 0")
    _require(tol.min_eye_distance >= 0.0, "tolerances.min_eye_distance must be >= 0")

    return DisplayConfig(
        schema_version=schema_version,
        surfaces=surfaces,
        eye=eye,
        stereo=stereo,
        clip=clip,
        tolerances=tol,
    )
