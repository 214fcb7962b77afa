from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from offaxiscam.core.frustum import DEFAULT_ZFAR, DEFAULT_ZNEAR, ProjectionPair, frustum_matrix, view_matrix
from offaxiscam.core.linalg import DegenerateInputError, as_vec3, normalize
from offaxiscam.core.quad import Quad, eye_offsets


@dataclass(frozen=True)
class CameraParams:
    """
    Symmetric perspective camera plus a normalized crop of its image.

    image_region is (x0, y0, x1, y1) in [0,1]^2, origin at the lower-left of
    the full symmetric frame.
    """

    position: np.ndarray  # (3,)
    direction: np.ndarray  # (3,) unit
    up: np.ndarray  # (3,) unit
    fovy: float  # radians
    aspect: float
    image_region: tuple[float, float, float, float]

    @property
    def region_area(self) -> float:
        x0, y0, x1, y1 = self.image_region
        return (x1 - x0) * (y1 - y0)

    def view_matrix(self) -> np.ndarray:
        return look_at_matrix(self.position, self.direction, self.up)

    def to_projection_pair(self, *, znear: float = DEFAULT_ZNEAR, zfar: float = DEFAULT_ZFAR) -> ProjectionPair:
        """
        Matrix form of the cropped camera.

        The crop window of the symmetric near-plane rectangle becomes the
        asymmetric frustum extents, so a camera produced from (quad, eye)
        maps back to the same projection as `offaxis_projection`.
        """
        if not (0.0 < znear < zfar):
            raise ValueError("clip planes must satisfy 0 < znear < zfar")
        if self.image_region == (0.0, 0.0, 1.0, 1.0):
            return ProjectionPair(
                projection=perspective_matrix(self.fovy, self.aspect, znear, zfar),
                view=self.view_matrix(),
            )
        h = znear * math.tan(0.5 * self.fovy)
        w = h * self.aspect
        x0, y0, x1, y1 = self.image_region
        P = frustum_matrix(
            -w + 2.0 * w * x0,
            -w + 2.0 * w * x1,
            -h + 2.0 * h * y0,
            -h + 2.0 * h * y1,
            znear,
            zfar,
        )
        return ProjectionPair(projection=P, view=self.view_matrix())


def look_at_matrix(position: np.ndarray, direction: np.ndarray, up: np.ndarray) -> np.ndarray:
    """World -> eye space for a camera at `position` looking along `direction`."""
    f = normalize(as_vec3(direction))
    s = normalize(np.cross(f, as_vec3(up)))
    u = np.cross(s, f)
    return view_matrix(s, u, -f, position)


def perspective_matrix(fovy: float, aspect: float, znear: float, zfar: float) -> np.ndarray:
    """Symmetric perspective projection (gluPerspective); fovy in radians."""
    if not (0.0 < fovy < math.pi) or not aspect > 0.0:
        raise DegenerateInputError("fovy must be in (0, pi) and aspect > 0")
    top = znear * math.tan(0.5 * fovy)
    right = top * aspect
    return frustum_matrix(-right, right, -top, top, znear, zfar)


def offaxis_perspective_camera(quad: Quad, eye: np.ndarray, *, min_eye_distance: float = 1e-9) -> CameraParams:
    """
    Emulate the off-axis frustum of (quad, eye) with a symmetric camera.

    The symmetric frame is sized by the larger half-extent on each axis, so it
    contains the asymmetric window; image_region locates that window. A side
    where the eye's offset is the larger one touches the frame edge (0 or 1).
    """
    eye = as_vec3(eye)
    o = eye_offsets(quad, eye, min_eye_distance=min_eye_distance)
    left, right, bottom, top = o.left, o.right, o.bottom, o.top

    new_width = 2.0 * right if left < right else 2.0 * left
    new_height = 2.0 * top if bottom < top else 2.0 * bottom

    fovy = 2.0 * math.atan(new_height / (2.0 * o.distance))
    aspect = new_width / new_height

    region = (
        (right - left) / new_width if left < right else 0.0,
        (top - bottom) / new_height if bottom < top else 0.0,
        (left + right) / new_width if right < left else 1.0,
        (bottom + top) / new_height if top < bottom else 1.0,
    )

    if not (math.isfinite(fovy) and fovy > 0.0 and math.isfinite(aspect) and aspect > 0.0):
        raise DegenerateInputError(f"degenerate camera (fovy={fovy!r}, aspect={aspect!r})")
    if not all(math.isfinite(c) and 0.0 <= c <= 1.0 for c in region):
        raise DegenerateInputError(f"image region outside [0,1]: {region}")

    return CameraParams(
        position=eye,
        direction=-o.z,
        up=o.y,
        fovy=float(fovy),
        aspect=float(aspect),
        image_region=tuple(float(c) for c in region),  # type: ignore[arg-type]
    )
