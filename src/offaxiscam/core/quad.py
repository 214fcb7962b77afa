from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from offaxiscam.core.linalg import DegenerateInputError, as_vec3, normalize


@dataclass(frozen=True)
class Quad:
    """
    Flat rectangular display surface given by three corners.

    Convention:
    - LL -> LR runs along the surface's +X (width)
    - LR -> UR runs along the surface's +Y (height)
    - the viewer sits on the +Z = X x Y side

    The edges are assumed orthogonal; only collinearity is rejected.
    """

    ll: np.ndarray  # (3,)
    lr: np.ndarray  # (3,)
    ur: np.ndarray  # (3,)

    @classmethod
    def from_corners(cls, ll: np.ndarray, lr: np.ndarray, ur: np.ndarray) -> "Quad":
        ll, lr, ur = as_vec3(ll), as_vec3(lr), as_vec3(ur)
        if not (np.all(np.isfinite(ll)) and np.all(np.isfinite(lr)) and np.all(np.isfinite(ur))):
            raise DegenerateInputError("quad corners must be finite")
        if float(np.linalg.norm(np.cross(lr - ll, ur - lr))) == 0.0:
            raise DegenerateInputError("quad corners are collinear")
        return cls(ll=ll, lr=lr, ur=ur)

    @classmethod
    def from_pose(cls, center: np.ndarray, width: float, height: float, rotvec: np.ndarray | None = None) -> "Quad":
        """
        Build a wall of size (width, height) centered at `center`.

        With rotvec=None the wall lies in the z=0 plane facing +Z; otherwise its
        local frame is rotated by the rotation vector (axis * angle, radians).
        """
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        center = as_vec3(center)
        w = float(width)
        h = float(height)
        if not (w > 0.0 and h > 0.0):
            raise DegenerateInputError("wall width and height must be > 0")
        R = np.eye(3) if rotvec is None else Rot.from_rotvec(as_vec3(rotvec)).as_matrix()
        ex, ey = R[:, 0], R[:, 1]
        ll = center - 0.5 * w * ex - 0.5 * h * ey
        return cls.from_corners(ll, ll + w * ex, ll + w * ex + h * ey)

    @property
    def ul(self) -> np.ndarray:
        return self.ll + (self.ur - self.lr)

    @property
    def width(self) -> float:
        return float(np.linalg.norm(self.lr - self.ll))

    @property
    def height(self) -> float:
        return float(np.linalg.norm(self.ur - self.lr))

    @property
    def center(self) -> np.ndarray:
        return 0.5 * (self.ll + self.ur)

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        X = normalize(self.lr - self.ll)
        Y = normalize(self.ur - self.lr)
        Z = np.cross(X, Y)
        return X, Y, Z


@dataclass(frozen=True)
class EyeOffsets:
    """
    Eye position expressed in a quad's frame.

    left/right/bottom/top are the distances (world units, in the surface
    plane) from the eye's foot point to each edge; `distance` is the
    perpendicular eye-to-surface distance.
    """

    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    distance: float
    left: float
    right: float
    bottom: float
    top: float


def eye_offsets(quad: Quad, eye: np.ndarray, *, min_eye_distance: float = 1e-9) -> EyeOffsets:
    eye = as_vec3(eye)
    if not np.all(np.isfinite(eye)):
        raise DegenerateInputError("eye position must be finite")

    X, Y, Z = quad.basis()
    eyeP = eye - quad.ll
    dist = float(np.dot(eyeP, Z))
    if not dist > min_eye_distance:
        raise DegenerateInputError(
            f"eye must lie in front of the surface (distance {dist:.3g} <= {min_eye_distance:.3g})"
        )

    left = float(np.dot(eyeP, X))
    bottom = float(np.dot(eyeP, Y))
    return EyeOffsets(
        x=X,
        y=Y,
        z=Z,
        distance=dist,
        left=left,
        right=quad.width - left,
        bottom=bottom,
        top=quad.height - bottom,
    )
