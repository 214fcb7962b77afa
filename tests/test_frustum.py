from __future__ import annotations

import numpy as np
import pytest

from offaxiscam.core.frustum import ProjectionPair, frustum_matrix, offaxis_projection
from offaxiscam.core.linalg import DegenerateInputError
from offaxiscam.core.quad import Quad


def _reference_quad() -> Quad:
    return Quad.from_corners([0.0, 0.0, 0.0], [3.0, 0.0, 0.0], [3.0, 3.0, 0.0])


def _to_ndc(pair: ProjectionPair, p: np.ndarray) -> np.ndarray:
    clip = pair.projection @ pair.view @ np.append(np.asarray(p, dtype=np.float64), 1.0)
    return clip[:3] / clip[3]


def test_frustum_matrix_layout():
    l, r, b, t, n, f = -0.2, 0.6, -0.1, 0.3, 0.5, 50.0
    P = frustum_matrix(l, r, b, t, n, f)
    proj_cm, _ = ProjectionPair.from_matrices(P, np.eye(4)).column_major()
    assert np.allclose(proj_cm[0:4], [2 * n / (r - l), 0.0, 0.0, 0.0])
    assert np.allclose(proj_cm[4:8], [0.0, 2 * n / (t - b), 0.0, 0.0])
    assert np.allclose(proj_cm[8:12], [(r + l) / (r - l), (t + b) / (t - b), -(f + n) / (f - n), -1.0])
    assert np.allclose(proj_cm[12:16], [0.0, 0.0, -(2 * f * n) / (f - n), 0.0])


def test_view_matrix_axis_aligned_is_translation_by_minus_eye():
    eye = np.array([1.5, 1.68, 1.5])
    pair = offaxis_projection(_reference_quad(), eye)
    assert np.allclose(pair.view[:3, :3], np.eye(3))
    assert np.allclose(pair.view[:3, 3], -eye)
    assert np.allclose(pair.view @ np.append(eye, 1.0), [0.0, 0.0, 0.0, 1.0])


def test_quad_corners_land_on_ndc_corners():
    quad = _reference_quad()
    pair = offaxis_projection(quad, [1.5, 1.68, 1.5])
    expected = {"ll": (-1.0, -1.0), "lr": (1.0, -1.0), "ur": (1.0, 1.0), "ul": (-1.0, 1.0)}
    for corner, xy in expected.items():
        ndc = _to_ndc(pair, getattr(quad, corner))
        assert np.allclose(ndc[:2], xy, atol=1e-9)
        assert -1.0 < ndc[2] < 1.0


def test_rotated_wall_corners_land_on_ndc_corners():
    rng = np.random.default_rng(3)
    for _ in range(10):
        quad = Quad.from_pose(rng.normal(size=3), 2.0, 1.5, rng.normal(size=3))
        X, Y, Z = quad.basis()
        eye = quad.center + rng.uniform(-1.5, 1.5) * X + rng.uniform(-1.0, 1.0) * Y + rng.uniform(0.3, 3.0) * Z
        pair = offaxis_projection(quad, eye)
        assert np.allclose(_to_ndc(pair, quad.ll)[:2], [-1.0, -1.0], atol=1e-8)
        assert np.allclose(_to_ndc(pair, quad.ur)[:2], [1.0, 1.0], atol=1e-8)
        assert np.allclose(pair.view @ np.append(eye, 1.0), [0.0, 0.0, 0.0, 1.0], atol=1e-12)


@pytest.mark.parametrize("z", [0.0, -1.0, 1e-12])
def test_eye_on_or_behind_plane_is_rejected(z: float):
    with pytest.raises(DegenerateInputError):
        offaxis_projection(_reference_quad(), [1.5, 1.5, z])


def test_invalid_clip_planes():
    with pytest.raises(ValueError):
        offaxis_projection(_reference_quad(), [1.5, 1.5, 1.0], znear=1.0, zfar=0.5)


def test_collinear_quad_is_rejected():
    with pytest.raises(DegenerateInputError):
        Quad.from_corners([0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0])


def test_column_major_roundtrip():
    pair = offaxis_projection(_reference_quad(), [1.0, 2.0, 0.5])
    proj, view = pair.column_major()
    back = ProjectionPair.from_column_major(proj, view)
    assert np.array_equal(back.projection, pair.projection)
    assert np.array_equal(back.view, pair.view)
