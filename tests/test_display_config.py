import numpy as np
import pytest

from offaxiscam.meta import MetaValidationError, parse_display_config


def _config(**overrides):
    data = {
        "schema_version": "offaxiscam.display.v0",
        "surfaces": [
            {"name": "front", "LL": [0, 0, 0], "LR": [3, 0, 0], "UR": [3, 3, 0]},
            {"name": "floor", "center": [1.5, 0.0, 1.5], "size": [3.0, 3.0], "rotvec": [-np.pi / 2, 0.0, 0.0]},
        ],
        "eye": [1.5, 1.68, 1.5],
    }
    data.update(overrides)
    return data


def test_parse_display_config_ok():
    cfg = parse_display_config(_config())
    assert [s.name for s in cfg.surfaces] == ["front", "floor"]
    assert cfg.eye == (1.5, 1.68, 1.5)
    assert cfg.clip.znear == pytest.approx(1e-3)
    assert cfg.clip.zfar == pytest.approx(1000.0)
    assert cfg.tolerances.singular_eps == 0.0
    assert list(name for name, _ in cfg.eyes()) == ["mono"]

    floor = cfg.surface("floor").quad
    assert np.allclose(floor.ll, [0.0, 0.0, 3.0], atol=1e-12)
    assert np.allclose(floor.ur, [3.0, 0.0, 0.0], atol=1e-12)
    _, _, Z = floor.basis()
    assert np.allclose(Z, [0.0, 1.0, 0.0], atol=1e-12)


def test_stereo_eyes_straddle_the_head_position():
    cfg = parse_display_config(_config(stereo={"separation": 0.064, "axis": [2.0, 0.0, 0.0]}))
    eyes = dict(cfg.eyes())
    assert sorted(eyes) == ["left", "right"]
    assert np.allclose(eyes["left"], [1.5 - 0.032, 1.68, 1.5])
    assert np.allclose(eyes["right"], [1.5 + 0.032, 1.68, 1.5])


def test_parse_display_config_rejects_bad_schema():
    with pytest.raises(MetaValidationError):
        parse_display_config(_config(schema_version="offaxiscam.display.v1"))


def test_parse_display_config_rejects_collinear_surface():
    with pytest.raises(MetaValidationError):
        parse_display_config(_config(surfaces=[{"name": "bad", "LL": [0, 0, 0], "LR": [1, 0, 0], "UR": [2, 0, 0]}]))


def test_parse_display_config_rejects_bad_clip():
    with pytest.raises(MetaValidationError):
        parse_display_config(_config(clip={"znear": 10.0, "zfar": 1.0}))


def test_parse_display_config_rejects_duplicate_names():
    s = {"name": "front", "LL": [0, 0, 0], "LR": [3, 0, 0], "UR": [3, 3, 0]}
    with pytest.raises(MetaValidationError):
        parse_display_config(_config(surfaces=[s, s]))


def test_parse_display_config_rejects_non_numeric_values():
    with pytest.raises(MetaValidationError):
        parse_display_config(_config(eye=["a", 0, 0]))
    with pytest.raises(MetaValidationError):
        parse_display_config(_config(surfaces=[{"name": "w", "center": [0, 0, 0], "size": ["wide", 1.0]}]))
    with pytest.raises(MetaValidationError):
        parse_display_config(_config(clip={"znear": None}))
