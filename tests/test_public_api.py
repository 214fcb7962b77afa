from __future__ import annotations


def test_public_api_exports() -> None:
    import offaxiscam as oc

    assert hasattr(oc, "offaxis_projection")
    assert hasattr(oc, "offaxis_perspective_camera")
    assert hasattr(oc, "camera_from_matrices")
    assert hasattr(oc, "camera_from_projection_pair")
    assert hasattr(oc, "cameras_for_display")
    assert hasattr(oc, "Quad")
    assert issubclass(oc.ParallelGeometryError, oc.GeometryError)
    assert issubclass(oc.GeometryError, ValueError)
