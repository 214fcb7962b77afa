from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from offaxiscam.api.camera_io import CameraFileError, load_cameras, save_cameras
from offaxiscam.api.display import camera_difference, cameras_for_display
from offaxiscam.core.linalg import GeometryError
from offaxiscam.core.reconstruct import camera_from_projection_pair
from offaxiscam.meta import MetaValidationError, load_display_config


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="offaxiscam")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details (frustum extents, apex skew).")
    sub = parser.add_subparsers(dest="cmd", required=True)

    fr = sub.add_parser("frustum", help="Asymmetric projection/view matrices per surface and eye.")
    fr.add_argument("config", type=Path)
    fr.add_argument("--out", type=Path, required=True)

    pe = sub.add_parser("perspective", help="Symmetric perspective cameras + image regions per surface and eye.")
    pe.add_argument("config", type=Path)
    pe.add_argument("--out", type=Path, required=True)

    rc = sub.add_parser(
        "reconstruct",
        help="Recover perspective cameras from the matrix cameras stored in a camera file.",
    )
    rc.add_argument("cameras", type=Path)
    rc.add_argument("--out", type=Path, required=True)
    rc.add_argument("--eps", type=float, default=0.0, help="Degeneracy threshold (0 = exact zero test).")

    cmp_ = sub.add_parser(
        "compare",
        help="Compare direct perspective cameras with the ones reconstructed from matrices.",
    )
    cmp_.add_argument("config", type=Path)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return _run(args)
    except (GeometryError, MetaValidationError, CameraFileError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


def _run(args: argparse.Namespace) -> int:
    if args.cmd == "frustum":
        cams = cameras_for_display(load_display_config(args.config))
        save_cameras(args.out, matrix=cams.matrix)
        print(f"Wrote {args.out}")
        return 0

    if args.cmd == "perspective":
        cams = cameras_for_display(load_display_config(args.config))
        save_cameras(args.out, perspective=cams.perspective)
        print(f"Wrote {args.out}")
        return 0

    if args.cmd == "reconstruct":
        matrix, _ = load_cameras(args.cameras)
        perspective = {name: camera_from_projection_pair(pair, eps=args.eps) for name, pair in matrix.items()}
        save_cameras(args.out, perspective=perspective)
        print(f"Wrote {args.out}")
        return 0

    if args.cmd == "compare":
        config = load_display_config(args.config)
        cams = cameras_for_display(config)
        reconstructed = cams.reconstructed(
            eps=config.tolerances.singular_eps,
            min_eye_distance=config.tolerances.min_eye_distance,
        )
        for name, direct in cams.perspective.items():
            diff = camera_difference(direct, reconstructed[name])
            fields = " ".join(f"{k}={v:.3e}" for k, v in diff.items())
            print(f"{name}: {fields}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
