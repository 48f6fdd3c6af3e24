#!/usr/bin/env python3
"""
Register two scans with point-to-point ICP.

Usage:
    python -m scan_registration scan_a.off scan_b.off --stride 2
    python -m scan_registration scan_a.off --rotate-z 20 --noise 0.0005 --output result.ply
"""

import argparse
import logging

import numpy as np

from .errors import RegistrationError
from .exporter import Exporter
from .icp import ICPConfig, StopPolicy, register
from .mesh_loader import MeshLoader
from .transforms import add_noise, rotate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Align two partially overlapping scans with ICP')
    parser.add_argument('reference', type=str,
                        help='Stationary scan')
    parser.add_argument('moving', type=str, nargs='?', default=None,
                        help='Scan moved onto the reference (default: rotated copy of the reference)')
    parser.add_argument('--stride', type=int, default=1,
                        help='Use every n-th reference point for correspondences')
    parser.add_argument('--max-iterations', type=int, default=250,
                        help='Iteration budget')
    parser.add_argument('--policy', type=str, default=StopPolicy.PLATEAU_THEN_SMALL.value,
                        choices=[p.value for p in StopPolicy],
                        help='Stopping policy')
    parser.add_argument('--tolerance', type=float, default=None,
                        help='Residual tolerance (default depends on policy)')
    parser.add_argument('--max-sq-distance', type=float, default=0.01,
                        help='Squared distance above which matches are rejected')
    parser.add_argument('--no-reflection-fix', action='store_true',
                        help='Keep improper rotations produced by the SVD')
    parser.add_argument('--rotate-x', type=float, default=0.0, help='Rotation about X in degrees')
    parser.add_argument('--rotate-y', type=float, default=0.0, help='Rotation about Y in degrees')
    parser.add_argument('--rotate-z', type=float, default=0.0, help='Rotation about Z in degrees')
    parser.add_argument('--noise', type=float, default=0.0,
                        help='Std. dev. of Gaussian noise added to the moving scan')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the noise generator')
    parser.add_argument('--output', type=str, default=None,
                        help='Write reference and aligned scan to this mesh file')
    parser.add_argument('--transform-out', type=str, default=None,
                        help='Write the final rigid transform as JSON')
    parser.add_argument('--show', action='store_true',
                        help='Open a viewer with the result (needs open3d)')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    print("=" * 60)
    print("Scan Registration - Point-to-Point ICP")
    print("=" * 60)

    try:
        reference, reference_faces = MeshLoader.load_mesh(args.reference)
        if args.moving is not None:
            moving, moving_faces = MeshLoader.load_mesh(args.moving)
    except (FileNotFoundError, ValueError) as e:
        print(f"Could not load scan: {e}")
        return 1
    print(f"\nReference: {args.reference} ({len(reference)} points)")

    angles = np.deg2rad([args.rotate_x, args.rotate_y, args.rotate_z])
    if args.moving is None:
        reference, moving = rotate(reference, *angles)
        moving_faces = reference_faces
        print(f"Moving: rotated copy of reference by {args.rotate_x}, {args.rotate_y}, {args.rotate_z} deg")
    else:
        print(f"Moving: {args.moving} ({len(moving)} points)")
        if np.any(angles):
            # rotate in place about the scan's own centroid
            _, rotated = rotate(moving, *angles)
            moving = rotated + moving.mean(axis=0)

    if args.noise > 0:
        moving = add_noise(moving, args.noise, seed=args.seed)
        print(f"Added noise (sigma={args.noise})")

    try:
        config = ICPConfig(
            stride=args.stride,
            max_iterations=args.max_iterations,
            policy=StopPolicy(args.policy),
            tolerance=args.tolerance,
            max_sq_distance=args.max_sq_distance,
            correct_reflection=not args.no_reflection_fix,
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 2

    try:
        result = register(reference, moving, config)
    except RegistrationError as e:
        print(f"Registration failed: {e}")
        return 1

    print(f"\nIterations: {result.iterations} ({'converged' if result.converged else 'budget exhausted'})")
    print(f"End distance: {result.residual:.6e}")
    print(f"Processing Time: {result.elapsed:.3f} s")
    print("Transform:")
    print(result.transform.as_matrix())

    if args.output:
        Exporter.export_combined(reference, result.aligned, args.output,
                                 reference_faces=reference_faces, aligned_faces=moving_faces)
        print(f"\nSaved combined scans to {args.output}")
    if args.transform_out:
        with open(args.transform_out, "w") as f:
            f.write(result.transform.to_json())
        print(f"Saved transform to {args.transform_out}")
    if args.show:
        from .visualizer import Visualizer
        Visualizer.show(reference, result.aligned)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
