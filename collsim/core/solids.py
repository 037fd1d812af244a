"""Point-in-solid tests, surface sampling and extents for tube, cone and box.

Vectorized with numpy over (N, 3) point arrays given in the solid's own
frame. Tubes are handled as cones with equal end radii. All lengths in mm;
sweeps are converted from degree at this boundary.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from collsim.core.units import deg_to_rad
from collsim.models.geometry import BoxShape, ConeShape, Shape, ShapeKind, Transform

_TWO_PI = 2.0 * math.pi


def _profile(shape: Shape) -> tuple[float, float, float, float, float, float]:
    """(rmin1, rmax1, rmin2, rmax2, half_length, sweep_rad) of a tube or cone."""
    if isinstance(shape, ConeShape):
        return (
            shape.inner_radius1, shape.outer_radius1,
            shape.inner_radius2, shape.outer_radius2,
            shape.half_length, float(deg_to_rad(shape.sweep_deg)),
        )
    return (
        shape.inner_radius, shape.outer_radius,
        shape.inner_radius, shape.outer_radius,
        shape.half_length, float(deg_to_rad(shape.sweep_deg)),
    )


def _is_full_sweep(sweep_rad: float) -> bool:
    return sweep_rad >= _TWO_PI - 1e-12


# ---------------------------------------------------------------------------
# Inside tests
# ---------------------------------------------------------------------------

def inside_mask(
    shape: Shape,
    points: NDArray[np.float64],
    tolerance: float,
    strict: bool,
) -> NDArray[np.bool_]:
    """Classify points against a solid.

    Args:
        shape: Solid descriptor.
        points: (N, 3) points in the solid frame [mm].
        tolerance: Surface tolerance [mm].
        strict: If True, only points deeper than *tolerance* inside the
            solid count. If False, points on the surface (within
            *tolerance*) count as inside.

    Returns:
        Boolean mask of shape (N,).
    """
    pts = np.atleast_2d(np.asarray(points, dtype=np.float64))
    if shape.kind is ShapeKind.BOX:
        return _inside_box(shape, pts, tolerance, strict)
    return _inside_conical(shape, pts, tolerance, strict)


def _inside_box(
    shape: BoxShape, pts: NDArray[np.float64], tol: float, strict: bool,
) -> NDArray[np.bool_]:
    half = np.array([shape.half_x, shape.half_y, shape.half_z])
    if strict:
        return np.all(np.abs(pts) < half - tol, axis=1)
    return np.all(np.abs(pts) <= half + tol, axis=1)


def _inside_conical(
    shape: Shape, pts: NDArray[np.float64], tol: float, strict: bool,
) -> NDArray[np.bool_]:
    rmin1, rmax1, rmin2, rmax2, hz, sweep = _profile(shape)
    x, y, z = pts[:, 0], pts[:, 1], pts[:, 2]
    r = np.hypot(x, y)

    frac = (np.clip(z, -hz, hz) + hz) / (2.0 * hz)
    rmin = rmin1 + (rmin2 - rmin1) * frac
    rmax = rmax1 + (rmax2 - rmax1) * frac

    if strict:
        mask = (np.abs(z) < hz - tol) & (r < rmax - tol)
        mask &= (rmin <= 0.0) | (r > rmin + tol)
    else:
        mask = (np.abs(z) <= hz + tol) & (r <= rmax + tol) & (r >= rmin - tol)

    if not _is_full_sweep(sweep):
        phi = np.mod(np.arctan2(y, x), _TWO_PI)
        # Angular tolerance equivalent to the surface tolerance at radius r
        ang_tol = tol / np.maximum(r, tol)
        if strict:
            mask &= (r > tol) & (phi > ang_tol) & (phi < sweep - ang_tol)
        else:
            in_sweep = (phi <= sweep + ang_tol) | (phi >= _TWO_PI - ang_tol)
            mask &= in_sweep | (r <= tol)
    return mask


# ---------------------------------------------------------------------------
# Surface sampling
# ---------------------------------------------------------------------------

def surface_points(shape: Shape, resolution: int) -> NDArray[np.float64]:
    """Deterministic grid of points covering every face of a solid.

    Args:
        shape: Solid descriptor.
        resolution: Grid points per surface direction.

    Returns:
        (N, 3) points in the solid frame [mm].
    """
    if resolution < 2:
        raise ValueError(f"Sampling resolution must be >= 2, got {resolution}")
    if shape.kind is ShapeKind.BOX:
        return _box_surface(shape, resolution)
    return _conical_surface(shape, resolution)


def _box_surface(shape: BoxShape, n: int) -> NDArray[np.float64]:
    half = (shape.half_x, shape.half_y, shape.half_z)
    faces = []
    for axis in range(3):
        u_axis, v_axis = [a for a in range(3) if a != axis]
        u, v = np.meshgrid(
            np.linspace(-half[u_axis], half[u_axis], n),
            np.linspace(-half[v_axis], half[v_axis], n),
        )
        for sign in (-1.0, 1.0):
            face = np.empty((u.size, 3))
            face[:, axis] = sign * half[axis]
            face[:, u_axis] = u.ravel()
            face[:, v_axis] = v.ravel()
            faces.append(face)
    return np.vstack(faces)


def _polar(r: NDArray[np.float64], phi: NDArray[np.float64], z: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.column_stack([r * np.cos(phi), r * np.sin(phi), z])


def _conical_surface(shape: Shape, n: int) -> NDArray[np.float64]:
    rmin1, rmax1, rmin2, rmax2, hz, sweep = _profile(shape)
    full = _is_full_sweep(sweep)
    phis = np.linspace(0.0, _TWO_PI, n, endpoint=False) if full else np.linspace(0.0, sweep, n)
    zs = np.linspace(-hz, hz, n)
    frac = (zs + hz) / (2.0 * hz)
    rmin_z = rmin1 + (rmin2 - rmin1) * frac
    rmax_z = rmax1 + (rmax2 - rmax1) * frac

    phi_g, idx_g = np.meshgrid(phis, np.arange(n))
    phi_g, idx_g = phi_g.ravel(), idx_g.ravel()
    parts = [_polar(rmax_z[idx_g], phi_g, zs[idx_g])]

    hollow = rmin_z[idx_g] > 0.0
    if hollow.any():
        parts.append(_polar(rmin_z[idx_g][hollow], phi_g[hollow], zs[idx_g][hollow]))

    # End caps
    for z_end, rmin_end, rmax_end in ((-hz, rmin1, rmax1), (hz, rmin2, rmax2)):
        rs = np.linspace(rmin_end, rmax_end, n)
        phi_c, r_c = np.meshgrid(phis, rs)
        parts.append(_polar(r_c.ravel(), phi_c.ravel(), np.full(r_c.size, z_end)))

    # Phi cut faces
    if not full:
        s = np.linspace(0.0, 1.0, n)
        s_g, i_g = np.meshgrid(s, np.arange(n))
        s_g, i_g = s_g.ravel(), i_g.ravel()
        r_face = rmin_z[i_g] + s_g * (rmax_z[i_g] - rmin_z[i_g])
        for phi_edge in (0.0, sweep):
            parts.append(_polar(r_face, np.full(r_face.size, phi_edge), zs[i_g]))

    return np.vstack(parts)


# ---------------------------------------------------------------------------
# Extents
# ---------------------------------------------------------------------------

def local_extent(shape: Shape) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Axis-aligned bounding box (lo, hi) in the solid frame [mm]."""
    if shape.kind is ShapeKind.BOX:
        hi = np.array([shape.half_x, shape.half_y, shape.half_z])
        return -hi, hi
    _, rmax1, _, rmax2, hz, _ = _profile(shape)
    rmax = max(rmax1, rmax2)
    hi = np.array([rmax, rmax, hz])
    return -hi, hi


def transformed_extent(
    shape: Shape, transform: Transform,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Bounding box of a placed solid in its mother frame [mm]."""
    lo, hi = local_extent(shape)
    corners = np.array(
        [[x, y, z] for x in (lo[0], hi[0]) for y in (lo[1], hi[1]) for z in (lo[2], hi[2])]
    )
    moved = transform.apply(corners)
    return moved.min(axis=0), moved.max(axis=0)
