"""Internal ray-casting math for triangulated meshes.

All symbols here are private (underscore-prefixed).  Users should import
only from :mod:`mesh2brick.voxelize`.

Algorithms
----------
Ray–triangle test — Möller–Trumbore.
    Rays nearly parallel to the triangle plane (``|det| < _EPSILON``) are
    rejected, as are hits whose barycentric coordinates fall outside
    ``[-_EPSILON, 1 + _EPSILON]`` and hits at or behind the origin
    (``t <= _EPSILON``).  Tolerances are fixed constants.

Row crossings — Möller–Trumbore specialised to the +X direction.
    With ``dir = (1, 0, 0)`` the barycentric coordinates ``u, v`` depend only
    on the ray's ``(y, z)`` and the hit abscissa ``x_hit = v0.x + u*e1.x +
    v*e2.x`` does not depend on the origin at all.  One solve per triangle
    per ``(y, z)`` row therefore serves every sample along that row: a sample
    at ``x`` is crossed when ``x_hit - x > _EPSILON``.

Complexity: O(F × R²) row solves plus O(R³) counting, where F = triangles
and R = samples per axis.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

_EPSILON: float = 1e-9

_RAY_DIR: np.ndarray = np.array([1.0, 0.0, 0.0], dtype=np.float64)

# Slack added around a triangle's (y, z) box before row culling; wider than
# any point the barycentric tolerance can still accept.
_CULL_PAD: float = 1e-6


# ---------------------------------------------------------------------------
# Point-wise test, arbitrary direction
# ---------------------------------------------------------------------------

def _ray_triangle_hits(
    P: np.ndarray,
    tri: np.ndarray,
    ray_dir: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Return ``(N,)`` int32: 1 where the ray from each point hits *tri*, 0 otherwise.

    Parameters
    ----------
    P:
        ``(N, 3)`` ray origins.
    tri:
        ``(3, 3)`` triangle vertices ``[v0, v1, v2]``.
    ray_dir:
        ``(3,)`` direction shared by all rays; defaults to +X.
    """
    if ray_dir is None:
        ray_dir = _RAY_DIR
    v0, v1, v2 = tri[0], tri[1], tri[2]
    e1  = v1 - v0
    e2  = v2 - v0
    h   = np.cross(ray_dir, e2)
    det = float(e1 @ h)

    if abs(det) < _EPSILON:
        return np.zeros(len(P), dtype=np.int32)

    inv_det = 1.0 / det
    s = P - v0
    u = inv_det * (s @ h)
    q = np.cross(s, e1)
    v = inv_det * (q @ ray_dir)
    t = inv_det * (q @ e2)

    hit = (
        (u >= -_EPSILON) & (u <= 1.0 + _EPSILON)
        & (v >= -_EPSILON) & ((u + v) <= 1.0 + _EPSILON)
        & (t > _EPSILON)
    )
    return hit.astype(np.int32)


def _points_inside(P: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Parity test for ``(N, 3)`` points against ``(F, 3, 3)`` triangles (+X rays)."""
    P    = np.asarray(P, dtype=np.float64).reshape(-1, 3)
    hits = np.zeros(len(P), dtype=np.int32)
    for tri in np.asarray(triangles, dtype=np.float64):
        hits += _ray_triangle_hits(P, tri)
    return hits % 2 == 1


# ---------------------------------------------------------------------------
# Row solve, +X direction
# ---------------------------------------------------------------------------

def _row_crossings(
    oy: np.ndarray,
    oz: np.ndarray,
    tri: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Intersect +X rays with origins ``(*, oy, oz)`` against one triangle.

    Returns
    -------
    (accepted, x_hit)
        ``accepted`` is a boolean mask shaped like *oy*; ``x_hit`` holds the
        abscissa of the hit (meaningless where not accepted).
    """
    v0, v1, v2 = tri[0], tri[1], tri[2]
    e1 = v1 - v0
    e2 = v2 - v0

    # h = dir x e2 = (0, -e2.z, e2.y)
    det = e1[2] * e2[1] - e1[1] * e2[2]
    if abs(det) < _EPSILON:
        empty = np.zeros(np.shape(oy), dtype=bool)
        return empty, np.zeros(np.shape(oy))

    inv_det = 1.0 / det
    sy = oy - v0[1]
    sz = oz - v0[2]
    u = inv_det * (sz * e2[1] - sy * e2[2])
    # q.x = s.y * e1.z - s.z * e1.y
    v = inv_det * (sy * e1[2] - sz * e1[1])

    accepted = (
        (u >= -_EPSILON) & (u <= 1.0 + _EPSILON)
        & (v >= -_EPSILON) & ((u + v) <= 1.0 + _EPSILON)
    )
    x_hit = v0[0] + u * e1[0] + v * e2[0]
    return accepted, x_hit


def _parity_grid(
    triangles: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    zs: np.ndarray,
) -> np.ndarray:
    """Inside/outside flags for every sample ``(xs[i], ys[j], zs[k])``.

    *xs*, *ys*, *zs* must be sorted ascending.  Returns a boolean array of
    shape ``(len(xs), len(ys), len(zs))`` indexed ``[i, j, k]``.
    """
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    zs = np.asarray(zs, dtype=np.float64)
    Y, Z = np.meshgrid(ys, zs, indexing="ij")           # (ny, nz)
    hits = np.zeros((len(ys), len(zs), len(xs)), dtype=np.int32)

    for tri in np.asarray(triangles, dtype=np.float64):
        lo  = tri.min(axis=0)
        hi  = tri.max(axis=0)
        pad = _CULL_PAD * (1.0 + max(hi[1] - lo[1], hi[2] - lo[2]))
        j0 = np.searchsorted(ys, lo[1] - pad, side="left")
        j1 = np.searchsorted(ys, hi[1] + pad, side="right")
        k0 = np.searchsorted(zs, lo[2] - pad, side="left")
        k1 = np.searchsorted(zs, hi[2] + pad, side="right")
        if j0 >= j1 or k0 >= k1:
            continue

        accepted, x_hit = _row_crossings(Y[j0:j1, k0:k1], Z[j0:j1, k0:k1], tri)
        if not accepted.any():
            continue

        block = hits[j0:j1, k0:k1]                       # view into hits
        block[accepted] += (x_hit[accepted][:, None] - xs[None, :]) > _EPSILON

    return (hits % 2 == 1).transpose(2, 0, 1)
