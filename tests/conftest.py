"""Shared mesh builders for the mesh2brick tests."""
from __future__ import annotations

import numpy as np
import pytest

from mesh2brick.catalog import Footprint
from mesh2brick.geometry import Mesh


def make_box_triangles(lo=(0.0, 0.0, 0.0), hi=(1.0, 1.0, 1.0)) -> np.ndarray:
    """12-triangle watertight box [lo, hi], outward winding."""
    x0, y0, z0 = lo
    x1, y1, z1 = hi
    verts = np.array([
        [x0, y0, z0], [x1, y0, z0], [x1, y1, z0], [x0, y1, z0],
        [x0, y0, z1], [x1, y0, z1], [x1, y1, z1], [x0, y1, z1],
    ], dtype=np.float64)
    face_indices = [
        (0, 2, 1), (0, 3, 2),   # -Z
        (4, 5, 6), (4, 6, 7),   # +Z
        (0, 4, 7), (0, 7, 3),   # -X
        (1, 2, 6), (1, 6, 5),   # +X
        (0, 1, 5), (0, 5, 4),   # -Y
        (3, 7, 6), (3, 6, 2),   # +Y
    ]
    return np.array([[verts[i], verts[j], verts[k]] for i, j, k in face_indices],
                    dtype=np.float64)


def make_pyramid_triangles(base: float = 4.0, apex_height: float = 3.0) -> np.ndarray:
    """Square pyramid on [0, base]² at z=0, apex over the centre."""
    a = np.array([0.0, 0.0, 0.0])
    b = np.array([base, 0.0, 0.0])
    c = np.array([base, base, 0.0])
    d = np.array([0.0, base, 0.0])
    apex = np.array([base / 2, base / 2, apex_height])
    return np.array([
        [a, c, b], [a, d, c],             # base, facing -Z
        [a, b, apex], [b, c, apex],
        [c, d, apex], [d, a, apex],
    ], dtype=np.float64)


def make_uv_sphere_triangles(radius: float = 1.0, n_lat: int = 16, n_lon: int = 32) -> np.ndarray:
    """Closed latitude/longitude sphere centred on the origin."""
    theta = np.linspace(0.0, np.pi, n_lat + 1)
    phi   = np.linspace(0.0, 2.0 * np.pi, n_lon + 1)[:-1]

    def vert(i, j):
        t, p = theta[i], phi[j % n_lon]
        return radius * np.array([np.sin(t) * np.cos(p), np.sin(t) * np.sin(p), np.cos(t)])

    tris = []
    for i in range(n_lat):
        for j in range(n_lon):
            p00, p01 = vert(i, j), vert(i, j + 1)
            p10, p11 = vert(i + 1, j), vert(i + 1, j + 1)
            if i > 0:
                tris.append([p00, p10, p01])
            if i < n_lat - 1:
                tris.append([p01, p10, p11])
    return np.array(tris, dtype=np.float64)


@pytest.fixture
def unit_cube() -> Mesh:
    return Mesh.from_array(make_box_triangles())


@pytest.fixture
def pyramid() -> Mesh:
    return Mesh.from_array(make_pyramid_triangles())


@pytest.fixture
def sphere() -> Mesh:
    return Mesh.from_array(make_uv_sphere_triangles())


@pytest.fixture
def standard_footprints() -> list:
    """The footprint list the bundled catalog produces."""
    return [
        Footprint(2, 8), Footprint(2, 6), Footprint(2, 4), Footprint(1, 8),
        Footprint(2, 3), Footprint(1, 6), Footprint(2, 2), Footprint(1, 4),
        Footprint(1, 3), Footprint(2, 1), Footprint(1, 1),
    ]
