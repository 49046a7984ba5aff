from __future__ import annotations

import math
from typing import TypeAlias

import numpy as np


Matrix: TypeAlias = np.ndarray
Components: TypeAlias = tuple[float, float, float, float, float, float]

_SINGULAR_EPSILON = 1e-12


def identity() -> Matrix:
    return np.eye(3, dtype=np.float64)


def from_components(a: float, b: float, c: float, d: float, e: float, f: float) -> Matrix:
    """Builds the affine matrix for the canvas ``transform(a, b, c, d, e, f)`` argument order."""
    return np.array(
        [
            [float(a), float(c), float(e)],
            [float(b), float(d), float(f)],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def components(matrix: Matrix) -> Components:
    return (
        float(matrix[0, 0]),
        float(matrix[1, 0]),
        float(matrix[0, 1]),
        float(matrix[1, 1]),
        float(matrix[0, 2]),
        float(matrix[1, 2]),
    )


def translation(tx: float, ty: float) -> Matrix:
    return from_components(1.0, 0.0, 0.0, 1.0, tx, ty)


def scaling(sx: float, sy: float) -> Matrix:
    return from_components(sx, 0.0, 0.0, sy, 0.0, 0.0)


def rotation(radians: float) -> Matrix:
    cos_a = math.cos(radians)
    sin_a = math.sin(radians)
    return from_components(cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0)


def determinant(matrix: Matrix) -> float:
    return float(matrix[0, 0] * matrix[1, 1] - matrix[0, 1] * matrix[1, 0])


def is_invertible(matrix: Matrix) -> bool:
    return abs(determinant(matrix)) > _SINGULAR_EPSILON


def invert(matrix: Matrix) -> Matrix:
    if not is_invertible(matrix):
        raise ValueError("transform matrix is singular")
    return np.linalg.inv(matrix)


def apply_point(matrix: Matrix, x: float, y: float) -> tuple[float, float]:
    px = matrix[0, 0] * x + matrix[0, 1] * y + matrix[0, 2]
    py = matrix[1, 0] * x + matrix[1, 1] * y + matrix[1, 2]
    return (float(px), float(py))


def apply_points(matrix: Matrix, points: np.ndarray) -> np.ndarray:
    """Maps an ``(n, 2)`` array of points through ``matrix``."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    return pts @ matrix[:2, :2].T + matrix[:2, 2]
