"""Dense linear solver for the small systems produced by the models.

Polynomial normal equations are at most 4x4 and Yule-Walker systems are the
size of the AR order.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from forecast_engine.core.exceptions import SingularMatrixError

PIVOT_TOLERANCE = 1e-10


def solve(
    a: np.ndarray[Any, np.dtype[np.floating[Any]]] | list[list[float]],
    b: np.ndarray[Any, np.dtype[np.floating[Any]]] | list[float],
) -> np.ndarray[Any, np.dtype[np.floating[Any]]]:
    """Solve ``a @ x = b`` by Gaussian elimination with partial pivoting.

    At each column the row with the largest absolute pivot candidate is
    swapped into place before elimination.

    Args:
        a: Square coefficient matrix of shape [n, n].
        b: Right-hand side vector of shape [n].

    Returns:
        Solution vector of shape [n].

    Raises:
        ValueError: If shapes are inconsistent.
        SingularMatrixError: If a pivot magnitude falls below 1e-10.
    """
    matrix = np.array(a, dtype=np.float64)
    rhs = np.array(b, dtype=np.float64)

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Coefficient matrix must be square, got shape {matrix.shape}")
    n = matrix.shape[0]
    if rhs.shape != (n,):
        raise ValueError(f"Right-hand side must have shape ({n},), got {rhs.shape}")

    augmented = np.column_stack([matrix, rhs])

    # Forward elimination
    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

        pivot = augmented[col, col]
        if abs(pivot) < PIVOT_TOLERANCE:
            raise SingularMatrixError(
                "Matrix is singular; the system has no unique solution",
                details={"column": col, "pivot": float(pivot), "size": n},
            )

        for row in range(col + 1, n):
            factor = augmented[row, col] / pivot
            augmented[row, col:] -= factor * augmented[col, col:]

    # Back substitution
    x = np.zeros(n, dtype=np.float64)
    for row in range(n - 1, -1, -1):
        residual = augmented[row, n] - float(np.dot(augmented[row, row + 1 : n], x[row + 1 :]))
        x[row] = residual / augmented[row, row]

    return x
