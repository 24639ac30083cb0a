# core/numeric_kernel.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  ImputeGenius — Numeric Kernel                                             ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Transpose / Matrix Product / Matrix-Vector Product                      ║
║  ✓ Gaussian Elimination with Partial Pivoting                              ║
║  ✓ Ordinary Least Squares via Normal Equations (with intercept)            ║
║  ✓ Coefficient of Determination (R²)                                       ║
╚════════════════════════════════════════════════════════════════════════════╝

Pure functions over numpy arrays; no knowledge of datasets or estimators.
A linear system is reported as singular (``None``) when any pivot's
absolute value falls below ``SINGULAR_PIVOT_TOLERANCE``.

Usage:
```python
    from core.numeric_kernel import fit_least_squares

    fit = fit_least_squares(X, y)
    if fit is not None:
        y_hat = fit.predict(X_new)
```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.exceptions import NumericKernelError

__all__ = [
    "SINGULAR_PIVOT_TOLERANCE",
    "LinearFit",
    "transpose",
    "matmul",
    "matvec",
    "solve_linear_system",
    "add_intercept",
    "r_squared",
    "fit_least_squares",
]

# Pivots below this magnitude mean the normal equations have no unique solution
SINGULAR_PIVOT_TOLERANCE: float = 1e-10


# ═══════════════════════════════════════════════════════════════════════════
# Basic Operations
# ═══════════════════════════════════════════════════════════════════════════

def _as_matrix(a, name: str) -> np.ndarray:
    arr = np.asarray(a, dtype=float)
    if arr.ndim != 2:
        raise NumericKernelError(
            f"{name} must be 2-dimensional",
            details={"shape": list(arr.shape)},
        )
    return arr


def _as_vector(v, name: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float)
    if arr.ndim != 1:
        raise NumericKernelError(
            f"{name} must be 1-dimensional",
            details={"shape": list(arr.shape)},
        )
    return arr


def transpose(a) -> np.ndarray:
    """Matrix transpose."""
    return _as_matrix(a, "matrix").T.copy()


def matmul(a, b) -> np.ndarray:
    """Matrix product ``a @ b``."""
    left, right = _as_matrix(a, "left operand"), _as_matrix(b, "right operand")
    if left.shape[1] != right.shape[0]:
        raise NumericKernelError(
            "Inner dimensions do not match",
            details={"left": list(left.shape), "right": list(right.shape)},
        )
    return left @ right


def matvec(a, v) -> np.ndarray:
    """Matrix-vector product ``a @ v``."""
    m, x = _as_matrix(a, "matrix"), _as_vector(v, "vector")
    if m.shape[1] != x.shape[0]:
        raise NumericKernelError(
            "Matrix columns do not match vector length",
            details={"matrix": list(m.shape), "vector": list(x.shape)},
        )
    return m @ x


# ═══════════════════════════════════════════════════════════════════════════
# Linear Systems
# ═══════════════════════════════════════════════════════════════════════════

def solve_linear_system(a, b) -> Optional[np.ndarray]:
    """
    Solve ``a x = b`` by Gaussian elimination with partial pivoting.

    Args:
        a: Square coefficient matrix (n x n)
        b: Right-hand side (n,)

    Returns:
        Solution vector, or None when the system is singular.

    Raises:
        NumericKernelError: On non-square ``a`` or mismatched ``b``.
    """
    m = _as_matrix(a, "coefficient matrix").copy()
    rhs = _as_vector(b, "right-hand side").copy()
    n = m.shape[0]

    if m.shape[1] != n:
        raise NumericKernelError(
            "Coefficient matrix must be square",
            details={"shape": list(m.shape)},
        )
    if rhs.shape[0] != n:
        raise NumericKernelError(
            "Right-hand side length does not match matrix size",
            details={"matrix": list(m.shape), "rhs": list(rhs.shape)},
        )
    if n == 0:
        return np.empty(0)

    # Forward elimination
    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(m[col:, col])))
        if abs(m[pivot_row, col]) < SINGULAR_PIVOT_TOLERANCE:
            return None

        if pivot_row != col:
            m[[col, pivot_row]] = m[[pivot_row, col]]
            rhs[[col, pivot_row]] = rhs[[pivot_row, col]]

        factors = m[col + 1:, col] / m[col, col]
        m[col + 1:, col:] -= np.outer(factors, m[col, col:])
        rhs[col + 1:] -= factors * rhs[col]

    # Back substitution
    x = np.zeros(n)
    for row in range(n - 1, -1, -1):
        x[row] = (rhs[row] - m[row, row + 1:] @ x[row + 1:]) / m[row, row]

    if not np.all(np.isfinite(x)):
        return None
    return x


# ═══════════════════════════════════════════════════════════════════════════
# Least Squares
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LinearFit:
    """Fitted ordinary-least-squares model ``y ≈ intercept + X · slopes``."""

    intercept: float
    slopes: np.ndarray
    r_squared: float
    n_samples: int

    @property
    def coefficients(self) -> np.ndarray:
        """Intercept followed by slopes."""
        return np.concatenate([[self.intercept], self.slopes])

    def predict(self, x) -> np.ndarray:
        """Predict for a matrix of rows (or a single feature vector)."""
        arr = np.asarray(x, dtype=float)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        if arr.shape[1] != self.slopes.shape[0]:
            raise NumericKernelError(
                "Feature count does not match the fitted model",
                details={"expected": int(self.slopes.shape[0]), "got": int(arr.shape[1])},
            )
        return self.intercept + arr @ self.slopes


def add_intercept(x) -> np.ndarray:
    """Prepend a column of ones."""
    m = _as_matrix(x, "design matrix")
    return np.column_stack([np.ones(m.shape[0]), m])


def r_squared(y, y_hat) -> float:
    """
    Coefficient of determination ``1 - SSR/SST`` clipped to [0, 1].

    Returns 0 when the target has no variance.
    """
    actual, predicted = _as_vector(y, "y"), _as_vector(y_hat, "y_hat")
    if actual.shape != predicted.shape:
        raise NumericKernelError(
            "y and y_hat must have the same length",
            details={"y": list(actual.shape), "y_hat": list(predicted.shape)},
        )
    if actual.size == 0:
        return 0.0

    sst = float(np.sum((actual - actual.mean()) ** 2))
    if sst == 0.0:
        return 0.0
    ssr = float(np.sum((actual - predicted) ** 2))
    return float(np.clip(1.0 - ssr / sst, 0.0, 1.0))


def fit_least_squares(x, y) -> Optional[LinearFit]:
    """
    Fit OLS through the normal equations ``(XᵗX) β = Xᵗy`` with an intercept.

    Args:
        x: Feature matrix (n_samples x n_features)
        y: Target vector (n_samples,)

    Returns:
        LinearFit, or None when ``XᵗX`` is singular.
    """
    features = _as_matrix(x, "feature matrix")
    target = _as_vector(y, "target")
    if features.shape[0] != target.shape[0]:
        raise NumericKernelError(
            "Feature rows do not match target length",
            details={"features": list(features.shape), "target": list(target.shape)},
        )

    design = add_intercept(features)
    xt = transpose(design)
    beta = solve_linear_system(matmul(xt, design), matvec(xt, target))
    if beta is None:
        return None

    y_hat = matvec(design, beta)
    return LinearFit(
        intercept=float(beta[0]),
        slopes=beta[1:].copy(),
        r_squared=r_squared(target, y_hat),
        n_samples=int(target.shape[0]),
    )
