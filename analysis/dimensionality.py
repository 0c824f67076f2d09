"""
Dimensionality Reduction

Singular value decomposition of the entropy-weighted feature matrix.

    X = U diag(s) V^T

U holds orthonormal component scores (rows = observations), s the singular
values in descending order and V the feature loadings (rows = features).
Components are labelled C1..Cr.
"""

from dataclasses import dataclass
from typing import Optional, List, Union, Any
import logging
import numpy as np
import pandas as pd
from scipy import linalg
from sklearn.utils.extmath import svd_flip

from .errors import NumericError, InsufficientDataError

logger = logging.getLogger(__name__)


def component_names(n: int) -> List[str]:
    """Component labels C1..Cn."""
    return [f"C{i + 1}" for i in range(n)]


@dataclass(frozen=True)
class DecompositionResult:
    """
    Thin SVD of an m x n matrix.

    Attributes:
        U: (m, r) left singular vectors, orthonormal columns
        singular_values: (r,) non-negative, descending
        V: (n, r) right singular vectors (feature loadings)
        feature_names: Names of the n original features
        index: Row labels of the m observations
    """
    U: np.ndarray
    singular_values: np.ndarray
    V: np.ndarray
    feature_names: List[str]
    index: pd.Index

    @property
    def n_components(self) -> int:
        return int(self.singular_values.shape[0])

    @property
    def component_names(self) -> List[str]:
        return component_names(self.n_components)

    @property
    def scores(self) -> pd.DataFrame:
        """U as a DataFrame (observations x components)."""
        return pd.DataFrame(self.U, index=self.index, columns=self.component_names)

    @property
    def loadings(self) -> pd.DataFrame:
        """V as a DataFrame (features x components)."""
        return pd.DataFrame(self.V, index=self.feature_names, columns=self.component_names)

    @property
    def explained_variance_ratio(self) -> np.ndarray:
        """Share of total squared singular value per component."""
        squared = self.singular_values ** 2
        total = squared.sum()
        if total == 0:
            return np.zeros_like(squared)
        return squared / total

    def reconstruct(self) -> np.ndarray:
        """U diag(s) V^T."""
        return (self.U * self.singular_values) @ self.V.T

    def project(self, matrix: Union[np.ndarray, pd.DataFrame], n_components: Optional[int] = None) -> pd.DataFrame:
        """
        Map new rows onto the leading fitted components: X V_k diag(s_k)^-1.

        For the rows the decomposition was fitted on this returns U[:, :k].

        Args:
            matrix: Rows to project, same features as the fitted matrix
            n_components: Number of leading components k (None = all)

        Raises:
            NumericError: Non-finite input, or a zero singular value among
                the leading k
            ValueError: Column count does not match the fitted features,
                or k is outside 1..n_components
        """
        k = self.n_components if n_components is None else n_components
        if not 1 <= k <= self.n_components:
            raise ValueError(f"n_components must be between 1 and {self.n_components}, got {k}")

        if isinstance(matrix, pd.DataFrame):
            index = matrix.index
            matrix = matrix[self.feature_names].to_numpy(dtype=float)
        else:
            matrix = np.asarray(matrix, dtype=float)
            index = pd.RangeIndex(matrix.shape[0])

        if matrix.ndim != 2 or matrix.shape[1] != len(self.feature_names):
            raise ValueError(
                f"Expected {len(self.feature_names)} feature columns, got shape {matrix.shape}"
            )
        if not np.isfinite(matrix).all():
            raise NumericError("Matrix to project contains non-finite values")

        leading = self.singular_values[:k]
        if np.any(leading == 0):
            zero = int(np.argmax(leading == 0)) + 1
            raise NumericError(
                "Cannot project onto a component with zero singular value",
                component=zero
            )

        scores = (matrix @ self.V[:, :k]) / leading
        return pd.DataFrame(scores, index=index, columns=self.component_names[:k])

    def singular_value_table(self) -> pd.DataFrame:
        """One row per component: singular value and variance share."""
        ratio = self.explained_variance_ratio
        return pd.DataFrame({
            'component': range(1, self.n_components + 1),
            'singular_value': self.singular_values,
            'explained_variance': ratio,
            'cumulative_variance': np.cumsum(ratio)
        })

    def summary(self) -> str:
        lines = [
            "SVD Summary",
            "=" * 40,
            f"Observations: {self.U.shape[0]}",
            f"Features: {len(self.feature_names)}",
            f"Components: {self.n_components}",
            "",
        ]
        ratio = self.explained_variance_ratio
        for i, (s, r, c) in enumerate(zip(self.singular_values, ratio, np.cumsum(ratio))):
            lines.append(f"  C{i + 1}: s={s:.4f} | {r * 100:.1f}% | Cumulative: {c * 100:.1f}%")
        return "\n".join(lines)


class Decomposer:
    """
    SVD of a feature matrix.

    Sign of each component is fixed so that the largest-magnitude entry of
    each U column is positive; reconstruction is unaffected.
    """

    def __init__(self, n_components: Optional[int] = None):
        """
        Args:
            n_components: Cap on retained components (None = min(m, n))
        """
        self.n_components = n_components

    def decompose(
        self,
        matrix: Union[np.ndarray, pd.DataFrame, Any],
        n_components: Optional[int] = None,
        feature_names: Optional[List[str]] = None
    ) -> DecompositionResult:
        """
        Decompose an m x n matrix.

        Args:
            matrix: Array, DataFrame, or EntropyWeightedMatrix
            n_components: Overrides the instance cap
            feature_names: Names for array input (default feature_0..)

        Returns:
            DecompositionResult

        Raises:
            NumericError: If the matrix contains NaN or Inf
            InsufficientDataError: Empty matrix, or cap > min(m, n)
        """
        # EntropyWeightedMatrix
        if hasattr(matrix, 'values') and isinstance(getattr(matrix, 'values'), pd.DataFrame):
            matrix = matrix.values

        if isinstance(matrix, pd.DataFrame):
            feature_names = [str(c) for c in matrix.columns]
            index = matrix.index
            X = matrix.to_numpy(dtype=float)
        else:
            X = np.asarray(matrix, dtype=float)
            if X.ndim != 2:
                raise ValueError(f"Expected a 2-D matrix, got shape {X.shape}")
            index = pd.RangeIndex(X.shape[0])
            if feature_names is None:
                feature_names = [f"feature_{i}" for i in range(X.shape[1])]

        m, n = X.shape
        if m == 0 or n == 0:
            raise InsufficientDataError(f"Cannot decompose an empty matrix of shape {X.shape}")

        bad = ~np.isfinite(X)
        if bad.any():
            col = int(np.argmax(bad.any(axis=0)))
            raise NumericError(
                f"Matrix contains {int(bad.sum())} non-finite value(s)",
                column=feature_names[col]
            )

        cap = n_components if n_components is not None else self.n_components
        r_max = min(m, n)
        if cap is not None:
            if cap < 1:
                raise ValueError(f"n_components must be at least 1, got {cap}")
            if cap > r_max:
                raise InsufficientDataError(
                    f"Requested {cap} components but a {m}x{n} matrix has at most {r_max}"
                )

        U, s, Vt = linalg.svd(X, full_matrices=False)
        U, Vt = svd_flip(U, Vt)

        r = cap if cap is not None else r_max
        logger.debug(f"SVD of {m}x{n} matrix, keeping {r} of {r_max} components")

        return DecompositionResult(
            U=U[:, :r],
            singular_values=s[:r],
            V=Vt[:r].T,
            feature_names=list(feature_names),
            index=index
        )
