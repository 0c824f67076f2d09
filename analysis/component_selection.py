"""
Component Selection

Choose how many SVD components to keep by fitting nested OLS models

    outcome ~ 1 + C1
    outcome ~ 1 + C1 + C2
    ...
    outcome ~ 1 + C1 + ... + CK

and tracking the gain in adjusted R-squared from each model to the next.
The selected size is the k with the LARGEST GAIN, i.e. the steepest
marginal improvement, which is not necessarily the best absolute fit.
Ties go to the smallest k.
"""

from dataclasses import dataclass
from typing import Union, Optional
import logging
import numpy as np
import pandas as pd
import statsmodels.api as sm

from .errors import InsufficientDataError, NumericError, SchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentSelectionTable:
    """
    Adjusted R-squared per candidate size and the gain over the previous size.

    `frame` is indexed by n_components (1..K) with columns adj_r2 and gain;
    gain is NaN for k = 1.
    """
    frame: pd.DataFrame

    @property
    def max_k(self) -> int:
        return int(self.frame.index.max())

    @property
    def adj_r2(self) -> pd.Series:
        return self.frame['adj_r2']

    @property
    def gains(self) -> pd.Series:
        """Defined gains only (k = 2..K)."""
        return self.frame['gain'].iloc[1:]

    @property
    def chosen_k(self) -> int:
        """k with maximum gain; first occurrence on ties."""
        gains = self.gains
        return int(gains.index[int(np.argmax(gains.to_numpy()))])

    @property
    def best_fit_k(self) -> int:
        """k with maximum adjusted R-squared (for comparison only)."""
        values = self.adj_r2.to_numpy()
        return int(self.adj_r2.index[int(np.argmax(values))])

    def to_frame(self) -> pd.DataFrame:
        """Report table with n_components as a column."""
        return self.frame.reset_index()

    def summary(self) -> str:
        lines = ["Component selection", "=" * 40]
        for k, row in self.frame.iterrows():
            gain = "" if pd.isna(row['gain']) else f" | gain {row['gain']:+.4f}"
            marker = "  <- selected" if k == self.chosen_k else ""
            lines.append(f"  k={k:>3}: adj R2 {row['adj_r2']:.4f}{gain}{marker}")
        return "\n".join(lines)


class ComponentSelector:
    """Nested-model sweep over the number of leading components."""

    def select_cutoff(
        self,
        outcome: Union[np.ndarray, pd.Series],
        U: Union[np.ndarray, pd.DataFrame],
        max_k: Optional[int] = None
    ) -> ComponentSelectionTable:
        """
        Fit outcome ~ first k components for k = 1..max_k.

        Args:
            outcome: Outcome vector (length m)
            U: (m, r) component scores, leading components first
            max_k: Largest model size (None = all r components)

        Returns:
            ComponentSelectionTable

        Raises:
            SchemaError: Outcome and U have different row counts
            InsufficientDataError: max_k > r, max_k < 2, a fit has no
                residual degrees of freedom, or a design is rank-deficient
            NumericError: Non-finite input or adjusted R-squared
        """
        y = np.asarray(outcome, dtype=float).ravel()
        scores = np.asarray(U, dtype=float)

        if scores.ndim != 2:
            raise SchemaError(f"Component scores must be 2-D, got shape {scores.shape}")
        m, r = scores.shape
        if len(y) != m:
            raise SchemaError(f"Outcome has {len(y)} values but component scores have {m} rows")
        if not np.isfinite(y).all():
            raise NumericError("Outcome contains non-finite values")
        if not np.isfinite(scores).all():
            raise NumericError("Component scores contain non-finite values")

        if max_k is None:
            max_k = r
        if max_k > r:
            raise InsufficientDataError(
                f"Requested up to {max_k} components but only {r} are available"
            )
        if max_k < 2:
            raise InsufficientDataError(
                f"At least two candidate sizes are needed to compute a gain, got max_k={max_k}"
            )

        adj_r2 = []
        for k in range(1, max_k + 1):
            adj_r2.append(self._adjusted_r2(y, scores[:, :k], k))

        adj = np.asarray(adj_r2)
        gain = np.full(max_k, np.nan)
        gain[1:] = np.diff(adj)

        frame = pd.DataFrame(
            {'adj_r2': adj, 'gain': gain},
            index=pd.Index(range(1, max_k + 1), name='n_components')
        )
        table = ComponentSelectionTable(frame=frame)
        logger.info(
            f"Component sweep k=1..{max_k}: selected k={table.chosen_k} "
            f"(gain {table.frame.loc[table.chosen_k, 'gain']:+.4f})"
        )
        return table

    def _adjusted_r2(self, y: np.ndarray, predictors: np.ndarray, k: int) -> float:
        """Adjusted R-squared of y ~ 1 + predictors."""
        m = len(y)
        design = sm.add_constant(predictors, has_constant='add')

        if m - design.shape[1] < 1:
            raise InsufficientDataError(
                f"Model with {k} components needs more than {design.shape[1]} observations, have {m}",
                component=k
            )
        if np.linalg.matrix_rank(design) < design.shape[1]:
            raise InsufficientDataError(
                f"Design matrix with {k} components is rank-deficient",
                component=k
            )

        value = float(sm.OLS(y, design).fit().rsquared_adj)
        if not np.isfinite(value):
            raise NumericError(
                f"Adjusted R-squared is undefined for {k} components (constant outcome?)",
                component=k
            )
        return value
