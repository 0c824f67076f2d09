"""
Linear Models

OLS fitting through statsmodels, returned as a typed result so downstream
code reads coefficients and p-values directly instead of parsing printed
summaries.
"""

from dataclasses import dataclass
from typing import Union, List, Optional
import numpy as np
import pandas as pd
import statsmodels.api as sm

from analysis.errors import InsufficientDataError, NumericError, SchemaError

INTERCEPT = 'Intercept'


@dataclass(frozen=True)
class LinearModelResult:
    """
    Fitted OLS model.

    Attributes:
        coefficients: One row per predictor with columns predictor,
            coefficient, std_error, t_value, p_value (intercept first)
        r2: R-squared
        adj_r2: Adjusted R-squared
        n_obs: Number of observations
        df_resid: Residual degrees of freedom
    """
    coefficients: pd.DataFrame
    r2: float
    adj_r2: float
    n_obs: int
    df_resid: int

    @property
    def predictors(self) -> List[str]:
        return self.coefficients['predictor'].tolist()

    def coefficient(self, predictor: str) -> float:
        row = self.coefficients[self.coefficients['predictor'] == predictor]
        if row.empty:
            raise KeyError(predictor)
        return float(row['coefficient'].iloc[0])

    def predict(self, X: Union[np.ndarray, pd.DataFrame]) -> np.ndarray:
        """Linear prediction for new rows (same predictor order, no intercept column)."""
        X = np.asarray(X, dtype=float)
        beta = self.coefficients['coefficient'].to_numpy()
        return beta[0] + X @ beta[1:]

    def summary(self) -> str:
        lines = [
            "OLS Summary",
            "=" * 40,
            f"Observations: {self.n_obs} | df resid: {self.df_resid}",
            f"R2: {self.r2:.4f} | adj R2: {self.adj_r2:.4f}",
            "",
        ]
        for row in self.coefficients.itertuples(index=False):
            lines.append(
                f"  {row.predictor:<24} {row.coefficient:+.4f} (se {row.std_error:.4f}, p={row.p_value:.4f})"
            )
        return "\n".join(lines)


class LinearModelFitter:
    """OLS with an intercept."""

    def fit(
        self,
        X: Union[np.ndarray, pd.DataFrame],
        y: Union[np.ndarray, pd.Series],
        predictor_names: Optional[List[str]] = None
    ) -> LinearModelResult:
        """
        Fit y ~ 1 + X.

        Raises:
            SchemaError: Row counts differ
            NumericError: Non-finite inputs
            InsufficientDataError: No residual degrees of freedom or
                rank-deficient design
        """
        if isinstance(X, pd.DataFrame):
            predictor_names = [str(c) for c in X.columns]
            X = X.to_numpy(dtype=float)
        else:
            X = np.asarray(X, dtype=float)
            if X.ndim == 1:
                X = X.reshape(-1, 1)
            if predictor_names is None:
                predictor_names = [f"x{i + 1}" for i in range(X.shape[1])]

        y = np.asarray(y, dtype=float).ravel()
        if len(y) != X.shape[0]:
            raise SchemaError(f"Outcome has {len(y)} values but predictors have {X.shape[0]} rows")
        if not (np.isfinite(X).all() and np.isfinite(y).all()):
            raise NumericError("Linear model inputs contain non-finite values")

        design = sm.add_constant(X, has_constant='add')
        if design.shape[0] - design.shape[1] < 1:
            raise InsufficientDataError(
                f"{design.shape[1]} parameters need more than {design.shape[0]} observations"
            )
        if np.linalg.matrix_rank(design) < design.shape[1]:
            raise InsufficientDataError("Design matrix is rank-deficient")

        fit = sm.OLS(y, design).fit()

        coefficients = pd.DataFrame({
            'predictor': [INTERCEPT] + list(predictor_names),
            'coefficient': np.asarray(fit.params),
            'std_error': np.asarray(fit.bse),
            't_value': np.asarray(fit.tvalues),
            'p_value': np.asarray(fit.pvalues)
        })

        return LinearModelResult(
            coefficients=coefficients,
            r2=float(fit.rsquared),
            adj_r2=float(fit.rsquared_adj),
            n_obs=int(fit.nobs),
            df_resid=int(fit.df_resid)
        )
