"""
Statistical Analysis

- Effect extraction: significant and trending coefficients of a fitted
  linear model
- Group comparison: each feature between the 'for' and 'against' sides,
  Mann-Whitney U (default) or Welch t-test, with multiple comparison
  correction and effect sizes
"""

from typing import List, Dict, Optional, Tuple, Any, NamedTuple
import warnings
import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.multitest import multipletests

NONPARAMETRIC_TESTS = ('mannwhitney', 'mannwhitneyu', 'mann-whitney')
PARAMETRIC_TESTS = ('ttest', 't-test', 't_test')
GROUP_TESTS = NONPARAMETRIC_TESTS + PARAMETRIC_TESTS

# Method names accepted by statsmodels multipletests
CORRECTION_METHODS = (
    'bonferroni', 'sidak', 'holm-sidak', 'holm', 'simes-hochberg',
    'hommel', 'fdr_bh', 'fdr_by', 'fdr_tsbh', 'fdr_tsbky',
)


class Effect(NamedTuple):
    predictor: str
    coefficient: float
    p_value: float


class EffectExtractor:
    """
    Filter a fitted model's coefficient table by p-value.

    Works on any result exposing a `coefficients` DataFrame with
    'predictor', 'coefficient' and 'p_value' columns
    (models.linear.LinearModelResult). Nothing is refitted.
    """

    def __init__(self, include_intercept: bool = True, intercept_name: str = 'Intercept'):
        self.include_intercept = include_intercept
        self.intercept_name = intercept_name

    def _rows(self, model: Any) -> pd.DataFrame:
        table = model.coefficients
        for col in ('predictor', 'coefficient', 'p_value'):
            if col not in table.columns:
                raise ValueError(f"Coefficient table is missing column '{col}'")
        if not self.include_intercept:
            table = table[table['predictor'] != self.intercept_name]
        return table

    def _effects(self, table: pd.DataFrame) -> List[Effect]:
        return [
            Effect(str(row.predictor), float(row.coefficient), float(row.p_value))
            for row in table.itertuples(index=False)
        ]

    def significant_effects(self, model: Any, threshold: float = 0.05) -> List[Effect]:
        """Coefficients with p <= threshold."""
        table = self._rows(model)
        return self._effects(table[table['p_value'] <= threshold])

    def trending_effects(self, model: Any, lower: float = 0.05, upper: float = 0.10) -> List[Effect]:
        """Coefficients with lower < p <= upper."""
        if lower >= upper:
            raise ValueError(f"lower ({lower}) must be below upper ({upper})")
        table = self._rows(model)
        mask = (table['p_value'] > lower) & (table['p_value'] <= upper)
        return self._effects(table[mask])

    def effects_frame(
        self,
        model: Any,
        threshold: float = 0.05,
        trend_upper: float = 0.10
    ) -> pd.DataFrame:
        """Significant and trending effects as one table with a 'level' column."""
        rows = []
        for effect in self.significant_effects(model, threshold):
            rows.append({**effect._asdict(), 'level': 'significant'})
        for effect in self.trending_effects(model, threshold, trend_upper):
            rows.append({**effect._asdict(), 'level': 'trend'})
        return pd.DataFrame(rows, columns=['predictor', 'coefficient', 'p_value', 'level'])


class GroupComparison:
    """
    Compare feature distributions between the two debate sides.

    Args:
        test: 'mannwhitney' (default) or 'ttest' (Welch)
        correction_method: statsmodels multipletests method, or None
        alpha: Significance threshold on corrected p-values
    """

    def __init__(
        self,
        test: str = 'mannwhitney',
        correction_method: Optional[str] = 'fdr_bh',
        alpha: float = 0.05
    ):
        test = test.lower()
        if test in NONPARAMETRIC_TESTS:
            self.test_name = 'Mann-Whitney U'
            self.parametric = False
        elif test in PARAMETRIC_TESTS:
            self.test_name = 't-test'
            self.parametric = True
        else:
            raise ValueError(f"Unknown test: {test}")
        if correction_method is not None and correction_method not in CORRECTION_METHODS:
            raise ValueError(f"Unknown correction method: {correction_method}")
        self.correction_method = correction_method
        self.alpha = alpha

    def _test(self, group1: np.ndarray, group2: np.ndarray) -> Tuple[float, float]:
        if self.parametric:
            if len(group1) < 2 or len(group2) < 2:
                return np.nan, np.nan
            stat, pval = stats.ttest_ind(group1, group2, equal_var=False)
            return float(stat), float(pval)

        if len(group1) < 1 or len(group2) < 1:
            return np.nan, np.nan
        try:
            stat, pval = stats.mannwhitneyu(group1, group2, alternative='two-sided')
            return float(stat), float(pval)
        except ValueError:
            # All values identical
            return np.nan, 1.0

    def compare_groups(
        self,
        features_df: pd.DataFrame,
        labels: np.ndarray,
        feature_names: Optional[List[str]] = None
    ) -> pd.DataFrame:
        """
        Compare each feature between two groups.

        Args:
            features_df: Rows = speakers, columns = features
            labels: Group label per row (exactly two distinct values)
            feature_names: Features to compare (None = all numeric)

        Returns:
            DataFrame with feature_name, per-group mean/std/n, test_statistic,
            p_value, p_value_corrected, effect_size, significant, test_used
        """
        labels = np.asarray(labels)
        if feature_names is None:
            feature_names = features_df.select_dtypes(include=[np.number]).columns.tolist()

        if len(labels) != len(features_df):
            raise ValueError(
                f"Labels length ({len(labels)}) must match features length ({len(features_df)})"
            )

        unique_labels = sorted(l for l in pd.unique(labels) if not pd.isna(l))
        if len(unique_labels) != 2:
            raise ValueError(f"Need exactly 2 groups for comparison, got {unique_labels}")
        label1, label2 = unique_labels

        results = []
        for feature_name in feature_names:
            if feature_name not in features_df.columns:
                warnings.warn(f"Feature '{feature_name}' not in DataFrame, skipping")
                continue

            values = features_df[feature_name].to_numpy(dtype=float)
            group1 = values[labels == label1]
            group2 = values[labels == label2]
            group1 = group1[~np.isnan(group1)]
            group2 = group2[~np.isnan(group2)]

            stat, pval = self._test(group1, group2)
            results.append({
                'feature_name': feature_name,
                'group1_label': label1,
                'group1_mean': np.mean(group1) if len(group1) else np.nan,
                'group1_std': np.std(group1) if len(group1) else np.nan,
                'group1_n': len(group1),
                'group2_label': label2,
                'group2_mean': np.mean(group2) if len(group2) else np.nan,
                'group2_std': np.std(group2) if len(group2) else np.nan,
                'group2_n': len(group2),
                'test_statistic': stat,
                'p_value': pval,
                'effect_size': self.compute_effect_size(group1, group2),
                'test_used': self.test_name
            })

        results_df = pd.DataFrame(results)
        if len(results_df) == 0:
            return results_df

        results_df['p_value_corrected'] = self.correct_multiple_comparisons(results_df['p_value'].to_numpy())
        results_df['significant'] = results_df['p_value_corrected'] < self.alpha
        return results_df

    def correct_multiple_comparisons(self, p_values: np.ndarray) -> np.ndarray:
        """Corrected p-values; NaN entries are left untouched."""
        p_vals = np.asarray(p_values, dtype=float).copy()
        if self.correction_method is None:
            return p_vals

        valid_mask = ~np.isnan(p_vals)
        if not np.any(valid_mask):
            return p_vals

        _, corrected, _, _ = multipletests(p_vals[valid_mask], method=self.correction_method)
        p_vals[valid_mask] = corrected
        return p_vals

    def compute_effect_size(self, group1: np.ndarray, group2: np.ndarray) -> float:
        """Cohen's d for the t-test, rank-biserial correlation otherwise."""
        if len(group1) < 1 or len(group2) < 1:
            return np.nan
        if self.parametric:
            return self._cohens_d(group1, group2)
        return self._rank_biserial(group1, group2)

    @staticmethod
    def _cohens_d(group1: np.ndarray, group2: np.ndarray) -> float:
        n1, n2 = len(group1), len(group2)
        if n1 < 2 or n2 < 2:
            return np.nan
        pooled = np.sqrt(((n1 - 1) * np.var(group1, ddof=1) + (n2 - 1) * np.var(group2, ddof=1)) / (n1 + n2 - 2))
        if pooled == 0:
            return 0.0
        return float((np.mean(group1) - np.mean(group2)) / pooled)

    @staticmethod
    def _rank_biserial(group1: np.ndarray, group2: np.ndarray) -> float:
        try:
            u_stat, _ = stats.mannwhitneyu(group1, group2, alternative='two-sided')
        except ValueError:
            return 0.0
        return float(1 - 2 * u_stat / (len(group1) * len(group2)))

    def significant_features(self, results: pd.DataFrame) -> Dict[str, float]:
        """feature -> corrected p-value for significant rows."""
        if len(results) == 0:
            return {}
        hits = results[results['significant']]
        return dict(zip(hits['feature_name'], hits['p_value_corrected']))
