"""
Entropy Weighting

Local x global reweighting of proportional LIWC features, analogous to
tf-idf: rare-on-average categories are amplified, common ones damped.

For column c with values p on a 0..S scale:

    w_c     = -ln(mean(p / S))
    t[i, c] = (p[i] / S) * w_c

The transform is column-local and must be applied to the original
proportions, never to its own output.
"""

from dataclasses import dataclass
from typing import List, Optional, Union, Any, Sequence
import logging
import numpy as np
import pandas as pd

from .errors import SchemaError, DegenerateColumnError
from .feature_selector import as_frame

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 100.0


@dataclass(frozen=True)
class EntropyWeightedMatrix:
    """Reweighted feature matrix plus the global weights that produced it."""
    values: pd.DataFrame
    weights: pd.Series
    scale: float

    @property
    def columns(self) -> List[str]:
        return self.values.columns.tolist()

    @property
    def shape(self):
        return self.values.shape

    def to_numpy(self) -> np.ndarray:
        return self.values.to_numpy(dtype=float)


class EntropyTransformer:
    """
    Entropy (tf-idf-like) transform of proportional features.

    Args:
        scale: Normalising constant S; proportions are divided by it
               before averaging (100 for percentages)
    """

    def __init__(self, scale: float = DEFAULT_SCALE):
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = float(scale)

    def _validated_block(self, table: Union[pd.DataFrame, Any], columns: Sequence[str]) -> pd.DataFrame:
        """Check presence, type, completeness and sign of the requested columns."""
        df = as_frame(table)
        columns = list(columns)

        if not columns:
            raise SchemaError("No columns selected for entropy transform")

        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise SchemaError(f"Column(s) not found in table: {missing}", column=missing[0])

        for column in columns:
            if not pd.api.types.is_numeric_dtype(df[column]) or pd.api.types.is_bool_dtype(df[column]):
                raise SchemaError(f"Column '{column}' is not numeric", column=column)
            if df[column].isna().any():
                raise SchemaError(
                    f"Column '{column}' has {int(df[column].isna().sum())} missing values",
                    column=column
                )
            if not np.isfinite(df[column].to_numpy(dtype=float)).all():
                raise SchemaError(f"Column '{column}' contains infinite values", column=column)
            if (df[column] < 0).any():
                raise SchemaError(
                    f"Column '{column}' contains negative proportions; "
                    f"entropy weighting needs non-negative input",
                    column=column
                )

        return df[columns].astype(float)

    def degenerate_columns(self, table: Union[pd.DataFrame, Any], columns: Sequence[str]) -> List[str]:
        """
        Columns whose mean is zero, i.e. whose weight is undefined.

        Lets the caller drop them before calling transform().
        """
        block = self._validated_block(table, columns)
        means = (block / self.scale).mean(axis=0)
        return [c for c in block.columns if means[c] == 0]

    def compute_weights(self, table: Union[pd.DataFrame, Any], columns: Sequence[str]) -> pd.Series:
        """
        Global weight per column.

        Raises:
            SchemaError: Missing, non-numeric, incomplete or negative column
            DegenerateColumnError: A column has mean zero
        """
        block = self._validated_block(table, columns)
        means = (block / self.scale).mean(axis=0)

        degenerate = [c for c in block.columns if means[c] == 0]
        if degenerate:
            raise DegenerateColumnError(
                f"Entropy weight undefined (mean is 0) for column(s): {degenerate}",
                column=degenerate[0],
                columns=degenerate
            )

        weights = -np.log(means)
        weights.name = 'entropy_weight'
        return weights

    def transform(self, table: Union[pd.DataFrame, Any], columns: Sequence[str]) -> EntropyWeightedMatrix:
        """
        Reweight each column by its corpus-wide information content.

        Args:
            table: DataFrame or table-like object
            columns: Feature columns to transform

        Returns:
            EntropyWeightedMatrix with the same row index as the table
        """
        weights = self.compute_weights(table, columns)
        matrix = self.apply_weights(table, weights)
        logger.debug(f"Entropy-weighted {len(weights)} columns over {len(matrix.values)} rows")
        return matrix

    def apply_weights(self, table: Union[pd.DataFrame, Any], weights: pd.Series) -> EntropyWeightedMatrix:
        """
        Apply previously computed weights to (possibly held-out) rows.

        Args:
            table: DataFrame or table-like object containing the weighted columns
            weights: Series indexed by column name, e.g. from compute_weights()
        """
        block = self._validated_block(table, list(weights.index))
        values = (block / self.scale) * weights
        return EntropyWeightedMatrix(values=values, weights=weights.copy(), scale=self.scale)
