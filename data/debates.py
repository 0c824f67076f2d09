"""
Debate Table

One row per speaker in a debate: identifying columns, a for/against group
label, the audience vote shift (outcome) and LIWC proportion columns.

This module validates only what the analysis needs: required columns
exist, names are unique, the group label is binary and the outcome is
numeric.
"""

from typing import Optional, List, Union
from pathlib import Path
import numpy as np
import pandas as pd

from analysis.errors import SchemaError

GROUP_LABELS = ('for', 'against')


class DebateTable:
    """
    Validated speaker-level observation table.

    Attributes:
        df (pd.DataFrame): The table, group labels normalised to lower case
        debate_column (str): Debate identifier column
        speaker_column (str): Speaker identifier column
        group_column (str): Side label column ('for' / 'against')
        outcome_column (str): Vote-shift column
    """

    def __init__(
        self,
        df: pd.DataFrame,
        debate_column: str = 'debate_id',
        speaker_column: str = 'speaker_id',
        group_column: str = 'group',
        outcome_column: str = 'deltaV'
    ):
        """
        Initialize and validate.

        Raises:
            SchemaError: Duplicate column names, missing required column,
                group label outside {for, against}, non-numeric outcome
        """
        if not isinstance(df, pd.DataFrame):
            raise TypeError("df must be a pandas DataFrame")

        duplicated = df.columns[df.columns.duplicated()].tolist()
        if duplicated:
            raise SchemaError(f"Duplicate column names: {duplicated}", column=str(duplicated[0]))

        self.debate_column = debate_column
        self.speaker_column = speaker_column
        self.group_column = group_column
        self.outcome_column = outcome_column

        for column in self.id_columns + [outcome_column]:
            if column not in df.columns:
                raise SchemaError(f"Required column '{column}' not found", column=column)

        df = df.copy()
        df.columns = [str(c) for c in df.columns]

        groups = df[group_column].astype(str).str.strip().str.lower()
        unknown = sorted(set(groups) - set(GROUP_LABELS))
        if unknown:
            raise SchemaError(
                f"Group labels must be one of {GROUP_LABELS}, found {unknown}",
                column=group_column
            )
        df[group_column] = groups

        if not pd.api.types.is_numeric_dtype(df[outcome_column]):
            raise SchemaError(f"Outcome column '{outcome_column}' is not numeric", column=outcome_column)
        if df[outcome_column].isna().any():
            raise SchemaError(
                f"Outcome column '{outcome_column}' has missing values",
                column=outcome_column
            )

        self.df = df

    @classmethod
    def from_csv(cls, filepath: Union[str, Path], **columns) -> 'DebateTable':
        """
        Load from a delimited file.

        Args:
            filepath: Path to CSV file
            **columns: Column-name overrides passed to the constructor

        Returns:
            DebateTable instance
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        # read_csv renames repeated headers ('x', 'x.1'), so check the raw row
        header = pd.read_csv(filepath, header=None, nrows=1).iloc[0].astype(str)
        duplicated = header[header.duplicated()].tolist()
        if duplicated:
            raise SchemaError(
                f"Duplicate column names in {filepath.name}: {duplicated}",
                column=duplicated[0]
            )

        df = pd.read_csv(filepath)
        return cls(df, **columns)

    def to_csv(self, filepath: Union[str, Path]) -> None:
        """Write the table to CSV (parent directories created)."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        self.df.to_csv(filepath, index=False)

    @property
    def id_columns(self) -> List[str]:
        return [self.debate_column, self.speaker_column, self.group_column]

    @property
    def column_names(self) -> dict:
        """Constructor keyword arguments describing this table's columns."""
        return {
            'debate_column': self.debate_column,
            'speaker_column': self.speaker_column,
            'group_column': self.group_column,
            'outcome_column': self.outcome_column,
        }

    @property
    def outcome(self) -> pd.Series:
        return self.df[self.outcome_column].astype(float)

    @property
    def groups(self) -> np.ndarray:
        return self.df[self.group_column].to_numpy()

    @property
    def debates(self) -> np.ndarray:
        return self.df[self.debate_column].to_numpy()

    @property
    def n_debates(self) -> int:
        return int(self.df[self.debate_column].nunique())

    def subset(self, mask) -> 'DebateTable':
        """New table with the selected rows."""
        return DebateTable(self.df[mask].reset_index(drop=True), **self.column_names)

    def drop_columns(self, columns: List[str]) -> 'DebateTable':
        """New table without the given columns."""
        return DebateTable(self.df.drop(columns=list(columns)), **self.column_names)

    def summary(self) -> str:
        counts = self.df[self.group_column].value_counts()
        return (
            f"{len(self)} speaker records from {self.n_debates} debates "
            f"(for={int(counts.get('for', 0))}, against={int(counts.get('against', 0))}), "
            f"{self.df.shape[1]} columns"
        )

    def __len__(self) -> int:
        return len(self.df)

    def __repr__(self) -> str:
        return f"DebateTable({self.summary()})"
