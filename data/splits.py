"""
Train/Test Split

Seeded split of the debate table into training and held-out rows, written
to disk once and re-read as the canonical split on later runs.
"""

from typing import Tuple, Union
from pathlib import Path
import logging
import warnings
import numpy as np
from sklearn.model_selection import GroupShuffleSplit, train_test_split

from .debates import DebateTable

logger = logging.getLogger(__name__)

TRAIN_FILE = 'train.csv'
TEST_FILE = 'test.csv'


class TrainTestSplitter:
    """
    Split speakers into train and test sets.

    Args:
        test_size: Fraction of debates (or rows) held out
        random_state: Seed for the split
        by_debate: Keep all speakers of a debate on the same side of the split
    """

    def __init__(self, test_size: float = 0.2, random_state: int = 42, by_debate: bool = True):
        if not 0 < test_size < 1:
            raise ValueError(f"test_size must be between 0 and 1, got {test_size}")
        self.test_size = test_size
        self.random_state = random_state
        self.by_debate = by_debate

    def split(self, table: DebateTable) -> Tuple[DebateTable, DebateTable]:
        """Deterministic split for a given seed."""
        indices = np.arange(len(table))

        if self.by_debate:
            splitter = GroupShuffleSplit(n_splits=1, test_size=self.test_size, random_state=self.random_state)
            train_idx, test_idx = next(splitter.split(indices, groups=table.debates))
        else:
            train_idx, test_idx = train_test_split(
                indices, test_size=self.test_size, random_state=self.random_state
            )

        train_mask = np.zeros(len(table), dtype=bool)
        train_mask[np.sort(train_idx)] = True
        return table.subset(train_mask), table.subset(~train_mask)

    def load_or_create(
        self,
        table: DebateTable,
        directory: Union[str, Path],
        overwrite: bool = False
    ) -> Tuple[DebateTable, DebateTable]:
        """
        Return the canonical split stored in `directory`, creating it if absent.

        Args:
            table: Full table, split when no files exist and checked against
                re-read files otherwise
            directory: Folder holding train.csv / test.csv
            overwrite: Regenerate and overwrite existing split files

        Raises:
            FileNotFoundError: Only one of the two split files exists
        """
        directory = Path(directory)
        train_path = directory / TRAIN_FILE
        test_path = directory / TEST_FILE

        if not overwrite:
            if train_path.exists() and test_path.exists():
                logger.info(f"Re-using existing split in {directory}")
                train = DebateTable.from_csv(train_path, **table.column_names)
                test = DebateTable.from_csv(test_path, **table.column_names)
                self._check_stale(table, train, test, directory)
                return train, test
            if train_path.exists() or test_path.exists():
                present = train_path if train_path.exists() else test_path
                raise FileNotFoundError(
                    f"Incomplete split in {directory}: only {present.name} exists. "
                    f"Restore the missing file or rerun with overwrite."
                )

        train, test = self.split(table)
        train.to_csv(train_path)
        test.to_csv(test_path)
        logger.info(f"Wrote split to {directory}: {len(train)} train / {len(test)} test rows")
        return train, test

    @staticmethod
    def _check_stale(table: DebateTable, train: DebateTable, test: DebateTable, directory: Path) -> None:
        """Warn when stored split files no longer describe the current table."""
        speaker = table.speaker_column
        current = set(table.df[speaker].astype(str))
        stored = set(train.df[speaker].astype(str)) | set(test.df[speaker].astype(str))

        problems = []
        if stored != current:
            problems.append(
                f"{len(stored - current)} stored speaker(s) not in the data, "
                f"{len(current - stored)} data speaker(s) not in the split"
            )
        missing = [c for c in table.df.columns if c not in train.df.columns]
        extra = [c for c in train.df.columns if c not in table.df.columns]
        if missing or extra:
            problems.append(f"columns missing from split: {missing}, columns only in split: {extra}")

        if problems:
            message = (
                f"Split in {directory} does not match the current data ({'; '.join(problems)}). "
                f"Rerun with overwrite to regenerate it."
            )
            logger.warning(message)
            warnings.warn(message)