"""
Data Layer

Loading and validating the debate table, train/test split files and
report export.
"""

from .debates import DebateTable, GROUP_LABELS
from .splits import TrainTestSplitter, TRAIN_FILE, TEST_FILE
from .exporters import ExcelExporter, CSVExporter, ResultsExporter

__all__ = [
    'DebateTable',
    'GROUP_LABELS',
    'TrainTestSplitter',
    'TRAIN_FILE',
    'TEST_FILE',
    'ExcelExporter',
    'CSVExporter',
    'ResultsExporter',
]
