"""
Pipeline Context

Carries every artifact from one stage to the next. Each stage reads what
earlier stages produced and adds its own result; nothing lives in module
or global state.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
from pathlib import Path
import pandas as pd

from analysis.feature_selector import FeatureSet
from analysis.entropy import EntropyWeightedMatrix
from analysis.dimensionality import DecompositionResult
from analysis.component_selection import ComponentSelectionTable
from analysis.interpretation import ComponentProfile
from analysis.statistical import Effect
from data.debates import DebateTable
from models.linear import LinearModelResult

from .config import AnalysisConfig


@dataclass
class AnalysisContext:
    """State of one pipeline run."""
    config: AnalysisConfig

    table: Optional[DebateTable] = None
    train: Optional[DebateTable] = None
    test: Optional[DebateTable] = None

    feature_set: Optional[FeatureSet] = None
    feature_columns: List[str] = field(default_factory=list)
    dropped_columns: List[str] = field(default_factory=list)
    feature_labels: Dict[str, str] = field(default_factory=dict)

    entropy: Optional[EntropyWeightedMatrix] = None
    decomposition: Optional[DecompositionResult] = None
    selection: Optional[ComponentSelectionTable] = None
    profiles: List[ComponentProfile] = field(default_factory=list)

    final_model: Optional[LinearModelResult] = None
    significant: List[Effect] = field(default_factory=list)
    trending: List[Effect] = field(default_factory=list)

    group_comparison: Optional[pd.DataFrame] = None
    svm_metrics: Dict[str, Any] = field(default_factory=dict)

    outputs: List[Path] = field(default_factory=list)
    completed_stages: List[str] = field(default_factory=list)
    stage: Optional[str] = None

    @property
    def chosen_k(self) -> Optional[int]:
        return self.selection.chosen_k if self.selection is not None else None

    def summary(self) -> str:
        lines = ["Analysis summary", "=" * 40]
        if self.table is not None:
            lines.append(f"Data: {self.table.summary()}")
        if self.train is not None and self.test is not None:
            lines.append(f"Split: {len(self.train)} train / {len(self.test)} test rows")
        if self.feature_columns:
            lines.append(f"Features: {len(self.feature_columns)} ({self.config.feature_group})")
        if self.dropped_columns:
            lines.append(f"Dropped degenerate columns: {', '.join(self.dropped_columns)}")
        if self.selection is not None:
            lines.append(f"Selected components: {self.chosen_k} of {self.selection.max_k}")
        if self.final_model is not None:
            lines.append(f"Final model adj R2: {self.final_model.adj_r2:.4f}")
        if self.significant:
            lines.append("Significant: " + ", ".join(f"{e.predictor} (p={e.p_value:.3f})" for e in self.significant))
        if self.trending:
            lines.append("Trending: " + ", ".join(f"{e.predictor} (p={e.p_value:.3f})" for e in self.trending))
        for profile in self.profiles:
            lines.append(profile.describe())
        for key, value in self.svm_metrics.items():
            if isinstance(value, float):
                lines.append(f"SVM {key}: {value:.4f}")
        return "\n".join(lines)
