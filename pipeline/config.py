"""
Analysis Configuration

All run parameters in one dataclass, loaded from and saved to YAML.
The YAML file groups keys into sections (data, split, features, analysis,
svm, export); section names are only for readability and every key maps
to one field.
"""

from dataclasses import dataclass, field, fields, asdict
from typing import List, Dict, Optional, Any
from pathlib import Path
import yaml

from analysis.statistical import GROUP_TESTS, CORRECTION_METHODS
from models.classifiers import SVM_KERNELS

SECTIONS = {
    'data': [
        'data_file', 'output_dir', 'debate_column', 'speaker_column',
        'group_column', 'outcome_column',
    ],
    'split': ['split_dir', 'test_size', 'random_state', 'split_by_debate', 'overwrite_split'],
    'features': [
        'main_tag', 'group_tag', 'feature_group', 'exclude_columns',
        'drop_degenerate_columns', 'feature_labels',
    ],
    'analysis': [
        'entropy_scale', 'max_components', 'profile_size', 'profile_components',
        'significance_level', 'trend_level', 'group_test', 'correction_method',
    ],
    'svm': ['run_svm', 'svm_task', 'svm_kernel', 'svm_C'],
    'export': ['export_excel', 'show_progress'],
}

FEATURE_GROUPS = ('main', 'interaction')
SVM_TASKS = ('classification', 'regression')


@dataclass
class AnalysisConfig:
    """Configuration for the analysis pipeline."""

    # Data
    data_file: str
    output_dir: str = "results"
    debate_column: str = 'debate_id'
    speaker_column: str = 'speaker_id'
    group_column: str = 'group'
    outcome_column: str = 'deltaV'

    # Split
    split_dir: Optional[str] = None  # default: <output_dir>/split
    test_size: float = 0.2
    random_state: int = 42
    split_by_debate: bool = True
    overwrite_split: bool = False

    # Features
    main_tag: str = 'prop'
    group_tag: str = 'group'
    feature_group: str = 'main'
    exclude_columns: List[str] = field(default_factory=list)
    drop_degenerate_columns: bool = False
    feature_labels: Dict[str, str] = field(default_factory=dict)

    # Analysis
    entropy_scale: float = 100.0
    max_components: Optional[int] = None  # None: as many as leave a residual df
    profile_size: int = 5
    profile_components: Optional[List[int]] = None  # None: C1..C<selected k>
    significance_level: float = 0.05
    trend_level: float = 0.10
    group_test: str = 'mannwhitney'
    correction_method: Optional[str] = 'fdr_bh'

    # SVM check on held-out rows
    run_svm: bool = True
    svm_task: str = 'classification'
    svm_kernel: str = 'rbf'
    svm_C: float = 1.0

    # Export
    export_excel: bool = False
    show_progress: bool = True

    @property
    def split_path(self) -> Path:
        return Path(self.split_dir) if self.split_dir else Path(self.output_dir) / 'split'

    @property
    def table_columns(self) -> Dict[str, str]:
        """Column-name keyword arguments for DebateTable."""
        return {
            'debate_column': self.debate_column,
            'speaker_column': self.speaker_column,
            'group_column': self.group_column,
            'outcome_column': self.outcome_column,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'AnalysisConfig':
        """Build from a flat or sectioned mapping."""
        known = {f.name for f in fields(cls)}
        flat: Dict[str, Any] = {}
        for key, value in (raw or {}).items():
            if key in SECTIONS and isinstance(value, dict):
                flat.update(value)
            else:
                flat[key] = value

        unknown = sorted(set(flat) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        if 'data_file' not in flat:
            raise ValueError("Configuration must define 'data_file'")

        config = cls(**flat)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, filepath: str) -> 'AnalysisConfig':
        """Load configuration from YAML file."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Config not found: {filepath}")
        with open(filepath, 'r') as f:
            raw = yaml.safe_load(f)
        return cls.from_dict(raw or {})

    def to_dict(self) -> Dict[str, Any]:
        """Sectioned mapping, as written by to_yaml()."""
        values = asdict(self)
        return {section: {key: values[key] for key in keys} for section, keys in SECTIONS.items()}

    def to_yaml(self, filepath: str) -> None:
        """Save configuration to YAML file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)

    def validate(self) -> None:
        """Validate configuration parameters."""
        if not self.data_file:
            raise ValueError("data_file must be set")
        if self.feature_group not in FEATURE_GROUPS:
            raise ValueError(f"feature_group must be one of {FEATURE_GROUPS}, got '{self.feature_group}'")
        if not 0 < self.test_size < 1:
            raise ValueError(f"test_size must be between 0 and 1, got {self.test_size}")
        if self.entropy_scale <= 0:
            raise ValueError(f"entropy_scale must be positive, got {self.entropy_scale}")
        if self.max_components is not None and self.max_components < 2:
            raise ValueError(f"max_components must be at least 2, got {self.max_components}")
        if self.profile_size < 1:
            raise ValueError(f"profile_size must be at least 1, got {self.profile_size}")
        if self.profile_components is not None and any(c < 1 for c in self.profile_components):
            raise ValueError("profile_components are 1-based component numbers")
        if not 0 < self.significance_level < self.trend_level <= 1:
            raise ValueError(
                f"Need 0 < significance_level < trend_level <= 1, "
                f"got {self.significance_level} and {self.trend_level}"
            )
        if self.group_test.lower() not in GROUP_TESTS:
            raise ValueError(f"group_test must be one of {GROUP_TESTS}, got '{self.group_test}'")
        if self.correction_method is not None and self.correction_method not in CORRECTION_METHODS:
            raise ValueError(
                f"correction_method must be one of {CORRECTION_METHODS} or null, "
                f"got '{self.correction_method}'"
            )
        if self.svm_task not in SVM_TASKS:
            raise ValueError(f"svm_task must be one of {SVM_TASKS}, got '{self.svm_task}'")
        if self.svm_kernel not in SVM_KERNELS:
            raise ValueError(f"svm_kernel must be one of {SVM_KERNELS}, got '{self.svm_kernel}'")
        if self.svm_C <= 0:
            raise ValueError(f"svm_C must be positive, got {self.svm_C}")
