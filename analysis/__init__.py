"""
Analysis Layer

Feature selection, entropy weighting, SVD, component-count selection,
component interpretation and effect extraction.
"""

from .errors import (
    AnalysisError,
    SchemaError,
    DegenerateColumnError,
    NumericError,
    InsufficientDataError
)
from .feature_selector import (
    FeatureSelector,
    FeatureSet,
    FeatureRoles,
    NamePredicate,
    StartsWith,
    Contains,
    InColumns
)
from .entropy import EntropyTransformer, EntropyWeightedMatrix
from .dimensionality import Decomposer, DecompositionResult
from .component_selection import ComponentSelector, ComponentSelectionTable
from .interpretation import ComponentInterpreter, ComponentProfile, FeatureLoading, default_labels
from .statistical import EffectExtractor, Effect, GroupComparison

__all__ = [
    # Errors
    'AnalysisError',
    'SchemaError',
    'DegenerateColumnError',
    'NumericError',
    'InsufficientDataError',

    # Feature Selection
    'FeatureSelector',
    'FeatureSet',
    'FeatureRoles',
    'NamePredicate',
    'StartsWith',
    'Contains',
    'InColumns',

    # Transform and decomposition
    'EntropyTransformer',
    'EntropyWeightedMatrix',
    'Decomposer',
    'DecompositionResult',

    # Model size and interpretation
    'ComponentSelector',
    'ComponentSelectionTable',
    'ComponentInterpreter',
    'ComponentProfile',
    'FeatureLoading',
    'default_labels',

    # Statistics
    'EffectExtractor',
    'Effect',
    'GroupComparison',
]
