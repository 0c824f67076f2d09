"""
Support Vector Models

Thin wrappers around scikit-learn SVC / SVR with a consistent
train / predict / save interface. Inputs are standardised inside the
wrapper.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Union
import numpy as np
import warnings
import joblib

from sklearn.svm import SVC, SVR
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.base import BaseEstimator

SVM_KERNELS = ('linear', 'poly', 'rbf', 'sigmoid')


class SupportVectorModel(ABC):
    """Abstract base class of the SVM wrappers."""

    def __init__(self, name: str, estimator: BaseEstimator):
        self.name = name
        self.model = Pipeline([('scale', StandardScaler()), ('svm', estimator)])
        self.is_trained = False
        self.feature_names: Optional[List[str]] = None

    @abstractmethod
    def train(self, X: np.ndarray, y: np.ndarray, feature_names: Optional[List[str]] = None) -> None:
        """Fit the model."""
        pass

    def _fit(self, X: np.ndarray, y: np.ndarray, feature_names: Optional[List[str]] = None) -> None:
        self.model.fit(np.asarray(X, dtype=float), np.asarray(y))
        self.is_trained = True
        if feature_names:
            self.feature_names = list(feature_names)

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Predict held-out rows."""
        if not self.is_trained:
            raise ValueError(f"{self.name} is not trained.")
        return self.model.predict(np.asarray(X, dtype=float))

    def save(self, filepath: str) -> None:
        """Save model to disk."""
        if not self.is_trained:
            warnings.warn("Saving untrained model.")
        joblib.dump(self, filepath)

    @staticmethod
    def load(filepath: str) -> 'SupportVectorModel':
        """Load model from disk."""
        return joblib.load(filepath)


def _check_kernel(kernel: str) -> str:
    if kernel not in SVM_KERNELS:
        raise ValueError(f"Unknown SVM kernel: {kernel}. Expected one of {SVM_KERNELS}")
    return kernel


class SVMClassifier(SupportVectorModel):
    """Support Vector Machine classifier."""

    def __init__(self, kernel: str = 'rbf', C: float = 1.0, gamma: Union[str, float] = 'scale', **kwargs):
        super().__init__("SVM", SVC(kernel=_check_kernel(kernel), C=C, gamma=gamma, random_state=42, **kwargs))
        self.classes: Optional[np.ndarray] = None

    def train(self, X: np.ndarray, y: np.ndarray, feature_names: Optional[List[str]] = None) -> None:
        if len(np.unique(y)) < 2:
            raise ValueError("SVM classifier needs at least two classes in the training labels")
        self._fit(X, y, feature_names)
        self.classes = self.model.classes_


class SVMRegressor(SupportVectorModel):
    """Support Vector Machine regressor."""

    def __init__(self, kernel: str = 'rbf', C: float = 1.0, epsilon: float = 0.1, gamma: Union[str, float] = 'scale', **kwargs):
        super().__init__("SVR", SVR(kernel=_check_kernel(kernel), C=C, epsilon=epsilon, gamma=gamma, **kwargs))

    def train(self, X: np.ndarray, y: np.ndarray, feature_names: Optional[List[str]] = None) -> None:
        self._fit(X, y, feature_names)


def create_svm(task: str, **params) -> SupportVectorModel:
    """Build an SVM wrapper for 'classification' or 'regression'."""
    if task == 'classification':
        return SVMClassifier(**params)
    if task == 'regression':
        return SVMRegressor(**params)
    raise ValueError(f"Unknown SVM task: {task}")
