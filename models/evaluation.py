"""
Model Evaluation

Held-out metrics for the SVM check.
"""

from typing import Dict, Any
import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    f1_score,
    confusion_matrix,
    mean_squared_error,
    mean_absolute_error,
    r2_score
)

from .classifiers import SupportVectorModel, SVMClassifier


class ModelEvaluator:
    """Standard model evaluator."""

    def evaluate(self, model: SupportVectorModel, X_test: np.ndarray, y_test: np.ndarray) -> Dict[str, Any]:
        """
        Compute metrics on held-out rows.

        Classification: accuracy, macro_f1, confusion_matrix, n_test.
        Regression: rmse, mae, r2, n_test.
        """
        if not model.is_trained:
            raise ValueError("Model not trained")

        y_test = np.asarray(y_test)
        y_pred = model.predict(X_test)

        if isinstance(model, SVMClassifier):
            return {
                'accuracy': float(accuracy_score(y_test, y_pred)),
                'macro_f1': float(f1_score(y_test, y_pred, average='macro', zero_division=0)),
                'confusion_matrix': confusion_matrix(y_test, y_pred, labels=model.classes),
                'n_test': int(len(y_test))
            }

        return {
            'rmse': float(np.sqrt(mean_squared_error(y_test, y_pred))),
            'mae': float(mean_absolute_error(y_test, y_pred)),
            'r2': float(r2_score(y_test, y_pred)) if len(y_test) > 1 else np.nan,
            'n_test': int(len(y_test))
        }

    @staticmethod
    def to_frame(metrics: Dict[str, Any], model_name: str = 'SVM') -> pd.DataFrame:
        """Scalar metrics as a long table (matrices are skipped)."""
        rows = [
            {'model': model_name, 'metric': key, 'value': value}
            for key, value in metrics.items()
            if np.isscalar(value)
        ]
        return pd.DataFrame(rows, columns=['model', 'metric', 'value'])
