"""Models Package - linear model boundary, SVM wrappers, evaluation"""

from .linear import LinearModelFitter, LinearModelResult, INTERCEPT
from .classifiers import SupportVectorModel, SVMClassifier, SVMRegressor, create_svm
from .evaluation import ModelEvaluator

__all__ = [
    'LinearModelFitter',
    'LinearModelResult',
    'INTERCEPT',
    'SupportVectorModel',
    'SVMClassifier',
    'SVMRegressor',
    'create_svm',
    'ModelEvaluator',
]
