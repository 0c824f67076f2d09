"""Pipeline Package - configuration, run context and orchestration"""

from .config import AnalysisConfig
from .context import AnalysisContext
from .runner import AnalysisPipeline
from .logging_config import setup_logging

__all__ = [
    'AnalysisConfig',
    'AnalysisContext',
    'AnalysisPipeline',
    'setup_logging',
]
