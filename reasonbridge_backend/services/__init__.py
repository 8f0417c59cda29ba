"""Services for the ReasonBridge feedback and alignment backend."""

from .analysis_cache import AnalysisCacheService
from .response_analyzer import ResponseAnalyzer

__all__ = [
    'AnalysisCacheService',
    'ResponseAnalyzer',
]
