"""
app/services package marker.
"""

from app.services.capture_analysis_service import (
    AnalysisTaskExecutor,
    CaptureAnalysisService,
    get_capture_analysis_service,
)
from app.services.domain_analytics_service import (
    DomainAnalyticsService,
    DomainSummary,
    LearningOverview,
)

__all__ = [
    "AnalysisTaskExecutor",
    "CaptureAnalysisService",
    "get_capture_analysis_service",
    "DomainAnalyticsService",
    "DomainSummary",
    "LearningOverview",
]
