"""Return-lag analyses.

The engine answers two questions about a business change that went live
on a cutoff date T0:

1. Maturity - how far has the post-change cohort matured, and what final
   return rate does its mature part project to?
2. Contrast - did returns improve, comparing before and after windows
   censored to the same observable age?
"""

from .contrast import (
    ContrastMetrics,
    ContrastResult,
    DailyContrastRow,
    VelocityPoint,
    analyze_contrast,
    relative_delta,
)
from .lag_distribution import (
    LagBucket,
    LagDistribution,
    build_lag_distribution,
    collect_lag_samples,
    derive_markers,
)
from .maturity import MaturityAnalysisResult, SegmentSummary, analyze_maturity
from .projection import (
    DailyProjection,
    MaturityPhase,
    ProjectionBucket,
    ProjectionResult,
    classify_phase,
    gross_up,
    project_cohorts,
)
from .target_dates import TargetDates, estimate_target_dates
from .trend import DailyTrend, build_daily_trend

__all__ = [
    # Lag distribution
    "LagBucket",
    "LagDistribution",
    "build_lag_distribution",
    "collect_lag_samples",
    "derive_markers",
    # Projection
    "DailyProjection",
    "MaturityPhase",
    "ProjectionBucket",
    "ProjectionResult",
    "classify_phase",
    "gross_up",
    "project_cohorts",
    # Target dates
    "TargetDates",
    "estimate_target_dates",
    # Trend
    "DailyTrend",
    "build_daily_trend",
    # Maturity
    "MaturityAnalysisResult",
    "SegmentSummary",
    "analyze_maturity",
    # Contrast
    "ContrastMetrics",
    "ContrastResult",
    "DailyContrastRow",
    "VelocityPoint",
    "analyze_contrast",
    "relative_delta",
]
