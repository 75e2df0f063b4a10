"""Monitoring module for data freshness and report exports."""

from return_maturity_audit.monitoring.exports import (
    contrast_result_to_dict,
    export_contrast_breakdown_csv,
    export_contrast_report_json,
    export_daily_projections_csv,
    export_maturity_report_json,
    export_maturity_report_markdown,
    maturity_result_to_dict,
)
from return_maturity_audit.monitoring.freshness import (
    DataFreshness,
    assess_data_freshness,
)

__all__ = [
    "DataFreshness",
    "assess_data_freshness",
    "contrast_result_to_dict",
    "maturity_result_to_dict",
    "export_contrast_breakdown_csv",
    "export_contrast_report_json",
    "export_daily_projections_csv",
    "export_maturity_report_json",
    "export_maturity_report_markdown",
]
