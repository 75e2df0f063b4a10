"""Export maturity and contrast results to various formats.

This module serialises analysis results for dashboards, spreadsheets and
stakeholder reports. Dates are written as ISO 8601 strings; a projected
rate of None (no defensible projection) stays null in JSON.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd

from return_maturity_audit.analyses.contrast import ContrastResult
from return_maturity_audit.analyses.maturity import MaturityAnalysisResult
from return_maturity_audit.monitoring.freshness import DataFreshness

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def maturity_result_to_dict(result: MaturityAnalysisResult) -> dict[str, Any]:
    """Return a JSON-serialisable representation of a maturity result."""
    projection = result.projection
    payload = {
        "product_id": result.product_id,
        "t0": result.t0,
        "s": result.s,
        "p20": result.p20,
        "p50": result.p50,
        "p90": result.p90,
        "maturity_status": result.maturity_status,
        "confidence_score": result.confidence_score,
        "is_evaluable": result.is_evaluable,
        "earliest_eval_date": result.earliest_eval_date,
        "p90_date": result.p90_date,
        "days_to_wait": result.days_to_wait,
        "baseline_range": asdict(result.baseline_range),
        "histogram": [asdict(bucket) for bucket in result.distribution],
        "metrics": {
            "pre": asdict(result.segments.pre),
            "reference": asdict(result.segments.reference),
            "post": asdict(result.segments.post),
        },
        "projection": {
            "projected_rate": projection.projected_rate,
            "forecasted_volume": projection.forecasted_volume,
            "phase_buckets": [asdict(bucket) for bucket in projection.buckets],
            "baseline_rate": projection.baseline_rate,
        },
        "daily_projections": [asdict(row) for row in projection.daily],
        "trend": [asdict(row) for row in result.trend],
    }
    return _jsonable(payload)


def contrast_result_to_dict(result: ContrastResult) -> dict[str, Any]:
    """Return a JSON-serialisable representation of a contrast result."""
    return _jsonable(asdict(result))


def _write_json(payload: dict[str, Any], output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    return output_path


def export_maturity_report_json(
    result: MaturityAnalysisResult,
    output_path: str | Path,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Export a maturity result to JSON.

    Parameters
    ----------
    result:
        Result of :func:`analyze_maturity`.
    output_path:
        Path where the JSON file will be saved.
    metadata:
        Optional metadata to include (e.g. data source, analyst).
    """
    payload = {"metadata": metadata or {}, "maturity": maturity_result_to_dict(result)}
    path = _write_json(payload, output_path)
    logger.info(f"Maturity report exported to {path}")


def export_contrast_report_json(
    result: ContrastResult,
    output_path: str | Path,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Export a contrast result to JSON."""
    payload = {"metadata": metadata or {}, "contrast": contrast_result_to_dict(result)}
    path = _write_json(payload, output_path)
    logger.info(f"Contrast report exported to {path}")


def export_daily_projections_csv(
    result: MaturityAnalysisResult,
    output_path: str | Path,
) -> None:
    """Export the per-day projection table to CSV."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        [_jsonable(asdict(row)) for row in result.projection.daily],
        columns=[
            "date",
            "age",
            "phase",
            "sales",
            "realized",
            "current_rate",
            "lag_pct",
            "algorithm",
            "weight",
            "forecast_add",
            "projected_total",
            "projected_rate",
        ],
    )
    df.to_csv(output_path, index=False)

    logger.info(f"Daily projections exported to {output_path}")


def export_contrast_breakdown_csv(
    result: ContrastResult,
    output_path: str | Path,
) -> None:
    """Export the matched day-by-day contrast breakdown to CSV."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        [_jsonable(asdict(row)) for row in result.daily_breakdown],
        columns=[
            "date",
            "matched_date",
            "age_limit",
            "sales",
            "returns",
            "ref_sales",
            "ref_returns",
        ],
    )
    df.to_csv(output_path, index=False)

    logger.info(f"Contrast breakdown exported to {output_path}")


def _pct(value: float | None) -> str:
    return "n/a" if value is None else f"{value * 100:.1f}%"


def export_maturity_report_markdown(
    output_path: str | Path,
    maturity: MaturityAnalysisResult | None,
    contrast: ContrastResult | None = None,
    freshness: DataFreshness | None = None,
    title: str = "Return Maturity Report",
    generated_at: datetime | None = None,
) -> None:
    """Export a human-readable Markdown report.

    Parameters
    ----------
    output_path:
        Path where the Markdown file will be saved.
    maturity:
        Maturity result, or None when no analysis could be produced.
    contrast:
        Optional contrast result to include.
    freshness:
        Optional data freshness check to include.
    title:
        Report title.
    generated_at:
        Optional timestamp printed in the header. Omitted when None.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    lines = [f"# {title}\n"]
    if generated_at is not None:
        lines.append(f"**Generated:** {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n")

    if maturity is None:
        lines.append(
            "No maturity analysis available. Provide order records and a "
            "cutoff date (T0).\n"
        )
    else:
        projection = maturity.projection
        lines.append("## Maturity\n")
        lines.append(f"- **Product:** {maturity.product_id}")
        lines.append(f"- **Cutoff (T0):** {maturity.t0.isoformat()}")
        lines.append(f"- **Latest Data (S):** {maturity.s.isoformat()}")
        lines.append(
            f"- **Lag Markers:** P20={maturity.p20}d, P50={maturity.p50}d, "
            f"P90={maturity.p90}d"
        )
        lines.append(f"- **Status:** {maturity.maturity_status}")
        lines.append(f"- **Confidence:** {_pct(maturity.confidence_score)}")
        lines.append(f"- **Projected Rate:** {_pct(projection.projected_rate)}")
        lines.append(f"- **Baseline Rate:** {_pct(projection.baseline_rate)}")
        lines.append(
            f"- **Earliest Evaluation:** {maturity.earliest_eval_date.isoformat()} "
            f"(days to wait: {maturity.days_to_wait})"
        )
        lines.append(f"- **Full Maturity:** {maturity.p90_date.isoformat()}\n")

        lines.append("| Phase | Age | Volume | Realized | Forecast | Contribution |")
        lines.append("|-------|-----|--------|----------|----------|--------------|")
        for bucket in projection.buckets:
            lines.append(
                f"| {bucket.label} | {bucket.age_range} | {bucket.volume} | "
                f"{bucket.realized_returns} | {bucket.forecasted_returns:.1f} | "
                f"{_pct(bucket.contribution_rate)} |"
            )
        lines.append("")

    if contrast is not None:
        lines.append("## Fairness Contrast\n")
        if not contrast.has_data:
            lines.append(
                f"No purchases after the cutoff yet (latest data {contrast.s.isoformat()}).\n"
            )
        else:
            lines.append(f"- **Matched Days:** {contrast.run_days}")
            lines.append(
                f"- **Before:** {contrast.before.returns}/{contrast.before.sales} "
                f"({_pct(contrast.before.rate)})"
            )
            lines.append(
                f"- **After:** {contrast.after.returns}/{contrast.after.sales} "
                f"({_pct(contrast.after.rate)})"
            )
            lines.append(f"- **Relative Change:** {_pct(contrast.delta_rate)}")
            lines.append(
                f"- **Improved:** {'yes' if contrast.is_improved else 'no'}\n"
            )

    if freshness is not None:
        lines.append("## Data Freshness\n")
        lines.append(f"- **As Of:** {freshness.as_of.isoformat()}")
        lines.append(f"- **Days Since Latest Purchase:** {freshness.days_since_latest}")
        lines.append(f"- **Settled:** {'yes' if freshness.is_settled else 'no'}")

    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))

    logger.info(f"Markdown report exported to {output_path}")
