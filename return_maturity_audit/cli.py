"""Command line entry points for the return maturity toolkit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from return_maturity_audit.analyses.contrast import analyze_contrast
from return_maturity_audit.analyses.maturity import analyze_maturity
from return_maturity_audit.analyses.projection import DEFAULT_SPAN_DAYS
from return_maturity_audit.foundation.calendar import to_calendar_day
from return_maturity_audit.foundation.order_contract import (
    OrderContract,
    OrderRecord,
)
from return_maturity_audit.monitoring.exports import (
    contrast_result_to_dict,
    export_maturity_report_markdown,
    maturity_result_to_dict,
)
from return_maturity_audit.monitoring.freshness import assess_data_freshness

logger = logging.getLogger(__name__)


MAX_INPUT_BYTES = 25 * 1024 * 1024  # 25 MiB cap to avoid accidental OOM

# Keys an upload may nest the order list under
ORDER_LIST_KEYS = ("return_order", "orders")


def _load_orders(path: Path) -> list[OrderRecord]:
    resolved = path.resolve()
    size = resolved.stat().st_size
    if size > MAX_INPUT_BYTES:
        raise ValueError(
            f"Input file {resolved} is {size} bytes; exceeds limit of {MAX_INPUT_BYTES} bytes"
        )
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)

    if isinstance(payload, dict):
        for key in ORDER_LIST_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
    if not isinstance(payload, list):
        raise ValueError(
            "Expected a list of order records, or an object holding one under "
            f"{' / '.join(ORDER_LIST_KEYS)}"
        )

    return OrderContract().validate_records(payload)


def _emit(payload: dict[str, Any], output: Path | None) -> None:
    if output:
        output_path = output.resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, sort_keys=True)
        logger.info(f"Result written to {output_path}")
    else:  # stdout fallback enables piping in shell usage.
        json.dump(payload, fp=sys.stdout, indent=2, sort_keys=True)
        print()


def _base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "input", type=Path, help="Path to JSON file with raw order records"
    )
    parser.add_argument(
        "--cutoff",
        type=str,
        required=True,
        help="Date the business change went live (ISO format: YYYY-MM-DD)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional path for writing the result as JSON (stdout otherwise).",
    )
    parser.add_argument(
        "--markdown",
        type=Path,
        help="Optional path for a Markdown summary report.",
    )
    return parser


def maturity_cli(argv: list[str] | None = None) -> int:
    """Project the final return rate of the cohort purchased after the cutoff.

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 when no analysis can be produced)
    """
    parser = _base_parser(
        "Project final return rates from partially matured order data"
    )
    parser.add_argument(
        "--span",
        type=int,
        default=DEFAULT_SPAN_DAYS,
        help=f"Forecast window length in days (default: {DEFAULT_SPAN_DAYS})",
    )
    parser.add_argument(
        "--as-of",
        type=str,
        help="Today's date (YYYY-MM-DD) for the data freshness check.",
    )
    args = parser.parse_args(argv)

    if args.span < 1:
        parser.error("--span must be a positive number of days")

    logger.info(f"Loading orders from {args.input}")
    orders = _load_orders(args.input)
    cutoff = to_calendar_day(args.cutoff)

    result = analyze_maturity(orders, cutoff, span_days=args.span)
    if result is None:
        logger.error("No usable order records; cannot run maturity analysis")
        return 1

    logger.info(
        f"Maturity: status={result.maturity_status}, "
        f"confidence={result.confidence_score:.2f}, "
        f"P50={result.p50}d, days_to_wait={result.days_to_wait}"
    )

    payload = maturity_result_to_dict(result)
    freshness = None
    if args.as_of:
        freshness = assess_data_freshness(result.s, to_calendar_day(args.as_of))
        payload["freshness"] = {
            "as_of": freshness.as_of.isoformat(),
            "days_since_latest": freshness.days_since_latest,
            "days_to_wait": freshness.days_to_wait,
            "is_settled": freshness.is_settled,
        }
    _emit(payload, args.output)

    if args.markdown:
        export_maturity_report_markdown(
            args.markdown,
            result,
            contrast=analyze_contrast(orders, cutoff),
            freshness=freshness,
        )

    return 0


def contrast_cli(argv: list[str] | None = None) -> int:
    """Compare returns before and after the cutoff under equal censoring.

    Args:
        argv: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 when no analysis can be produced)
    """
    parser = _base_parser(
        "Compare return rates before and after a change on matched windows"
    )
    args = parser.parse_args(argv)

    logger.info(f"Loading orders from {args.input}")
    orders = _load_orders(args.input)
    cutoff = to_calendar_day(args.cutoff)

    result = analyze_contrast(orders, cutoff)
    if result is None:
        logger.error("No usable order records; cannot run contrast analysis")
        return 1

    if result.has_data:
        logger.info(
            f"Contrast over {result.run_days} matched days: "
            f"before={result.before.rate:.4f}, after={result.after.rate:.4f}, "
            f"delta={result.delta_rate:+.2%}"
        )
    else:
        logger.warning(
            f"No purchases after cutoff {result.t0.isoformat()}; nothing to compare"
        )

    _emit(contrast_result_to_dict(result), args.output)

    if args.markdown:
        export_maturity_report_markdown(
            args.markdown,
            analyze_maturity(orders, cutoff),
            contrast=result,
            title="Return Contrast Report",
        )

    return 0


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    raise SystemExit(maturity_cli())


def contrast_main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    raise SystemExit(contrast_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
