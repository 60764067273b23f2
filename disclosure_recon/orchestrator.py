"""
Orchestrator - end-to-end reconciliation runner.
Fetches production and staging, compares them and writes the accuracy
report as JSON and CSV.

Usage:
    python -m disclosure_recon.orchestrator
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .comparison import compare_datasets, find_staging_only
from .config import OUTPUT_DIR, PRODUCTION_API_URL, STAGING_API_URL
from .fetcher import FetchError, fetch_datasets
from .models import ComparisonResult, RunSummary
from .report import write_outputs

logger = logging.getLogger(__name__)


def run_comparison(production_url: str = PRODUCTION_API_URL,
                   staging_url: str = STAGING_API_URL,
                   output_dir: Optional[Path] = None) -> RunSummary:
    """Run the full fetch + compare + report pipeline.

    Fetch and validation errors propagate before any file is written.
    """
    logger.info("=" * 60)
    logger.info("STAGING vs PRODUCTION RECONCILIATION")
    logger.info("=" * 60)
    logger.info(f"Production: {production_url}")
    logger.info(f"Staging:    {staging_url}")

    # Step 1: Fetch both datasets
    production, staging = fetch_datasets(production_url, staging_url)

    # Step 2: Compare
    results = compare_datasets(production, staging)
    staging_only = find_staging_only(production, staging)
    if staging_only:
        logger.warning(
            f"{len(staging_only)} companies exist only in staging and are not scored: "
            f"{', '.join(staging_only[:10])}{' ...' if len(staging_only) > 10 else ''}"
        )

    # Step 3: Save outputs
    write_outputs(results, output_dir or OUTPUT_DIR)

    # Step 4: Print summary
    summary = RunSummary.from_results(results, only_in_staging=len(staging_only))
    _print_summary(results, summary)
    return summary


def _print_summary(results: List[ComparisonResult], summary: RunSummary):
    """Log a summary of the reconciliation run."""
    logger.info("\n" + "=" * 60)
    logger.info("RECONCILIATION SUMMARY")
    logger.info("=" * 60)

    logger.info(f"Production companies compared: {summary.companies}")
    logger.info(f"  Fully matching: {summary.fully_matching}")
    logger.info(f"  Missing in staging: {summary.missing_in_staging}")
    logger.info(f"  Only in staging (not scored): {summary.only_in_staging}")
    logger.info(f"Mean accuracy: {summary.mean_accuracy:.2f}%")

    for result in sorted(results, key=lambda r: r.accuracy):
        if result.mismatched_fields:
            logger.info(
                f"  {result.name} ({result.wikidata_id}): {result.accuracy:.2f}% "
                f"[{len(result.mismatched_fields)} mismatches]"
            )

    logger.info("=" * 60)


def main():
    """Entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    try:
        run_comparison()
    except FetchError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except ValidationError as e:
        logger.error(f"Error: dataset failed schema validation:\n{e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Reconciliation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
