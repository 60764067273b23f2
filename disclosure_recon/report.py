"""
Report rendering.
Writes the full comparison results as JSON and a one-row-per-company
summary table as CSV.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from .config import OUTPUT_DIR, RESULTS_CSV_FILENAME, RESULTS_JSON_FILENAME
from .models import ComparisonResult, MismatchEntry

logger = logging.getLogger(__name__)

# Table columns resolved from matched/mismatched fields
SCOPED_COLUMNS = ["scope1", "scope2", "scope3", "employees", "economy"]
TABLE_COLUMNS = ["name", "inStaging"] + SCOPED_COLUMNS + ["accuracy"]


def render_json(results: List[ComparisonResult]) -> str:
    return json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False)


def load_json(text: str) -> List[ComparisonResult]:
    """Parse the output of render_json back into results."""
    return [ComparisonResult.from_dict(item) for item in json.loads(text)]


def resolve_match_or_difference(column: str, mismatched: List[MismatchEntry],
                                matched: List[str]) -> str:
    """Summarise one section for the table.

    A mismatch wins over a match: "Production: X, Staging: Y" for the first
    mismatch in the section, "Yes" if anything in the section matched,
    otherwise "N/A".
    """
    for entry in mismatched:
        if entry.section == column:
            production = entry.production if entry.production is not None else "N/A"
            staging = entry.staging if entry.staging is not None else "N/A"
            return f"Production: {production}, Staging: {staging}"

    if any(label.startswith(column) for label in matched):
        return "Yes"

    return "N/A"


def build_table(results: List[ComparisonResult]) -> pd.DataFrame:
    rows = []
    for result in results:
        row = {
            "name": result.name,
            "inStaging": "Yes" if result.in_staging else "No",
        }
        for column in SCOPED_COLUMNS:
            row[column] = resolve_match_or_difference(
                column, result.mismatched_fields, result.matched_fields
            )
        row["accuracy"] = result.accuracy
        rows.append(row)
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def write_outputs(results: List[ComparisonResult],
                  output_dir: Optional[Path] = None) -> Tuple[Path, Path]:
    """Write the JSON and CSV reports. Returns (json_path, csv_path).

    Both reports are rendered in memory first. If writing the second file
    fails, the first is removed again so a run never leaves one report
    without the other.
    """
    output_dir = Path(output_dir) if output_dir is not None else OUTPUT_DIR

    json_text = render_json(results)
    table = build_table(results)
    csv_text = table.to_csv(index=False)

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / RESULTS_JSON_FILENAME
    csv_path = output_dir / RESULTS_CSV_FILENAME

    written = []
    try:
        for path, text in ((json_path, json_text), (csv_path, csv_text)):
            written.append(path)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
    except OSError:
        for path in written:
            path.unlink(missing_ok=True)
        raise

    logger.info(f"Accuracy results written to {json_path}")
    logger.info(f"CSV results written to {csv_path} ({len(table)} rows)")
    return json_path, csv_path
