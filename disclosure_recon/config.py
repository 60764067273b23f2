"""
Configuration and path management for the disclosure reconciler.
All paths are relative to the project root.
"""

from pathlib import Path

# Project root: one level up from disclosure_recon/
_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = _THIS_DIR.parent

# ── API endpoints ─────────────────────────────────────────────────────────────

# Reference dataset (treated as ground truth)
PRODUCTION_API_URL = "https://api.klimatkollen.se/api"

# Candidate dataset (validated against production)
STAGING_API_URL = "http://localhost:3000/api"

COMPANIES_ENDPOINT = "/companies"

# ── Output directories ────────────────────────────────────────────────────────

OUTPUT_DIR = PROJECT_ROOT / "output"

RESULTS_JSON_FILENAME = "accuracy-results.json"
RESULTS_CSV_FILENAME = "accuracy-results.csv"

# ── Scoring weights ──────────────────────────────────────────────────────────
# Denominator contribution per compared reporting period. These are weights,
# not field counts: scope 2 counts 3 even when only one sub-field is reported.
SCOPE1_FIELD_WEIGHT = 1
SCOPE2_FIELD_WEIGHT = 3
SCOPE3_STATED_TOTAL_WEIGHT = 1  # plus one per production scope 3 category
TOTAL_EMISSIONS_WEIGHT = 2
ECONOMY_WEIGHT = 2

# Sub-fields compared for scope 1 and scope 2
# total, market-based, location-based, unknown method
SCOPE_FIELDS = ("total", "mb", "lb", "unknown")

# ── HTTP settings ─────────────────────────────────────────────────────────────

REQUEST_TIMEOUT = 60
REQUEST_HEADERS = {
    "User-Agent": "disclosure-recon/0.1 (staging verification)",
    "Accept": "application/json",
}
