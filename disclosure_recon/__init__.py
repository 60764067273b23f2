"""
Disclosure Reconciler - Staging vs Production Comparison
========================================================

Fetches the company collection from the production and staging
climate-disclosure APIs, compares every reporting period field by field
and writes an accuracy report as JSON and CSV.

Usage:
    python -m disclosure_recon.orchestrator
"""

__version__ = "0.1.0"
