"""
Dataset fetcher.
Downloads the full company collection from an API and validates it
against the company schema before anything is compared.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import requests

from .config import COMPANIES_ENDPOINT, REQUEST_HEADERS, REQUEST_TIMEOUT
from .schemas import CompanyList, CompanyRecord

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a dataset cannot be retrieved from its endpoint."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(f"Failed to fetch data from {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


def fetch_companies(base_url: str,
                    session: Optional[requests.Session] = None) -> List[CompanyRecord]:
    """Fetch and validate all companies from ``<base_url>/companies``.

    Raises FetchError on network failure, a non-success status or a body
    that is not JSON. Schema violations raise pydantic.ValidationError.
    """
    url = base_url.rstrip("/") + COMPANIES_ENDPOINT
    http = session or requests
    logger.info(f"Fetching companies: {url}")
    try:
        resp = http.get(url, headers=REQUEST_HEADERS, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise FetchError(url, str(e)) from e

    if not resp.ok:
        raise FetchError(url, resp.reason or f"HTTP {resp.status_code}", status=resp.status_code)

    try:
        payload = resp.json()
    except ValueError as e:
        raise FetchError(url, f"invalid JSON body ({e})", status=resp.status_code) from e

    companies = CompanyList.validate_python(payload)
    logger.info(f"Fetched data from {base_url}: {len(companies)} companies")
    return companies


def fetch_datasets(production_url: str, staging_url: str,
                   session: Optional[requests.Session] = None,
                   ) -> Tuple[List[CompanyRecord], List[CompanyRecord]]:
    """Fetch production and staging concurrently. Returns (production, staging)."""
    with ThreadPoolExecutor(max_workers=2) as executor:
        production_future = executor.submit(fetch_companies, production_url, session)
        staging_future = executor.submit(fetch_companies, staging_url, session)
        # .result() re-raises the first failure; the run aborts on either one
        return production_future.result(), staging_future.result()
