"""
Staging vs production reconciliation.

Aligns companies by wikidataId and reporting periods by end-date year, then
walks each aligned pair through the comparable fields:

1. Scope 1 / scope 2 sub-fields (total, mb, lb, unknown)
2. Scope 3 stated total and per-category totals
3. Calculated and stated total emissions
4. Economy: employees and turnover

Every comparator appends labels to the ComparisonResult and returns the
number of matches; the caller adds the fixed scoring weight for the
section. A key missing from the payload (MISSING) and an explicit null
(None) are different values: null against a number is a mismatch, while a
key missing on one side skips the field. Nothing here raises on absent data.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .config import (
    ECONOMY_WEIGHT,
    SCOPE1_FIELD_WEIGHT,
    SCOPE2_FIELD_WEIGHT,
    SCOPE3_STATED_TOTAL_WEIGHT,
    SCOPE_FIELDS,
    TOTAL_EMISSIONS_WEIGHT,
)
from .models import (
    MATCH_NOTE,
    MISMATCH_NOTE,
    MISSING_COMPANY_FIELD,
    MISSING_COMPANY_NOTE,
    ComparisonResult,
)
from .schemas import (
    MISSING,
    CompanyRecord,
    Economy,
    Emissions,
    ReportingPeriod,
    Scope1,
    Scope3,
    lookup,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Formatting helpers
# ============================================================================

def format_number(value: Any) -> Optional[str]:
    """Render a value for labels: integral floats lose their ".0".

    An explicit null renders as "null"; a missing key renders as None.
    """
    if value is MISSING:
        return None
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_currency(amount: Optional[float], currency: Optional[str]) -> str:
    """Group thousands with spaces and append the currency code.

    >>> format_currency(1000000, "USD")
    '1 000 000 USD'
    >>> format_currency(1234.5, "SEK")
    '1 234.5 SEK'
    """
    if amount is None or amount is MISSING:
        grouped = "null"
    else:
        grouped = f"{amount:,.3f}".rstrip("0").rstrip(".").replace(",", " ")
    return f"{grouped} {currency}" if currency else grouped


# ============================================================================
# Section comparators
# ============================================================================

def _compare_optional(label: str, prod_value, stage_value,
                      result: ComparisonResult, year: str) -> int:
    """Equal and non-null -> match; unequal -> mismatch; null/missing on both -> nothing.

    Null against a missing key counts as unequal.
    """
    if prod_value == stage_value:
        if prod_value is not None and prod_value is not MISSING:
            result.match(f"{label}: {year}")
            return 1
        return 0
    result.mismatch(label, year, format_number(prod_value), format_number(stage_value))
    return 0


def compare_scope(scope_name: str, prod_scope: Optional[Scope1], stage_scope: Optional[Scope1],
                  result: ComparisonResult, year: str) -> int:
    """Compare total/mb/lb/unknown of a scope 1 or scope 2 block.

    A sub-field is compared whenever both sides carry the key, including
    when one or both values are null.
    """
    matched = 0
    if not prod_scope and not stage_scope:
        return matched

    for field_name in SCOPE_FIELDS:
        prod_value = lookup(prod_scope, field_name)
        stage_value = lookup(stage_scope, field_name)
        if prod_value is MISSING or stage_value is MISSING:
            continue
        label = f"{scope_name}.{field_name}"
        if prod_value == stage_value:
            result.match(f"{label}: {year}")
            matched += 1
        else:
            result.mismatch(label, year, format_number(prod_value), format_number(stage_value))
    return matched


def compare_scope3(prod_scope3: Optional[Scope3], stage_scope3: Optional[Scope3],
                   result: ComparisonResult, year: str) -> int:
    """Compare the scope 3 stated total and each production category."""
    if not prod_scope3 and not stage_scope3:
        return 0

    matched = _compare_optional(
        "scope3.statedTotalEmissions.total",
        lookup(prod_scope3, "statedTotalEmissions", "total"),
        lookup(stage_scope3, "statedTotalEmissions", "total"),
        result, year,
    )

    prod_categories = lookup(prod_scope3, "categories")
    stage_categories = lookup(stage_scope3, "categories")
    if not isinstance(prod_categories, list) or not isinstance(stage_categories, list):
        return matched

    stage_by_number = {}
    for cat in stage_categories:
        stage_by_number.setdefault(cat.category, cat)

    for prod_cat in prod_categories:
        label = f"scope3.category={prod_cat.category}"
        prod_total = prod_cat.reported("total")
        stage_cat = stage_by_number.get(prod_cat.category)
        if stage_cat is None:
            result.mismatch(label, year, format_number(prod_total), None)
            continue
        stage_total = stage_cat.reported("total")
        if prod_total == stage_total:
            result.match(f"{label}: {year}")
            matched += 1
        else:
            result.mismatch(label, year, format_number(prod_total), format_number(stage_total))
    return matched


def compare_total_emissions(prod_emissions: Optional[Emissions], stage_emissions: Optional[Emissions],
                            result: ComparisonResult, year: str) -> int:
    matched = _compare_optional(
        "calculatedTotalEmissions",
        lookup(prod_emissions, "calculatedTotalEmissions"),
        lookup(stage_emissions, "calculatedTotalEmissions"),
        result, year,
    )
    matched += _compare_optional(
        "statedTotalEmissions.total",
        lookup(prod_emissions, "statedTotalEmissions", "total"),
        lookup(stage_emissions, "statedTotalEmissions", "total"),
        result, year,
    )
    return matched


def compare_economy(prod_economy: Optional[Economy], stage_economy: Optional[Economy],
                    result: ComparisonResult, year: str) -> int:
    """Compare employee count and turnover.

    Match labels carry the value itself ("employees: 1200",
    "economy: 1 000 000 SEK") rather than the year.
    """
    matched = 0

    prod_employees = lookup(prod_economy, "employees", "value")
    stage_employees = lookup(stage_economy, "employees", "value")
    if prod_employees is not MISSING and stage_employees is not MISSING:
        if prod_employees == stage_employees:
            result.match(f"employees: {format_number(prod_employees)}")
            matched += 1
        else:
            result.mismatch("employees", year, format_number(prod_employees),
                            format_number(stage_employees))

    prod_value = lookup(prod_economy, "turnover", "value")
    stage_value = lookup(stage_economy, "turnover", "value")
    if prod_value is not MISSING and stage_value is not MISSING:
        prod_currency = lookup(prod_economy, "turnover", "currency")
        stage_currency = lookup(stage_economy, "turnover", "currency")
        prod_formatted = format_currency(prod_value, prod_currency)
        stage_formatted = format_currency(stage_value, stage_currency)
        if prod_value == stage_value and prod_currency == stage_currency:
            result.match(f"economy: {prod_formatted}")
            matched += 1
        else:
            result.mismatch("economy", year, prod_formatted, stage_formatted)

    return matched


# ============================================================================
# Period / company level
# ============================================================================

def _find_period(periods: Iterable[ReportingPeriod], year: str) -> Optional[ReportingPeriod]:
    for period in periods:
        if period.year == year:
            return period
    return None


def compare_period(prod_period: ReportingPeriod, stage_period: ReportingPeriod,
                   result: ComparisonResult) -> None:
    """Compare one aligned pair of periods and add to the running counts."""
    year = prod_period.year
    prod_emissions = lookup(prod_period, "emissions")
    stage_emissions = lookup(stage_period, "emissions")

    matched = 0
    total = 0

    matched += compare_scope("scope1", lookup(prod_emissions, "scope1"),
                             lookup(stage_emissions, "scope1"), result, year)
    total += SCOPE1_FIELD_WEIGHT

    matched += compare_scope("scope2", lookup(prod_emissions, "scope2"),
                             lookup(stage_emissions, "scope2"), result, year)
    total += SCOPE2_FIELD_WEIGHT

    prod_categories = lookup(prod_emissions, "scope3", "categories")
    matched += compare_scope3(lookup(prod_emissions, "scope3"),
                              lookup(stage_emissions, "scope3"), result, year)
    total += SCOPE3_STATED_TOTAL_WEIGHT + (len(prod_categories) if prod_categories else 0)

    matched += compare_total_emissions(prod_emissions, stage_emissions, result, year)
    total += TOTAL_EMISSIONS_WEIGHT

    matched += compare_economy(lookup(prod_period, "economy"), lookup(stage_period, "economy"),
                               result, year)
    total += ECONOMY_WEIGHT

    result.matched_field_count += matched
    result.total_field_count += total


def score_accuracy(matched: int, total: int) -> float:
    """Percentage of weighted fields that matched, rounded to 2 decimals.

    Capped at 100: a scope block reporting more sub-fields than its weight
    would otherwise push the score past 100.
    """
    if total <= 0:
        return 0.0
    return round(min(matched / total, 1.0) * 100, 2)


def missing_company_result(company: CompanyRecord) -> ComparisonResult:
    result = ComparisonResult(
        name=company.name,
        wikidata_id=company.wikidataId,
        in_staging=False,
        accuracy=0.0,
        note=MISSING_COMPANY_NOTE,
    )
    result.mismatch(MISSING_COMPANY_FIELD)
    return result


def compare_company(prod_company: CompanyRecord, stage_company: CompanyRecord) -> ComparisonResult:
    result = ComparisonResult(name=prod_company.name, wikidata_id=prod_company.wikidataId)

    for prod_period in prod_company.reportingPeriods:
        year = prod_period.year
        stage_period = _find_period(stage_company.reportingPeriods, year)
        if stage_period is None:
            result.mismatch("Reporting period", year)
            continue
        compare_period(prod_period, stage_period, result)

    result.accuracy = score_accuracy(result.matched_field_count, result.total_field_count)
    result.note = MATCH_NOTE if not result.mismatched_fields else MISMATCH_NOTE
    logger.debug(
        f"{result.name}: {result.matched_field_count}/{result.total_field_count} "
        f"matched ({result.accuracy}%)"
    )
    return result


def compare_datasets(production: List[CompanyRecord],
                     staging: List[CompanyRecord]) -> List[ComparisonResult]:
    """Compare every production company against its staging counterpart.

    Alignment is one-directional: companies that exist only in staging are
    not part of the result (see find_staging_only).
    """
    staging_by_id: Dict[str, CompanyRecord] = {}
    for company in staging:
        staging_by_id.setdefault(company.wikidataId, company)

    results = []
    for prod_company in production:
        stage_company = staging_by_id.get(prod_company.wikidataId)
        if stage_company is None:
            logger.debug(f"{prod_company.name} ({prod_company.wikidataId}) missing in staging")
            results.append(missing_company_result(prod_company))
            continue
        results.append(compare_company(prod_company, stage_company))
    return results


def find_staging_only(production: List[CompanyRecord],
                      staging: List[CompanyRecord]) -> List[str]:
    """wikidataIds present in staging but not in production."""
    production_ids = {c.wikidataId for c in production}
    return [c.wikidataId for c in staging if c.wikidataId not in production_ids]
