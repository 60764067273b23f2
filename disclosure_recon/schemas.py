"""
Pydantic schemas for the company collection returned by the disclosure API.

Only the fields the reconciler compares are modelled in detail; any other
keys in the payload are ignored. A key that is missing from the payload and
a key that is explicitly null are kept apart: ``reported()`` returns
``MISSING`` for the first and ``None`` for the second.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Missing:
    """Marker for a key the payload does not contain."""

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def reported(self, name: str) -> Any:
        """Value of ``name`` as sent (possibly None), or MISSING if the key was absent."""
        if name in self.model_fields_set:
            return getattr(self, name)
        return MISSING


def lookup(obj: Any, *path: str) -> Any:
    """Follow ``path`` through nested schemas.

    A null or missing parent yields MISSING, so
    ``lookup(emissions, "statedTotalEmissions", "total")`` is MISSING when
    ``statedTotalEmissions`` is null.
    """
    for name in path:
        if obj is None or obj is MISSING:
            return MISSING
        obj = obj.reported(name)
    return obj


# ---------------------------------------------------------------------------
# Emissions
# ---------------------------------------------------------------------------

class Scope1(_Schema):
    total: Optional[float] = None
    mb: Optional[float] = None  # market-based
    lb: Optional[float] = None  # location-based
    unknown: Optional[float] = None


class Scope2(Scope1):
    calculatedTotalEmissions: Optional[float] = None


class StatedTotal(_Schema):
    total: Optional[float] = None
    unit: Optional[str] = None


class Scope3Category(_Schema):
    category: int
    total: Optional[float] = None
    unit: Optional[str] = None


class Scope3(_Schema):
    statedTotalEmissions: Optional[StatedTotal] = None
    categories: Optional[List[Scope3Category]] = None
    calculatedTotalEmissions: Optional[float] = None


class Emissions(_Schema):
    scope1: Optional[Scope1] = None
    scope2: Optional[Scope2] = None
    scope3: Optional[Scope3] = None
    calculatedTotalEmissions: Optional[float] = None
    statedTotalEmissions: Optional[StatedTotal] = None


# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------

class Employees(_Schema):
    value: Optional[float] = None
    unit: Optional[str] = None


class Turnover(_Schema):
    value: Optional[float] = None
    currency: Optional[str] = None


class Economy(_Schema):
    employees: Optional[Employees] = None
    turnover: Optional[Turnover] = None


# ---------------------------------------------------------------------------
# Company
# ---------------------------------------------------------------------------

class ReportingPeriod(_Schema):
    startDate: Optional[datetime] = None
    endDate: datetime
    reportURL: Optional[str] = None
    emissions: Optional[Emissions] = None
    economy: Optional[Economy] = None

    @property
    def year(self) -> str:
        """Calendar year of the end date, used to align periods across datasets."""
        return str(self.endDate.year)


class CompanyRecord(_Schema):
    wikidataId: str
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    lei: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    reportingPeriods: List[ReportingPeriod] = Field(default_factory=list)


CompanyList = TypeAdapter(List[CompanyRecord])


__all__ = [
    "MISSING",
    "CompanyList",
    "CompanyRecord",
    "Economy",
    "Emissions",
    "Employees",
    "ReportingPeriod",
    "Scope1",
    "Scope2",
    "Scope3",
    "Scope3Category",
    "StatedTotal",
    "Turnover",
    "lookup",
]
