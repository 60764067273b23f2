"""
Data models for reconciliation results.
Results are produced per run and written to disk; nothing is persisted.
"""

from dataclasses import dataclass, field, asdict
from typing import Iterable, List, Optional


MATCH_NOTE = "All data matches between production and staging"
MISMATCH_NOTE = "Partial mismatch or missing data between production and staging"
MISSING_COMPANY_NOTE = "Exists in production but not in staging"
MISSING_COMPANY_FIELD = "Company does not exist in staging"


@dataclass
class MismatchEntry:
    """A single field that differs between production and staging."""
    field: str  # "scope1.total", "scope3.category=4", "employees", "Reporting period", ...
    year: Optional[str] = None
    production: Optional[str] = None
    staging: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.field}: {self.year}" if self.year else self.field

    @property
    def section(self) -> str:
        """Top-level section of the field ("scope3" for "scope3.category=4")."""
        return self.field.split(".", 1)[0]


@dataclass
class ComparisonResult:
    """Outcome of comparing one production company against staging."""
    name: str
    wikidata_id: str
    in_staging: bool = True
    matched_fields: List[str] = field(default_factory=list)
    mismatched_fields: List[MismatchEntry] = field(default_factory=list)
    matched_field_count: int = 0
    total_field_count: int = 0
    accuracy: float = 0.0
    note: str = ""

    def match(self, label: str):
        self.matched_fields.append(label)

    def mismatch(self, field_name: str, year: Optional[str] = None,
                 production: Optional[str] = None, staging: Optional[str] = None) -> MismatchEntry:
        entry = MismatchEntry(field=field_name, year=year, production=production, staging=staging)
        self.mismatched_fields.append(entry)
        return entry

    def to_dict(self) -> dict:
        """JSON shape of the result; keys are camelCase like the API and CSV."""
        return {
            "name": self.name,
            "wikidataId": self.wikidata_id,
            "inStaging": self.in_staging,
            "matchedFields": list(self.matched_fields),
            "mismatchedFields": [asdict(m) for m in self.mismatched_fields],
            "matchedFieldCount": self.matched_field_count,
            "totalFieldCount": self.total_field_count,
            "accuracy": self.accuracy,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ComparisonResult":
        return cls(
            name=data["name"],
            wikidata_id=data["wikidataId"],
            in_staging=data.get("inStaging", True),
            matched_fields=list(data.get("matchedFields", [])),
            mismatched_fields=[MismatchEntry(**m) for m in data.get("mismatchedFields", [])],
            matched_field_count=data.get("matchedFieldCount", 0),
            total_field_count=data.get("totalFieldCount", 0),
            accuracy=data.get("accuracy", 0.0),
            note=data.get("note", ""),
        )


@dataclass
class RunSummary:
    """Aggregate figures for a reconciliation run."""
    companies: int
    missing_in_staging: int
    only_in_staging: int
    fully_matching: int
    mean_accuracy: float

    @classmethod
    def from_results(cls, results: Iterable[ComparisonResult],
                     only_in_staging: int = 0) -> "RunSummary":
        results = list(results)
        missing = sum(1 for r in results if not r.in_staging)
        matching = sum(1 for r in results if r.in_staging and not r.mismatched_fields)
        mean = round(sum(r.accuracy for r in results) / len(results), 2) if results else 0.0
        return cls(
            companies=len(results),
            missing_in_staging=missing,
            only_in_staging=only_in_staging,
            fully_matching=matching,
            mean_accuracy=mean,
        )
