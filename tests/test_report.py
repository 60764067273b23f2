import builtins
import json
from pathlib import Path

import pandas as pd
import pytest

from disclosure_recon import report
from disclosure_recon.comparison import compare_company, compare_datasets
from disclosure_recon.models import ComparisonResult, MismatchEntry
from disclosure_recon.report import (
    TABLE_COLUMNS,
    build_table,
    load_json,
    render_json,
    resolve_match_or_difference,
    write_outputs,
)


def _results(make_company, make_period):
    prod_period = make_period(2022,
                              emissions={"scope1": {"total": 100}, "scope2": {"mb": 10}},
                              economy={"turnover": {"value": 1000000, "currency": "USD"}})
    stage_period = make_period(2022,
                               emissions={"scope1": {"total": 100}, "scope2": {"mb": 12}},
                               economy={"turnover": {"value": 1000000, "currency": "EUR"}})
    production = [make_company("Q1", "Acme AB", [prod_period]), make_company("Q2", "Gone AB")]
    staging = [make_company("Q1", "Acme AB", [stage_period])]
    return compare_datasets(production, staging)


class TestResolveMatchOrDifference:
    def test_mismatch_wins_over_match(self):
        mismatched = [MismatchEntry("scope1.total", "2021", "5", "6")]
        matched = ["scope1.total: 2022"]

        assert resolve_match_or_difference("scope1", mismatched, matched) == \
            "Production: 5, Staging: 6"

    def test_match(self):
        assert resolve_match_or_difference("scope3", [], ["scope3.category=1: 2022"]) == "Yes"

    def test_missing_side_is_na(self):
        mismatched = [MismatchEntry("scope3.category=4", "2022", "30", None)]

        assert resolve_match_or_difference("scope3", mismatched, []) == \
            "Production: 30, Staging: N/A"

    def test_nothing_recorded(self):
        assert resolve_match_or_difference("employees", [], ["scope1.total: 2022"]) == "N/A"

    def test_other_sections_do_not_leak(self):
        mismatched = [MismatchEntry("statedTotalEmissions.total", "2022", "1", "2")]

        assert resolve_match_or_difference("scope1", mismatched, []) == "N/A"


class TestBuildTable:
    def test_rows_and_columns(self, make_company, make_period):
        table = build_table(_results(make_company, make_period))

        assert list(table.columns) == TABLE_COLUMNS
        acme, gone = table.to_dict(orient="records")
        assert acme["inStaging"] == "Yes"
        assert acme["scope1"] == "Yes"
        assert acme["scope2"] == "Production: 10, Staging: 12"
        assert acme["economy"] == "Production: 1 000 000 USD, Staging: 1 000 000 EUR"
        assert acme["employees"] == "N/A"
        assert gone["inStaging"] == "No"
        assert gone["scope1"] == "N/A"
        assert gone["accuracy"] == 0

    def test_empty(self):
        table = build_table([])

        assert table.empty
        assert list(table.columns) == TABLE_COLUMNS


class TestJson:
    def test_round_trip(self, make_company, make_period):
        results = _results(make_company, make_period)

        assert load_json(render_json(results)) == results

    def test_mismatch_entries_are_structured(self, make_company, make_period):
        payload = json.loads(render_json(_results(make_company, make_period)))

        entry = payload[0]["mismatchedFields"][0]
        assert entry == {"field": "scope2.mb", "year": "2022", "production": "10", "staging": "12"}
        assert payload[1]["mismatchedFields"][0]["field"] == "Company does not exist in staging"


def test_write_outputs(tmp_path, make_company, make_period):
    results = _results(make_company, make_period)

    json_path, csv_path = write_outputs(results, tmp_path / "output")

    assert json_path.name == "accuracy-results.json"
    assert csv_path.name == "accuracy-results.csv"
    assert len(json.loads(json_path.read_text(encoding="utf-8"))) == 2
    table = pd.read_csv(csv_path)
    assert list(table.columns) == TABLE_COLUMNS
    assert list(table["name"]) == ["Acme AB", "Gone AB"]


def test_full_match_row(make_company):
    result = compare_company(make_company(), make_company())
    row = build_table([result]).iloc[0]

    assert row["accuracy"] == 100
    assert [row[c] for c in ("scope1", "scope2", "scope3", "employees", "economy")] == ["Yes"] * 5


def test_from_dict_accepts_plain_result():
    result = ComparisonResult(name="Acme AB", wikidata_id="Q1")

    assert ComparisonResult.from_dict(result.to_dict()) == result


def test_json_keys_match_csv_columns(make_company, make_period):
    payload = json.loads(render_json(_results(make_company, make_period)))

    assert payload[0]["inStaging"] is True
    assert payload[1]["inStaging"] is False
    assert {"wikidataId", "matchedFields", "matchedFieldCount", "totalFieldCount"} <= set(payload[0])
    assert "in_staging" not in payload[0]


def test_write_outputs_leaves_nothing_when_csv_write_fails(tmp_path, monkeypatch,
                                                           make_company, make_period):
    results = _results(make_company, make_period)

    def flaky_open(path, *args, **kwargs):
        if Path(path).suffix == ".csv":
            raise OSError("disk full")
        return builtins.open(path, *args, **kwargs)

    monkeypatch.setattr(report, "open", flaky_open, raising=False)

    with pytest.raises(OSError, match="disk full"):
        write_outputs(results, tmp_path)

    assert list(tmp_path.iterdir()) == []
