import json

import pandas as pd
import pytest

from disclosure_recon import orchestrator
from disclosure_recon.fetcher import FetchError
from disclosure_recon.schemas import CompanyList

from .factories import company_payload


def _datasets():
    production = CompanyList.validate_python([
        company_payload("Q1", "Acme AB"),
        company_payload("Q2", "Gone AB"),
    ])
    staging = CompanyList.validate_python([
        company_payload("Q1", "Acme AB"),
        company_payload("Q3", "New AB"),
    ])
    return production, staging


def test_run_comparison_writes_reports(tmp_path, monkeypatch):
    calls = []

    def fake_fetch(production_url, staging_url):
        calls.append((production_url, staging_url))
        return _datasets()

    monkeypatch.setattr(orchestrator, "fetch_datasets", fake_fetch)

    summary = orchestrator.run_comparison("https://prod/api", "http://stage/api", tmp_path)

    assert calls == [("https://prod/api", "http://stage/api")]
    assert summary.companies == 2
    assert summary.missing_in_staging == 1
    assert summary.only_in_staging == 1
    assert summary.fully_matching == 1
    assert summary.mean_accuracy == 50.0

    results = json.loads((tmp_path / "accuracy-results.json").read_text(encoding="utf-8"))
    assert [r["name"] for r in results] == ["Acme AB", "Gone AB"]
    assert (tmp_path / "accuracy-results.csv").exists()


def test_main_exits_without_output_on_fetch_error(tmp_path, monkeypatch):
    def failing_fetch(production_url, staging_url):
        raise FetchError(staging_url, "Bad Gateway", status=502)

    monkeypatch.setattr(orchestrator, "fetch_datasets", failing_fetch)
    monkeypatch.setattr(orchestrator, "OUTPUT_DIR", tmp_path / "output")

    with pytest.raises(SystemExit) as excinfo:
        orchestrator.main()

    assert excinfo.value.code == 1
    assert not (tmp_path / "output").exists()


def test_main_exits_on_validation_error(tmp_path, monkeypatch):
    def invalid_fetch(production_url, staging_url):
        CompanyList.validate_python([{"name": "No id"}])

    monkeypatch.setattr(orchestrator, "fetch_datasets", invalid_fetch)
    monkeypatch.setattr(orchestrator, "OUTPUT_DIR", tmp_path / "output")

    with pytest.raises(SystemExit) as excinfo:
        orchestrator.main()

    assert excinfo.value.code == 1
    assert not (tmp_path / "output").exists()


def test_main_exits_without_output_when_csv_fails(tmp_path, monkeypatch):
    def failing_to_csv(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(orchestrator, "fetch_datasets", lambda p, s: _datasets())
    monkeypatch.setattr(pd.DataFrame, "to_csv", failing_to_csv)
    monkeypatch.setattr(orchestrator, "OUTPUT_DIR", tmp_path / "output")

    with pytest.raises(SystemExit) as excinfo:
        orchestrator.main()

    assert excinfo.value.code == 1
    assert not (tmp_path / "output").exists()
    assert list(tmp_path.iterdir()) == []
