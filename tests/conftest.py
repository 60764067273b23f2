import pytest

from disclosure_recon.schemas import CompanyRecord

from .factories import company_payload, period_payload


@pytest.fixture
def make_company():
    def _make(wikidata_id="Q1", name="Acme AB", periods=None):
        return CompanyRecord.model_validate(company_payload(wikidata_id, name, periods))
    return _make


@pytest.fixture
def make_period():
    return period_payload
