import pytest

from atio_search.config.settings import settings
from fakes import FakeRepository, catalog_of, make_record


@pytest.fixture
def records():
    return [make_record(i) for i in range(1, 31)]


@pytest.fixture
def repo(records):
    return FakeRepository(records)


@pytest.fixture
def catalog(repo):
    return catalog_of(repo)


@pytest.fixture(autouse=True)
def _no_expansion(monkeypatch):
    monkeypatch.setattr(settings, "query_expansion_enabled", False)
