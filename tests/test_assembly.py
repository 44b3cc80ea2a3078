from atio_search.db.models import InnovationTags
from atio_search.ranking.models import ScoredResult
from atio_search.search.assembly import ResultAssembler, level_number, sdg_numbers
from atio_search.search.classifier import Signals, derive_complexity, derive_cost
from fakes import FakeRepository, catalog_of, make_record


def test_level_number():
    assert level_number("7 - Prototype tested") == 7
    assert level_number("Unknown stage") == 1
    assert level_number("") == 1


def test_sdg_numbers():
    assert sdg_numbers(["Goal 2: Zero Hunger", "no goal", "Goal 13: Climate Action"]) == [2, 13]


def test_cost_and_complexity_labels():
    frugal = Signals(short_description="A frugal, manual seed drill made from local wood.")
    hightech = Signals(long_description="Drone imagery with machine learning for yield maps.")
    mixed = Signals(types=["Digital platform"], short_description="Low-cost SMS advisory.")
    grassroots = Signals(short_description="Farmer-built rainwater pond.", is_grassroots=True)

    assert (derive_cost(frugal), derive_complexity(frugal)) == ("low", "simple")
    assert (derive_cost(hightech), derive_complexity(hightech)) == ("high", "advanced")
    assert (derive_cost(mixed), derive_complexity(mixed)) == ("low", "moderate")
    assert (derive_cost(grassroots), derive_complexity(grassroots)) == ("low", "moderate")


def _assembler():
    records = [make_record(i) for i in range(1, 8)]
    tags = {
        2: InnovationTags(
            countries=["Kenya"],
            types=["Practice"],
            sdgs=["Goal 2: Zero Hunger"],
            use_cases=["Water management"],
            users=["Farmers&#039; cooperatives"],
        )
    }
    return ResultAssembler(catalog=catalog_of(FakeRepository(records, tags)))


def test_assemble_slices_sorts_and_flags_more():
    ranked = [ScoredResult(id=i, score=s) for i, s in [(3, 95), (2, 90), (5, 80), (1, 70), (4, 60)]]
    page = _assembler().assemble("q", ranked, offset=1, limit=2)

    assert [(r.id, r.match_score) for r in page.results] == [(2, 90), (5, 80)]
    assert page.has_more is True
    assert page.total == 5

    enriched = page.results[0]
    assert enriched.countries == ["Kenya"]
    assert enriched.sdgs == [2]
    assert enriched.users == ["Farmers' cooperatives"]
    assert enriched.readiness_level == 7 and enriched.adoption_level == 3
    assert enriched.owner == "Owner Org 2"


def test_assemble_last_page_and_missing_records():
    ranked = [ScoredResult(id=i, score=50) for i in (6, 99, 7)]
    page = _assembler().assemble("q", ranked, offset=0, limit=5)

    assert [r.id for r in page.results] == [6, 7]
    assert page.has_more is False
    assert page.total == 3


def test_assemble_offset_past_end():
    ranked = [ScoredResult(id=1, score=50)]
    page = _assembler().assemble("q", ranked, offset=10, limit=5)
    assert page.results == [] and page.has_more is False


def test_page_serializes_with_camel_case_keys():
    ranked = [ScoredResult(id=1, score=77)]
    payload = _assembler().assemble("q", ranked, offset=0, limit=5).model_dump(by_alias=True)

    assert set(payload) == {"query", "results", "hasMore", "total"}
    item = payload["results"][0]
    assert item["matchScore"] == 77
    assert {"shortDescription", "readinessLevel", "isGrassroots", "useCases", "thumbsUpCount"} <= set(item)
