"""Result assembly: one page of a cached ranking -> enriched, scored records."""

import html
import re

from atio_search.config.settings import settings
from atio_search.db.models import InnovationRecord, InnovationTags
from atio_search.db.repository import CatalogFactory, open_catalog
from atio_search.ranking.models import ScoredResult
from atio_search.search.classifier import Signals, derive_complexity, derive_cost
from atio_search.search.models import InnovationResult, SearchPage

_LEADING_NUMBER = re.compile(r"^(\d+)")
_SDG_GOAL = re.compile(r"Goal (\d+)")


def level_number(name: str, default: int = 1) -> int:
    """'7 - Prototype tested' -> 7; anything without a leading number -> default."""
    match = _LEADING_NUMBER.match(name or "")
    return int(match.group(1)) if match else default


def sdg_numbers(names: list[str]) -> list[int]:
    numbers = []
    for name in names:
        match = _SDG_GOAL.search(name)
        if match:
            numbers.append(int(match.group(1)))
    return numbers


def enrich(record: InnovationRecord, tags: InnovationTags) -> InnovationResult:
    users = [html.unescape(u) for u in tags.users]
    signals = Signals(
        types=tags.types,
        use_cases=tags.use_cases,
        users=users,
        short_description=record.short_description,
        long_description=record.long_description,
        is_grassroots=record.is_grassroots,
    )
    return InnovationResult(
        id=record.id,
        title=record.title,
        short_description=record.short_description,
        long_description=record.long_description,
        readiness_level=level_number(record.readiness_level),
        readiness_name=record.readiness_level,
        adoption_level=level_number(record.adoption_level),
        adoption_name=record.adoption_level,
        region=record.region,
        is_grassroots=record.is_grassroots,
        owner=record.owner_text,
        partner=record.partner_text,
        data_source=record.data_source,
        countries=tags.countries,
        types=tags.types,
        sdgs=sdg_numbers(tags.sdgs),
        use_cases=tags.use_cases,
        users=users,
        cost=derive_cost(signals),
        complexity=derive_complexity(signals),
    )


class ResultAssembler:
    def __init__(self, catalog: CatalogFactory = open_catalog):
        self.catalog = catalog
        self.default_score = settings.rerank_default_score

    def enrich_ids(self, ids: list[int]) -> list[InnovationResult]:
        """Enriched records in the order of `ids`; ids missing from the catalog are skipped."""
        if not ids:
            return []
        with self.catalog() as repo:
            records = {r.id: r for r in repo.fetch_by_ids(ids)}
            tags = repo.fetch_tags(list(records))
        return [enrich(records[i], tags.get(i, InnovationTags())) for i in ids if i in records]

    def assemble(
        self,
        query: str,
        ranked: list[ScoredResult],
        offset: int,
        limit: int,
    ) -> SearchPage:
        page = ranked[offset : offset + limit]
        scores = {r.id: r.score for r in ranked}

        results = self.enrich_ids([r.id for r in page])
        for result in results:
            result.match_score = scores.get(result.id, self.default_score)
        results.sort(key=lambda r: r.match_score, reverse=True)

        return SearchPage(
            query=query,
            results=results,
            has_more=offset + limit < len(ranked),
            total=len(ranked),
        )
