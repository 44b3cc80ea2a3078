"""Repository layer: all SQL operations isolated here"""

from contextlib import AbstractContextManager, contextmanager
from typing import Callable, Generator

from sqlalchemy import text
from sqlalchemy.orm import Session

from atio_search.db.connection import TAG_TABLES, get_session
from atio_search.db.models import InnovationCreate, InnovationRecord, InnovationTags
from atio_search.logger import get_logger

logger = get_logger(__name__)

RECORD_COLUMNS = (
    "i.id, i.title, "
    "coalesce(i.short_description, '') AS short_description, "
    "coalesce(i.long_description, '') AS long_description, "
    "coalesce(i.readiness_level, '') AS readiness_level, "
    "coalesce(i.adoption_level, '') AS adoption_level, "
    "coalesce(i.region, '') AS region, "
    "i.is_grassroots, "
    "coalesce(i.owner_text, '') AS owner_text, "
    "coalesce(i.partner_text, '') AS partner_text, "
    "coalesce(i.data_source, '') AS data_source"
)


def _to_record(row) -> InnovationRecord:
    return InnovationRecord(**row._mapping)


def _escape_like(token: str) -> str:
    return token.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class InnovationRepository:
    """
    Read access to the innovation catalog, plus the inserts ingestion needs.
    """

    def __init__(self, session: Session):
        self.session = session

    def count(self) -> int:
        return self.session.execute(text("SELECT COUNT(*) FROM innovations")).scalar_one()

    def fetch_by_ids(self, ids: list[int]) -> list[InnovationRecord]:
        """Records for the given ids, in no particular order. Unknown ids are skipped."""
        if not ids:
            return []
        result = self.session.execute(
            text(f"SELECT {RECORD_COLUMNS} FROM innovations i WHERE i.id = ANY(:ids)"),
            {"ids": list(ids)},
        )
        return [_to_record(r) for r in result.fetchall()]

    def fetch_tags(self, ids: list[int]) -> dict[int, InnovationTags]:
        """One batched query per tag table."""
        if not ids:
            return {}
        values: dict[int, dict[str, list[str]]] = {i: {} for i in ids}
        for field, (table, column) in TAG_TABLES.items():
            result = self.session.execute(
                text(
                    f"SELECT innovation_id, {column} AS value FROM {table} "
                    "WHERE innovation_id = ANY(:ids)"
                ),
                {"ids": list(ids)},
            )
            for r in result.fetchall():
                values[r.innovation_id].setdefault(field, []).append(r.value)
        return {i: InnovationTags(**v) for i, v in values.items()}

    def search_vector(
        self, embedding: list[float], limit: int, timeout_ms: int | None = None
    ) -> list[int]:
        """
        Nearest neighbours by inner product via pgvector (<#> is the negated product).

        `timeout_ms` sets a transaction-local statement_timeout, so Postgres
        cancels the scan instead of leaving the caller's worker blocked.
        """
        if timeout_ms:
            self.session.execute(
                text("SELECT set_config('statement_timeout', :ms, true)"),
                {"ms": str(int(timeout_ms))},
            )
        result = self.session.execute(
            text(
                "SELECT id FROM innovations WHERE embedding IS NOT NULL "
                "ORDER BY embedding <#> CAST(:embedding AS vector) LIMIT :limit"
            ),
            {"embedding": str(embedding), "limit": limit},
        )
        return [r.id for r in result.fetchall()]

    def search_fulltext(self, tsquery: str, limit: int) -> list[InnovationRecord]:
        """Full-text search via tsvector. `tsquery` uses to_tsquery boolean syntax."""
        result = self.session.execute(
            text(
                f"SELECT {RECORD_COLUMNS}, "
                "ts_rank(i.tsv, to_tsquery('english', :query)) AS rank "
                "FROM innovations i WHERE i.tsv @@ to_tsquery('english', :query) "
                "ORDER BY rank DESC, i.id LIMIT :limit"
            ),
            {"query": tsquery, "limit": limit},
        )
        return [
            InnovationRecord(**{k: v for k, v in r._mapping.items() if k != "rank"})
            for r in result.fetchall()
        ]

    def search_substring(self, tokens: list[str], limit: int) -> list[InnovationRecord]:
        """Case-insensitive substring match of any token on title or descriptions."""
        if not tokens:
            return []
        conditions = []
        params: dict = {"limit": limit}
        for n, token in enumerate(tokens):
            conditions.append(
                f"(i.title ILIKE :p{n} OR i.short_description ILIKE :p{n} "
                f"OR i.long_description ILIKE :p{n})"
            )
            params[f"p{n}"] = f"%{_escape_like(token)}%"
        result = self.session.execute(
            text(
                f"SELECT {RECORD_COLUMNS} FROM innovations i "
                f"WHERE {' OR '.join(conditions)} ORDER BY i.id LIMIT :limit"
            ),
            params,
        )
        return [_to_record(r) for r in result.fetchall()]

    def insert(self, innovation: InnovationCreate) -> int:
        result = self.session.execute(
            text(
                "INSERT INTO innovations (title, short_description, long_description, "
                "readiness_level, adoption_level, region, is_grassroots, "
                "owner_text, partner_text, data_source) "
                "VALUES (:title, :short_description, :long_description, "
                ":readiness_level, :adoption_level, :region, :is_grassroots, "
                ":owner_text, :partner_text, :data_source) RETURNING id"
            ),
            innovation.model_dump(exclude=set(TAG_TABLES)),
        )
        innovation_id = result.scalar_one()
        for field, (table, column) in TAG_TABLES.items():
            for value in getattr(innovation, field):
                self.session.execute(
                    text(f"INSERT INTO {table} (innovation_id, {column}) VALUES (:id, :value)"),
                    {"id": innovation_id, "value": value},
                )
        return innovation_id

    def insert_batch(self, innovations: list[InnovationCreate]) -> list[int]:
        ids = [self.insert(a) for a in innovations]
        self.session.flush()
        logger.info("batch_inserted", count=len(ids))
        return ids

    def fetch_missing_embeddings(self) -> list[InnovationRecord]:
        result = self.session.execute(
            text(f"SELECT {RECORD_COLUMNS} FROM innovations i WHERE i.embedding IS NULL ORDER BY i.id")
        )
        return [_to_record(r) for r in result.fetchall()]

    def set_embedding(self, innovation_id: int, embedding: list[float]) -> None:
        self.session.execute(
            text("UPDATE innovations SET embedding = CAST(:embedding AS vector) WHERE id = :id"),
            {"embedding": str(embedding), "id": innovation_id},
        )


@contextmanager
def open_catalog() -> Generator[InnovationRepository, None, None]:
    """Repository bound to a fresh session. Components take this as their catalog factory."""
    with get_session() as session:
        yield InnovationRepository(session)


CatalogFactory = Callable[[], AbstractContextManager[InnovationRepository]]
