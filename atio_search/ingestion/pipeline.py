"""Ingestion pipeline: catalog CSV -> Postgres, then embeddings of sanitized text."""

import re
from pathlib import Path

import pandas as pd

from atio_search.db.connection import get_session
from atio_search.db.repository import InnovationRepository
from atio_search.db.models import InnovationCreate
from atio_search.ranking.sanitize import sanitize_text
from atio_search.services.embedding import BaseEmbeddingService, create_embedding_service
from atio_search.logger import get_logger

logger = get_logger(__name__)

TEXT_COLUMNS = (
    "short_description",
    "long_description",
    "readiness_level",
    "adoption_level",
    "region",
    "owner_text",
    "partner_text",
    "data_source",
)
# ";"-separated list columns, one per tag table.
TAG_COLUMNS = ("countries", "types", "sdgs", "use_cases", "users")


class IngestionPipeline:
    """
    Loads the innovation catalog from CSV and fills the pgvector column.

    Embeddings are computed from sanitized text only, the same view the
    reranker sees, so no identifying metadata reaches the embedding provider.
    """

    def __init__(self, embedding_service: BaseEmbeddingService | None = None):
        self._embedding_service = embedding_service

    @property
    def embedding_service(self) -> BaseEmbeddingService:
        if self._embedding_service is None:
            self._embedding_service = create_embedding_service()
        return self._embedding_service

    def ingest_csv(self, csv_path: str | Path) -> int:
        """Load CSV and store records. Skips if already ingested."""
        csv_path = Path(csv_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV not found: {csv_path}")

        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
        if "title" not in df.columns:
            raise ValueError("CSV must contain a 'title' column")

        innovations = [self._to_create(row) for row in df.to_dict(orient="records")]
        innovations = [i for i in innovations if i is not None]
        logger.info("csv_loaded", count=len(innovations))

        with get_session() as session:
            repo = InnovationRepository(session)
            existing = repo.count()
            if existing > 0:
                logger.info("already_ingested", count=existing)
                return existing
            repo.insert_batch(innovations)

        logger.info("ingestion_complete", count=len(innovations))
        return len(innovations)

    def embed_missing(self) -> int:
        """Embed every record that has no vector yet. Records without free text are left empty."""
        with get_session() as session:
            records = InnovationRepository(session).fetch_missing_embeddings()

        pending = [(r.id, sanitize_text(r)) for r in records]
        pending = [(i, t) for i, t in pending if t]
        if not pending:
            logger.info("embeddings_up_to_date")
            return 0

        embeddings = self.embedding_service.embed_batch([t for _, t in pending])

        with get_session() as session:
            repo = InnovationRepository(session)
            for (innovation_id, _), embedding in zip(pending, embeddings):
                repo.set_embedding(innovation_id, embedding)

        logger.info("embeddings_stored", count=len(pending))
        return len(pending)

    @classmethod
    def _to_create(cls, row: dict) -> InnovationCreate | None:
        title = cls._clean_text(row.get("title", ""))
        if not title:
            return None
        fields = {c: cls._clean_text(row.get(c, "")) for c in TEXT_COLUMNS}
        tags = {c: cls._split_list(row.get(c, "")) for c in TAG_COLUMNS}
        grassroots = str(row.get("is_grassroots", "")).strip().lower() in {"1", "true", "yes"}
        return InnovationCreate(title=title, is_grassroots=grassroots, **fields, **tags)

    @staticmethod
    def _split_list(value: str) -> list[str]:
        return [v.strip() for v in (value or "").split(";") if v.strip()]

    @staticmethod
    def _clean_text(text: str) -> str:
        text = (text or "").strip().strip('"').strip()
        text = re.sub(r"\*{1,2}(.+?)\*{1,2}", r"\1", text)  # **bold**, *italic*
        text = " ".join(text.split())
        return text
