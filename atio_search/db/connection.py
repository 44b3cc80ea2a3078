"""Database session management and schema initialization."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session

from atio_search.config.settings import settings
from atio_search.logger import get_logger


logger = get_logger(__name__)

engine = create_engine(settings.database_url, pool_pre_ping=True, pool_size=5)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

# tag field -> (table, value column) for every tag table hanging off innovations.
TAG_TABLES = {
    "countries": ("innovation_countries", "country_name"),
    "types": ("innovation_types", "term_name"),
    "sdgs": ("innovation_sdgs", "sdg_name"),
    "use_cases": ("innovation_use_cases", "term_name"),
    "users": ("innovation_prospective_users", "user_name"),
}


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    :return: Database session generator
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_schema() -> None:
    """
    Create extensions and tables.

    Vector dimension is read from settings. Make sure it matches the embedding provider's output.
    The tsv column indexes title and both descriptions; the substring stage
    scans the same three columns.
    """
    dim = settings.embedding_dimension

    with get_session() as session:
        session.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        session.execute(
            text(
                f"""
            CREATE TABLE IF NOT EXISTS innovations (
                id SERIAL PRIMARY KEY,
                title TEXT NOT NULL,
                short_description TEXT,
                long_description TEXT,
                readiness_level TEXT,
                adoption_level TEXT,
                region TEXT,
                is_grassroots BOOLEAN NOT NULL DEFAULT FALSE,
                owner_text TEXT,
                partner_text TEXT,
                data_source TEXT,
                embedding vector({dim}),
                tsv tsvector GENERATED ALWAYS AS (
                    to_tsvector(
                        'english',
                        coalesce(title, '') || ' ' ||
                        coalesce(short_description, '') || ' ' ||
                        coalesce(long_description, '')
                    )
                ) STORED
            )
        """
            )
        )
        session.execute(
            text("CREATE INDEX IF NOT EXISTS innovations_tsv_idx ON innovations USING GIN (tsv)")
        )
        for table, column in TAG_TABLES.values():
            session.execute(
                text(
                    f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    innovation_id INT NOT NULL REFERENCES innovations(id) ON DELETE CASCADE,
                    {column} TEXT NOT NULL
                )
            """
                )
            )
            session.execute(
                text(
                    f"CREATE INDEX IF NOT EXISTS {table}_innovation_idx "
                    f"ON {table} (innovation_id)"
                )
            )

    logger.info("schema_initialized", embedding_dimension=dim)


def check_connection() -> bool:
    try:
        with get_session() as session:
            session.execute(text("SELECT 1"))
            session.execute(text("SELECT vector '[1,2,3]'"))
        logger.info("database_ok")
        return True
    except Exception as e:
        logger.error("database_failed", error=str(e))
        return False
