"""
ATIO Search.

Usage:
    python main.py --task ingest --csv data/innovations.csv      # Load catalog + embed sanitized text
    python main.py --task search --query "drought-tolerant seed varieties" --offset 0 --limit 5
    python main.py --task serve --port 3001                       # HTTP API (POST /api/search)
"""

import argparse
import json
import sys
from pathlib import Path

from atio_search.config.settings import settings
from atio_search.logger import setup_logging, get_logger
from atio_search.db.connection import check_connection, init_schema
from atio_search.ingestion.pipeline import IngestionPipeline
from atio_search.search.pipeline import InvalidQueryError, SearchPipeline
from atio_search.search.models import SearchPage

setup_logging()
logger = get_logger("main")


def run_ingest(csv_path: Path) -> None:
    pipeline = IngestionPipeline()
    count = pipeline.ingest_csv(csv_path)
    embedded = pipeline.embed_missing()
    logger.info("ready", innovations=count, embedded=embedded)


def print_page(page: SearchPage, offset: int) -> None:
    print(f"\n{'='*70}")
    print(f" Query: {page.query[:100]}")
    print(f" Showing {offset + 1}-{offset + len(page.results)} of {page.total}"
          f"{' (more available)' if page.has_more else ''}")
    print(f"{'='*70}\n")

    for i, r in enumerate(page.results, offset + 1):
        print(f"  [{i}] {r.title}  (score {r.match_score:.0f})")
        print(f"      Cost: {r.cost} | Complexity: {r.complexity} | Readiness: {r.readiness_level}")
        print(f"      {r.short_description[:200]}\n")


def run_search(query: str, offset: int, limit: int, as_json: bool) -> SearchPage:
    pipeline = SearchPipeline()
    try:
        page = pipeline.search(query, offset=offset, limit=limit)
    finally:
        pipeline.close()

    if as_json:
        print(json.dumps(page.model_dump(by_alias=True), indent=2))
    else:
        print_page(page, offset)
    return page


def run_serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("atio_search.api.app:app", host=host, port=port)


# CLI
def main():
    parser = argparse.ArgumentParser(description="ATIO innovation search")
    parser.add_argument("--task", choices=["ingest", "search", "serve"], required=True)
    parser.add_argument("--csv", type=Path, default=Path(settings.data_dir) / "innovations.csv")
    parser.add_argument("--query", type=str, default="drought-tolerant seed varieties")
    parser.add_argument("--offset", type=int, default=0)
    parser.add_argument("--limit", type=int, default=settings.default_page_limit)
    parser.add_argument("--json", action="store_true", help="Print the raw API payload")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3001)
    args = parser.parse_args()

    if args.task == "serve":
        run_serve(args.host, args.port)
        return

    init_schema()

    if not check_connection():
        logger.error("Database unavailable")
        sys.exit(1)

    if args.task == "ingest":
        run_ingest(args.csv)
    elif args.task == "search":
        try:
            run_search(args.query, args.offset, args.limit, args.json)
        except InvalidQueryError as e:
            logger.error("invalid_query", error=str(e))
            sys.exit(2)


if __name__ == "__main__":
    main()
