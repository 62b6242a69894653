"""
Run a JSON file of evaluation queries through plan, execute and render:

    python scripts/eval_queries.py --file eval/queries.json --out reports/eval.json

Each entry is {"q": ..., "expectedRefs": [...], "shouldRefuse": bool}. The
report lists every query's outcome plus the number that passed.
"""
import os
import sys
import json
import argparse
import logging

SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from pydantic import ValidationError

from kol_hatorah import config
from kol_hatorah.evaluation import evaluate_queries, load_queries
from kol_hatorah.planner import WorkRegistry
from kol_hatorah.qa import GeneralQA, QAIndexError
from kol_hatorah.storage import StorageError, open_store

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger("eval_queries")

DEFAULT_QUERIES = os.path.join(os.path.dirname(__file__), os.pardir, "eval", "queries.json")


def main():
    parser = argparse.ArgumentParser(description="Evaluate questions against expected references")
    parser.add_argument("--file", "-f", type=str, default=DEFAULT_QUERIES, help="JSON list of queries")
    parser.add_argument("--limit", "-k", type=int, default=None, help="Results per query")
    parser.add_argument("--out", "-o", type=str, default=None, help="Write the report here instead of stdout")
    parser.add_argument("--db", type=str, default=config.SQLITE_PATH, help="SQLite database path")
    parser.add_argument("--qa-index", type=str, default=config.QA_INDEX_PATH, help="General QA index path")
    args = parser.parse_args()

    try:
        queries = load_queries(args.file)
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"Failed to read queries file {args.file}: {e}")
        sys.exit(1)

    try:
        general_qa = GeneralQA.from_path(args.qa_index)
    except QAIndexError as e:
        logger.info(f"General QA unavailable: {e}")
        general_qa = None

    try:
        with open_store(args.db) as store:
            registry = WorkRegistry.from_store(store)
            report = evaluate_queries(queries, store, registry, general_qa=general_qa, limit=args.limit)
    except StorageError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    body = json.dumps(report, ensure_ascii=False, indent=2)
    if args.out:
        os.makedirs(os.path.dirname(os.path.abspath(args.out)), exist_ok=True)
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(body)
        logger.info(f"Wrote report for {report['count']} queries to {args.out}")
    else:
        print(body)


if __name__ == "__main__":
    main()
