"""
Ask a Hebrew question from the command line:

    python scripts/ask.py --q "איפה מופיעה המילה \"אור\" בנביאים"
"""
import os
import sys
import json
import argparse
import logging

SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from kol_hatorah import config
from kol_hatorah.evaluation import ask_once
from kol_hatorah.planner import WorkRegistry, render_answer
from kol_hatorah.qa import GeneralQA, QAIndexError
from kol_hatorah.storage import StorageError, open_store
from kol_hatorah.text import normalize_query_input

logger = logging.getLogger("ask")


def load_general_qa():
    try:
        return GeneralQA.from_path(config.QA_INDEX_PATH)
    except QAIndexError as e:
        logger.info(f"General QA unavailable: {e}")
        return None


def main():
    parser = argparse.ArgumentParser(description="Ask a question over Tanakh, Mishnah and Bavli")
    parser.add_argument("--q", "--query", dest="query", type=str, required=True, help="Question in Hebrew")
    parser.add_argument("--limit", "-k", type=int, default=None, help="Results per page")
    parser.add_argument("--offset", type=int, default=0, help="Results to skip")
    parser.add_argument("--json", action="store_true", help="Print the raw result as JSON")
    parser.add_argument("--debug", action="store_true", help="Print the plan to stderr")
    parser.add_argument("--show-tanakh-text", action="store_true", help="Show the linked verse text")
    parser.add_argument("--show-mishnah-text", action="store_true", help="Show the full source text")
    parser.add_argument("--db", type=str, default=config.SQLITE_PATH, help="SQLite database path")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    query = normalize_query_input(args.query)
    if not query:
        print("Error: --q is required", file=sys.stderr)
        sys.exit(1)

    try:
        with open_store(args.db) as store:
            registry = WorkRegistry.from_store(store)
            plan, result, limit = ask_once(
                query, store, registry, limit=args.limit, offset=args.offset, load_general_qa=load_general_qa
            )
    except StorageError as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.debug:
        print("Plan:", plan.model_dump_json(indent=2), file=sys.stderr)
    if args.json:
        print(json.dumps(result.model_dump(mode="json", exclude_none=True), ensure_ascii=False, indent=2))
    else:
        print(render_answer(
            plan,
            result,
            limit=limit,
            offset=args.offset,
            show_tanakh_text=args.show_tanakh_text,
            show_mishnah_text=args.show_mishnah_text,
        ))


if __name__ == "__main__":
    main()
