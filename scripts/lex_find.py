"""
Look a term up in the lexical store and print the hits with a snippet:

    python scripts/lex_find.py --term אור --scope tanakh --limit 20
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
from kol_hatorah.storage import ScopeFilter, StorageError, open_store
from kol_hatorah.taxonomy import COLLECTIONS
from kol_hatorah.text import normalize_text, snippet_around

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger("lex_find")


def find_hits(store, term: str, scope: ScopeFilter, limit: int, context: int):
    term_norm = normalize_text(term).norm
    rows = store.find_term(term_norm, scope, limit=limit)
    hits = [
        {
            "idx": i,
            "work": r.work,
            "ref": r.ref,
            "type": r.type,
            "snippet": snippet_around(r.text_plain, term, context),
        }
        for i, r in enumerate(rows, 1)
    ]
    return {"total": store.count_term(term_norm, scope), "hits": hits}


def main():
    parser = argparse.ArgumentParser(description="Find a term in the lexical store")
    parser.add_argument("--term", "-t", type=str, required=True, help="Term to look up")
    parser.add_argument("--scope", "--type", dest="scope", choices=COLLECTIONS, default=None, help="Collection")
    parser.add_argument("--work", type=str, default=None, help="Canonical work name")
    parser.add_argument("--limit", type=int, default=20, help="Maximum hits to print")
    parser.add_argument("--context", type=int, default=120, help="Snippet width in characters")
    parser.add_argument("--db", type=str, default=config.SQLITE_PATH, help="SQLite database path")
    args = parser.parse_args()

    scope = ScopeFilter(type=args.scope, work=args.work)
    try:
        with open_store(args.db) as store:
            out = find_hits(store, args.term, scope, args.limit, args.context)
    except StorageError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)
    print(json.dumps(out, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
