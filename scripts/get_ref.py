"""
Print the stored segment for one normalized reference:

    python scripts/get_ref.py --ref "Genesis 1:1"
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
from kol_hatorah.storage import StorageError, open_store

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger("get_ref")


def main():
    parser = argparse.ArgumentParser(description="Fetch one segment by normalized reference")
    parser.add_argument("--ref", type=str, required=True, help='Normalized reference, e.g. "Genesis 1:1"')
    parser.add_argument("--db", type=str, default=config.SQLITE_PATH, help="SQLite database path")
    args = parser.parse_args()

    try:
        with open_store(args.db) as store:
            row = store.get_ref(args.ref.strip())
    except StorageError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)
    if row is None:
        print(json.dumps({"found": False}))
    else:
        print(json.dumps({"found": True, "row": row.model_dump()}, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
