"""
Load segment rows from JSONL files into the lexical store.

Each line is one segment: {"type", "work", "ref", "text"} plus optional
"id", "normalized_ref", "lang" and "source". Missing ids are derived from the
collection and the normalized reference.
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
from kol_hatorah.storage import Segment, StorageError, open_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("load_segments")


def read_segments(path: str):
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
                raw.setdefault("normalized_ref", raw.get("ref"))
                raw.setdefault("id", f"{raw.get('type')}:{raw.get('normalized_ref')}")
                yield Segment(**raw)
            except (json.JSONDecodeError, AttributeError, ValidationError) as e:
                logger.warning(f"{path}:{line_no}: skipped invalid row: {e}")


def main():
    parser = argparse.ArgumentParser(description="Load JSONL segments into the lexical store")
    parser.add_argument("inputs", nargs="+", help="JSONL files with one segment per line")
    parser.add_argument("--db", type=str, default=config.SQLITE_PATH, help="SQLite database path")
    args = parser.parse_args()

    total = 0
    try:
        with open_store(args.db) as store:
            for path in args.inputs:
                written = store.insert_segments(read_segments(path))
                logger.info(f"{path}: {written} segments")
                total += written
    except (StorageError, OSError) as e:
        logger.error(f"Failed to load segments: {e}")
        sys.exit(1)
    logger.info(f"Loaded {total} segments into {args.db}")


if __name__ == "__main__":
    main()
