"""
Build the TF-IDF index used for open-ended questions from every segment in the
lexical store and write it to QA_INDEX_PATH (models/qa_index.pkl by default).
"""
import os
import sys
import argparse
import logging

SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from kol_hatorah import config
from kol_hatorah.qa import QAIndexError, build_qa_index
from kol_hatorah.storage import StorageError, open_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("build_qa_index")


def main():
    parser = argparse.ArgumentParser(description="Build the general-QA TF-IDF index")
    parser.add_argument("--db", type=str, default=config.SQLITE_PATH, help="SQLite database path")
    parser.add_argument("--out", type=str, default=config.QA_INDEX_PATH, help="Output path for pickle")
    parser.add_argument("--max-features", type=int, default=200000, help="Max TF-IDF features")
    parser.add_argument("--ngram-max", type=int, default=4, help="Max character ngram size")
    args = parser.parse_args()

    try:
        with open_store(args.db) as store:
            logger.info(f"Indexing {store.count_segments()} segments...")
            out_path = build_qa_index(store, args.out, args.max_features, args.ngram_max)
        logger.info(f"Index saved to {out_path}")
    except (StorageError, QAIndexError) as e:
        logger.error(f"Failed to build index: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
