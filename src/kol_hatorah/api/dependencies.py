import logging
from typing import Optional

from flask import request, jsonify

from kol_hatorah import config as core_config
from kol_hatorah.api import config, state
from kol_hatorah.planner.registry import WorkRegistry
from kol_hatorah.qa import GeneralQA, QAIndexError
from kol_hatorah.storage import SQLiteLexicalStore, StorageError, open_store

logger = logging.getLogger("api")


def require_api_key():
    if config.API_KEY:
        key = request.headers.get("X-API-Key", "")
        if key != config.API_KEY:
            return jsonify({"error": "Unauthorized"}), 401
    return None


def get_store() -> SQLiteLexicalStore:
    """Open the lexical store for one request. Raises StorageError."""
    return open_store(core_config.SQLITE_PATH)


def rebuild_registry() -> WorkRegistry:
    """Build a fresh registry from storage and swap it in. Raises StorageError."""
    with state.registry_lock:
        with get_store() as store:
            registry = WorkRegistry.from_store(store)
        state.registry = registry
    return registry


def load_registry() -> None:
    try:
        rebuild_registry()
    except StorageError as e:
        logger.warning(f"[api] Work registry unavailable: {e}")


def get_registry() -> WorkRegistry:
    if state.registry is None:
        return rebuild_registry()
    return state.registry


def load_qa_index() -> Optional[GeneralQA]:
    if not config.LOAD_QA_INDEX:
        logger.info("[api] Skipping QA index load")
        return None
    try:
        state.general_qa = GeneralQA.from_path(core_config.QA_INDEX_PATH)
        logger.info(f"[api] Loaded QA index from {core_config.QA_INDEX_PATH}")
    except QAIndexError as e:
        logger.warning(f"[api] General QA disabled: {e}")
        state.general_qa = None
    return state.general_qa


def storage_unavailable(e: StorageError):
    logger.error(f"[api] Lexical store error: {e}")
    return jsonify({"error": "storage_unavailable", "detail": str(e)}), 503
