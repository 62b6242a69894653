import os
import platform

from flask import Blueprint, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from kol_hatorah import config as core_config
from kol_hatorah.api import config, dependencies, state
from kol_hatorah.storage import ScopeFilter, StorageError
from kol_hatorah.taxonomy import COLLECTIONS

monitoring_bp = Blueprint('monitoring', __name__)


def _work_counts(registry):
    return {c: len(works) for c, works in registry.as_dict().items()}


@monitoring_bp.route("/metrics", methods=["GET"])
def metrics():
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)


@monitoring_bp.route("/version", methods=["GET"])
@monitoring_bp.route("/api/version", methods=["GET"])
def version():
    return jsonify({
        "service": "kol-hatorah",
        "version": config.APP_VERSION,
        "env": config.APP_ENV,
        "commit": os.getenv("GIT_COMMIT"),
        "python": platform.python_version(),
        "works": _work_counts(state.registry) if state.registry else None,
        "general_qa": state.general_qa is not None,
    })


@monitoring_bp.route("/api/health", methods=["GET"])
def health():
    """Store reachability plus segment counts per collection."""
    try:
        with dependencies.get_store() as store:
            by_collection = {c: store.count_segments(ScopeFilter(type=c)) for c in COLLECTIONS}
            total = store.count_segments()
    except StorageError as e:
        return jsonify({"status": "error", "detail": str(e)}), 500
    return jsonify({"status": "ok", "segments": total, "by_collection": by_collection}), 200


@monitoring_bp.route("/api/health/ready", methods=["GET"])
def health_ready():
    """Readiness: a non-empty work registry has been built."""
    checks = {
        'registry_loaded': state.registry is not None and len(state.registry) > 0,
        'store_configured': bool(core_config.SQLITE_PATH),
    }
    ready = all(checks.values())
    body = {"ready": ready, "checks": checks, "general_qa_loaded": state.general_qa is not None}
    return jsonify(body), 200 if ready else 503


@monitoring_bp.route("/api/health/live", methods=["GET"])
def health_live():
    return jsonify({"alive": True}), 200


@monitoring_bp.route("/api/registry/rebuild", methods=["POST"])
def registry_rebuild():
    """Swap in a registry rebuilt from storage, e.g. after loading new segments."""
    auth = dependencies.require_api_key()
    if auth:
        return auth
    try:
        registry = dependencies.rebuild_registry()
    except StorageError as e:
        return dependencies.storage_unavailable(e)
    return jsonify({"status": "ok", "works": _work_counts(registry)}), 200
