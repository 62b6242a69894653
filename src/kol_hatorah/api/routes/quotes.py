from flask import Blueprint, request, jsonify
from flasgger import swag_from
from werkzeug.exceptions import BadRequest
from pydantic import ValidationError

from kol_hatorah.api import state, dependencies, models
from kol_hatorah.api.extensions import limiter
from kol_hatorah.quotes import detect_quotes_with_links
from kol_hatorah.storage import StorageError

quotes_bp = Blueprint('quotes', __name__)


@quotes_bp.route("/api/quotes/detect", methods=["POST"])
@limiter.limit("60/minute")
@swag_from({
    'tags': ['quotes'],
    'consumes': ['application/json'],
    'parameters': [{
        'name': 'body', 'in': 'body', 'required': True,
        'schema': {'type': 'object', 'properties': {
            'text': {'type': 'string'},
            'link': {'type': 'boolean'},
            'top_k': {'type': 'integer'},
        }}
    }],
    'responses': {200: {'description': 'Quote candidates with verdicts'}, 400: {'description': 'Validation failed'}}
})
def detect_quotes():
    auth = dependencies.require_api_key()
    if auth:
        return auth
    raw = request.get_json(silent=True) or {}
    if not isinstance(raw, dict):
        raise BadRequest("Body must be a JSON object")
    try:
        parsed = models.DetectQuotesRequest(**raw)
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": ve.errors(include_url=False)}), 400

    try:
        if parsed.link:
            with dependencies.get_store() as store:
                results = detect_quotes_with_links(parsed.text, store, top_k=parsed.top_k)
        else:
            results = detect_quotes_with_links(parsed.text)
    except StorageError as e:
        return dependencies.storage_unavailable(e)

    if state.QUOTE_VERDICTS_TOTAL:
        for r in results:
            state.QUOTE_VERDICTS_TOTAL.labels(r.verdict.value).inc()
    return jsonify({
        "results": [r.model_dump(mode="json") for r in results],
        "confirmed": sum(1 for r in results if r.confirmed),
        "linked": parsed.link,
    })
