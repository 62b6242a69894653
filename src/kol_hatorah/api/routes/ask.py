from flask import Blueprint, request, jsonify
from flasgger import swag_from
from werkzeug.exceptions import BadRequest
from pydantic import ValidationError

from kol_hatorah.api import state, dependencies, models
from kol_hatorah.api.extensions import limiter
from kol_hatorah.planner import execute_plan, plan_query, render_answer
from kol_hatorah.storage import StorageError

ask_bp = Blueprint('ask', __name__)


def _parse(model, raw):
    if not isinstance(raw, dict):
        raise BadRequest("Body must be a JSON object")
    return model(**raw)


def _count_plan(plan):
    if state.PLANS_TOTAL:
        state.PLANS_TOTAL.labels(plan.intent.value, str(plan.requires_disambiguation).lower()).inc()


@ask_bp.route("/api/plan", methods=["POST"])
@limiter.limit("120/minute")
@swag_from({
    'tags': ['planner'],
    'consumes': ['application/json'],
    'parameters': [{
        'name': 'body', 'in': 'body', 'required': True,
        'schema': {'type': 'object', 'properties': {'query': {'type': 'string'}}}
    }],
    'responses': {200: {'description': 'Query plan'}, 400: {'description': 'Validation failed'}}
})
def plan():
    auth = dependencies.require_api_key()
    if auth:
        return auth
    try:
        parsed = _parse(models.PlanRequest, request.get_json(silent=True) or {})
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": ve.errors(include_url=False)}), 400
    try:
        registry = dependencies.get_registry()
    except StorageError as e:
        return dependencies.storage_unavailable(e)
    query_plan = plan_query(parsed.query, registry)
    _count_plan(query_plan)
    return jsonify({"plan": query_plan.model_dump(mode="json")})


@ask_bp.route("/api/ask", methods=["POST"])
@limiter.limit("60/minute")
@swag_from({
    'tags': ['planner'],
    'consumes': ['application/json'],
    'parameters': [{
        'name': 'body', 'in': 'body', 'required': True,
        'schema': {'type': 'object', 'properties': {
            'query': {'type': 'string'},
            'limit': {'type': 'integer'},
            'offset': {'type': 'integer'},
            'format': {'type': 'string', 'enum': ['json', 'text']},
            'show_tanakh_text': {'type': 'boolean'},
            'show_mishnah_text': {'type': 'boolean'},
        }}
    }],
    'responses': {200: {'description': 'Plan result'}, 400: {'description': 'Validation failed'},
                  503: {'description': 'Lexical store unavailable'}}
})
def ask():
    auth = dependencies.require_api_key()
    if auth:
        return auth
    try:
        parsed = _parse(models.AskRequest, request.get_json(silent=True) or {})
    except ValidationError as ve:
        return jsonify({"error": "validation_failed", "details": ve.errors(include_url=False)}), 400

    try:
        registry = dependencies.get_registry()
        query_plan = plan_query(parsed.query, registry)
        _count_plan(query_plan)
        with dependencies.get_store() as store:
            result = execute_plan(
                query_plan,
                parsed.query,
                store,
                registry,
                general_qa=state.general_qa,
                limit=parsed.limit,
                offset=parsed.offset,
            )
    except StorageError as e:
        return dependencies.storage_unavailable(e)

    if parsed.format == "text":
        text = render_answer(
            query_plan,
            result,
            limit=parsed.limit if parsed.limit is not None else query_plan.limits.max_results,
            offset=parsed.offset,
            show_tanakh_text=parsed.show_tanakh_text,
            show_mishnah_text=parsed.show_mishnah_text,
        )
        return jsonify({"kind": result.kind, "text": text})
    return jsonify({"result": result.model_dump(mode="json", exclude_none=True)})
