import json
import time
import uuid
import logging
from datetime import datetime, timezone

import sentry_sdk
from flask import Flask, g, request
from flask_cors import CORS
from flasgger import Swagger
from prometheus_client import Counter, Histogram
from sentry_sdk.integrations.flask import FlaskIntegration

from kol_hatorah import config as core_config
from kol_hatorah.api import config, dependencies, state
from kol_hatorah.api.extensions import limiter
from kol_hatorah.api.routes import ask_bp, monitoring_bp, quotes_bp

logging.basicConfig(level=getattr(logging, core_config.LOG_LEVEL.upper(), logging.INFO), format='%(message)s')
logger = logging.getLogger("api")

SWAGGER_TEMPLATE = {
    "info": {
        "title": "Kol HaTorah API",
        "description": "Query planning, lexical retrieval and Tanakh quotation detection",
        "version": config.APP_VERSION,
    }
}


def _register_metrics():
    try:
        state.REQUEST_COUNT = Counter(
            'kol_hatorah_requests_total', 'HTTP requests by route and status', ['method', 'endpoint', 'status'])
        state.REQUEST_LATENCY = Histogram(
            'kol_hatorah_request_latency_seconds', 'HTTP request latency', ['endpoint'])
        state.PLANS_TOTAL = Counter(
            'kol_hatorah_plans_total', 'Query plans by intent', ['intent', 'disambiguation'])
        state.QUOTE_VERDICTS_TOTAL = Counter(
            'kol_hatorah_quote_verdicts_total', 'Quotation candidates by verdict', ['verdict'])
    except ValueError:
        # collectors survive a module reload in the default registry
        pass


def _init_sentry():
    if not config.SENTRY_DSN:
        return
    try:
        sentry_sdk.init(
            dsn=config.SENTRY_DSN,
            integrations=[FlaskIntegration()],
            traces_sample_rate=config.SENTRY_TRACES_SAMPLE_RATE,
            profiles_sample_rate=config.SENTRY_PROFILES_SAMPLE_RATE,
            environment=config.APP_ENV,
            release=f"kol-hatorah@{config.APP_VERSION}",
        )
        logger.info("Sentry enabled")
    except Exception as e:
        logger.error(f"Sentry init failed: {e}")


_register_metrics()
_init_sentry()

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH
# Hebrew stays readable in JSON responses
app.json.ensure_ascii = False
CORS(app)
Swagger(app, template=SWAGGER_TEMPLATE)
limiter.init_app(app)

for blueprint in (ask_bp, quotes_bp, monitoring_bp):
    app.register_blueprint(blueprint)


@app.before_request
def _start_timer():
    g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    g.started_at = time.time()


@app.after_request
def _access_log(response):
    elapsed = time.time() - getattr(g, 'started_at', time.time())
    endpoint = request.endpoint or request.path
    logger.info(json.dumps({
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "request_id": getattr(g, 'request_id', None),
        "method": request.method,
        "path": request.path,
        "status": response.status_code,
        "duration_ms": round(elapsed * 1000),
        "remote_addr": request.headers.get('X-Forwarded-For', request.remote_addr),
    }, ensure_ascii=False))
    if state.REQUEST_COUNT:
        state.REQUEST_COUNT.labels(request.method, endpoint, response.status_code).inc()
    if state.REQUEST_LATENCY:
        state.REQUEST_LATENCY.labels(endpoint).observe(elapsed)
    if getattr(g, 'request_id', None):
        response.headers["X-Request-ID"] = g.request_id
    return response


# Registry and QA index are loaded once per worker
dependencies.load_registry()
dependencies.load_qa_index()

if __name__ == "__main__":
    app.run(debug=True, port=5002, host="0.0.0.0")
