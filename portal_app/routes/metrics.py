# portal_app/routes/metrics.py

from flask import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest


def register_metrics_route(app):
    """Expose the Prometheus registry when ``MONITORING_ENABLED`` is set."""
    if not app.config.get("MONITORING_ENABLED", False):
        return
    endpoint = app.config.get("METRICS_ENDPOINT", "/metrics")

    @app.route(endpoint, methods=["GET"])
    def prometheus_metrics():
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
