# portal_app/routes/__init__.py
"""
Application routes package
"""

from .admin_importer import admin_importer_blueprint
from .api import register_api_routes
from .metrics import register_metrics_route


def init_routes(app):
    """Initialize all application routes"""
    register_api_routes(app)
    register_metrics_route(app)
    if admin_importer_blueprint.name not in app.blueprints:
        app.register_blueprint(admin_importer_blueprint)
