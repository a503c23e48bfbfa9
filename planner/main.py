import os
import logging
from flask import Flask, jsonify, request
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from planner.extensions import db, migrate, csrf
from planner.scheduling.errors import SchedulingError

# Import models so their tables are registered before create_all
from planner.models import absence, curriculum, lesson, setting, student  # noqa: F401

from planner.routes.api import api_bp
from planner.routes.absences import absences_bp
from planner.routes.curriculum import curriculum_bp
from planner.routes.export import export_bp
from planner.routes.settings import settings_bp


def create_app(test_config=None):
    # Load environment variables from .env file
    load_dotenv()

    app = Flask(__name__)

    # Configuration
    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "default_secret_key_for_development")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///planner.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["WTF_CSRF_ENABLED"] = True
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    logging.getLogger("planner").setLevel(app.logger.level)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    # Register blueprints; the JSON API does not use CSRF tokens
    for blueprint in (api_bp, absences_bp, curriculum_bp, export_bp, settings_bp):
        csrf.exempt(blueprint)
        app.register_blueprint(blueprint)

    with app.app_context():
        db.create_all()

    @app.route("/")
    def index():
        return jsonify(service="homeschool-planner", api="/api/v1")

    # Error Handling
    @app.errorhandler(SchedulingError)
    def scheduling_error(e):
        app.logger.info(f"Rejected scheduling request: {e}")
        return jsonify(error=str(e)), 400

    @app.errorhandler(404)
    def page_not_found(e):
        if request.path.startswith("/api/"):
            return jsonify(error="Not Found"), 404
        return e

    @app.errorhandler(SQLAlchemyError)
    @app.errorhandler(500)
    def internal_server_error(e):
        app.logger.error(f"Internal Server Error: {e}")
        db.session.rollback()
        return jsonify(error="Internal Server Error"), 500

    return app
