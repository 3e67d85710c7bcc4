"""
Flask Application Factory

This module creates and configures the Flask application.
"""
import time
from flask import Flask, g, request, jsonify
from flask_cors import CORS

from .config import get_config
from .errors import BiliError
from .extensions import db, migrate, session_manager
from .api import auth_bp, domains_bp
from .utils.logger import setup_logger, get_logger


def create_app(config_class=None):
    """Create and configure Flask application.

    Args:
        config_class: Configuration class to use. If None, auto-detect from environment.

    Returns:
        Configured Flask application instance
    """
    if config_class is None:
        config_class = get_config()

    app = Flask(__name__)
    app.config.from_object(config_class)

    config_class.init_paths()

    setup_logger(
        log_level=app.config.get('LOG_LEVEL', 'INFO'),
        log_file=app.config.get('LOG_FILE')
    )
    logger = get_logger('app')

    cors_config = config_class.get_cors_config()
    CORS(app, resources={r"/api/*": cors_config})

    db.init_app(app)
    migrate.init_app(app, db)

    # Platform transport built from BILI_* settings
    session_manager.init_app(app)

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_request_hooks(app)
    _register_health_check(app)

    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    logger.info(f"Application initialized, database: {db_uri}, backups: {app.config['BACKUP_PATH']}")

    return app


def _register_blueprints(app):
    """Register API blueprints under /api."""
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(domains_bp, url_prefix='/api')


def _register_error_handlers(app):
    """Register global error handlers."""
    from .utils.responses import ApiResponse

    @app.errorhandler(BiliError)
    def bili_error(error):
        return ApiResponse.from_bili_error(error)

    @app.errorhandler(400)
    def bad_request(error):
        msg = str(error.description) if hasattr(error, 'description') else 'Bad request'
        return ApiResponse.error(msg, 400, 'BAD_REQUEST')

    @app.errorhandler(404)
    def not_found(error):
        msg = str(error.description) if hasattr(error, 'description') else 'Resource not found'
        return ApiResponse.not_found(msg)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return ApiResponse.error('Method not allowed', 405, 'METHOD_NOT_ALLOWED')

    @app.errorhandler(500)
    def internal_error(error):
        logger = get_logger('error')
        logger.exception(error)
        return ApiResponse.server_error('Internal server error')


def _register_request_hooks(app):
    """Register request timing hooks."""

    @app.before_request
    def before_request():
        g.start_time = time.time()

    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time'):
            duration = (time.time() - g.start_time) * 1000
            # backup/restore runs are long by nature; only flag the quick endpoints
            if duration > 1000 and request.method == 'GET':
                logger = get_logger('slow_request')
                logger.warning(f"Slow request: {request.method} {request.path} took {duration:.2f}ms")
        return response


def _register_health_check(app):
    """Register health check endpoint."""

    @app.route('/api/health')
    def health_check():
        """Health check endpoint for container orchestration."""
        return jsonify({
            'status': 'healthy',
            'service': 'bili-backup',
            'logged_in': session_manager.is_logged_in,
        })
