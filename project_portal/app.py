"""
Flask application factory for the Student Project Portal backend
"""
import os
from pathlib import Path

from flask import Flask, jsonify, request
from flask_cors import CORS

from project_portal.config import get_config
from project_portal.i18n import t
from project_portal.services.record_store import InMemoryBackend, JsonFileBackend, RecordStore


def create_app(config_name=None, **overrides):
    """
    Application factory pattern for creating Flask app

    Args:
        config_name: Configuration name ('development', 'production', 'testing')
        **overrides: Individual config values to override

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app.config.from_object(get_config(config_name))
    app.config.update(overrides)

    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    # Temp area for uploads before they are placed in a submission folder
    Path(app.config['UPLOAD_FOLDER']).mkdir(parents=True, exist_ok=True)

    init_record_store(app)
    register_error_handlers(app)
    register_blueprints(app)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'version': '1.0.0',
            'service': 'project-portal-backend'
        }), 200

    return app


def init_record_store(app):
    """Build the project database for this app and make sure it exists"""
    if app.config['STORE_BACKEND'] == 'memory':
        backend = InMemoryBackend()
    else:
        data_dir = Path(app.config['DATA_DIR'])
        backend = JsonFileBackend(data_dir / app.config['PROJECTS_DB_FILE'],
                                  data_dir / app.config['PROJECTS_BACKUP_FILE'])

    store = RecordStore(backend)
    store.initialize()
    app.extensions['record_store'] = store
    return store


def register_error_handlers(app):
    """Register error handlers for the application"""

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'success': False,
            'error': t('errors.bad_request'),
            'message': str(error)
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': t('errors.not_found'),
            'message': t('errors.resource_not_found'),
            'path': request.path
        }), 404

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({
            'success': False,
            'error': t('errors.file_too_large'),
            'message': t('errors.max_file_size', size=app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024))
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({
            'success': False,
            'error': t('errors.internal_error'),
            'message': t('errors.unexpected_error')
        }), 500


def register_blueprints(app):
    """Register API blueprints"""
    from project_portal.api import api_bp

    app.register_blueprint(api_bp, url_prefix='/api')
