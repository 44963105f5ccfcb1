"""
ProofAlign - Main Flask Application
Sentence alignment service for proofreading errata tables
"""
import os

from flask import Flask, g, jsonify, request

from config_logging import APP_NAME, VERSION, StructuredLogger, get_config, get_logger
from sentence_align.routes import align_blueprint

logger = get_logger('app')

MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # 50MB max request size


def create_app() -> Flask:
    """Build the Flask application with the alignment API registered."""
    flask_app = Flask(__name__)
    flask_app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH
    flask_app.register_blueprint(align_blueprint)

    @flask_app.before_request
    def assign_correlation_id():
        """Tag every request (and its log records) with a correlation id."""
        incoming = request.headers.get('X-Correlation-ID')
        if incoming:
            StructuredLogger.set_correlation_id(incoming[:64])
            g.correlation_id = incoming[:64]
        else:
            g.correlation_id = StructuredLogger.new_correlation_id()

    @flask_app.after_request
    def add_correlation_header(response):
        response.headers['X-Correlation-ID'] = getattr(g, 'correlation_id', 'unknown')
        return response

    @flask_app.route('/api/version')
    def version():
        """Application name and version"""
        return jsonify({'app': APP_NAME, 'version': VERSION})

    @flask_app.errorhandler(413)
    def request_too_large(_error):
        return jsonify({
            'success': False,
            'error': {
                'code': 'REQUEST_TOO_LARGE',
                'message': f'Request exceeds {MAX_CONTENT_LENGTH // (1024 * 1024)}MB',
                'correlation_id': getattr(g, 'correlation_id', 'unknown')
            }
        }), 413

    logger.info(f"{APP_NAME} {VERSION} initialized", log_level=get_config().log_level)
    return flask_app


app = create_app()


if __name__ == '__main__':
    port = int(os.environ.get('PA_PORT', '5000'))
    print("=" * 60)
    print(f"  {APP_NAME} {VERSION}")
    print(f"  Starting server at http://localhost:{port}")
    print("=" * 60)
    app.run(host='127.0.0.1', port=port, debug=False)
