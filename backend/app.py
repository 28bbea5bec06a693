"""Main Flask application"""
import logging
import os
import time
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request, g
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from api.weekly import weekly_bp
from core.config import DigestSettings
from core.logging_config import configure_logging

# Load environment variables
load_dotenv()

configure_logging()
logger = logging.getLogger(__name__)


def _cors_origins():
    raw = os.environ.get("CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or "*"


def create_app(settings: Optional[DigestSettings] = None):
    """Create and configure Flask application"""
    logger.info("Initializing Flask application", extra={"operation": "app_init"})
    app = Flask(__name__)
    app.json.sort_keys = False
    app.config['DIGEST_SETTINGS'] = settings or DigestSettings.from_env()

    CORS(app, resources={r"/api/*": {"origins": _cors_origins()}})

    # Request timing and tracing
    @app.before_request
    def _req_start():
        g._start = time.time()
        logging.getLogger("request").info(
            "request_start",
            extra={
                "operation": "request_start",
                "method": request.method,
                "path": request.path,
                "remote_addr": request.headers.get("X-Forwarded-For", request.remote_addr),
                "user_agent": request.headers.get("User-Agent"),
            },
        )

    @app.after_request
    def _req_end(response):
        duration_ms = int((time.time() - getattr(g, "_start", time.time())) * 1000)
        logging.getLogger("request").info(
            "request_end",
            extra={
                "operation": "request_end",
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response

    @app.errorhandler(Exception)
    def _unhandled(error):
        status = 500
        if isinstance(error, HTTPException):
            status = error.code or 500

        if status >= 500:
            logging.getLogger("error").exception(
                "unhandled_exception",
                extra={
                    "operation": "unhandled_exception",
                    "method": request.method,
                    "path": request.path,
                    "status": status,
                },
            )
        msg = "Internal server error" if status >= 500 else (getattr(error, "description", "Bad request"))
        return jsonify({"error": msg}), status

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Endpoint not found'}), 404

    app.register_blueprint(weekly_bp, url_prefix='/api')

    @app.route('/')
    def health_check():
        """Health check endpoint"""
        logger.debug("Health check requested", extra={"operation": "health_check"})
        return jsonify({
            'status': 'healthy',
            'service': 'weekly-digest',
            'endpoints': ['/api/weekly'],
        })

    @app.route('/api/_diagnostics')
    def diagnostics():
        """Report configuration presence without exposing secrets"""
        current = app.config['DIGEST_SETTINGS']
        return jsonify({
            "ok": True,
            "openai_key_present": bool(current.openai_api_key),
            "token_required": current.token_required,
            "primary_model": current.primary_model,
            "fallback_model": current.fallback_model,
            "request_style": current.request_style,
        })

    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    logger.info(
        "Starting Flask server",
        extra={
            "operation": "app_start",
            "host": "0.0.0.0",
            "port": port,
        },
    )
    app.run(debug=True, host='0.0.0.0', port=port)
