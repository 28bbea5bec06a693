"""Weekly research digest endpoint"""
from __future__ import annotations

import hmac
import logging
import time

from flask import Blueprint, current_app, jsonify, request

from core.config import DigestSettings
from core.digest import DigestPipeline
from core.openai_client import UpstreamCallError

weekly_bp = Blueprint('weekly', __name__)
logger = logging.getLogger(__name__)

# Every verb is routed here so non-GET requests get our JSON 405 with Allow: GET.
_ROUTED_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


def _settings() -> DigestSettings:
    return current_app.config['DIGEST_SETTINGS']


def _supplied_token(settings: DigestSettings) -> str:
    """Bearer token from the Authorization header, or ?token= when enabled."""
    parts = request.headers.get('Authorization', '').split(' ')
    token = parts[1] if len(parts) > 1 else ''
    if not token and settings.allow_query_token:
        token = request.args.get('token', '')
    return token


def _token_matches(supplied: str, required: str) -> bool:
    return hmac.compare_digest(supplied.encode('utf-8'), required.encode('utf-8'))


def _error(status: int, message: str, detail=None):
    body = {'error': message}
    if detail is not None:
        body['detail'] = detail
    return jsonify(body), status


@weekly_bp.route('/weekly', methods=_ROUTED_METHODS, provide_automatic_options=False)
def weekly_digest():
    """Return this week's curated article list"""
    if request.method != 'GET':
        response = jsonify({'error': 'Method Not Allowed'})
        response.status_code = 405
        response.headers['Allow'] = 'GET'
        return response

    settings = _settings()
    if settings.token_required and not _token_matches(_supplied_token(settings), settings.required_token):
        logger.warning("weekly_unauthorized", extra={"operation": "weekly_unauthorized"})
        return _error(401, 'Unauthorized')

    start_time = time.perf_counter()
    try:
        result = DigestPipeline(settings).run()
    except UpstreamCallError as exc:
        logger.error(
            "weekly_upstream_failed",
            extra={"operation": "weekly_request", "status_code": exc.status_code},
        )
        return _error(502, 'OpenAI call failed', exc.detail)
    except Exception as exc:  # noqa: BLE001 - every failure becomes a JSON 500
        logger.exception("weekly_failed", extra={"operation": "weekly_request"})
        return _error(500, 'Server error', str(exc))

    logger.info(
        "weekly_success",
        extra={
            "operation": "weekly_request",
            "article_count": len(result.articles),
            "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
        },
    )
    return jsonify(result.model_dump())
