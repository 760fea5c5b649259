"""
Application-wide error handlers: JSON for API callers, error pages otherwise
"""

from flask import render_template, request

from cemetery_app.services.exceptions import DatabaseError, NotFoundError, ServiceError
from cemetery_app.shared.api_response_formatter import APIResponseFormatter
from cemetery_app.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)

# status code -> (API message, template)
HTTP_ERRORS = {
    404: ('Resource not found', 'errors/404.html'),
    405: ('Method not allowed', 'errors/405.html'),
    500: ('Internal server error', 'errors/500.html'),
}


def _wants_json() -> bool:
    return request.is_json or request.path.startswith('/api/')


def error_response(status_code: int, api_message: str = None):
    """Render an error for the current request in the format the caller expects"""
    default_message, template = HTTP_ERRORS.get(status_code, HTTP_ERRORS[500])
    if _wants_json():
        return APIResponseFormatter.error(api_message or default_message, status_code=status_code)
    try:
        return render_template(template), status_code
    except Exception:
        logger.error(f"Error template {template} failed to render", exc_info=True)
        return "<h1>Internal Server Error</h1><p>An unexpected error occurred.</p>", 500


def register_error_handlers(app):
    """Register error handlers on the Flask app"""

    @app.errorhandler(404)
    def not_found_error(error):
        logger.warning(f"404 error: {request.url}")
        return error_response(404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        logger.warning(f"405 error: {request.method} {request.url}")
        return error_response(405)

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"500 error: {request.url} - {error}")
        return error_response(500)

    @app.errorhandler(ServiceError)
    def service_error(error):
        """Service errors that escaped a view, e.g. the remote store failing on a read"""
        if isinstance(error, NotFoundError):
            logger.warning(f"Not found: {request.url} - {error}")
            return error_response(404)
        if isinstance(error, DatabaseError):
            logger.error(f"Database unavailable: {request.url} - {error}")
            return error_response(500, 'Database error occurred')
        logger.error(f"Unhandled service error: {request.url} - {error}", exc_info=True)
        return error_response(500, 'An unexpected error occurred')

    @app.errorhandler(Exception)
    def handle_exception(error):
        logger.error(f"Unhandled exception: {request.url} - {error}", exc_info=True)
        return error_response(500, 'An unexpected error occurred')
