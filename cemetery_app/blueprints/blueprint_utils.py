"""
Standardized error handling for blueprint operations
"""
from functools import wraps

from flask import flash, redirect, url_for

from cemetery_app.services.exceptions import (
    ConnectionError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    ServiceError,
    TimeoutError,
    ValidationError,
)
from cemetery_app.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)


def flash_service_error(error: ServiceError) -> None:
    """Show a service error to the user as a flash message"""
    if isinstance(error, (ValidationError, NotFoundError, ExternalServiceError)):
        flash(str(error), 'error')
    elif isinstance(error, (ConnectionError, TimeoutError)):
        logger.error(f"AI service unreachable: {error}")
        flash('The AI service could not be reached - please try again later', 'error')
    elif isinstance(error, DatabaseError):
        logger.error(f"Database error: {error}")
        flash('Database error occurred - please try again', 'error')
    else:
        logger.error(f"Service error: {error}")
        flash('An unexpected error occurred - please try again', 'error')


def handle_blueprint_errors(redirect_url: str = 'main.index'):
    """Decorator to handle service errors with a flash message and redirect.

    Args:
        redirect_url: URL endpoint to redirect to on error
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError as e:
                flash_service_error(e)
                return redirect(url_for(redirect_url))
        return wrapper
    return decorator
