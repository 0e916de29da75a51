"""Error handling and custom exception classes for TruckQR application."""

from flask import jsonify, request, render_template, flash, redirect, url_for
from sqlalchemy.exc import SQLAlchemyError
from truckqr.utils.logging_config import get_logger, ERRORS_LOGGER
from functools import wraps


# Custom exception classes
class TruckQRException(Exception):
    """Base exception class for TruckQR application."""
    pass


class ValidationError(TruckQRException):
    """Raised when a submitted form is missing required data."""
    pass


class NotFoundError(TruckQRException):
    """Raised when a plate, document or photo does not exist."""
    pass


class StorageError(TruckQRException):
    """Raised when the database rejects or cannot complete an operation."""
    pass


class NotificationError(TruckQRException):
    """Raised when an email cannot be delivered."""
    pass


# Logger for error handling
logger = get_logger(ERRORS_LOGGER)


def _wants_json():
    return request.path.startswith('/api/')


def _error_response(status_code, title, message, template=None):
    if _wants_json():
        return jsonify({'error': title, 'message': message}), status_code
    return render_template(template or 'errors/error.html',
                           status_code=status_code, title=title, message=message), status_code


def init_error_handlers(app):
    """Initialize error handlers for the Flask application."""

    @app.errorhandler(400)
    def bad_request(error):
        logger.error(f"Bad request: {request.url} - {str(error)}")
        return _error_response(400, 'Bad Request',
                               getattr(error, 'description', None) or 'Invalid request')

    @app.errorhandler(401)
    def unauthorized(error):
        return _error_response(401, 'Unauthorized', 'Authentication required')

    @app.errorhandler(403)
    def forbidden(error):
        return _error_response(403, 'Forbidden', 'Access denied')

    @app.errorhandler(404)
    def not_found(error):
        return _error_response(404, 'Not Found', 'The requested resource was not found',
                               template='errors/404.html')

    @app.errorhandler(NotFoundError)
    def not_found_exception(error):
        return _error_response(404, 'Not Found', str(error) or 'The requested resource was not found',
                               template='errors/404.html')

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error_response(405, 'Method Not Allowed', 'The method is not allowed for this endpoint')

    @app.errorhandler(413)
    def payload_too_large(error):
        return _error_response(413, 'Payload Too Large', 'The uploaded files are too large')

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        logger.warning(f"Rate limit exceeded: {request.url} from {request.remote_addr}")
        return _error_response(429, 'Rate Limit Exceeded', 'Too many requests. Please try again later.')

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {request.url} - {str(error)}", exc_info=True)
        return _error_response(500, 'Internal Server Error', 'An unexpected error occurred')

    @app.errorhandler(StorageError)
    def storage_exception(error):
        # Already rolled back and logged where the commit failed
        return _error_response(500, 'Internal Server Error', 'The data store is unavailable')

    @app.errorhandler(SQLAlchemyError)
    def storage_error(error):
        from truckqr import db
        db.session.rollback()
        logger.error(f"Storage error on {request.url}: {str(error)}", exc_info=True)
        return _error_response(500, 'Internal Server Error', 'The data store is unavailable')


def handle_admin_errors(f):
    """Decorator for admin form posts: turn domain errors into flash messages.

    The wrapped view returns a redirect on success. On failure the user is sent
    back to the editor for the plate in the submitted form, with a flash
    message describing what went wrong.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ValidationError as e:
            logger.info(f"Validation error: {str(e)}")
            flash(str(e), 'error')
        except NotFoundError as e:
            flash(str(e) or 'Not found', 'error')
        except (StorageError, SQLAlchemyError) as e:
            from truckqr import db
            db.session.rollback()
            logger.error(f"Storage error in {f.__name__}: {str(e)}", exc_info=True)
            flash('Could not save changes.', 'error')
        plate = (request.form.get('plate') or '').strip().upper()
        return redirect(url_for('admin.edit', plate=plate or None))
    return decorated_function
