"""Error kinds raised by game services and their JSON rendering.

Every service operation either returns a result or raises exactly one of
these. The HTTP layer maps them to status codes; nothing below the
blueprints knows about responses.
"""

from flask import jsonify
from sqlalchemy.orm.exc import StaleDataError


class GameError(Exception):
    status_code = 500
    default_message = 'Internal error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(GameError):
    status_code = 404
    default_message = 'Not found'


class Forbidden(GameError):
    status_code = 403
    default_message = 'Forbidden'


class Unauthorized(GameError):
    status_code = 401
    default_message = 'User not authenticated'


class Conflict(GameError):
    status_code = 409
    default_message = 'Conflict'


class ValidationError(GameError):
    status_code = 400
    default_message = 'Invalid request'


class InvalidQuestion(ValidationError):
    default_message = 'Invalid question'


def register_error_handlers(app):
    @app.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify({'error': exc.message}), exc.status_code

    @app.errorhandler(StaleDataError)
    def handle_stale_write(exc):
        app.logger.warning(f"[stale-write] {exc}")
        return jsonify({'error': 'Game was modified by another request, reload and try again'}), 409
