"""
forge/errors.py: Exceptions raised by the stores and rendered as JSON

Every failure is terminal for the request. Route handlers let these
propagate; the error handlers registered in create_app() turn them into
responses:

  ValidationError  422  {"error": ..., "errors": {field: message}}
  NotFoundError    404  {"error": ...}
  ConflictError    422  {"error": ..., "errors": {field: message}}
"""


class ForgeError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 400
    default_message = 'The request could not be processed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(ForgeError):
    """Malformed or out-of-range input. Carries field-level messages."""
    status_code = 422
    default_message = 'The given data was invalid.'

    def __init__(self, errors, message=None):
        self.errors = dict(errors)
        if message is None and len(self.errors) == 1:
            message = next(iter(self.errors.values()))
        super().__init__(message)

    def to_dict(self):
        return {'error': self.message, 'errors': self.errors}


class NotFoundError(ForgeError):
    """The record does not exist or does not belong to the requesting user."""
    status_code = 404
    default_message = 'Not found.'


class ConflictError(ForgeError):
    """A uniqueness rule was violated (duplicate edge, session number, ...)."""
    status_code = 422
    default_message = 'This record already exists.'

    def __init__(self, message=None, field=None):
        super().__init__(message)
        self.field = field

    def to_dict(self):
        data = {'error': self.message}
        if self.field:
            data['errors'] = {self.field: self.message}
        return data


class AuthError(ForgeError):
    """Bad credentials on login."""
    status_code = 401
    default_message = 'Authentication required.'
