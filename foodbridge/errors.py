"""
Error taxonomy shared by every operation.

Each error is a werkzeug ``HTTPException`` with a ``data`` payload, which is
what flask-restful renders as the JSON body of the failed response:

    {"success": false, "message": "...", "errors": {"field": "..."}}
"""
from werkzeug.exceptions import HTTPException


class FoodBridgeError(HTTPException):
    code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(description=self.message)
        self.data = {'success': False, 'message': self.message}
        if self.errors:
            self.data['errors'] = self.errors


class ValidationError(FoodBridgeError):
    code = 400
    default_message = 'Validation failed'


class Unauthorized(FoodBridgeError):
    code = 401
    default_message = 'Unauthorized'


class PermissionDenied(FoodBridgeError):
    code = 403
    default_message = 'Permission denied'


class NotFound(FoodBridgeError):
    code = 404
    default_message = 'Not found'


class Conflict(FoodBridgeError):
    code = 409
    default_message = 'Conflict'


class Internal(FoodBridgeError):
    code = 500
    default_message = 'Internal server error'
