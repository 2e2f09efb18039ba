class TandemException(Exception):
    """Base exception for the application"""
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TandemException):
    """Malformed or missing input"""
    status_code = 400
    default_message = "Invalid request"


class SelfRequestError(ValidationError):
    """Friend request addressed to the sender"""
    default_message = "You cannot send a friend request to yourself"


class AuthenticationError(TandemException):
    """Missing, invalid or expired credentials"""
    status_code = 401
    default_message = "Unauthorized"


class InvalidTokenError(AuthenticationError):
    """Token could not be decoded or verified"""
    default_message = "Unauthorized - Invalid token"


class ForbiddenError(TandemException):
    """Authenticated but not allowed to act on the resource"""
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(TandemException):
    """Resource not found errors"""
    status_code = 404
    default_message = "Resource not found"


class ConflictError(TandemException):
    """Resource conflict errors"""
    status_code = 409
    default_message = "Resource already exists"


class AlreadyFriendsError(ConflictError):
    default_message = "You are already friends with this user"


class DuplicateRequestError(ConflictError):
    default_message = "A friend request already exists between these users"


class ConfigurationError(TandemException):
    """Server is missing required configuration"""
    status_code = 500
    default_message = "Server configuration error"


class UpstreamError(TandemException):
    """External chat provider failure"""
    status_code = 500
    default_message = "Chat provider request failed"


class InternalError(TandemException):
    """Unexpected failure"""
    status_code = 500
    default_message = "Internal server error"


class TokenGenerationError(InternalError):
    default_message = "Error generating tokens"
