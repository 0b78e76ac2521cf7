class AppError(Exception):
    """Base for errors raised by services and mapped to HTTP responses.

    ``message`` is always safe to show to API clients; anything internal
    belongs in the log, not here.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class InvalidSale(ValidationError):
    default_message = "Sale must contain at least one item"


class AuthError(AppError):
    status_code = 401
    default_message = "Not authorized"


class TokenMissingError(AuthError):
    default_message = "Not authorized, no token"


class TokenExpiredError(AuthError):
    default_message = "Token expired"


class TokenInvalidError(AuthError):
    status_code = 403
    default_message = "Not authorized, token failed"


class InvalidCredentialsError(AuthError):
    default_message = "Invalid username or password"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Not authorized to access this route"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictOrInternalError(AppError):
    status_code = 500
    default_message = "Internal server error"
