from profitpulse.schemas.common import ErrorOut


_ERROR_EXAMPLES: dict[int, str] = {
    400: "Bad request",
    401: "Not authorized, no token",
    403: "Not authorized, token failed",
    404: "Resource not found",
    500: "Internal server error",
}


def error_responses(*status_codes: int) -> dict[int, dict]:
    responses: dict[int, dict] = {}
    for status_code in status_codes:
        message = _ERROR_EXAMPLES.get(status_code, "HTTP error")
        responses[status_code] = {
            "model": ErrorOut,
            "description": message,
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "error": {"message": message, "status": status_code},
                    }
                }
            },
        }
    return responses
