# errors.py: domain errors raised by services and turned into JSON by app.py


class RepoCertiError(Exception):
    status_code = 500

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__ or "Server error"
        super().__init__(self.message)


class ValidationError(RepoCertiError):
    """Invalid request."""
    status_code = 400


class ConflictError(RepoCertiError):
    """Resource already exists."""
    # duplicate email has always been reported as 400
    status_code = 400


class AuthenticationError(RepoCertiError):
    """Invalid email or password."""
    status_code = 401


class PermissionDenied(RepoCertiError):
    """Access denied."""
    status_code = 403


class NotFoundError(RepoCertiError):
    """Not found."""
    status_code = 404


class AIUnavailableError(RepoCertiError):
    """AI is not configured. Please check your GOOGLE_API_KEY in .env file."""
    status_code = 503


class AIResponseError(RepoCertiError):
    """AI returned an unusable response."""
    status_code = 502


class CloudUploadError(RepoCertiError):
    """Cloud upload failed."""
    status_code = 502
