from fastapi import status
from auth_service.libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


class TransientError(Exception):
    """Retryable infrastructure failure, answered with 503 instead of 401/500"""

    def __init__(self, base_error: Error, retry_after_seconds: int = 1):
        self.base_error = base_error
        self.retry_after_seconds = retry_after_seconds
        super().__init__(base_error.message)
