from fastapi import status
from fastapi.responses import JSONResponse


class ApplicationException(Exception):
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_response(self):
        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message}
        )


class ValidationError(ApplicationException):
    """Input rejected before it reaches storage (bad date, cursor or rating)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=422)


class StorageError(ApplicationException):
    """The journal database failed an upsert or a query."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        self.__cause__ = cause
