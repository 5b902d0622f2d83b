from typing import Optional

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Base error rendered as the error envelope"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        errors: Optional[list] = None,
        headers: Optional[dict] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.errors = errors or []


class InvalidArgument(ApiError):
    """Missing, empty or malformed input"""

    def __init__(self, detail: str = "Invalid argument", errors: Optional[list] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, errors)


class Unauthorized(ApiError):
    """Missing or invalid viewer identity"""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFound(ApiError):
    """Referenced entity does not exist"""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class Conflict(ApiError):
    """Uniqueness violation on create"""

    def __init__(self, detail: str = "Already exists"):
        super().__init__(status.HTTP_409_CONFLICT, detail)


class Internal(ApiError):
    """Storage or unexpected failure"""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
