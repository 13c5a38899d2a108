"""
Error taxonomy shared by services and routers.

Services raise these directly; FastAPI renders them like any HTTPException.
Store failures are not listed here: SQLAlchemyError is mapped to a generic 500
by the handler registered in app.main.
"""
from fastapi import HTTPException, status


class Unauthenticated(HTTPException):
    """Raised when a request needs a session and has none"""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidOperation(HTTPException):
    """Raised for self-follows and malformed input"""

    def __init__(self, detail: str = "Invalid operation"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Forbidden(HTTPException):
    """Raised when the actor does not own the row it tries to mutate"""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )
